"""
Core Layer - models, stores and services shared by the mapping rules

Modules:
- design_model: Design model container, queries and snapshots
- engineering_store: Engineering model cache indexed by iid
- stereotypes: Stereotype application and tagged values
- values: Value text parsing into typed literals
- cycle_validator: Cyclic dependency detection in the design model
- correspondence_store: External identifier map persistence
- notifications: User-facing status and warning messages
"""

from .correspondence_store import (
    CorrespondenceStore,
    CorrespondenceStoreError,
    CorruptMapError,
    MapNotFoundError,
)
from .cycle_validator import CycleValidator
from .design_model import DesignModel, DesignSnapshot, names_match
from .engineering_store import EngineeringModelStore
from .notifications import Notification, NotificationLog, Severity
from .stereotypes import StereotypeService
from .values import ValueParsingError

__all__ = [
    # Design model
    'DesignModel',
    'DesignSnapshot',
    'names_match',
    # Engineering model
    'EngineeringModelStore',
    # Services
    'StereotypeService',
    'CycleValidator',
    'NotificationLog',
    'Notification',
    'Severity',
    # Correspondences
    'CorrespondenceStore',
    'CorrespondenceStoreError',
    'CorruptMapError',
    'MapNotFoundError',
    # Values
    'ValueParsingError',
]

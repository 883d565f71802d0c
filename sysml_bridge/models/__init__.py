"""
Data models for sysml-bridge: engineering things, design elements,
mapped rows and the persisted correspondence schema.
"""

from .correspondence import Correspondence, ExternalIdentifier, ExternalIdentifierMap
from .mapping import (
    LookupResult,
    MappedElementDefinitionRow,
    MappedElementRow,
    MappedRequirementRow,
    MappingDirection,
    RowState,
)

__all__ = [
    'Correspondence',
    'ExternalIdentifier',
    'ExternalIdentifierMap',
    'LookupResult',
    'MappedElementDefinitionRow',
    'MappedElementRow',
    'MappedRequirementRow',
    'MappingDirection',
    'RowState',
]

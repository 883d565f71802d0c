"""
Design Model Store - queryable block/port/interface model

Holds the design model as a root package plus a data package for reference
data (value types, units). Provides the predicate and kind-specific queries
the mapping rules resolve existing elements with, and snapshot/restore
support for transactions.

Usage:
    from sysml_bridge.core.design_model import DesignModel

    model = DesignModel("Satellite")
    model.add_to_root(block)

    result = model.try_get_element_by(lambda e: e.name == "Tank")
    snapshot = model.create_snapshot("before-mapping")
    # ... changes ...
    model.restore_snapshot(snapshot)
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional

from ..models.design import (
    Class,
    DataType,
    DesignElement,
    InstanceSpecification,
    Package,
    Stereotype,
    contained_elements,
    walk,
)
from ..models.engineering import MeasurementScale, MeasurementUnit, ParameterType
from ..models.mapping import LookupResult
from .values import data_type_name

logger = logging.getLogger(__name__)

DATA_PACKAGE_NAME = "Reference Data"

ElementPredicate = Callable[[DesignElement], bool]


def names_match(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive name equality; empty names never match."""
    if not left or not right:
        return False
    return left.casefold() == right.casefold()


def is_data_type_for(parameter_type: ParameterType,
                     scale: Optional[MeasurementScale] = None) -> ElementPredicate:
    """Predicate matching the value type of a parameter type and scale."""
    expected_name = data_type_name(parameter_type, scale)

    def predicate(element: DesignElement) -> bool:
        return isinstance(element, DataType) and (
            names_match(element.name, expected_name)
            or (scale is None and names_match(element.name, parameter_type.short_name))
        )
    return predicate


def is_unit_for(unit: MeasurementUnit) -> ElementPredicate:
    """Predicate matching the unit instance named like ``unit``."""
    def predicate(element: DesignElement) -> bool:
        return (isinstance(element, InstanceSpecification)
                and element.has_stereotype(Stereotype.UNIT)
                and (names_match(element.name, unit.name) or names_match(element.name, unit.short_name)))
    return predicate


@dataclass
class DesignSnapshot:
    """Deep copy of the design model packages for rollback."""
    timestamp: datetime
    root: Package
    data_package: Package
    label: Optional[str] = None


class DesignModel:
    """In-memory design model.

    Attributes:
        name: Model name, written into external identifier maps
        root: Top-level package
        data_package: Package holding value types and units, nested in root
    """

    def __init__(self, name: str = "Model"):
        self.name = name
        self.root = Package(name=name)
        self.data_package = Package(name=DATA_PACKAGE_NAME)
        self.root.owned_elements.append(self.data_package)

    # ------------------------------------------------------------------
    # Traversal and queries
    # ------------------------------------------------------------------

    def all_elements(self) -> Iterator[DesignElement]:
        """Every element in the model except the two packages."""
        for element in walk(self.root):
            if element is self.root or element is self.data_package:
                continue
            yield element

    def try_get_element_by(self, predicate: ElementPredicate) -> LookupResult:
        """First element matching ``predicate``."""
        for element in self.all_elements():
            if predicate(element):
                return LookupResult.hit(element)
        return LookupResult.miss()

    def get_element_by_id(self, element_id: str) -> Optional[DesignElement]:
        return self.try_get_element_by(lambda e: e.id == element_id).value

    def try_get_data_type(self, parameter_type: ParameterType,
                          scale: Optional[MeasurementScale] = None) -> LookupResult:
        """Value type generated for (or named like) a parameter type and scale."""
        return self.try_get_element_by(is_data_type_for(parameter_type, scale))

    def try_get_unit(self, unit: MeasurementUnit) -> LookupResult:
        """Unit-stereotyped instance named like ``unit``."""
        return self.try_get_element_by(is_unit_for(unit))

    def blocks(self) -> List[Class]:
        return [
            e for e in self.all_elements()
            if isinstance(e, Class) and e.has_stereotype(Stereotype.BLOCK)
        ]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_to_root(self, element: DesignElement) -> None:
        self.root.owned_elements.append(element)

    def add_to_data_package(self, element: DesignElement) -> None:
        self.data_package.owned_elements.append(element)

    def find_container(self, element_id: str) -> Optional[DesignElement]:
        """Element whose containment directly includes ``element_id``."""
        for element in walk(self.root):
            if any(child.id == element_id for child in contained_elements(element)):
                return element
        return None

    def replace_element(self, element: DesignElement) -> bool:
        """Swap the live element sharing ``element.id`` for ``element``.

        Returns:
            True if a live element was replaced, False if none exists
        """
        container = self.find_container(element.id)
        if container is None:
            return False

        for collection_name in ('owned_attributes', 'owned_elements', 'relationships', 'owned_literals'):
            collection = getattr(container, collection_name, None)
            if collection is None:
                continue
            for index, child in enumerate(collection):
                if child.id == element.id:
                    collection[index] = element

        logger.debug(f"Replaced design element {element.name} ({element.id})")
        return True

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def create_snapshot(self, label: Optional[str] = None) -> DesignSnapshot:
        """Deep copy of the current model state."""
        root, data_package = deepcopy((self.root, self.data_package))
        snapshot = DesignSnapshot(
            timestamp=datetime.now(),
            root=root,
            data_package=data_package,
            label=label,
        )
        logger.debug(f"Created design model snapshot: {label or 'unlabeled'}")
        return snapshot

    def restore_snapshot(self, snapshot: DesignSnapshot) -> None:
        """Restore the model to a snapshot (the snapshot stays reusable)."""
        self.root, self.data_package = deepcopy((snapshot.root, snapshot.data_package))
        logger.debug(f"Restored design model to snapshot: {snapshot.label or snapshot.timestamp}")

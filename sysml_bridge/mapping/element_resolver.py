"""
Get-or-create resolution of design elements.

Each ``get_or_create_*`` method prefers, in order: an element cached in the
current pass, an element created or cloned earlier in the open transaction,
an existing element of the design model, and only then a new element created
through the transaction service. Existing top-level blocks are cloned, never
edited in place.
"""

import logging
from typing import Iterable, Optional, Tuple

from ..core.design_model import (
    DesignModel,
    ElementPredicate,
    is_data_type_for,
    is_unit_for,
    names_match,
)
from ..core.stereotypes import StereotypeService
from ..core.values import data_type_name, has_meaningful_unit
from ..managers.transaction_service import TransactionService
from ..models.design import (
    Class,
    DataType,
    DesignElement,
    ElementKind,
    Enumeration,
    InstanceSpecification,
    Interface,
    InterfaceRealization,
    Port,
    Property,
    Requirement,
    Stereotype,
    Usage,
)
from ..models.engineering import (
    BinaryRelationship,
    DefinedThing,
    ElementUsage,
    MeasurementUnit,
    ParameterTypeKind,
)
from ..models.mapping import LookupResult
from .context import MappingContext

logger = logging.getLogger(__name__)


def query_by_name_and_short_name(elements: Iterable[DesignElement], *names: Optional[str]) -> LookupResult:
    """First element whose name matches any of ``names`` case-insensitively."""
    for element in elements:
        if any(names_match(element.name, name) for name in names):
            return LookupResult.hit(element)
    return LookupResult.miss()


class ElementResolver:
    """Resolves or creates the design counterparts of engineering things."""

    def __init__(self, design_model: DesignModel, transaction_service: TransactionService,
                 stereotype_service: StereotypeService):
        self.design_model = design_model
        self.transaction_service = transaction_service
        self.stereotype_service = stereotype_service

    def _find(self, predicate: ElementPredicate) -> LookupResult:
        """Elements of the open transaction first, then the live design model."""
        pending = self.transaction_service.try_get_pending_element_by(predicate)
        if pending:
            return pending
        return self.design_model.try_get_element_by(predicate)

    # ------------------------------------------------------------------
    # Blocks and containment
    # ------------------------------------------------------------------

    def get_or_create_element(self, thing: DefinedThing) -> Class:
        """Block named like ``thing``.

        A block already created or cloned in the open transaction is returned
        as is; a live block is cloned; otherwise a new block is created.
        """
        def is_block(e) -> bool:
            return (isinstance(e, Class)
                    and not isinstance(e, (Interface, Requirement))
                    and e.has_stereotype(Stereotype.BLOCK)
                    and names_match(e.name, thing.name))

        pending = self.transaction_service.try_get_pending_element_by(is_block)
        if pending:
            return pending.value

        existing = self.design_model.try_get_element_by(is_block)
        if existing:
            return self.transaction_service.clone_element(existing.value)

        return self.transaction_service.create(ElementKind.BLOCK, thing.name)

    def update_containment(self, parent: Class, child: Class) -> Property:
        """Part property of ``parent`` typed by ``child`` (reused or created)."""
        part = next(
            (a for a in parent.owned_attributes if a.type is not None and a.type.id == child.id),
            None
        )

        if part is None:
            part = self.transaction_service.create(ElementKind.PART_PROPERTY, child.name)
            parent.owned_attributes.append(part)

        part.type = child
        return part

    # ------------------------------------------------------------------
    # Properties, value types and units
    # ------------------------------------------------------------------

    def try_get_existing_property(self, element: Class, parameter) -> LookupResult:
        parameter_type = parameter.parameter_type
        return query_by_name_and_short_name(
            (a for a in element.owned_attributes if not isinstance(a, Port)),
            parameter_type.name, parameter_type.short_name
        )

    def create_property(self, parameter, data_type: Optional[DataType]) -> Property:
        prop = self.transaction_service.create(ElementKind.VALUE_PROPERTY, parameter.parameter_type.name)
        if data_type is not None:
            prop.type = data_type
        return prop

    def get_or_create_data_type(self, parameter, context: MappingContext) -> DataType:
        """Value type for a parameter's type and scale.

        Scales whose unit is not dimensionless produce a value type named
        ``"<type>[<unit symbol>]"`` bound to a unit.
        """
        parameter_type = parameter.parameter_type
        scale = parameter.scale if has_meaningful_unit(parameter.scale) else None
        expected_name = data_type_name(parameter_type, scale)

        cached = query_by_name_and_short_name(
            context.data_types, expected_name, None if scale else parameter_type.short_name
        )
        if cached:
            return cached.value

        existing = self._find(is_data_type_for(parameter_type, scale))
        if existing:
            context.data_types.append(existing.value)
            return existing.value

        if parameter_type.kind == ParameterTypeKind.ENUMERATION and scale is None:
            data_type = self._create_enumeration(parameter_type)
        else:
            data_type = self.transaction_service.create(ElementKind.VALUE_TYPE, expected_name)

        if scale is not None:
            unit = self.get_or_create_unit(scale.unit, context)
            self.stereotype_service.set_stereotype_property_value(unit, Stereotype.UNIT, "symbol", scale.unit.short_name)
            if scale.unit.is_prefixed:
                self.stereotype_service.set_stereotype_property_value(unit, Stereotype.UNIT, "prefix", scale.unit.prefix)
            self.stereotype_service.set_stereotype_property_value(data_type, Stereotype.VALUE_TYPE, "unit", unit)

        context.data_types.append(data_type)
        self.transaction_service.add_reference_data_to_data_package(data_type)
        logger.debug(f"Created value type {data_type.name}")
        return data_type

    def _create_enumeration(self, parameter_type) -> Enumeration:
        enumeration = self.transaction_service.create(ElementKind.ENUMERATION, parameter_type.name)
        for value_definition in parameter_type.value_definitions:
            enumeration.owned_literals.append(
                self.transaction_service.create(ElementKind.ENUMERATION_LITERAL, value_definition)
            )
        return enumeration

    def get_or_create_unit(self, unit: MeasurementUnit, context: MappingContext) -> InstanceSpecification:
        cached = query_by_name_and_short_name(context.units, unit.name, unit.short_name)
        if cached:
            return cached.value

        existing = self._find(is_unit_for(unit))
        if existing:
            context.units.append(existing.value)
            return existing.value

        new_unit = self.transaction_service.create(ElementKind.UNIT, unit.name)
        context.units.append(new_unit)
        self.transaction_service.add_reference_data_to_data_package(new_unit)
        return new_unit

    # ------------------------------------------------------------------
    # Ports and interfaces
    # ------------------------------------------------------------------

    def get_or_create_port(self, usage: ElementUsage, parent: Class) -> LookupResult:
        """Port and port type for an interface-end usage.

        Returns:
            A hit holding ``(port, definition)``, or a miss when the port
            already has a type but no matching definition is owned by
            ``parent``.
        """
        port = next((p for p in parent.owned_ports if p.name == usage.name), None)

        definition = next(
            (e for e in parent.owned_elements
             if isinstance(e, Class)
             and self.stereotype_service.does_it_have_the_stereotype(e, Stereotype.BLOCK)
             and names_match(e.name, usage.name)),
            None
        )

        if port is None:
            port = self.transaction_service.create(ElementKind.PORT, usage.name)

        if port.type is None:
            if definition is None:
                definition = self.transaction_service.create(ElementKind.BLOCK, usage.name)
                parent.owned_elements.append(definition)
            port.type = definition

        if definition is None:
            return LookupResult.miss()

        return LookupResult.hit((port, definition))

    def get_or_create_interface(self, relationship: BinaryRelationship, context: MappingContext) -> Interface:
        cached = context.interfaces.get(relationship.iid)
        if cached is not None:
            return cached

        existing = self._find(
            lambda e: isinstance(e, Interface) and names_match(e.name, relationship.name)
        )
        interface = existing.value if existing else self.transaction_service.create(
            ElementKind.INTERFACE, relationship.name
        )

        context.interfaces[relationship.iid] = interface
        return interface

    def get_or_create_usage(self, interface: Interface, port_type: Class) -> Tuple[Usage, bool]:
        """Usage from ``port_type`` to ``interface``. Returns (usage, created)."""
        def matches(e) -> bool:
            return (isinstance(e, Usage)
                    and any(s.id == interface.id for s in e.suppliers)
                    and any(c.id == port_type.id for c in e.clients))

        existing = next((r for r in port_type.relationships if matches(r)), None)
        if existing is None:
            existing = self._find(matches).value
        if existing is not None:
            return existing, False

        usage = self.transaction_service.create(ElementKind.USAGE)
        usage.suppliers.append(interface)
        usage.clients.append(port_type)
        port_type.relationships.append(usage)
        return usage, True

    def get_or_create_interface_realization(self, interface: Interface,
                                            port_type: Class) -> Tuple[InterfaceRealization, bool]:
        """Realization of ``interface`` by ``port_type``. Returns (realization, created)."""
        def matches(e) -> bool:
            return (isinstance(e, InterfaceRealization)
                    and e.contract is not None and e.contract.id == interface.id
                    and e.implementing_classifier is not None
                    and e.implementing_classifier.id == port_type.id)

        existing = next((r for r in port_type.relationships if matches(r)), None)
        if existing is None:
            existing = self._find(matches).value
        if existing is not None:
            return existing, False

        realization = self.transaction_service.create(ElementKind.INTERFACE_REALIZATION)
        realization.contract = interface
        realization.implementing_classifier = port_type
        port_type.relationships.append(realization)
        return realization, True

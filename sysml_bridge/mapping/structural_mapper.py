"""
Structural Mapper - element definitions to blocks

Maps rows of element definitions onto blocks of the design model:

1. resolve (clone) or create the block of every row
2. walk contained usages (worklist, each row expanded once per pass),
   creating child rows and part properties
3. map parameters and overrides to value properties with typed literals
4. map interface-end usages to ports and port types
5. apply stereotypes from categories
6. connect ports through interfaces, usages and interface realizations

A pass either returns every resolved row or, on any exception, an empty
list; a failed pass also marks the open transaction rollback-only, so
nothing it created or cloned reaches the live model. ``last_pass_failed``
tells a failed pass from one with nothing to map. The per-pass context is
cleared on every exit path.

Usage:
    mapper = StructuralMapper(design_model, engineering_store,
                              transaction_service, mapping_configuration)

    with transaction_service.transaction():
        rows = mapper.transform([MappedElementDefinitionRow(tank_definition)])

    if mapper.last_pass_failed:
        ...  # the transaction was rolled back on exit
"""

import logging
from collections import deque
from typing import Callable, Iterable, List, Optional

from ..config.settings import is_enabled
from ..core.design_model import DesignModel
from ..core.engineering_store import EngineeringModelStore
from ..core.notifications import NotificationLog, Severity
from ..core.stereotypes import StereotypeService
from ..core.values import (
    ELEMENT_KIND_BY_LITERAL_KIND,
    ValueParsingError,
    literal_kind_for,
    write_literal_value,
)
from ..managers.transaction_service import TransactionService
from ..models.design import Class, Property, Stereotype
from ..models.engineering import (
    ActualFiniteState,
    BinaryRelationship,
    all_parameters_and_overrides,
    query_value_set,
)
from ..models.mapping import MappedElementDefinitionRow, MappedElementRow, MappingDirection
from .context import MappingContext
from .element_resolver import ElementResolver
from .state_mapping import StateMappingRule

logger = logging.getLogger(__name__)

StateSelector = Callable[[str], Optional[ActualFiniteState]]


class StructuralMapper:
    """Maps element definitions (engineering model) onto blocks (design model)."""

    direction = MappingDirection.FROM_ENGINEERING_TO_DESIGN

    def __init__(
        self,
        design_model: DesignModel,
        engineering_store: EngineeringModelStore,
        transaction_service: TransactionService,
        mapping_configuration,
        stereotype_service: Optional[StereotypeService] = None,
        state_mapping: Optional[StateMappingRule] = None,
        notifications: Optional[NotificationLog] = None,
    ):
        self.design_model = design_model
        self.engineering_store = engineering_store
        self.transaction_service = transaction_service
        self.mapping_configuration = mapping_configuration
        self.stereotype_service = stereotype_service or transaction_service.stereotype_service
        self.state_mapping = state_mapping or StateMappingRule(self.stereotype_service)
        self.notifications = notifications or NotificationLog()
        self.resolver = ElementResolver(design_model, transaction_service, self.stereotype_service)
        self.last_pass_failed = False

    # ========================================================================
    # Public API
    # ========================================================================

    def transform(self, rows: Iterable[MappedElementRow]) -> List[MappedElementDefinitionRow]:
        """
        Map ``rows`` and persist their correspondences.

        Args:
            rows: Rows to map; only element definition rows mapped from the
                engineering model are mapped, others are skipped with a warning

        Returns:
            The resolved rows, child rows included, or an empty list if the
            pass failed
        """
        context = MappingContext(direction=self.direction)
        self.last_pass_failed = False

        try:
            for row in rows:
                if not isinstance(row, MappedElementDefinitionRow) or row.engineering_element is None:
                    logger.warning(f"Skipping row that is not an element definition row: {row!r}")
                elif row.direction != self.direction:
                    logger.warning(f"Skipping row mapped in the other direction: {row!r}")
                else:
                    context.rows.append(row)

            self._map(context)

            resolved = [row for row in context.rows if row.is_resolved]
            self.mapping_configuration.save_mapping_configuration(resolved, self.direction)
            self._save_selected_states(context)

            logger.info(f"Mapped {len(resolved)} element(s) to blocks")
            return resolved

        except Exception:
            logger.exception("Element to block mapping failed; no element was mapped")
            self.last_pass_failed = True
            if self.transaction_service.is_active:
                self.transaction_service.set_rollback_only()
            return []

        finally:
            context.clear()

    # ========================================================================
    # Mapping steps
    # ========================================================================

    def _map(self, context: MappingContext) -> None:
        top_level = list(context.rows)

        for row in top_level:
            if row.design_element is None:
                row.design_element = self.resolver.get_or_create_element(row.engineering_element)

        for row in top_level:
            self._map_contained_elements(row, context)
            self._map_properties(row.engineering_element.parameters, row.design_element,
                                 row.get_selected_state_for, context)
            self._map_ports(row, context)
            self._map_stereotypes(row)

        self._connect_ports(context)

    def _map_contained_elements(self, root: MappedElementDefinitionRow, context: MappingContext) -> None:
        worklist = deque([root])

        while worklist:
            parent = worklist.popleft()
            if id(parent) in context.expanded:
                continue
            context.expanded.add(id(parent))

            for usage in parent.engineering_element.contained_elements:
                if usage.is_interface_end:
                    continue

                definition = usage.element_definition
                child = context.find_row_by_design_name(definition.name)

                if child is None:
                    child = MappedElementDefinitionRow(
                        definition,
                        self.resolver.get_or_create_element(definition),
                        self.direction,
                    )
                    context.rows.append(child)
                    self._map_stereotypes(child)

                self._map_properties(all_parameters_and_overrides(usage), child.design_element,
                                     child.get_selected_state_for, context)
                self._map_ports(child, context)
                self.resolver.update_containment(parent.design_element, child.design_element)
                worklist.append(child)

    def _map_properties(self, parameters, element: Class, select_state: StateSelector,
                        context: MappingContext) -> None:
        for parameter in parameters:
            existing = self.resolver.try_get_existing_property(element, parameter)

            if existing:
                prop = existing.value
            else:
                data_type = self.resolver.get_or_create_data_type(parameter, context)
                prop = self.resolver.create_property(parameter, data_type)
                element.owned_attributes.append(prop)

            if not prop.applied_stereotypes:
                self.stereotype_service.apply_stereotype(prop, Stereotype.VALUE_PROPERTY)

            self.state_mapping.map_state_dependencies(parameter, prop, self.direction)

            state = select_state(parameter.iid)
            if state is not None:
                context.selected_states[parameter.iid] = state.iid

            self._update_value(parameter, prop, state)

    def _update_value(self, parameter, prop: Property, state: Optional[ActualFiniteState]) -> None:
        if prop.default_value is None:
            kind = literal_kind_for(parameter.parameter_type)
            prop.default_value = self.transaction_service.create(ELEMENT_KIND_BY_LITERAL_KIND[kind])

        option = self.engineering_store.default_option() if parameter.is_option_dependent else None
        value_set = query_value_set(parameter, option, state)
        text = value_set.actual_value[0] if value_set is not None and value_set.actual_value else None

        try:
            write_literal_value(prop.default_value, text)
        except ValueParsingError as e:
            if not is_enabled('lenient_value_parsing'):
                raise
            self.notifications.append(
                "Value of [%s] was not mapped: %s", Severity.WARNING, prop.name, e
            )

    def _map_ports(self, row: MappedElementDefinitionRow, context: MappingContext) -> None:
        parent = row.design_element

        for usage in row.engineering_element.contained_elements:
            if not usage.is_interface_end:
                continue

            result = self.resolver.get_or_create_port(usage, parent)
            if not result:
                logger.warning(f"The mapping was not able to map port [{usage.user_friendly_name}]")
                continue

            port, definition = result.value
            context.ports_to_connect[usage.iid] = (usage, port)

            parent.remove_owned_element(port.id)
            parent.owned_elements.append(port)
            parent.remove_owned_element(definition.id)
            parent.owned_elements.append(definition)

    def _map_stereotypes(self, row: MappedElementDefinitionRow) -> None:
        self.stereotype_service.apply_stereotypes_from(row.engineering_element, row.design_element)

    def _connect_ports(self, context: MappingContext) -> None:
        for usage, port in context.ports_to_connect.values():
            port_type = port.type
            if not isinstance(port_type, Class):
                continue

            for relationship in usage.relationships:
                if not isinstance(relationship, BinaryRelationship):
                    continue

                interface = self.resolver.get_or_create_interface(relationship, context)

                if relationship.source is not None and relationship.source.iid == usage.iid:
                    self.resolver.get_or_create_usage(interface, port_type)
                else:
                    self.resolver.get_or_create_interface_realization(interface, port_type)

    def _save_selected_states(self, context: MappingContext) -> None:
        for parameter_iid, state_iid in context.selected_states.items():
            self.mapping_configuration.add_or_update_selected_actual_finite_state(
                state_iid, parameter_iid, self.direction
            )

"""
Mapping Configuration Service - correspondences between the two models

Owns the in-memory correspondences and the current external identifier map.
Loading maps existing design elements back to engineering things (skipping
elements on cyclic paths and restoring selected states); saving records a
correspondence per mapped row and per selected state.

The correspondences live as long as the modeling session: closing the
session resets them to a fresh, empty map.

Usage:
    configuration = MappingConfigurationService(
        engineering_store, transaction_service, cycle_validator,
        correspondence_store=store, session_service=sessions,
    )
    configuration.create_external_identifier_map("satellite", "Satellite")

    rows = configuration.load_mapping(design_model.blocks())
    ...
    configuration.persist_external_identifier_map()
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..config.settings import get_setting
from ..core.correspondence_store import CorrespondenceStore
from ..core.cycle_validator import CycleValidator
from ..core.engineering_store import EngineeringModelStore
from ..core.notifications import NotificationLog, Severity
from ..core.stereotypes import StereotypeService
from ..managers.session_service import SessionHook, SessionService
from ..managers.transaction_service import TransactionService
from ..models.correspondence import Correspondence, ExternalIdentifier, ExternalIdentifierMap
from ..models.design import DesignElement, Stereotype
from ..models.engineering import ActualFiniteState, ElementDefinition, Requirement
from ..models.mapping import (
    MappedElementDefinitionRow,
    MappedElementRow,
    MappedRequirementRow,
    MappingDirection,
)

logger = logging.getLogger(__name__)

CYCLIC_PATH_WARNING = (
    "Mapping for element [%s] was not loaded because it is part of a cyclic "
    "dependency path in the design model"
)


class _SessionResetHook(SessionHook):
    def __init__(self, configuration: "MappingConfigurationService"):
        self.configuration = configuration

    def on_session_closed(self, session: SessionService) -> None:
        self.configuration.reset()


class MappingConfigurationService:
    """Keeps and persists the correspondences of mapped elements."""

    def __init__(
        self,
        engineering_store: EngineeringModelStore,
        transaction_service: TransactionService,
        cycle_validator: CycleValidator,
        stereotype_service: Optional[StereotypeService] = None,
        notifications: Optional[NotificationLog] = None,
        correspondence_store: Optional[CorrespondenceStore] = None,
        session_service: Optional[SessionService] = None,
        tool_name: Optional[str] = None,
    ):
        self.engineering_store = engineering_store
        self.transaction_service = transaction_service
        self.cycle_validator = cycle_validator
        self.stereotype_service = stereotype_service or transaction_service.stereotype_service
        self.notifications = notifications or NotificationLog()
        self.correspondence_store = correspondence_store
        self.tool_name = tool_name or get_setting('tool_name')

        self._correspondences: List[Correspondence] = []
        self.external_identifier_map = ExternalIdentifierMap(external_tool_name=self.tool_name)

        if session_service is not None:
            session_service.add_hook(_SessionResetHook(self))

    # ========================================================================
    # Correspondences
    # ========================================================================

    @property
    def correspondences(self) -> List[Correspondence]:
        return list(self._correspondences)

    def find_correspondence(self, external_id: str,
                            direction: Optional[MappingDirection] = None) -> Optional[Correspondence]:
        for correspondence in self._correspondences:
            if correspondence.external_id != external_id:
                continue
            if direction is None or correspondence.mapping_direction == direction:
                return correspondence
        return None

    def add_to_external_identifier_map(self, internal_id: str, external_id: str,
                                       direction: MappingDirection) -> Correspondence:
        """Insert or update the correspondence keyed by (external id, direction)."""
        existing = self.find_correspondence(external_id, direction)

        if existing is not None:
            existing.internal_thing = internal_id
            return existing

        correspondence = Correspondence(
            internal_thing=internal_id,
            external_identifier=ExternalIdentifier(identifier=external_id, mapping_direction=direction),
        )
        self._correspondences.append(correspondence)
        return correspondence

    def add_or_update_selected_actual_finite_state(self, state_id: str, parameter_id: str,
                                                   direction: MappingDirection) -> Correspondence:
        """Record the state selected for a state-dependent parameter."""
        return self.add_to_external_identifier_map(state_id, parameter_id, direction)

    def save_mapping_configuration(self, rows: Iterable[MappedElementRow],
                                   direction: MappingDirection) -> None:
        """Record a correspondence for every resolved row and mark it persisted."""
        saved = 0
        for row in rows:
            if not row.is_resolved:
                continue
            self.add_to_external_identifier_map(row.engineering_element.iid, row.design_element.id, direction)
            row.mark_persisted()
            saved += 1

        logger.debug(f"Saved {saved} correspondence(s) {direction.value}")

    # ========================================================================
    # Loading
    # ========================================================================

    def load_mapping(self, elements: Iterable[DesignElement]) -> List[MappedElementRow]:
        """
        Rebuild rows for design elements that have a correspondence.

        Elements on a cyclic path are skipped with one warning each; rows
        whose engineering thing cannot be found are dropped.
        """
        rows: List[MappedElementRow] = []
        excluded: Dict[str, DesignElement] = {}
        invalid_ids = None

        for element in elements:
            correspondence = self.find_correspondence(element.id)
            if correspondence is None:
                continue

            if invalid_ids is None:
                invalid_ids = self.cycle_validator.get_invalid_paths()

            if element.id in invalid_ids:
                excluded.setdefault(element.id, element)
                continue

            row = self._build_row(element, correspondence)
            if row is None:
                continue
            if not row.is_resolved:
                logger.warning(
                    f"Engineering thing {correspondence.internal_thing} mapped to "
                    f"{element.name} was not found"
                )
                continue

            rows.append(row)

        for element in excluded.values():
            self.notifications.append(CYCLIC_PATH_WARNING, Severity.WARNING, element.name)

        return rows

    def _build_row(self, element: DesignElement,
                   correspondence: Correspondence) -> Optional[MappedElementRow]:
        direction = correspondence.mapping_direction
        design_element = (
            self.transaction_service.clone_element(element)
            if direction == MappingDirection.FROM_ENGINEERING_TO_DESIGN
            else element
        )

        if self.stereotype_service.does_it_have_the_stereotype(element, Stereotype.BLOCK):
            row = MappedElementDefinitionRow(None, design_element, direction)
            found = self.engineering_store.try_get_thing_by_id(correspondence.internal_thing, ElementDefinition)
            if found:
                row.engineering_element = found.value.clone()
                self._load_selected_states(row)
            return row

        if self.stereotype_service.does_it_have_the_stereotype(element, Stereotype.REQUIREMENT):
            row = MappedRequirementRow(None, design_element, direction)
            found = self.engineering_store.try_get_thing_by_id(correspondence.internal_thing, Requirement)
            if found:
                row.engineering_element = found.value.clone()
            return row

        logger.debug(f"{element.name} is neither a block nor a requirement; not loaded")
        return None

    def _load_selected_states(self, row: MappedElementDefinitionRow) -> None:
        for parameter in row.engineering_element.parameters:
            state_list = parameter.state_dependence
            if state_list is None or not state_list.actual_states:
                continue

            state: Optional[ActualFiniteState] = None
            correspondence = self.find_correspondence(parameter.iid)

            if correspondence is not None:
                state = next(
                    (s for s in state_list.actual_states if s.iid == correspondence.internal_thing),
                    None
                )

            if state is None:
                state = next((s for s in state_list.actual_states if s.is_default),
                             state_list.actual_states[0])

            row.set_selected_state_for(parameter.iid, state)

    # ========================================================================
    # External identifier maps
    # ========================================================================

    def create_external_identifier_map(self, name: str, model_name: str,
                                       add_temporary_mapping: bool = False) -> ExternalIdentifierMap:
        """
        Make a new named map current.

        Args:
            name: Map name
            model_name: Name of the design model
            add_temporary_mapping: Seed the map with the in-memory
                correspondences instead of starting empty
        """
        new_map = ExternalIdentifierMap(
            name=name,
            external_model_name=model_name,
            external_tool_name=self.tool_name,
        )

        if add_temporary_mapping:
            new_map.correspondences = [c.model_copy(deep=True) for c in self._correspondences]
        else:
            self._correspondences = []

        self.external_identifier_map = new_map
        logger.info(f"External identifier map '{name}' created for model {model_name}")
        return new_map

    def set_external_identifier_map(self, identifier_map: ExternalIdentifierMap) -> None:
        """Make ``identifier_map`` current and load its correspondences."""
        self.external_identifier_map = identifier_map
        self._correspondences = [c.model_copy(deep=True) for c in identifier_map.correspondences]

    def persist_external_identifier_map(self) -> ExternalIdentifierMap:
        """Write the in-memory correspondences into the current map and save it.

        The map version is incremented on every call. Without a
        correspondence store the map is only updated in memory.
        """
        current = self.external_identifier_map
        current.correspondences = [c.model_copy(deep=True) for c in self._correspondences]
        current.version += 1

        if self.correspondence_store is not None:
            self.correspondence_store.save(current)
            self.correspondence_store.save_to_file(current.name)

        logger.info(
            f"Persisted external identifier map '{current.name}' v{current.version} "
            f"({len(current.correspondences)} correspondences)"
        )
        return current

    def load_external_identifier_map(self, name: str) -> ExternalIdentifierMap:
        """Load a persisted map by name and make it current.

        Raises:
            ValueError: If no correspondence store is configured
        """
        if self.correspondence_store is None:
            raise ValueError("No correspondence store configured")

        identifier_map = self.correspondence_store.load_from_file(name)
        self.set_external_identifier_map(identifier_map)
        return identifier_map

    def reset(self) -> None:
        """Forget every correspondence and start from a fresh, empty map."""
        self._correspondences = []
        self.external_identifier_map = ExternalIdentifierMap(external_tool_name=self.tool_name)
        logger.info("Mapping configuration reset")

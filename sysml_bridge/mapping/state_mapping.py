"""State dependence of mapped value properties."""

import logging

from ..core.stereotypes import StereotypeService
from ..models.design import Property, Stereotype
from ..models.mapping import MappingDirection

logger = logging.getLogger(__name__)

STATE_DEPENDENCE_PROPERTY = "stateDependence"
STATES_PROPERTY = "states"


class StateMappingRule:
    """Links a state-dependent parameter's state list to its value property.

    The state list name and the names of its actual states are written as
    tagged values of the value property.
    """

    def __init__(self, stereotype_service: StereotypeService):
        self.stereotype_service = stereotype_service

    def map_state_dependencies(self, parameter, prop: Property, direction: MappingDirection) -> None:
        state_list = parameter.state_dependence

        if state_list is None:
            return

        if direction != MappingDirection.FROM_ENGINEERING_TO_DESIGN:
            logger.debug(f"State dependence of {prop.name} is not mapped {direction.value}")
            return

        self.stereotype_service.set_stereotype_property_value(
            prop, Stereotype.VALUE_PROPERTY, STATE_DEPENDENCE_PROPERTY, state_list.name
        )
        self.stereotype_service.set_stereotype_property_value(
            prop, Stereotype.VALUE_PROPERTY, STATES_PROPERTY,
            [state.name for state in state_list.actual_states]
        )

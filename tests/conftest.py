"""
Shared fixtures: a design model with its services, and small engineering
models (a tank with a mass, a pump connected to the tank by a pipe, a
state-dependent heater).
"""

import pytest

from sysml_bridge.config.settings import get_all_flags, set_flag
from sysml_bridge.core.correspondence_store import CorrespondenceStore
from sysml_bridge.core.cycle_validator import CycleValidator
from sysml_bridge.core.design_model import DesignModel
from sysml_bridge.core.engineering_store import EngineeringModelStore
from sysml_bridge.core.notifications import NotificationLog
from sysml_bridge.core.stereotypes import StereotypeService
from sysml_bridge.managers.history_service import LocalExchangeHistoryService
from sysml_bridge.managers.session_service import SessionService
from sysml_bridge.managers.transaction_service import TransactionService
from sysml_bridge.mapping.configuration import MappingConfigurationService
from sysml_bridge.mapping.structural_mapper import StructuralMapper
from sysml_bridge.models.engineering import (
    ActualFiniteState,
    ActualFiniteStateList,
    BinaryRelationship,
    Category,
    ElementDefinition,
    ElementUsage,
    InterfaceEndKind,
    MeasurementScale,
    MeasurementUnit,
    Option,
    Parameter,
    ParameterType,
    ParameterTypeKind,
    ValueSet,
)


# ============================================================================
# Engineering model builders
# ============================================================================

def quantity(name, short_name, value, unit_short_name="kg", unit_name="kilogram"):
    unit = MeasurementUnit(name=unit_name, short_name=unit_short_name)
    return Parameter(
        parameter_type=ParameterType(name=name, short_name=short_name, kind=ParameterTypeKind.QUANTITY),
        scale=MeasurementScale(name=f"{unit_name} scale", unit=unit),
        value_sets=[ValueSet(actual_value=[value])],
    )


def text(name, short_name, value):
    return Parameter(
        parameter_type=ParameterType(name=name, short_name=short_name, kind=ParameterTypeKind.TEXT),
        value_sets=[ValueSet(actual_value=[value])],
    )


@pytest.fixture
def make_quantity():
    return quantity


@pytest.fixture
def make_text():
    return text


# ============================================================================
# Services
# ============================================================================

@pytest.fixture
def design_model():
    return DesignModel("Satellite")


@pytest.fixture
def default_option():
    return Option(name="Default", short_name="default")


@pytest.fixture
def engineering_store(default_option):
    return EngineeringModelStore(options=[default_option])


@pytest.fixture
def stereotype_service():
    return StereotypeService()


@pytest.fixture
def history():
    return LocalExchangeHistoryService(author="tester")


@pytest.fixture
def transaction_service(design_model, stereotype_service, history):
    return TransactionService(design_model, stereotype_service, history)


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def session_service(design_model):
    sessions = SessionService()
    sessions.open("Satellite", design_model)
    return sessions


@pytest.fixture
def correspondence_store(tmp_path):
    return CorrespondenceStore(tmp_path / "maps")


@pytest.fixture
def mapping_configuration(engineering_store, transaction_service, design_model, stereotype_service,
                          notifications, correspondence_store, session_service):
    return MappingConfigurationService(
        engineering_store,
        transaction_service,
        CycleValidator(design_model),
        stereotype_service=stereotype_service,
        notifications=notifications,
        correspondence_store=correspondence_store,
        session_service=session_service,
        tool_name="test-tool",
    )


@pytest.fixture
def mapper(design_model, engineering_store, transaction_service, mapping_configuration, notifications):
    return StructuralMapper(
        design_model,
        engineering_store,
        transaction_service,
        mapping_configuration,
        notifications=notifications,
    )


@pytest.fixture
def lenient_values():
    """Enable lenient value parsing for one test."""
    previous = get_all_flags()['lenient_value_parsing']
    set_flag('lenient_value_parsing', True)
    yield
    set_flag('lenient_value_parsing', previous)


# ============================================================================
# Engineering models
# ============================================================================

@pytest.fixture
def tank_definition(engineering_store):
    """Tank with mass = 12.5 kg."""
    tank = ElementDefinition(
        name="Tank",
        short_name="tank",
        parameters=[quantity("mass", "m", "12.5")],
        categories=[Category(name="Block", short_name="block")],
    )
    engineering_store.add(tank)
    return tank


@pytest.fixture
def pump_and_tank(engineering_store):
    """Pump whose outlet is piped to the tank inlet.

    Returns:
        (pump definition, tank definition, pipe relationship)
    """
    connector = ElementDefinition(name="Connector", short_name="connector")

    outlet = ElementUsage(name="outlet", short_name="outlet", element_definition=connector,
                          interface_end=InterfaceEndKind.OUTPUT)
    inlet = ElementUsage(name="inlet", short_name="inlet", element_definition=connector,
                         interface_end=InterfaceEndKind.INPUT)

    pipe = BinaryRelationship(name="pipe", short_name="pipe", source=outlet, target=inlet)
    outlet.relationships.append(pipe)
    inlet.relationships.append(pipe)

    pump = ElementDefinition(name="Pump", short_name="pump", contained_elements=[outlet],
                             parameters=[quantity("flow rate", "q", "3", "l/s", "litre per second")])
    tank = ElementDefinition(name="Tank", short_name="tank", contained_elements=[inlet],
                             parameters=[quantity("mass", "m", "12.5")])

    engineering_store.add(pump)
    engineering_store.add(tank)
    return pump, tank, pipe


@pytest.fixture
def heater_definition(engineering_store):
    """Heater whose power depends on the Off (default) / On state."""
    off = ActualFiniteState(name="Off", short_name="off", is_default=True)
    on = ActualFiniteState(name="On", short_name="on")
    states = ActualFiniteStateList(name="Power mode", short_name="mode", actual_states=[off, on])

    power = Parameter(
        parameter_type=ParameterType(name="power", short_name="P", kind=ParameterTypeKind.QUANTITY),
        scale=MeasurementScale(name="watt scale", unit=MeasurementUnit(name="watt", short_name="W")),
        state_dependence=states,
        value_sets=[
            ValueSet(actual_value=["0"], actual_state=off.iid),
            ValueSet(actual_value=["250"], actual_state=on.iid),
        ],
    )

    heater = ElementDefinition(name="Heater", short_name="heater", parameters=[power])
    engineering_store.add(heater)
    return heater

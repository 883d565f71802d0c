"""Engineering model things.

The engineering model is the parameterized source side of a mapping:
element definitions that own parameters and contain element usages, usages
that override parameters and may represent interface ends, finite states
that parameters depend on, and requirements.

Every thing carries a unique ``iid``. ``clone()`` returns a deep copy so a
mapped row can be edited without touching the live engineering model.
"""

import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


def new_iid() -> str:
    """Generate a new unique thing identifier."""
    return str(uuid.uuid4())


class ParameterTypeKind(str, Enum):
    """Closed set of parameter type categories."""
    QUANTITY = "quantity"
    BOOLEAN = "boolean"
    TEXT = "text"
    ENUMERATION = "enumeration"
    DATE = "date"
    OTHER = "other"


class InterfaceEndKind(str, Enum):
    """Role of an element usage on an interface. NONE means a plain part."""
    NONE = "none"
    UNDIRECTED = "undirected"
    INPUT = "input"
    OUTPUT = "output"
    IN_OUT = "in_out"


@dataclass(eq=False)
class Thing:
    """Base class for every engineering-model thing."""
    iid: str = field(default_factory=new_iid, kw_only=True)

    def clone(self):
        """Return a deep copy of this thing, identifiers included."""
        return deepcopy(self)


@dataclass(eq=False)
class DefinedThing(Thing):
    """A thing with a name and a short name."""
    name: str = ""
    short_name: str = ""


@dataclass(eq=False)
class Category(DefinedThing):
    """Categorization applied to element definitions, usages and requirements."""
    pass


@dataclass(eq=False)
class MeasurementUnit(DefinedThing):
    """Measurement unit. ``prefix`` is set for prefixed units (e.g. 'kilo')."""
    prefix: Optional[str] = None

    @property
    def is_prefixed(self) -> bool:
        return self.prefix is not None


@dataclass(eq=False)
class MeasurementScale(DefinedThing):
    """Measurement scale of a quantity kind, optionally bound to a unit."""
    unit: Optional[MeasurementUnit] = None


@dataclass(eq=False)
class ParameterType(DefinedThing):
    """Parameter type. ``value_definitions`` lists enumeration literal names."""
    kind: ParameterTypeKind = ParameterTypeKind.TEXT
    value_definitions: List[str] = field(default_factory=list)


@dataclass(eq=False)
class ActualFiniteState(DefinedThing):
    is_default: bool = False


@dataclass(eq=False)
class ActualFiniteStateList(DefinedThing):
    actual_states: List[ActualFiniteState] = field(default_factory=list)


@dataclass(eq=False)
class Option(DefinedThing):
    pass


@dataclass(eq=False)
class ValueSet(Thing):
    """Values of a parameter for one (option, state) combination."""
    actual_value: List[str] = field(default_factory=lambda: ["-"])
    actual_option: Optional[str] = None
    actual_state: Optional[str] = None


@dataclass(eq=False)
class Parameter(Thing):
    parameter_type: ParameterType = field(default_factory=ParameterType)
    scale: Optional[MeasurementScale] = None
    value_sets: List[ValueSet] = field(default_factory=list)
    state_dependence: Optional[ActualFiniteStateList] = None
    is_option_dependent: bool = False


@dataclass(eq=False)
class ParameterOverride(Thing):
    """Usage-level override of a definition parameter.

    Type, scale, state dependence and option dependence come from the
    overridden parameter; only the value sets belong to the override.
    """
    parameter: Parameter = field(default_factory=Parameter)
    value_sets: List[ValueSet] = field(default_factory=list)

    @property
    def parameter_type(self) -> ParameterType:
        return self.parameter.parameter_type

    @property
    def scale(self) -> Optional[MeasurementScale]:
        return self.parameter.scale

    @property
    def state_dependence(self) -> Optional[ActualFiniteStateList]:
        return self.parameter.state_dependence

    @property
    def is_option_dependent(self) -> bool:
        return self.parameter.is_option_dependent


@dataclass(eq=False)
class BinaryRelationship(DefinedThing):
    """Directed relationship between two things, e.g. an interface link."""
    source: Optional[Thing] = None
    target: Optional[Thing] = None


@dataclass(eq=False)
class ElementDefinition(DefinedThing):
    parameters: List[Parameter] = field(default_factory=list)
    contained_elements: List["ElementUsage"] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)


@dataclass(eq=False)
class ElementUsage(DefinedThing):
    element_definition: ElementDefinition = field(default_factory=ElementDefinition)
    parameter_overrides: List[ParameterOverride] = field(default_factory=list)
    interface_end: InterfaceEndKind = InterfaceEndKind.NONE
    categories: List[Category] = field(default_factory=list)
    relationships: List[BinaryRelationship] = field(default_factory=list)

    @property
    def is_interface_end(self) -> bool:
        return self.interface_end != InterfaceEndKind.NONE

    @property
    def user_friendly_name(self) -> str:
        return f"{self.element_definition.name}.{self.name}"


@dataclass(eq=False)
class Requirement(DefinedThing):
    text: str = ""
    categories: List[Category] = field(default_factory=list)


def all_parameters_and_overrides(usage: ElementUsage) -> List[Thing]:
    """Parameters of a usage, overrides shadowing base parameters of the same type.

    Base parameters come first, in definition order, followed by the
    overrides in usage order.
    """
    overridden_types = {o.parameter_type.iid for o in usage.parameter_overrides}

    result: List[Thing] = [
        p for p in usage.element_definition.parameters
        if p.parameter_type.iid not in overridden_types
    ]
    result.extend(usage.parameter_overrides)
    return result


def query_value_set(parameter, option: Optional[Option] = None,
                    state: Optional[ActualFiniteState] = None) -> Optional[ValueSet]:
    """Select the value set of a parameter or override for an option and state.

    Option-dependent parameters are filtered by ``option``; state-dependent
    parameters by ``state``. Falls back to the first value set when nothing
    matches exactly.
    """
    if not parameter.value_sets:
        return None

    candidates = parameter.value_sets

    if parameter.is_option_dependent and option is not None:
        candidates = [v for v in candidates if v.actual_option == option.iid] or candidates

    if parameter.state_dependence is not None and state is not None:
        candidates = [v for v in candidates if v.actual_state == state.iid] or candidates

    return candidates[0]

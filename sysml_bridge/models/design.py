"""Design model elements.

The design model is the block/port/interface side of a mapping. Elements are
plain dataclasses identified by ``id``; relations between elements hold
object references and are always compared by ``id``, because clones share the
identifier of the element they were cloned from.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


def new_id() -> str:
    """Generate a new unique design element identifier."""
    return str(uuid.uuid4())


class Stereotype(str, Enum):
    """Semantic tags applied to design elements."""
    BLOCK = "Block"
    VALUE_PROPERTY = "ValueProperty"
    PART_PROPERTY = "PartProperty"
    PORT_PROPERTY = "PortProperty"
    VALUE_TYPE = "ValueType"
    UNIT = "Unit"
    REQUIREMENT = "Requirement"


class ElementKind(str, Enum):
    """Every kind of element the transaction service can create."""
    BLOCK = "block"
    PART_PROPERTY = "part_property"
    VALUE_PROPERTY = "value_property"
    PORT = "port"
    INTERFACE = "interface"
    VALUE_TYPE = "value_type"
    ENUMERATION = "enumeration"
    ENUMERATION_LITERAL = "enumeration_literal"
    UNIT = "unit"
    USAGE = "usage"
    INTERFACE_REALIZATION = "interface_realization"
    REQUIREMENT = "requirement"
    LITERAL_REAL = "literal_real"
    LITERAL_INTEGER = "literal_integer"
    LITERAL_UNLIMITED_NATURAL = "literal_unlimited_natural"
    LITERAL_BOOLEAN = "literal_boolean"
    LITERAL_STRING = "literal_string"


class LiteralKind(str, Enum):
    """Closed set of literal value representations."""
    REAL = "real"
    INTEGER = "integer"
    UNLIMITED_NATURAL = "unlimited_natural"
    BOOLEAN = "boolean"
    STRING = "string"


@dataclass(eq=False)
class Literal:
    """Literal value specification. ``value`` is None when no value is set."""
    kind: LiteralKind
    value: Union[float, int, bool, str, None] = None


@dataclass(eq=False)
class DesignElement:
    """Base class for every design element."""
    name: str = ""
    id: str = field(default_factory=new_id)
    applied_stereotypes: List[str] = field(default_factory=list)
    tagged_values: Dict[Tuple[str, str], Any] = field(default_factory=dict)

    def has_stereotype(self, stereotype: Union[Stereotype, str]) -> bool:
        return str(getattr(stereotype, 'value', stereotype)) in self.applied_stereotypes


@dataclass(eq=False)
class Property(DesignElement):
    type: Optional[DesignElement] = None
    default_value: Optional[Literal] = None


@dataclass(eq=False)
class Port(Property):
    pass


@dataclass(eq=False)
class Class(DesignElement):
    """Block-like classifier.

    ``owned_attributes`` holds value properties and part properties,
    ``owned_elements`` holds nested classes, ports and port types.
    """
    owned_attributes: List[Property] = field(default_factory=list)
    owned_elements: List[DesignElement] = field(default_factory=list)
    relationships: List[DesignElement] = field(default_factory=list)

    @property
    def owned_ports(self) -> List[Port]:
        ports = [a for a in self.owned_attributes if isinstance(a, Port)]
        ports.extend(e for e in self.owned_elements if isinstance(e, Port) and e not in ports)
        return ports

    def remove_owned_element(self, element_id: str) -> None:
        self.owned_elements[:] = [e for e in self.owned_elements if e.id != element_id]


@dataclass(eq=False)
class Interface(Class):
    pass


@dataclass(eq=False)
class DataType(DesignElement):
    pass


@dataclass(eq=False)
class EnumerationLiteral(DesignElement):
    pass


@dataclass(eq=False)
class Enumeration(DataType):
    owned_literals: List[EnumerationLiteral] = field(default_factory=list)


@dataclass(eq=False)
class InstanceSpecification(DesignElement):
    """Instance specification; units are Unit-stereotyped instances."""
    pass


@dataclass(eq=False)
class Requirement(Class):
    text: str = ""


@dataclass(eq=False)
class Usage(DesignElement):
    clients: List[DesignElement] = field(default_factory=list)
    suppliers: List[DesignElement] = field(default_factory=list)


@dataclass(eq=False)
class InterfaceRealization(DesignElement):
    contract: Optional[Interface] = None
    implementing_classifier: Optional[Class] = None


@dataclass(eq=False)
class Package(DesignElement):
    owned_elements: List[DesignElement] = field(default_factory=list)


def contained_elements(element: DesignElement) -> Iterator[DesignElement]:
    """Yield the elements directly contained by ``element``."""
    if isinstance(element, Class):
        yield from element.owned_attributes
        yield from (e for e in element.owned_elements if e not in element.owned_attributes)
        yield from element.relationships
    elif isinstance(element, Package):
        yield from element.owned_elements
    elif isinstance(element, Enumeration):
        yield from element.owned_literals


def walk(element: DesignElement) -> Iterator[DesignElement]:
    """Depth-first walk of ``element`` and everything it contains.

    Each element id is yielded once, so shared references do not loop.
    """
    seen = set()
    stack = [element]

    while stack:
        current = stack.pop()
        if current.id in seen:
            continue
        seen.add(current.id)
        yield current
        stack.extend(reversed(list(contained_elements(current))))

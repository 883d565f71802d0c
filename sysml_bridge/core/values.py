"""
Value, unit and type translation between engineering values and design literals.

Literal kinds are chosen from the parameter type category through an explicit
table, not through the type hierarchy:

    QUANTITY     -> REAL
    BOOLEAN      -> BOOLEAN
    TEXT / other -> STRING

Engineering values are text. ``"-"`` or blank text means "no value": numeric
and boolean literals are left unset, string literals hold ``"-"``.
Malformed numeric or boolean text raises ``ValueParsingError``.
"""

import logging
from typing import Dict, Optional

from ..models.design import ElementKind, Literal, LiteralKind
from ..models.engineering import MeasurementScale, ParameterType, ParameterTypeKind

logger = logging.getLogger(__name__)

NO_VALUE = "-"

# Unit short name of dimensionless scales
DIMENSIONLESS_UNIT = "1"

LITERAL_KIND_BY_PARAMETER_KIND: Dict[ParameterTypeKind, LiteralKind] = {
    ParameterTypeKind.QUANTITY: LiteralKind.REAL,
    ParameterTypeKind.BOOLEAN: LiteralKind.BOOLEAN,
    ParameterTypeKind.TEXT: LiteralKind.STRING,
    ParameterTypeKind.ENUMERATION: LiteralKind.STRING,
}

ELEMENT_KIND_BY_LITERAL_KIND: Dict[LiteralKind, ElementKind] = {
    LiteralKind.REAL: ElementKind.LITERAL_REAL,
    LiteralKind.INTEGER: ElementKind.LITERAL_INTEGER,
    LiteralKind.UNLIMITED_NATURAL: ElementKind.LITERAL_UNLIMITED_NATURAL,
    LiteralKind.BOOLEAN: ElementKind.LITERAL_BOOLEAN,
    LiteralKind.STRING: ElementKind.LITERAL_STRING,
}

_TRUE_TEXT = {"true", "1", "yes"}
_FALSE_TEXT = {"false", "0", "no"}


class ValueParsingError(ValueError):
    """Engineering value text cannot be read as the target literal kind."""

    def __init__(self, text: str, kind: LiteralKind):
        self.text = text
        self.kind = kind
        super().__init__(f"Cannot parse {text!r} as a {kind.value} literal")


def literal_kind_for(parameter_type: ParameterType) -> LiteralKind:
    """Literal kind used to hold values of ``parameter_type``."""
    return LITERAL_KIND_BY_PARAMETER_KIND.get(parameter_type.kind, LiteralKind.STRING)


def normalize_value(text: Optional[str]) -> Optional[str]:
    """Return None for absent values (``"-"``, blank or None), else the text."""
    if text is None:
        return None
    if text == NO_VALUE or not text.strip():
        return None
    return text


def parse_boolean(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE_TEXT:
        return True
    if lowered in _FALSE_TEXT:
        return False
    raise ValueParsingError(text, LiteralKind.BOOLEAN)


def parse_literal_value(text: Optional[str], kind: LiteralKind):
    """Convert engineering value text into the Python value of a literal.

    Returns None for absent values on numeric and boolean kinds, and
    ``"-"`` for absent values on strings.

    Raises:
        ValueParsingError: numeric or boolean text cannot be parsed
    """
    value = normalize_value(text)

    if kind == LiteralKind.STRING:
        return value if value is not None else NO_VALUE

    if value is None:
        return None

    try:
        if kind == LiteralKind.REAL:
            return float(value)
        if kind in (LiteralKind.INTEGER, LiteralKind.UNLIMITED_NATURAL):
            return int(value)
    except ValueError as e:
        raise ValueParsingError(value, kind) from e

    return parse_boolean(value)


def write_literal_value(literal: Literal, text: Optional[str]) -> Literal:
    """Write engineering value text into ``literal``, keeping its kind.

    An absent value leaves numeric and boolean literals untouched.
    """
    value = parse_literal_value(text, literal.kind)

    if value is not None:
        literal.value = value

    return literal


def literal_to_text(literal: Optional[Literal]) -> str:
    """Render a design literal back as engineering value text."""
    if literal is None or literal.value is None:
        return NO_VALUE

    if literal.kind == LiteralKind.BOOLEAN:
        return "true" if literal.value else "false"

    if literal.kind == LiteralKind.REAL:
        value = float(literal.value)
        return str(int(value)) if value.is_integer() else repr(value)

    return str(literal.value)


def has_meaningful_unit(scale: Optional[MeasurementScale]) -> bool:
    """True when the scale carries a unit other than the dimensionless one."""
    return (
        scale is not None
        and scale.unit is not None
        and scale.unit.short_name != DIMENSIONLESS_UNIT
    )


def data_type_name(parameter_type: ParameterType,
                   scale: Optional[MeasurementScale] = None) -> str:
    """Name of the value type generated for a parameter type and scale.

    Example:
        >>> data_type_name(mass, kilogram_scale)
        'mass[kg]'
    """
    if has_meaningful_unit(scale):
        return f"{parameter_type.name}[{scale.unit.short_name}]"
    return parameter_type.name

"""Stereotype (semantic tag) service for design elements."""

import logging
from typing import Any, Iterable, Union

from ..models.design import DesignElement, Stereotype
from ..models.engineering import Category, Thing

logger = logging.getLogger(__name__)

StereotypeLike = Union[Stereotype, str]


def _stereotype_name(stereotype: StereotypeLike) -> str:
    return stereotype.value if isinstance(stereotype, Stereotype) else str(stereotype)


def categories_of(thing: Thing) -> Iterable[Category]:
    """Categories of a thing; usages inherit their definition's categories."""
    categories = list(getattr(thing, 'categories', []))
    definition = getattr(thing, 'element_definition', None)
    if definition is not None:
        categories.extend(c for c in definition.categories if c not in categories)
    return categories


class StereotypeService:
    """Applies and queries stereotypes and their tagged values."""

    def apply_stereotype(self, element: DesignElement, stereotype: StereotypeLike) -> None:
        name = _stereotype_name(stereotype)
        if name not in element.applied_stereotypes:
            element.applied_stereotypes.append(name)

    def does_it_have_the_stereotype(self, element: DesignElement, stereotype: StereotypeLike) -> bool:
        return element.has_stereotype(_stereotype_name(stereotype))

    def apply_stereotypes_from(self, thing: Thing, element: DesignElement) -> None:
        """Apply one stereotype per category of ``thing``.

        Categories named like a known stereotype apply that stereotype
        (e.g. a 'Block' category); any other category applies a stereotype of
        its own name.
        """
        for category in categories_of(thing):
            known = next(
                (s for s in Stereotype
                 if s.value.casefold() in (category.name.casefold(), category.short_name.casefold())),
                None
            )
            self.apply_stereotype(element, known or category.name)

    def set_stereotype_property_value(self, element: DesignElement, stereotype: StereotypeLike,
                                      property_name: str, value: Any) -> None:
        """Set a tagged value, applying the stereotype first if needed."""
        name = _stereotype_name(stereotype)
        if not element.has_stereotype(name):
            logger.debug(f"Applying {name} to {element.name} before setting '{property_name}'")
            self.apply_stereotype(element, name)
        element.tagged_values[(name, property_name)] = value

    def get_stereotype_property_value(self, element: DesignElement, stereotype: StereotypeLike,
                                      property_name: str, default: Any = None) -> Any:
        return element.tagged_values.get((_stereotype_name(stereotype), property_name), default)

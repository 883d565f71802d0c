"""Mapping rows, directions and lookup results.

A mapped row pairs one engineering thing with one design element for a
single mapping pass. Rows belong to the caller of the pass; the mapper only
fills them in.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar

from .design import Class, DesignElement
from .engineering import ActualFiniteState, ElementDefinition, Requirement, Thing

T = TypeVar('T')


class MappingDirection(str, Enum):
    """Which model is the source of a mapping pass."""
    FROM_ENGINEERING_TO_DESIGN = "engineering_to_design"
    FROM_DESIGN_TO_ENGINEERING = "design_to_engineering"


class RowState(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class LookupResult(Generic[T]):
    """Result of a lookup that may not find anything.

    Truthy when found, so ``if result := store.try_get(...)`` reads naturally.
    """
    found: bool
    value: Optional[T] = None

    @classmethod
    def hit(cls, value: T) -> "LookupResult[T]":
        return cls(True, value)

    @classmethod
    def miss(cls) -> "LookupResult[T]":
        return cls(False, None)

    def __bool__(self) -> bool:
        return self.found


class MappedElementRow:
    """Working pairing of an engineering thing and a design element."""

    def __init__(self, engineering_element: Optional[Thing] = None,
                 design_element: Optional[DesignElement] = None,
                 direction: MappingDirection = MappingDirection.FROM_ENGINEERING_TO_DESIGN):
        self.engineering_element = engineering_element
        self.design_element = design_element
        self._direction = direction
        self._persisted = False

    @property
    def direction(self) -> MappingDirection:
        return self._direction

    @property
    def is_resolved(self) -> bool:
        return self.engineering_element is not None and self.design_element is not None

    @property
    def state(self) -> RowState:
        if not self.is_resolved:
            return RowState.UNRESOLVED
        return RowState.PERSISTED if self._persisted else RowState.RESOLVED

    def mark_persisted(self) -> None:
        if not self.is_resolved:
            raise ValueError("Only resolved rows can be persisted")
        self._persisted = True

    def __repr__(self) -> str:
        engineering_name = getattr(self.engineering_element, 'name', None)
        design_name = getattr(self.design_element, 'name', None)
        return (f"{type(self).__name__}({engineering_name!r} -> {design_name!r}, "
                f"{self.direction.value}, {self.state.value})")


class MappedElementDefinitionRow(MappedElementRow):
    """Row mapping an element definition to a block.

    Keeps the actual finite state selected for each state-dependent parameter,
    keyed by parameter iid.
    """

    engineering_element: Optional[ElementDefinition]
    design_element: Optional[Class]

    def __init__(self, engineering_element: Optional[ElementDefinition] = None,
                 design_element: Optional[Class] = None,
                 direction: MappingDirection = MappingDirection.FROM_ENGINEERING_TO_DESIGN):
        super().__init__(engineering_element, design_element, direction)
        self.selected_states: Dict[str, ActualFiniteState] = {}

    def get_selected_state_for(self, parameter_iid: str) -> Optional[ActualFiniteState]:
        return self.selected_states.get(parameter_iid)

    def set_selected_state_for(self, parameter_iid: str, state: ActualFiniteState) -> None:
        self.selected_states[parameter_iid] = state


class MappedRequirementRow(MappedElementRow):
    """Row mapping a requirement to a requirement-tagged design element."""

    engineering_element: Optional[Requirement]

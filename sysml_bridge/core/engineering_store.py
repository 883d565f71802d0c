"""
Engineering Model Store - id-indexed access to engineering things

Holds the element definitions, requirements and options of one engineering
model iteration and indexes every reachable thing by iid, so
``try_get_thing_by_id`` is a dictionary lookup rather than a model scan.

Usage:
    from sysml_bridge.core.engineering_store import EngineeringModelStore

    store = EngineeringModelStore(options=[Option(name="default")])
    store.add(tank_definition)

    result = store.try_get_thing_by_id(tank_definition.iid)
    if result:
        tank = result.value
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Type, TypeVar

from ..models.engineering import (
    ElementDefinition,
    ElementUsage,
    Option,
    Parameter,
    ParameterOverride,
    Requirement,
    Thing,
)
from ..models.mapping import LookupResult

logger = logging.getLogger(__name__)

TThing = TypeVar('TThing', bound=Thing)


class EngineeringModelStore:
    """In-memory engineering model with an iid index.

    The index is rebuilt incrementally as things are added; nested things
    (usages, parameters, overrides, states, relationships) are indexed along
    with their container.
    """

    def __init__(self, options: Optional[Iterable[Option]] = None):
        self._element_definitions: List[ElementDefinition] = []
        self._requirements: List[Requirement] = []
        self._options: List[Option] = list(options or [])
        self._index: Dict[str, Thing] = {}
        self._lock = threading.RLock()

        for option in self._options:
            self._index[option.iid] = option

    @property
    def element_definitions(self) -> List[ElementDefinition]:
        with self._lock:
            return list(self._element_definitions)

    @property
    def requirements(self) -> List[Requirement]:
        with self._lock:
            return list(self._requirements)

    @property
    def options(self) -> List[Option]:
        with self._lock:
            return list(self._options)

    def default_option(self) -> Optional[Option]:
        """First option of the iteration, used for option-dependent parameters."""
        with self._lock:
            return self._options[0] if self._options else None

    def add(self, thing: Thing) -> None:
        """Add a top-level element definition or requirement and index it."""
        with self._lock:
            if isinstance(thing, ElementDefinition):
                self._element_definitions.append(thing)
            elif isinstance(thing, Requirement):
                self._requirements.append(thing)
            elif isinstance(thing, Option):
                self._options.append(thing)
            else:
                raise TypeError(
                    f"Only element definitions, requirements and options can be "
                    f"added at the top level, got {type(thing).__name__}"
                )

            count = self._index_thing(thing)
            logger.debug(f"Indexed {count} things under {type(thing).__name__} {thing.iid}")

    def try_get_thing_by_id(self, iid: str,
                            expected_type: Optional[Type[TThing]] = None) -> LookupResult:
        """Look a thing up by iid, optionally requiring a type."""
        with self._lock:
            thing = self._index.get(iid)

        if thing is None:
            return LookupResult.miss()

        if expected_type is not None and not isinstance(thing, expected_type):
            return LookupResult.miss()

        return LookupResult.hit(thing)

    def __contains__(self, iid: str) -> bool:
        with self._lock:
            return iid in self._index

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def _index_thing(self, root: Thing) -> int:
        """Index ``root`` and every thing reachable from it. Returns the count added."""
        added = 0
        stack: List[Thing] = [root]

        while stack:
            thing = stack.pop()
            if thing.iid in self._index:
                continue

            self._index[thing.iid] = thing
            added += 1

            if isinstance(thing, ElementDefinition):
                stack.extend(thing.parameters)
                stack.extend(thing.contained_elements)
                stack.extend(thing.categories)
            elif isinstance(thing, ElementUsage):
                stack.append(thing.element_definition)
                stack.extend(thing.parameter_overrides)
                stack.extend(thing.relationships)
                stack.extend(thing.categories)
            elif isinstance(thing, Parameter):
                stack.append(thing.parameter_type)
                if thing.state_dependence is not None:
                    stack.append(thing.state_dependence)
                    stack.extend(thing.state_dependence.actual_states)
            elif isinstance(thing, ParameterOverride):
                stack.append(thing.parameter)
            elif isinstance(thing, Requirement):
                stack.extend(thing.categories)

        return added

"""Per-pass mapping context.

Everything a structural mapping pass caches lives here: value types, units
and interfaces created during the pass, ports waiting to be connected, the
state selected per parameter, and the rows already expanded. The mapper
builds one context per pass and clears it on every exit path.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..core.design_model import names_match
from ..models.design import DataType, InstanceSpecification, Interface, Port
from ..models.engineering import ElementUsage
from ..models.mapping import MappedElementDefinitionRow, MappingDirection


@dataclass
class MappingContext:
    """Transient state of one structural mapping pass.

    Attributes:
        rows: Accumulator of rows; child rows are appended during the pass
        direction: Direction of the pass
        data_types: Value types resolved or created in this pass
        units: Units resolved or created in this pass
        interfaces: Interfaces by binary relationship iid
        ports_to_connect: (usage, port) pairs by usage iid
        selected_states: Selected state iid by parameter iid
        expanded: id() of rows whose contained usages were mapped
    """
    rows: List[MappedElementDefinitionRow] = field(default_factory=list)
    direction: MappingDirection = MappingDirection.FROM_ENGINEERING_TO_DESIGN
    data_types: List[DataType] = field(default_factory=list)
    units: List[InstanceSpecification] = field(default_factory=list)
    interfaces: Dict[str, Interface] = field(default_factory=dict)
    ports_to_connect: Dict[str, Tuple[ElementUsage, Port]] = field(default_factory=dict)
    selected_states: Dict[str, str] = field(default_factory=dict)
    expanded: Set[int] = field(default_factory=set)

    def find_row_by_design_name(self, name: str) -> Optional[MappedElementDefinitionRow]:
        """First row whose design element is named ``name`` (case-insensitive)."""
        for row in self.rows:
            if row.design_element is not None and names_match(row.design_element.name, name):
                return row
        return None

    def clear(self) -> None:
        self.rows = []
        self.data_types.clear()
        self.units.clear()
        self.interfaces.clear()
        self.ports_to_connect.clear()
        self.selected_states.clear()
        self.expanded.clear()

    @property
    def is_empty(self) -> bool:
        return not (self.rows or self.data_types or self.units or self.interfaces
                    or self.ports_to_connect or self.selected_states or self.expanded)

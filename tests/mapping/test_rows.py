"""
Tests for mapped rows, lookup results and the per-pass mapping context.
"""

import pytest

from sysml_bridge.mapping.context import MappingContext
from sysml_bridge.models.design import Class, DataType
from sysml_bridge.models.engineering import ActualFiniteState, ElementDefinition
from sysml_bridge.models.mapping import (
    LookupResult,
    MappedElementDefinitionRow,
    MappingDirection,
    RowState,
)


class TestMappedRows:

    def test_row_states(self):
        row = MappedElementDefinitionRow(ElementDefinition(name="Tank"))
        assert row.state == RowState.UNRESOLVED
        assert not row.is_resolved

        row.design_element = Class(name="Tank")
        assert row.state == RowState.RESOLVED

        row.mark_persisted()
        assert row.state == RowState.PERSISTED

    def test_unresolved_row_cannot_be_persisted(self):
        with pytest.raises(ValueError, match="resolved"):
            MappedElementDefinitionRow(ElementDefinition(name="Tank")).mark_persisted()

    def test_direction_is_fixed(self):
        row = MappedElementDefinitionRow(direction=MappingDirection.FROM_DESIGN_TO_ENGINEERING)

        assert row.direction == MappingDirection.FROM_DESIGN_TO_ENGINEERING
        with pytest.raises(AttributeError):
            row.direction = MappingDirection.FROM_ENGINEERING_TO_DESIGN

    def test_selected_states(self):
        row = MappedElementDefinitionRow()
        on = ActualFiniteState(name="On")

        assert row.get_selected_state_for("param") is None
        row.set_selected_state_for("param", on)
        assert row.get_selected_state_for("param") is on

    def test_repr(self):
        row = MappedElementDefinitionRow(ElementDefinition(name="Tank"), Class(name="Tank"))
        assert repr(row) == (
            "MappedElementDefinitionRow('Tank' -> 'Tank', engineering_to_design, resolved)"
        )


class TestLookupResult:

    def test_hit_and_miss(self):
        assert LookupResult.hit(0)
        assert LookupResult.hit(0).value == 0
        assert not LookupResult.miss()
        assert LookupResult.miss().value is None


class TestMappingContext:

    def test_find_row_by_design_name(self):
        context = MappingContext()
        row = MappedElementDefinitionRow(ElementDefinition(name="Tank"), Class(name="Tank"))
        context.rows.append(row)

        assert context.find_row_by_design_name("TANK") is row
        assert context.find_row_by_design_name("Pump") is None

    def test_clear(self):
        context = MappingContext()
        context.rows.append(MappedElementDefinitionRow())
        context.data_types.append(DataType(name="mass[kg]"))
        context.selected_states["param"] = "state"
        context.expanded.add(1)
        assert not context.is_empty

        context.clear()

        assert context.is_empty

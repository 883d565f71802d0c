"""
Tests for TransactionService - creation, cloning, commit and rollback.
"""

import pytest

from sysml_bridge.managers.history_service import ChangeKind
from sysml_bridge.managers.transaction_service import (
    TransactionAlreadyActive,
    TransactionNotActive,
    TransactionStatus,
)
from sysml_bridge.models.design import (
    Class,
    DataType,
    ElementKind,
    Literal,
    LiteralKind,
    Property,
    Stereotype,
)


@pytest.fixture
def live_tank(design_model):
    tank = Class(name="Tank", applied_stereotypes=[Stereotype.BLOCK.value])
    tank.owned_attributes.append(Property(name="mass", default_value=Literal(LiteralKind.REAL, 12.5)))
    design_model.add_to_root(tank)
    return tank


# ============================================================================
# Lifecycle
# ============================================================================

class TestTransactionLifecycle:
    """begin / commit / rollback."""

    def test_begin_returns_id(self, transaction_service):
        tx_id = transaction_service.begin()

        assert transaction_service.is_active
        assert transaction_service.get_status()["transaction_id"] == tx_id
        assert transaction_service.get_status()["status"] == TransactionStatus.ACTIVE.value

    def test_begin_twice_raises(self, transaction_service):
        transaction_service.begin()

        with pytest.raises(TransactionAlreadyActive):
            transaction_service.begin()

    def test_commit_without_transaction_raises(self, transaction_service):
        with pytest.raises(TransactionNotActive):
            transaction_service.commit()

    def test_rollback_without_transaction_raises(self, transaction_service):
        with pytest.raises(TransactionNotActive):
            transaction_service.rollback()

    def test_status_when_idle(self, transaction_service):
        assert transaction_service.get_status() == {"active": False}

    def test_context_manager_commits(self, transaction_service, design_model):
        with transaction_service.transaction():
            transaction_service.create(ElementKind.BLOCK, "Pump")

        assert not transaction_service.is_active
        assert [b.name for b in design_model.blocks()] == ["Pump"]

    def test_context_manager_rolls_back_on_exception(self, transaction_service, design_model):
        with pytest.raises(RuntimeError):
            with transaction_service.transaction():
                transaction_service.create(ElementKind.BLOCK, "Pump")
                raise RuntimeError("mapping failed")

        assert not transaction_service.is_active
        assert design_model.blocks() == []

    def test_rollback_only_requires_transaction(self, transaction_service):
        with pytest.raises(TransactionNotActive):
            transaction_service.set_rollback_only()

    def test_commit_of_rollback_only_transaction_rolls_back(self, transaction_service, design_model, history):
        transaction_service.begin()
        transaction_service.create(ElementKind.BLOCK, "Pump")
        transaction_service.set_rollback_only()
        assert transaction_service.is_rollback_only
        assert transaction_service.get_status()["rollback_only"] is True

        result = transaction_service.commit()

        assert result.rolled_back
        assert result.created == []
        assert not transaction_service.is_active
        assert design_model.blocks() == []
        assert history.entries == []

    def test_context_manager_honours_rollback_only(self, transaction_service, design_model):
        with transaction_service.transaction():
            transaction_service.create(ElementKind.BLOCK, "Pump")
            transaction_service.set_rollback_only()

        assert not transaction_service.is_active
        assert not transaction_service.is_rollback_only
        assert design_model.blocks() == []


# ============================================================================
# Creation
# ============================================================================

class TestCreate:

    def test_create_requires_transaction(self, transaction_service):
        with pytest.raises(TransactionNotActive):
            transaction_service.create(ElementKind.BLOCK, "Pump")

    def test_created_elements_carry_stereotypes(self, transaction_service):
        transaction_service.begin()

        assert transaction_service.create(ElementKind.BLOCK).has_stereotype(Stereotype.BLOCK)
        assert transaction_service.create(ElementKind.PORT).has_stereotype(Stereotype.PORT_PROPERTY)
        assert transaction_service.create(ElementKind.UNIT).has_stereotype(Stereotype.UNIT)
        assert transaction_service.create(ElementKind.VALUE_TYPE).has_stereotype(Stereotype.VALUE_TYPE)

    def test_literal_kinds_are_not_tracked(self, transaction_service):
        transaction_service.begin()

        literal = transaction_service.create(ElementKind.LITERAL_REAL)

        assert isinstance(literal, Literal)
        assert literal.kind == LiteralKind.REAL
        assert literal.value is None
        assert transaction_service.get_status()["created"] == 0

    def test_contained_elements_are_not_added_to_root(self, transaction_service, design_model):
        with transaction_service.transaction():
            pump = transaction_service.create(ElementKind.BLOCK, "Pump")
            port = transaction_service.create(ElementKind.PORT, "outlet")
            pump.owned_elements.append(port)

        assert [e.name for e in design_model.root.owned_elements if e is not design_model.data_package] == ["Pump"]

    def test_reference_data_goes_to_data_package(self, transaction_service, design_model):
        with transaction_service.transaction():
            data_type = transaction_service.create(ElementKind.VALUE_TYPE, "mass[kg]")
            transaction_service.add_reference_data_to_data_package(data_type)

        assert design_model.data_package.owned_elements == [data_type]

    def test_commit_result_and_history(self, transaction_service, history):
        transaction_service.begin()
        pump = transaction_service.create(ElementKind.BLOCK, "Pump")
        result = transaction_service.commit()

        assert result.created == [pump.id]
        assert history.entries[0].change_kind == ChangeKind.CREATE
        assert history.entries[0].author == "tester"


# ============================================================================
# Cloning
# ============================================================================

class TestClone:
    """Clones are edited in the transaction and swapped in on commit."""

    def test_clone_shares_id(self, transaction_service, live_tank):
        transaction_service.begin()
        clone = transaction_service.clone_element(live_tank)

        assert clone is not live_tank
        assert clone.id == live_tank.id
        assert transaction_service.is_clone(clone)
        assert not transaction_service.is_clone(live_tank)

    def test_same_element_cloned_once(self, transaction_service, live_tank):
        transaction_service.begin()

        assert transaction_service.clone_element(live_tank) is transaction_service.clone_element(live_tank)

    def test_clone_edits_do_not_touch_live_element(self, transaction_service, live_tank):
        transaction_service.begin()
        clone = transaction_service.clone_element(live_tank)
        clone.owned_attributes[0].default_value.value = 13.0

        assert live_tank.owned_attributes[0].default_value.value == 12.5

    def test_commit_swaps_clone_in(self, transaction_service, design_model, live_tank, history):
        with transaction_service.transaction():
            clone = transaction_service.clone_element(live_tank)
            clone.owned_attributes[0].default_value.value = 13.0

        assert design_model.get_element_by_id(live_tank.id) is clone
        assert len(design_model.blocks()) == 1
        assert history.entries[0].change_kind == ChangeKind.UPDATE
        assert "mass: 12.5 -> 13" in history.entries[0].message

    def test_rollback_restores_model(self, transaction_service, design_model, live_tank):
        transaction_service.begin()
        clone = transaction_service.clone_element(live_tank)
        clone.name = "Renamed"
        design_model.add_to_root(DataType(name="stray"))
        transaction_service.rollback()

        assert [b.name for b in design_model.blocks()] == ["Tank"]
        assert not design_model.try_get_element_by(lambda e: e.name == "stray")

    def test_clone_outside_transaction_is_untracked_preview(self, transaction_service, design_model, live_tank):
        preview = transaction_service.clone_element(live_tank)
        preview.name = "Preview"

        assert preview.id == live_tank.id
        assert not transaction_service.is_clone(preview)
        assert design_model.blocks()[0].name == "Tank"


class TestPendingLookup:
    """Elements created or cloned in the open transaction."""

    def test_miss_without_transaction(self, transaction_service):
        assert not transaction_service.try_get_pending_element_by(lambda e: True)

    def test_finds_created_element(self, transaction_service):
        transaction_service.begin()
        block = transaction_service.create(ElementKind.BLOCK, "Tank")

        result = transaction_service.try_get_pending_element_by(lambda e: e.name == "Tank")

        assert result.value is block
        transaction_service.rollback()

    def test_finds_element_nested_in_clone(self, transaction_service, live_tank):
        transaction_service.begin()
        clone = transaction_service.clone_element(live_tank)

        result = transaction_service.try_get_pending_element_by(lambda e: isinstance(e, Property))

        assert result.value is clone.owned_attributes[0]
        assert result.value is not live_tank.owned_attributes[0]
        transaction_service.rollback()

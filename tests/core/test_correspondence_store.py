"""
Tests for the correspondence store and the external identifier map schema.
"""

import json

import pytest
from pydantic import ValidationError

from sysml_bridge.core.correspondence_store import (
    CorrespondenceStore,
    CorruptMapError,
    MapNotFoundError,
    map_file_name,
)
from sysml_bridge.models.correspondence import (
    Correspondence,
    ExternalIdentifier,
    ExternalIdentifierMap,
)
from sysml_bridge.models.mapping import MappingDirection

TO_DESIGN = MappingDirection.FROM_ENGINEERING_TO_DESIGN
TO_ENGINEERING = MappingDirection.FROM_DESIGN_TO_ENGINEERING


def correspondence(internal, external, direction=TO_DESIGN):
    return Correspondence(
        internal_thing=internal,
        external_identifier=ExternalIdentifier(identifier=external, mapping_direction=direction),
    )


@pytest.fixture
def identifier_map():
    return ExternalIdentifierMap(
        name="rover map",
        external_model_name="Rover",
        external_tool_name="sysml-bridge",
        version=3,
        correspondences=[
            correspondence("eng-1", "des-1"),
            correspondence("eng-2", "des-2", TO_ENGINEERING),
        ],
    )


@pytest.fixture
def store(tmp_path):
    return CorrespondenceStore(tmp_path)


class TestExternalIdentifierMap:
    """Schema rules of external identifier maps."""

    def test_duplicate_external_id_and_direction_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate correspondence"):
            ExternalIdentifierMap(correspondences=[
                correspondence("eng-1", "des-1"),
                correspondence("eng-2", "des-1"),
            ])

    def test_same_external_id_in_both_directions_allowed(self):
        identifier_map = ExternalIdentifierMap(correspondences=[
            correspondence("eng-1", "des-1"),
            correspondence("eng-1", "des-1", TO_ENGINEERING),
        ])

        assert len(identifier_map.correspondences) == 2

    def test_find(self, identifier_map):
        assert identifier_map.find("des-1").internal_thing == "eng-1"
        assert identifier_map.find("des-2", TO_DESIGN) is None
        assert identifier_map.find("missing") is None


class TestInMemory:

    def test_save_and_get_copy(self, store, identifier_map):
        store.save(identifier_map)

        retrieved = store.get("rover map")
        assert retrieved.model_dump() == identifier_map.model_dump()
        assert retrieved is not identifier_map

        retrieved.version = 99
        assert store.get("rover map").version == 3

    def test_get_unknown_raises(self, store):
        with pytest.raises(MapNotFoundError, match="not found"):
            store.get("missing")

    def test_delete_and_listing(self, store, identifier_map):
        store.save(identifier_map)
        assert "rover map" in store
        assert store.list_names() == ["rover map"]
        assert len(store) == 1

        assert store.delete("rover map") is True
        assert store.delete("rover map") is False
        assert len(store) == 0


class TestFilePersistence:
    """Save/load of maps as JSON files."""

    def test_file_name_is_sanitized(self):
        assert map_file_name("rover map") == "rover_map.map.json"
        assert map_file_name("../../etc") == ".._.._etc.map.json"
        assert map_file_name("///") == "unnamed.map.json"

    def test_round_trip(self, store, identifier_map):
        store.save(identifier_map)
        path = store.save_to_file("rover map")

        fresh = CorrespondenceStore(store.map_directory)
        loaded = fresh.load_from_file("rover map")

        assert path.exists()
        assert loaded.model_dump() == identifier_map.model_dump()
        assert loaded.correspondences[1].mapping_direction == TO_ENGINEERING
        assert "rover map" in fresh

    def test_file_has_sorted_keys(self, store, identifier_map):
        store.save(identifier_map)
        path = store.save_to_file("rover map")

        data = json.loads(path.read_text())
        assert list(data.keys()) == sorted(data.keys())
        assert data["correspondences"][0]["external_identifier"]["mapping_direction"] == "engineering_to_design"

    def test_save_to_file_unknown_map(self, store):
        with pytest.raises(MapNotFoundError):
            store.save_to_file("missing")

    def test_load_missing_file(self, store):
        with pytest.raises(MapNotFoundError):
            store.load_from_file("missing")

    def test_load_corrupt_file(self, store, tmp_path):
        (tmp_path / map_file_name("broken")).write_text("{not json")

        with pytest.raises(CorruptMapError):
            store.load_from_file("broken")

    def test_load_invalid_schema(self, store, tmp_path):
        (tmp_path / map_file_name("invalid")).write_text(json.dumps({"version": "three"}))

        with pytest.raises(CorruptMapError):
            store.load_from_file("invalid")

    def test_list_persisted(self, store, identifier_map):
        assert store.list_persisted() == []

        store.save(identifier_map)
        store.save_to_file("rover map")

        assert store.list_persisted() == ["rover_map"]

    def test_list_persisted_without_directory(self, tmp_path):
        assert CorrespondenceStore(tmp_path / "absent").list_persisted() == []

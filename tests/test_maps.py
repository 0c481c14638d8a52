"""Tests for map validation and the map loader."""

import copy
import random
from pathlib import Path

import pytest

from molehunt.core.exceptions import ConfigurationError, MapValidationError
from molehunt.game.maps import (
    TEST_MAP,
    MapDefinition,
    MapLoader,
    create_default_loader,
    validate_map,
)
from molehunt.game.types import InteractableType, SabotageType


MAPS_DIR = Path(__file__).parent.parent / "configs" / "maps"


def _room(data, room_id):
    return next(r for r in data["rooms"] if r["id"] == room_id)


@pytest.fixture
def raw_map():
    return copy.deepcopy(TEST_MAP)


def test_test_map_is_valid():
    definition = validate_map(TEST_MAP)

    assert isinstance(definition, MapDefinition)
    assert definition.id == "test-map"
    assert len(definition.rooms) == 6
    assert definition.rooms[2].interactables[0].type == InteractableType.BUTTON
    assert definition.sabotage_locations[2].type == SabotageType.SELF_DESTRUCT


def test_validated_definition_passes_through():
    definition = validate_map(TEST_MAP)
    assert validate_map(definition) is definition


def test_missing_button(raw_map):
    _room(raw_map, "council-room")["interactables"] = []

    with pytest.raises(MapValidationError) as exc_info:
        validate_map(raw_map)
    assert any("Button" in msg for msg in exc_info.value.details["errors"])


def test_missing_log(raw_map):
    _room(raw_map, "logs-room")["interactables"] = []
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_unknown_special_room(raw_map):
    raw_map["emergency_button_room"] = "bridge"
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_one_way_exit(raw_map):
    _room(raw_map, "council-room")["exits"] = []
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_exit_to_unknown_room(raw_map):
    _room(raw_map, "center")["exits"].append("attic")
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_duplicate_room(raw_map):
    raw_map["rooms"].append(copy.deepcopy(raw_map["rooms"][0]))
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_unknown_vent_room(raw_map):
    raw_map["vents"] = {"center": {"connects_to": ["attic"]}}
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_bad_interactable_type(raw_map):
    _room(raw_map, "electrical-room")["interactables"][0]["type"] = "Lever"
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_bad_sabotage_type(raw_map):
    raw_map["sabotage_locations"].append({"type": "flood", "room_id": "center"})
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_no_rooms(raw_map):
    raw_map["rooms"] = []
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_missing_required_field(raw_map):
    del raw_map["logs_room"]
    with pytest.raises(MapValidationError):
        validate_map(raw_map)


def test_map_validation_error_is_configuration_error(raw_map):
    raw_map["rooms"] = []
    with pytest.raises(ConfigurationError):
        validate_map(raw_map)


def test_loader_registry():
    loader = create_default_loader()

    assert loader.has("test-map")
    assert not loader.has("outpost")
    assert loader.get("outpost") is None
    assert loader.get_map_ids() == ["test-map"]
    assert loader.get_default().id == "test-map"


def test_first_registered_map_is_default():
    loader = MapLoader()
    assert loader.get_default() is None

    loader.load_file(MAPS_DIR / "outpost.yaml")
    loader.register(TEST_MAP)

    assert loader.get_default().id == "outpost"
    assert loader.get_map_ids() == ["outpost", "test-map"]


def test_load_outpost_file():
    definition = MapLoader().load_file(MAPS_DIR / "outpost.yaml")

    assert definition.id == "outpost"
    assert definition.emergency_button_room == "bridge"
    assert definition.logs_room == "archive"
    assert definition.vents["medbay"].connects_to == ["reactor"]


def test_load_directory():
    loader = MapLoader()
    loaded = loader.load_directory(MAPS_DIR)

    assert [d.id for d in loaded] == ["outpost"]
    assert loader.has("outpost")


def test_load_file_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(MapValidationError):
        MapLoader().load_file(path)


def test_select_random():
    loader = create_default_loader()
    loader.load_file(MAPS_DIR / "outpost.yaml")

    picked = {loader.select_random(random.Random(seed)).id for seed in range(20)}
    assert picked <= {"test-map", "outpost"}

    with pytest.raises(ConfigurationError):
        MapLoader().select_random()

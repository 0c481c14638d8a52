"""Tests for the room graph."""

import pytest

from molehunt.core.exceptions import MapValidationError
from molehunt.game.map import RoomGraph
from molehunt.game.maps import TEST_MAP


TEST_ROOMS = [
    "center",
    "hallway-west",
    "council-room",
    "hallway-north",
    "logs-room",
    "electrical-room",
]


def test_get_room(graph):
    room = graph.get_room("council-room")
    assert room.name == "Council Room"
    assert room.exits == ["hallway-west"]
    assert graph.get_room("attic") is None


def test_get_rooms_in_map_order(graph):
    assert [r.room_id for r in graph.get_rooms()] == TEST_ROOMS


def test_get_rooms_returns_copies(graph):
    rooms = graph.get_rooms()
    rooms[0].exits.clear()
    rooms[0].interactables.append("junk")
    rooms[0].name = "Renamed"

    center = graph.get_room("center")
    assert center.exits == ["hallway-west", "hallway-north", "electrical-room"]
    assert center.interactables == []
    assert center.name == "Central Hall"


@pytest.mark.parametrize("src,dst,expected", [
    ("center", "hallway-west", True),
    ("hallway-west", "council-room", True),
    ("council-room", "hallway-west", True),
    ("center", "council-room", False),
    ("center", "center", False),
    ("center", "attic", False),
    ("attic", "center", False),
])
def test_validate_movement(graph, src, dst, expected):
    assert graph.validate_movement(src, dst) is expected


def test_validate_movement_checks_source_only(graph):
    graph.get_room("council-room").exits.remove("hallway-west")

    assert graph.validate_movement("hallway-west", "council-room")
    assert not graph.validate_movement("council-room", "hallway-west")


def test_special_rooms(graph):
    assert graph.map_id == "test-map"
    assert graph.emergency_button_room == "council-room"
    assert graph.logs_room == "logs-room"
    assert [s.room_id for s in graph.sabotage_locations] == [
        "electrical-room", "council-room", "electrical-room",
    ]


def test_task_interactables(graph):
    assert [i.interactable_id for i in graph.get_task_interactables()] == ["rewire-task"]
    assert graph.get_tasks_in_room("electrical-room") == ["rewire-task"]
    assert graph.get_tasks_in_room("center") == []


def test_adjacency(graph):
    assert graph.get_adjacent_rooms("hallway-north") == ["center", "logs-room"]
    assert graph.get_adjacent_rooms("attic") == []
    assert graph.get_vent_destinations("center") == []


def test_graphs_do_not_share_rooms():
    first, second = RoomGraph(TEST_MAP), RoomGraph(TEST_MAP)
    first.get_room("center").interactables.append("junk")
    assert second.get_room("center").interactables == []


def test_vents_are_symmetrised():
    data = dict(TEST_MAP, vents={"logs-room": {"connects_to": ["electrical-room"]}})
    graph = RoomGraph(data)

    assert graph.validate_vent("logs-room", "electrical-room")
    assert graph.validate_vent("electrical-room", "logs-room")
    assert not graph.validate_vent("logs-room", "center")


def test_invalid_data_raises():
    with pytest.raises(MapValidationError):
        RoomGraph({"id": "broken"})

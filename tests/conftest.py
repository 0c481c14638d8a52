"""Shared fixtures for the molehunt test suite."""

import pytest

from molehunt.game.config import MatchConfig
from molehunt.game.emergency import EmergencyButtonSystem
from molehunt.game.kills import KillSystem
from molehunt.game.map import RoomGraph
from molehunt.game.maps import TEST_MAP
from molehunt.game.sabotage import SabotageSystem
from molehunt.game.state import MatchState
from molehunt.game.tasks import TaskManager
from molehunt.game.types import (
    Interactable,
    InteractableType,
    Location,
    PlayerRole,
    PlayerState,
)
from molehunt.logging import GameLogger


@pytest.fixture
def graph():
    return RoomGraph(TEST_MAP)


@pytest.fixture
def logger():
    return GameLogger(game_id="test-match")


@pytest.fixture
def config():
    return MatchConfig()


@pytest.fixture
def state(graph, config, logger):
    return MatchState(graph, config, logger=logger)


@pytest.fixture
def add_player(state):
    """Factory registering a player in the council room by default."""

    def _add(player_id, role=PlayerRole.LOYALIST, room_id="council-room"):
        player = PlayerState(
            player_id=player_id,
            name=player_id.replace("-", " ").title(),
            role=role,
            location=Location(room_id),
        )
        state.add_player(player)
        return player

    return _add


@pytest.fixture
def crew(state, add_player):
    """Three loyalists and one mole; the first round started at t=0."""
    for i in (1, 2, 3):
        add_player(f"loyalist-{i}")
    add_player("mole-1", PlayerRole.MOLE)
    state.start_round(start_ms=0, respawn=False)
    return state


@pytest.fixture
def sabotage(state):
    return SabotageSystem(state)


@pytest.fixture
def emergency(state, sabotage):
    return EmergencyButtonSystem(state, sabotage)


@pytest.fixture
def kills(state):
    return KillSystem(state)


@pytest.fixture
def tasks(crew, graph):
    """Task manager whose catalog is exactly {task-1, task-2, task-3}."""
    graph.rooms["electrical-room"].interactables = [
        Interactable(f"task-{i}", InteractableType.TASK, name=f"Task {i}") for i in (1, 2, 3)
    ]
    return TaskManager(crew)

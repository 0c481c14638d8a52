"""Tests for kill resolution."""

from molehunt.core.types import ErrorKind
from molehunt.game.types import Faction, Phase, PlayerRole, PlayerStatus
from molehunt.logging import EventType


def test_kill_in_same_room(kills, crew):
    result = kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)

    assert result.success
    assert result.data == {"victim": "loyalist-1", "room_id": "council-room"}
    assert crew.players["loyalist-1"].status == PlayerStatus.DEAD
    assert crew.players["mole-1"].kill_cooldown_until == 30000
    assert [b.player_id for b in crew.dead_bodies] == ["loyalist-1"]
    assert crew.phase == Phase.ROUND


def test_kill_cooldown(kills, crew):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)

    result = kills.attempt_kill("mole-1", "loyalist-2", now_ms=1000)
    assert result.error == ErrorKind.ON_COOLDOWN
    assert "29s remaining" in result.reason
    assert kills.get_cooldown_remaining("mole-1", now_ms=1000) == 29000

    assert kills.attempt_kill("mole-1", "loyalist-2", now_ms=30000).success


def test_moles_win_on_parity(kills, crew):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)
    kills.attempt_kill("mole-1", "loyalist-2", now_ms=30000)

    assert crew.phase == Phase.GAME_OVER
    assert crew.winner == Faction.MOLES


def test_target_in_other_room(kills, crew):
    crew.place_player(crew.players["loyalist-1"], "center")

    result = kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)

    assert result.error == ErrorKind.WRONG_ROOM
    assert crew.players["loyalist-1"].is_alive


def test_rejections(kills, crew, add_player):
    add_player("mole-2", PlayerRole.MOLE)

    assert kills.attempt_kill("loyalist-1", "loyalist-2", now_ms=0).error == ErrorKind.WRONG_ROLE
    assert kills.attempt_kill("mole-1", "mole-2", now_ms=0).error == ErrorKind.INVALID_TARGET
    assert kills.attempt_kill("mole-1", "ghost", now_ms=0).error == ErrorKind.PLAYER_NOT_FOUND
    assert kills.attempt_kill("ghost", "loyalist-1", now_ms=0).error == ErrorKind.PLAYER_NOT_FOUND

    crew.mark_dead("loyalist-3")
    assert kills.attempt_kill("mole-1", "loyalist-3", now_ms=0).error == ErrorKind.PLAYER_NOT_ALIVE


def test_kill_requires_round(state, add_player, kills):
    add_player("loyalist-1")
    add_player("mole-1", PlayerRole.MOLE)

    assert kills.attempt_kill("mole-1", "loyalist-1", now_ms=0).error == ErrorKind.WRONG_PHASE


def test_kill_completes_task_win(tasks, kills, crew):
    for pid in ("loyalist-1", "loyalist-2"):
        for task_id in ("task-1", "task-2", "task-3"):
            tasks.attempt_task(pid, task_id, success=True)

    kills.attempt_kill("mole-1", "loyalist-3", now_ms=0)

    assert crew.phase == Phase.GAME_OVER
    assert crew.winner == Faction.LOYALISTS


def test_kill_logged_privately(kills, crew, logger):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)

    assert logger.get_entries(EventType.PLAYER_KILLED) == []
    private = logger.get_entries(EventType.PLAYER_KILLED, include_private=True)
    assert private[0].data["victim"] == "loyalist-1"

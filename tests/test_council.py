"""Tests for body reports, voting and ejection."""

import pytest

from molehunt.core.types import ErrorKind
from molehunt.game.council import REASON_BODY, CouncilSystem
from molehunt.game.types import Faction, Phase, PlayerRole, PlayerStatus


@pytest.fixture
def council(crew, kills):
    return CouncilSystem(crew, kills)


@pytest.fixture
def five(state, add_player, kills):
    """Four loyalists and one mole in a running round."""
    for i in (1, 2, 3, 4):
        add_player(f"loyalist-{i}")
    add_player("mole-1", PlayerRole.MOLE)
    state.start_round(start_ms=0, respawn=False)
    return CouncilSystem(state, kills)


def test_report_body_opens_council(council, kills, crew):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)

    result = council.report_body("loyalist-2")

    assert result.success
    assert result.data["body"] == "loyalist-1"
    assert crew.phase == Phase.VOTING
    assert council.reason == REASON_BODY
    assert council.living_players == ["loyalist-2", "loyalist-3", "mole-1"]
    assert crew.dead_bodies[0].reported


def test_report_needs_body_in_room(council, kills, crew):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)
    crew.place_player(crew.players["loyalist-2"], "hallway-west")

    result = council.report_body("loyalist-2")

    assert result.error == ErrorKind.INVALID_TARGET
    assert crew.phase == Phase.ROUND


def test_dead_cannot_report(council, kills, crew):
    kills.attempt_kill("mole-1", "loyalist-1", now_ms=0)
    assert council.report_body("loyalist-1").error == ErrorKind.PLAYER_NOT_ALIVE


def test_vote_rejections(council, crew):
    assert council.cast_vote("loyalist-1", "mole-1").error == ErrorKind.WRONG_PHASE

    council.start_council("Emergency Meeting", caller_id="loyalist-1")

    assert council.cast_vote("ghost", "mole-1").error == ErrorKind.PLAYER_NOT_FOUND
    assert council.cast_vote("loyalist-1", "ghost").error == ErrorKind.INVALID_TARGET

    assert council.cast_vote("loyalist-1", "skip").success
    second = council.cast_vote("loyalist-1", "mole-1")
    assert second.error == ErrorKind.ALREADY_VOTED


def test_majority_ejects_and_loyalists_win(council, crew):
    council.start_council("Emergency Meeting")

    assert not council.cast_vote("loyalist-1", "mole-1").data["closed"]
    assert not council.cast_vote("loyalist-2", "mole-1").data["closed"]
    result = council.cast_vote("loyalist-3", "mole-1")

    assert result.data["closed"]
    assert result.data["ejected"] == "mole-1"
    assert result.data["role"] == "Mole"
    assert crew.players["mole-1"].status == PlayerStatus.EJECTED
    assert crew.phase == Phase.GAME_OVER
    assert crew.winner == Faction.LOYALISTS


def test_skip_majority_starts_next_round(council, crew):
    council.start_council("Emergency Meeting")
    for voter in ("loyalist-1", "loyalist-2", "loyalist-3"):
        council.cast_vote(voter, None, now_ms=50000)

    assert crew.phase == Phase.ROUND
    assert crew.round_number == 2
    assert crew.round_start_ms == 50000
    assert all(p.is_alive for p in crew.players.values())
    assert crew.players["mole-1"].kill_cooldown_until == 80000
    assert council.results[-1]["ejected"] is None


def test_tie_ejects_nobody(five, state):
    five.start_council("Emergency Meeting")
    five.cast_vote("loyalist-1", "mole-1")
    five.cast_vote("loyalist-2", "mole-1")
    five.cast_vote("loyalist-3", "loyalist-4")
    five.cast_vote("loyalist-4", "loyalist-4")
    result = five.cast_vote("mole-1", "skip", now_ms=1000)

    assert result.data["closed"]
    assert result.data["ejected"] is None
    assert result.data["votes"] == {"mole-1": 2, "loyalist-4": 2, "skip": 1}
    assert state.phase == Phase.ROUND


def test_close_early_without_majority(five, state):
    five.start_council("Emergency Meeting")
    five.cast_vote("loyalist-1", "mole-1")
    five.cast_vote("loyalist-2", "mole-1")

    result = five.close_council(now_ms=1000)

    assert result.data["ejected"] is None
    assert state.phase == Phase.ROUND


def test_ejecting_loyalist_can_hand_moles_the_win(council, crew):
    crew.mark_dead("loyalist-3")
    council.start_council("Emergency Meeting")
    council.cast_vote("mole-1", "loyalist-1")
    result = council.cast_vote("loyalist-2", "loyalist-1")

    assert result.data["ejected"] == "loyalist-1"
    assert crew.winner == Faction.MOLES


def test_close_without_council(council):
    assert council.close_council().error == ErrorKind.WRONG_PHASE

"""Tests for the emergency meeting gate."""

import pytest

from molehunt.core.types import ErrorKind
from molehunt.game.config import MatchConfig
from molehunt.game.emergency import EmergencyButtonSystem
from molehunt.game.types import Phase


ROUND_START = 1_000_000
READY = ROUND_START + 20000


def test_unknown_player(emergency, crew):
    result = emergency.can_call_emergency("unknown-id", "council-room", ROUND_START, READY)

    assert not result.valid
    assert "not found" in result.reason
    assert result.error == ErrorKind.PLAYER_NOT_FOUND


def test_dead_player(emergency, crew):
    crew.mark_dead("loyalist-1")
    result = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START, READY)

    assert not result.valid
    assert "not alive" in result.reason


def test_wrong_room(emergency, crew):
    result = emergency.can_call_emergency("loyalist-1", "center", ROUND_START, READY)

    assert not result.valid
    assert "council room" in result.reason
    assert result.error == ErrorKind.WRONG_ROOM


def test_warm_up_boundary(emergency, crew):
    early = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START,
                                         ROUND_START + 19999)
    assert not early.valid
    assert "warm-up" in early.reason
    assert early.error == ErrorKind.WARM_UP_ACTIVE

    on_time = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START,
                                           ROUND_START + 20000)
    assert on_time.valid
    assert on_time.reason is None


def test_warm_up_reports_remaining_seconds(emergency, crew):
    result = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START,
                                          ROUND_START + 5000)
    assert "15s remaining" in result.reason


def test_active_sabotage_blocks(emergency, sabotage, crew):
    assert sabotage.trigger_sabotage("mole-1", "lights", now_ms=ROUND_START).success

    result = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START, READY)

    assert not result.valid
    assert "sabotage" in result.reason
    assert result.error == ErrorKind.SABOTAGE_ACTIVE


def test_checks_run_in_order(emergency, sabotage, crew):
    # Wrong room wins over warm-up and sabotage
    sabotage.trigger_sabotage("mole-1", "lights", now_ms=ROUND_START)
    result = emergency.can_call_emergency("loyalist-1", "center", ROUND_START, ROUND_START)
    assert result.error == ErrorKind.WRONG_ROOM

    # Warm-up wins over sabotage
    result = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START, ROUND_START)
    assert result.error == ErrorKind.WARM_UP_ACTIVE


def test_sabotage_reported_before_already_used(emergency, sabotage, crew):
    assert emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY).success
    sabotage.trigger_sabotage("mole-1", "lights", now_ms=READY)

    result = emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START, READY)

    assert result.error == ErrorKind.SABOTAGE_ACTIVE


def test_call_increments_usage_once(emergency, crew):
    result = emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY)

    assert result.success
    assert crew.players["loyalist-1"].emergency_meetings_used == 1
    assert result.data["meetings_used"] == 1
    assert len(emergency.calls) == 1


def test_second_call_already_used(emergency, crew):
    emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY)

    for now in (READY, READY + 60000):
        result = emergency.call_emergency("loyalist-1", "council-room", ROUND_START, now)
        assert not result.success
        assert "already used" in result.reason
        assert result.error == ErrorKind.ALREADY_USED

    assert crew.players["loyalist-1"].emergency_meetings_used == 1


def test_usage_is_per_player(emergency, crew):
    emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY)
    assert emergency.call_emergency("loyalist-2", "council-room", ROUND_START, READY).success


def test_rejected_call_does_not_mutate(emergency, crew):
    result = emergency.call_emergency("loyalist-1", "council-room", ROUND_START, ROUND_START)

    assert not result.success
    assert crew.players["loyalist-1"].emergency_meetings_used == 0
    assert emergency.calls == []


def test_gate_does_not_change_phase(emergency, crew):
    emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY)
    assert crew.phase == Phase.ROUND


def test_reset_keeps_usage_counter(emergency, crew):
    emergency.call_emergency("loyalist-1", "council-room", ROUND_START, READY)
    emergency.reset()

    assert emergency.calls == []
    assert crew.players["loyalist-1"].emergency_meetings_used == 1
    assert not emergency.can_call_emergency("loyalist-1", "council-room", ROUND_START, READY)


@pytest.mark.parametrize("meetings", [2, 3])
def test_configurable_meeting_allowance(add_player, state, sabotage, meetings):
    state.config = MatchConfig(emergency_meetings=meetings)
    gate = EmergencyButtonSystem(state, sabotage)
    add_player("loyalist-1")

    for _ in range(meetings):
        assert gate.call_emergency("loyalist-1", "council-room", 0, 20000).success
    assert not gate.call_emergency("loyalist-1", "council-room", 0, 20000).success


def test_mole_may_call(emergency, crew):
    assert emergency.can_call_emergency("mole-1", "council-room", ROUND_START, READY).valid

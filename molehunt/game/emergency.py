"""Emergency button rules."""

import math
from dataclasses import dataclass
from typing import List, Optional

from molehunt.core.types import ActionResult, ErrorKind, ValidationResult
from molehunt.core.utils import now_ms as current_ms
from molehunt.game.sabotage import SabotageSystem
from molehunt.game.state import MatchState
from molehunt.logging.formats import EventType


@dataclass
class EmergencyCall:
    """A successful emergency call, kept for the match log."""
    player_id: str
    room_id: str
    called_at: int


class EmergencyButtonSystem:
    """Decides whether a player may press the emergency button.

    Checks run in a fixed order and the first failure wins:

    1. the player exists
    2. the player is alive
    3. the player stands in the map's emergency-button room
    4. the warm-up after round start has fully elapsed (inclusive boundary)
    5. no sabotage is active
    6. the player has meetings left (one per match by default)

    The gate owns no clock: the round start, and optionally "now", are
    supplied by the caller. Switching to the voting phase is the caller's job.
    """

    def __init__(self, state: MatchState, sabotage: SabotageSystem, logger=None):
        self.state = state
        self.sabotage = sabotage
        self.config = state.config
        self.logger = logger if logger is not None else state.logger
        self.calls: List[EmergencyCall] = []

    @property
    def warmup_ms(self) -> int:
        return self.config.emergency_warmup_ms

    @property
    def max_meetings(self) -> int:
        return self.config.emergency_meetings

    def can_call_emergency(
        self,
        player_id: str,
        from_room_id: str,
        round_start_ms: int,
        now_ms: Optional[int] = None,
    ) -> ValidationResult:
        """Check whether a player can call an emergency meeting.

        Args:
            player_id: Player pressing the button
            from_room_id: Room the player is pressing it from
            round_start_ms: When the current round started
            now_ms: Current time (defaults to now)
        """
        player = self.state.get_player(player_id)
        if player is None:
            return ValidationResult.fail(ErrorKind.PLAYER_NOT_FOUND, "Player not found")

        if not player.is_alive:
            return ValidationResult.fail(ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive")

        if from_room_id != self.state.room_graph.emergency_button_room:
            return ValidationResult.fail(
                ErrorKind.WRONG_ROOM, "Emergency button is only in the council room"
            )

        now = current_ms() if now_ms is None else now_ms
        elapsed = now - round_start_ms
        if elapsed < self.warmup_ms:
            remaining = math.ceil((self.warmup_ms - elapsed) / 1000)
            return ValidationResult.fail(
                ErrorKind.WARM_UP_ACTIVE,
                f"Emergency button is in warm-up ({remaining}s remaining)",
            )

        if self.sabotage.is_active():
            return ValidationResult.fail(
                ErrorKind.SABOTAGE_ACTIVE,
                "Cannot call emergency meeting during active sabotage",
            )

        if player.emergency_meetings_used >= self.max_meetings:
            return ValidationResult.fail(
                ErrorKind.ALREADY_USED, "You have already used your emergency meeting"
            )

        return ValidationResult.ok()

    def call_emergency(
        self,
        player_id: str,
        from_room_id: str,
        round_start_ms: int,
        now_ms: Optional[int] = None,
    ) -> ActionResult:
        """Press the button: validate, then spend one of the player's meetings."""
        now = current_ms() if now_ms is None else now_ms
        validation = self.can_call_emergency(player_id, from_room_id, round_start_ms, now)
        if not validation.valid:
            if self.logger:
                self.logger.log_rejection(
                    player_id, "call_emergency", validation.error.value, validation.reason
                )
            return ActionResult.from_validation(validation)

        player = self.state.players[player_id]
        player.emergency_meetings_used += 1
        self.calls.append(EmergencyCall(player_id=player_id, room_id=from_room_id, called_at=now))

        if self.logger:
            self.logger.log(
                EventType.EMERGENCY_CALLED,
                {"caller_name": player.name, "room": from_room_id,
                 "meetings_used": player.emergency_meetings_used},
                player_id=player_id,
            )

        return ActionResult.ok(meetings_used=player.emergency_meetings_used)

    def reset(self) -> None:
        """Forget the call history. Usage counters live on the players."""
        self.calls.clear()

"""Mole kill resolution."""

import math
from typing import Optional

from molehunt.core.types import ActionResult, ErrorKind
from molehunt.core.utils import now_ms as current_ms
from molehunt.game import rules
from molehunt.game.state import MatchState
from molehunt.game.types import Phase
from molehunt.logging.formats import EventType


class KillSystem:
    """Validates and applies kills.

    A kill needs a living mole and a living loyalist in the same room during
    a round, with the mole's kill cooldown elapsed. The victim leaves a body
    where it fell. Both win conditions are rechecked afterwards: the task
    condition through the state's status listeners, the headcount condition
    here.
    """

    def __init__(self, state: MatchState, logger=None):
        self.state = state
        self.config = state.config
        self.logger = logger if logger is not None else state.logger

    def get_cooldown_remaining(self, mole_id: str, now_ms: Optional[int] = None) -> int:
        player = self.state.get_player(mole_id)
        if player is None or player.kill_cooldown_until is None:
            return 0
        now = current_ms() if now_ms is None else now_ms
        return max(0, player.kill_cooldown_until - now)

    def attempt_kill(self, mole_id: str, target_id: str, now_ms: Optional[int] = None) -> ActionResult:
        """Try to kill a target.

        Args:
            mole_id: Mole performing the kill
            target_id: Intended victim
            now_ms: Current time (defaults to now)
        """
        if self.state.phase != Phase.ROUND:
            return self._reject(mole_id, ErrorKind.WRONG_PHASE, "Can only kill during round phase")

        mole = self.state.get_player(mole_id)
        if mole is None:
            return self._reject(mole_id, ErrorKind.PLAYER_NOT_FOUND, "Player not found")
        if not mole.is_mole:
            return self._reject(mole_id, ErrorKind.WRONG_ROLE, "Only moles can kill")
        if not mole.is_alive:
            return self._reject(mole_id, ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive")

        target = self.state.get_player(target_id)
        if target is None:
            return self._reject(mole_id, ErrorKind.PLAYER_NOT_FOUND, "Target player not found")
        if target.is_mole:
            return self._reject(mole_id, ErrorKind.INVALID_TARGET, "Moles cannot kill other moles")
        if not target.is_alive:
            return self._reject(mole_id, ErrorKind.PLAYER_NOT_ALIVE, "Target is not alive")

        if mole.location.room_id != target.location.room_id:
            return self._reject(
                mole_id, ErrorKind.WRONG_ROOM,
                f"Target not in same room (killer in {mole.location.room_id}, "
                f"target in {target.location.room_id})",
            )

        now = current_ms() if now_ms is None else now_ms
        remaining = self.get_cooldown_remaining(mole_id, now)
        if remaining > 0:
            return self._reject(mole_id, ErrorKind.ON_COOLDOWN,
                                f"Kill on cooldown: {math.ceil(remaining / 1000)}s remaining")

        mole.kill_cooldown_until = now + self.config.kill_cooldown_ms
        room_id = target.location.room_id

        if self.logger:
            self.logger.log(
                EventType.PLAYER_KILLED,
                {
                    "round": self.state.round_number,
                    "killer": mole_id,
                    "victim": target_id,
                    "victim_name": target.name,
                    "room": room_id,
                },
                player_id=mole_id,
                is_private=True,
            )

        self.state.mark_dead(target_id, leave_body=True)
        self.check_win()

        return ActionResult.ok(victim=target_id, room_id=room_id)

    def check_win(self) -> bool:
        """End the match if a faction has won by headcount."""
        if self.state.is_over():
            return False
        loyalists, moles = rules.count_alive(self.state.players.values())
        game_over, winner, reason = rules.check_faction_win(loyalists, moles)
        if not game_over:
            return False
        return self.state.end_game(winner, reason)

    def reset_cooldowns(self, until_ms: Optional[int]) -> None:
        """Set every mole's kill cooldown to expire at ``until_ms``."""
        for player in self.state.players.values():
            if player.is_mole:
                player.kill_cooldown_until = until_ms

    def _reject(self, player_id: str, error: ErrorKind, reason: str) -> ActionResult:
        if self.logger:
            self.logger.log_rejection(player_id, "kill", error.value, reason)
        return ActionResult.fail(error, reason)

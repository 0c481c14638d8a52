"""Sabotage engine.

A match has at most one active sabotage. Triggering while one is active is
rejected, never queued and never overriding the running one.

- Lights: fixed by any single living loyalist
- Doors: seals a target room; fixed by a loyalist standing in that room
- Self-destruct: needs several distinct loyalists before the timer runs
  out, otherwise the moles win
"""

import math
from typing import Dict, Optional, Union

from molehunt.core.types import ActionResult, ErrorKind
from molehunt.core.utils import now_ms as current_ms
from molehunt.game.state import MatchState
from molehunt.game.types import (
    Faction,
    Phase,
    SabotageAction,
    SabotageState,
    SabotageType,
)
from molehunt.logging.formats import EventType

SabotageRequest = Union[SabotageAction, SabotageType, str, Dict]


def _parse_request(request: SabotageRequest):
    """Return (type or None, target_room_id) from any accepted request shape."""
    if isinstance(request, SabotageAction):
        return SabotageType.parse(request.type), request.target_room_id
    if isinstance(request, dict):
        target = request.get("target_room_id", request.get("target"))
        return SabotageType.parse(request.get("type")), target
    return SabotageType.parse(request), None


class SabotageSystem:
    """Tracks the single active sabotage of a match."""

    def __init__(self, state: MatchState, logger=None):
        self.state = state
        self.config = state.config
        self.logger = logger if logger is not None else state.logger

        self._active: Optional[SabotageState] = None
        self._last_triggered: Dict[str, int] = {}  # mole_id -> ms
        self._id_counter = 0

    # --- Queries ---

    def is_active(self) -> bool:
        return self._active is not None

    def get_active_type(self) -> Optional[SabotageType]:
        return self._active.type if self._active else None

    def get_active(self) -> Optional[SabotageState]:
        return self._active

    def is_movement_blocked(self, room_id: str) -> bool:
        """Check if a doors sabotage currently seals a room."""
        active = self._active
        return (
            active is not None
            and active.type == SabotageType.DOORS
            and active.target_room_id == room_id
        )

    def get_cooldown_remaining(self, player_id: str, now_ms: Optional[int] = None) -> int:
        """Milliseconds until a mole may sabotage again (0 when ready)."""
        last = self._last_triggered.get(player_id)
        if last is None or self.config.sabotage_cooldown_ms <= 0:
            return 0
        now = current_ms() if now_ms is None else now_ms
        return max(0, self.config.sabotage_cooldown_ms - (now - last))

    # --- Trigger ---

    def trigger_sabotage(
        self,
        player_id: str,
        request: SabotageRequest,
        now_ms: Optional[int] = None,
    ) -> ActionResult:
        """Attempt to start a sabotage.

        Args:
            player_id: Mole triggering the sabotage
            request: ``SabotageAction``, a ``{"type": ..., "target_room_id": ...}``
                dict, a ``SabotageType`` or its string value
            now_ms: Current time (defaults to now)
        """
        if self.state.phase != Phase.ROUND:
            return self._reject(player_id, ErrorKind.WRONG_PHASE,
                                "Can only sabotage during round phase")

        player = self.state.get_player(player_id)
        if player is None:
            return self._reject(player_id, ErrorKind.PLAYER_NOT_FOUND, "Player not found")
        if not player.is_alive:
            return self._reject(player_id, ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive")
        if not player.is_mole:
            return self._reject(player_id, ErrorKind.WRONG_ROLE, "Only moles can sabotage")

        if self._active is not None:
            return self._reject(
                player_id, ErrorKind.SABOTAGE_ACTIVE,
                f"A sabotage is already active ({self._active.type.value})",
            )

        now = current_ms() if now_ms is None else now_ms
        remaining = self.get_cooldown_remaining(player_id, now)
        if remaining > 0:
            return self._reject(
                player_id, ErrorKind.ON_COOLDOWN,
                f"Sabotage on cooldown: {math.ceil(remaining / 1000)}s remaining",
            )

        sabotage_type, target_room_id = _parse_request(request)
        if sabotage_type is None:
            return self._reject(player_id, ErrorKind.INVALID_TARGET,
                                f"Unknown sabotage type: {request!r}")
        if sabotage_type == SabotageType.DOORS:
            if not target_room_id:
                return self._reject(player_id, ErrorKind.INVALID_TARGET,
                                    "Doors sabotage requires a target room")
            if target_room_id not in self.state.rooms:
                return self._reject(player_id, ErrorKind.INVALID_TARGET,
                                    f"Unknown target room: {target_room_id}")
        else:
            target_room_id = None

        self._id_counter += 1
        self._active = SabotageState(
            sabotage_id=f"sabotage-{self._id_counter}",
            type=sabotage_type,
            triggered_by=player_id,
            started_at=now,
            target_room_id=target_room_id,
        )
        self._last_triggered[player_id] = now

        if self.logger:
            self.logger.log(
                EventType.SABOTAGE_TRIGGERED,
                {
                    "sabotage_id": self._active.sabotage_id,
                    "type": sabotage_type.value,
                    "target": target_room_id,
                },
            )
            self.logger.log(
                EventType.SABOTAGE_TRIGGERED,
                {"sabotage_id": self._active.sabotage_id, "mole_id": player_id},
                player_id=player_id,
                is_private=True,
            )

        return ActionResult.ok(
            sabotage_id=self._active.sabotage_id,
            type=sabotage_type.value,
            target_room_id=target_room_id,
        )

    # --- Resolution ---

    def attempt_fix(self, player_id: str, now_ms: Optional[int] = None) -> ActionResult:
        """Contribute to fixing the active sabotage."""
        player = self.state.get_player(player_id)
        if player is None:
            return self._reject(player_id, ErrorKind.PLAYER_NOT_FOUND, "Player not found", "fix")
        if player.is_mole:
            return self._reject(player_id, ErrorKind.WRONG_ROLE,
                                "Only loyalists can fix sabotages", "fix")

        sabotage = self._active
        if sabotage is None:
            return self._reject(player_id, ErrorKind.NO_ACTIVE_SABOTAGE,
                                "No active sabotage to fix", "fix")
        if not player.is_alive:
            return self._reject(player_id, ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive", "fix")
        if player_id in sabotage.contributors:
            return self._reject(player_id, ErrorKind.ALREADY_CONTRIBUTED,
                                "You have already contributed to fixing this sabotage", "fix")
        if sabotage.type == SabotageType.DOORS and player.location.room_id != sabotage.target_room_id:
            return self._reject(player_id, ErrorKind.WRONG_ROOM,
                                "You must be in the affected room to fix this", "fix")

        sabotage.contributors.add(player_id)

        if sabotage.type == SabotageType.SELF_DESTRUCT:
            needed = self.config.self_destruct_fixers
            if len(sabotage.contributors) < needed:
                if self.logger:
                    self.logger.log(
                        EventType.SABOTAGE_PROGRESS,
                        {"sabotage_id": sabotage.sabotage_id,
                         "contributors": len(sabotage.contributors),
                         "needed": needed},
                        player_id=player_id,
                    )
                return ActionResult.ok(
                    "Fix contribution recorded",
                    contributors=len(sabotage.contributors),
                    needed=needed,
                )

        self._end(reason="Fixed by loyalists", now_ms=now_ms)
        return ActionResult.ok("Sabotage fixed!")

    def check_expiry(self, now_ms: Optional[int] = None) -> bool:
        """Resolve an expired self-destruct.

        Returns:
            True if the timer ran out and the moles won
        """
        sabotage = self._active
        if sabotage is None or sabotage.type != SabotageType.SELF_DESTRUCT:
            return False

        now = current_ms() if now_ms is None else now_ms
        if now - sabotage.started_at < self.config.self_destruct_duration_ms:
            return False

        self._end(reason="Self-destruct timer expired", now_ms=now)
        self.state.end_game(Faction.MOLES, "Self-destruct timer expired")
        return True

    def time_remaining(self, now_ms: Optional[int] = None) -> Optional[int]:
        """Milliseconds left on a running self-destruct, else None."""
        sabotage = self._active
        if sabotage is None or sabotage.type != SabotageType.SELF_DESTRUCT:
            return None
        now = current_ms() if now_ms is None else now_ms
        return max(0, self.config.self_destruct_duration_ms - (now - sabotage.started_at))

    def _end(self, reason: str, now_ms: Optional[int] = None) -> None:
        sabotage = self._active
        self._active = None
        if self.logger and sabotage:
            now = current_ms() if now_ms is None else now_ms
            self.logger.log(
                EventType.SABOTAGE_RESOLVED,
                {
                    "sabotage_id": sabotage.sabotage_id,
                    "type": sabotage.type.value,
                    "reason": reason,
                    "duration_ms": now - sabotage.started_at,
                },
            )

    def reset(self) -> None:
        """Force Idle and forget cooldowns (new match)."""
        self._active = None
        self._last_triggered.clear()

    def _reject(
        self,
        player_id: str,
        error: ErrorKind,
        reason: str,
        action: str = "sabotage",
    ) -> ActionResult:
        if self.logger:
            self.logger.log_rejection(player_id, action, error.value, reason)
        return ActionResult.fail(error, reason)

"""Authoritative match state.

``MatchState`` owns the player registry, the room registry of the loaded
map, the phase and the round metadata. Every game system receives the same
``MatchState`` instance and reads ``players`` / ``rooms`` by reference, so a
status flip made here is seen by all of them immediately.
"""

import random
from typing import Callable, Dict, List, Optional

from molehunt.core.exceptions import InvalidStateError
from molehunt.core.types import ActionResult, ErrorKind
from molehunt.core.utils import now_ms
from molehunt.game.config import MatchConfig
from molehunt.game.map import RoomGraph
from molehunt.game.types import (
    DeadBody,
    Faction,
    Location,
    Phase,
    PlayerRole,
    PlayerState,
    PlayerStatus,
    Room,
)
from molehunt.logging.formats import EventType

# Called after a player leaves ALIVE, with the player and its previous status
StatusListener = Callable[[PlayerState, PlayerStatus], None]


class MatchState:
    """Complete state of one match.

    Attributes:
        room_graph: Room graph of the current map
        config: Match configuration
        phase: Current match phase
        round_number: Current round number (0 before the first round)
        round_start_ms: Wall-clock ms at which the current round started
        round_timer: Seconds left in the current round
        players: Player registry, player_id -> PlayerState
        rooms: Room registry of the current map, room_id -> Room
        dead_bodies: Bodies dropped this round
        winner: Winning faction once the match is over
        win_reason: Reason for the match end
    """

    def __init__(
        self,
        room_graph: RoomGraph,
        config: Optional[MatchConfig] = None,
        logger=None,
        rng: Optional[random.Random] = None,
    ):
        self.room_graph = room_graph
        self.config = config or MatchConfig(map_id=room_graph.map_id)
        self.logger = logger
        self.rng = rng or random.Random(self.config.seed)

        self.phase: Phase = Phase.LOBBY
        self.phase_history: List[Phase] = []
        self.round_number: int = 0
        self.round_start_ms: int = 0
        self.round_timer: int = 0

        self.players: Dict[str, PlayerState] = {}
        self.rooms: Dict[str, Room] = room_graph.rooms
        self.dead_bodies: List[DeadBody] = []

        self.winner: Optional[Faction] = None
        self.win_reason: str = ""

        self._status_listeners: Dict[str, StatusListener] = {}

    # --- Phase ---

    def set_phase(self, phase: Phase) -> None:
        """Set the current phase.

        Raises:
            InvalidStateError: When leaving GAME_OVER (only ``reset`` may)
        """
        if phase == self.phase:
            return
        if self.phase == Phase.GAME_OVER:
            raise InvalidStateError(
                "Match is over; reset before changing phase",
                details={"requested": phase.value},
            )

        old_phase = self.phase
        self.phase_history.append(old_phase)
        self.phase = phase

        if self.logger:
            self.logger.log_phase_change(old_phase.value, phase.value, round=self.round_number)

    def is_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    def end_game(self, winner: Faction, reason: str, **details) -> bool:
        """Move to GAME_OVER and record the winner.

        Returns:
            False if the match was already over (the first result stands)
        """
        if self.phase == Phase.GAME_OVER:
            return False

        self.winner = winner
        self.win_reason = reason
        self.set_phase(Phase.GAME_OVER)

        if self.logger:
            loyalists, moles = len(self.get_alive_loyalists()), len(self.get_alive_moles())
            self.logger.log_game_end(
                winner.value,
                reason,
                {"alive_loyalists": loyalists, "alive_moles": moles,
                 "round": self.round_number, **details},
            )
        return True

    def start_round(self, start_ms: Optional[int] = None, respawn: bool = True) -> None:
        """Start a new round.

        Args:
            start_ms: Round start timestamp (defaults to now)
            respawn: Scatter living players over random rooms

        Raises:
            InvalidStateError: If the match is over
        """
        if self.phase == Phase.GAME_OVER:
            raise InvalidStateError("Cannot start a round after the match ended")

        self.set_phase(Phase.ROUND)
        self.round_number += 1
        self.round_timer = self.config.round_duration_s
        self.round_start_ms = now_ms() if start_ms is None else start_ms
        self.dead_bodies = []

        if respawn:
            self.spawn_players_in_random_rooms()

        if self.logger:
            self.logger.log_round_start(
                self.round_number,
                mole_count=self.mole_count,
                player_count=len(self.players),
            )

    def spawn_players_in_random_rooms(self) -> None:
        room_ids = self.room_graph.get_room_ids()
        for player in self.players.values():
            if player.is_alive:
                self.place_player(player, self.rng.choice(room_ids))

    # --- Players ---

    def add_player(self, player: PlayerState) -> None:
        """Register a player.

        Players without a location start in the emergency-button room.

        Raises:
            InvalidStateError: If the ID is taken or the location is unknown
        """
        if player.player_id in self.players:
            raise InvalidStateError(f"Player '{player.player_id}' already registered")

        if not player.location.room_id:
            self.place_player(player, self.room_graph.emergency_button_room)
        elif player.location.room_id not in self.rooms:
            raise InvalidStateError(
                f"Player '{player.player_id}' placed in unknown room",
                details={"room_id": player.location.room_id},
            )

        self.players[player.player_id] = player

        if self.logger:
            self.logger.log(
                EventType.PLAYER_JOINED,
                {"name": player.name, "room": player.location.room_id},
                player_id=player.player_id,
            )
            self.logger.log(
                EventType.PLAYER_JOINED,
                {"role": player.role.value},
                player_id=player.player_id,
                is_private=True,
            )

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        return self.players.get(player_id)

    def get_alive_players(self) -> List[str]:
        """Return list of alive player IDs."""
        return [pid for pid, p in self.players.items() if p.is_alive]

    def get_alive_loyalists(self) -> List[str]:
        """Return list of alive loyalist IDs."""
        return [
            pid for pid, p in self.players.items()
            if p.is_alive and p.role == PlayerRole.LOYALIST
        ]

    def get_alive_moles(self) -> List[str]:
        """Return list of alive mole IDs."""
        return [
            pid for pid, p in self.players.items()
            if p.is_alive and p.role == PlayerRole.MOLE
        ]

    @property
    def mole_count(self) -> int:
        """Number of moles still alive."""
        return len(self.get_alive_moles())

    def add_status_listener(self, listener: StatusListener, key: Optional[str] = None) -> None:
        """Subscribe to players leaving ALIVE (death or ejection).

        Args:
            listener: Callback receiving the player and its previous status
            key: Optional slot name; a later listener with the same key
                replaces the earlier one
        """
        slot = key if key is not None else f"listener-{id(listener)}"
        self._status_listeners[slot] = listener

    def remove_status_listener(self, key: str, listener: Optional[StatusListener] = None) -> None:
        """Drop the listener in ``key``; with ``listener``, only if it still holds the slot."""
        if listener is None or self._status_listeners.get(key) == listener:
            self._status_listeners.pop(key, None)

    def set_player_status(self, player_id: str, status: PlayerStatus) -> bool:
        """Flip a living player to DEAD or EJECTED.

        Non-alive statuses are terminal, so flipping an already dead or
        ejected player does nothing.

        Returns:
            True if the status changed
        """
        player = self.players.get(player_id)
        if player is None or not player.is_alive or status == PlayerStatus.ALIVE:
            return False

        previous = player.status
        player.status = status
        for listener in list(self._status_listeners.values()):
            listener(player, previous)
        return True

    def mark_dead(self, player_id: str, leave_body: bool = True) -> Optional[DeadBody]:
        """Kill a player, optionally dropping a body where they stood.

        Returns:
            The dropped body, or None if nothing changed or no body was left
        """
        player = self.players.get(player_id)
        if player is None or not player.is_alive:
            return None

        body = None
        if leave_body:
            body = DeadBody(
                player_id=player_id,
                location=Location(player.location.room_id, player.location.x, player.location.y),
                role=player.role,
            )
            self.dead_bodies.append(body)

        self.set_player_status(player_id, PlayerStatus.DEAD)
        return body

    def mark_ejected(self, player_id: str) -> bool:
        return self.set_player_status(player_id, PlayerStatus.EJECTED)

    # --- Movement ---

    def place_player(self, player: PlayerState, room_id: str) -> None:
        room = self.rooms[room_id]
        player.location = Location(room_id=room_id, x=room.position.x, y=room.position.y)

    def move_player(
        self,
        player_id: str,
        target_room_id: str,
        is_blocked: Optional[Callable[[str], bool]] = None,
    ) -> ActionResult:
        """Move a player through an exit.

        Args:
            player_id: Player to move
            target_room_id: Destination room ID
            is_blocked: Optional predicate telling whether a room is sealed
                (doors sabotage)
        """
        player, rejection = self._check_mover(player_id)
        if rejection is not None:
            return rejection

        if is_blocked is not None and is_blocked(target_room_id):
            return self._reject_move(player_id, ErrorKind.MOVEMENT_BLOCKED,
                                     f"Doors to {target_room_id} are sealed by sabotage")

        current_room_id = player.location.room_id
        if not self.room_graph.validate_movement(current_room_id, target_room_id):
            return self._reject_move(player_id, ErrorKind.NOT_ADJACENT,
                                     f"Cannot move from {current_room_id} to {target_room_id}")

        return self._relocate(player, target_room_id, via="exit")

    def vent_player(self, player_id: str, target_room_id: str) -> ActionResult:
        """Move a mole through a vent."""
        player, rejection = self._check_mover(player_id)
        if rejection is not None:
            return rejection

        if not player.is_mole:
            return self._reject_move(player_id, ErrorKind.WRONG_ROLE, "Only moles can use vents")

        current_room_id = player.location.room_id
        if not self.room_graph.validate_vent(current_room_id, target_room_id):
            return self._reject_move(player_id, ErrorKind.NOT_ADJACENT,
                                     f"No vent from {current_room_id} to {target_room_id}")

        return self._relocate(player, target_room_id, via="vent")

    def _check_mover(self, player_id: str):
        player = self.players.get(player_id)
        if player is None:
            return None, self._reject_move(player_id, ErrorKind.PLAYER_NOT_FOUND, "Player not found")
        if not player.is_alive:
            return None, self._reject_move(player_id, ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive")
        if self.phase != Phase.ROUND:
            return None, self._reject_move(player_id, ErrorKind.WRONG_PHASE,
                                           "Can only move during round phase")
        return player, None

    def _relocate(self, player: PlayerState, target_room_id: str, via: str) -> ActionResult:
        from_room_id = player.location.room_id
        self.place_player(player, target_room_id)

        if self.logger:
            self.logger.log(
                EventType.PLAYER_MOVED,
                {"from_room": from_room_id, "to_room": target_room_id, "via": via},
                player_id=player.player_id,
                is_private=(via == "vent"),
            )
        return ActionResult.ok(room_id=target_room_id)

    def _reject_move(self, player_id: str, error: ErrorKind, reason: str) -> ActionResult:
        if self.logger:
            self.logger.log_rejection(player_id, "move", error.value, reason)
        return ActionResult.fail(error, reason)

    # --- Lifecycle ---

    def reset(self) -> None:
        """Return to the lobby for a rematch with the same players.

        Per-match player counters (status, tasks, emergency meetings, kill
        cooldown) go back to their initial values.
        """
        if self.logger:
            self.logger.log(
                EventType.MATCH_RESET,
                {"previous_phase": self.phase.value, "round": self.round_number},
            )

        self.phase = Phase.LOBBY
        self.phase_history = []
        self.round_number = 0
        self.round_start_ms = 0
        self.round_timer = 0
        self.dead_bodies = []
        self.winner = None
        self.win_reason = ""

        for player in self.players.values():
            player.status = PlayerStatus.ALIVE
            player.tasks = []
            player.task_progress = 0
            player.emergency_meetings_used = 0
            player.kill_cooldown_until = None

    def to_dict(self) -> dict:
        """Public snapshot of the match (roles withheld)."""
        return {
            "map_id": self.room_graph.map_id,
            "phase": self.phase.value,
            "round_number": self.round_number,
            "round_timer": self.round_timer,
            "mole_count": self.mole_count,
            "players": {
                pid: {
                    "name": p.name,
                    "status": p.status.value,
                    "room_id": p.location.room_id,
                    "task_progress": p.task_progress,
                }
                for pid, p in self.players.items()
            },
            "dead_bodies": [
                {"player_id": b.player_id, "room_id": b.location.room_id, "reported": b.reported}
                for b in self.dead_bodies
            ],
            "winner": self.winner.value if self.winner else None,
            "win_reason": self.win_reason,
        }

"""Match controller: one map, one shared state, every game system wired together.

``Match`` is the single entry point action handlers are expected to use. It
serializes every call behind a per-match re-entrant lock, so the systems
underneath can assume one in-flight write at a time.
"""

import random
import threading
from typing import Any, Dict, List, Optional

from molehunt.core.exceptions import ConfigurationError
from molehunt.core.types import ActionResult, ErrorKind, ValidationResult
from molehunt.core.utils import now_ms as current_ms
from molehunt.core.utils import seed_everything
from molehunt.game.config import MatchConfig
from molehunt.game.council import REASON_EMERGENCY, REASON_TIMER, CouncilSystem
from molehunt.game.emergency import EmergencyButtonSystem
from molehunt.game.kills import KillSystem
from molehunt.game.map import RoomGraph
from molehunt.game.maps import MapLoader, create_default_loader
from molehunt.game.sabotage import SabotageRequest, SabotageSystem
from molehunt.game.state import MatchState
from molehunt.game.tasks import TaskManager
from molehunt.game.types import Faction, Location, Phase, PlayerRole, PlayerState

EMERGENCY_PHASE_REASON = "Can only call emergency meetings during round phase"


class Match:
    """A single in-memory match.

    Example:
        >>> match = Match(MatchConfig(map_id="test-map"))
        >>> match.add_player("p1", "Ada", PlayerRole.LOYALIST)
        >>> match.add_player("p2", "Bo", PlayerRole.MOLE)
        >>> match.start_round(now_ms=0)
        >>> match.attempt_task("p1", "rewire-task", success=True)
    """

    def __init__(
        self,
        config: Optional[MatchConfig] = None,
        map_loader: Optional[MapLoader] = None,
        logger=None,
    ):
        """Build every system for the configured map.

        Args:
            config: Match configuration (defaults to ``MatchConfig()``)
            map_loader: Registry to resolve ``config.map_id`` from (defaults
                to the built-in maps)
            logger: Optional ``GameLogger`` shared by every system

        Raises:
            ConfigurationError: If the configured map is not registered
        """
        self.config = config or MatchConfig()
        self.map_loader = map_loader or create_default_loader()
        self.logger = logger
        self._lock = threading.RLock()

        definition = self.map_loader.get(self.config.map_id)
        if definition is None:
            raise ConfigurationError(
                f"Unknown map '{self.config.map_id}'",
                details={"available": self.map_loader.get_map_ids()},
            )

        if self.config.seed is not None:
            seed_everything(self.config.seed)
        self.rng = random.Random(self.config.seed)

        self.room_graph = RoomGraph(definition)
        self.state = MatchState(self.room_graph, self.config, logger=logger, rng=self.rng)
        self.sabotage = SabotageSystem(self.state)
        self.emergency = EmergencyButtonSystem(self.state, self.sabotage)
        self.tasks = TaskManager(self.state)
        self.kills = KillSystem(self.state)
        self.council = CouncilSystem(self.state, self.kills)

        if self.logger:
            self.logger.log_game_start(self.config.to_dict())

    # --- Setup ---

    def add_player(
        self,
        player_id: str,
        name: str,
        role: PlayerRole,
        room_id: Optional[str] = None,
    ) -> PlayerState:
        """Register a player.

        Raises:
            InvalidStateError: If the ID is taken or the room is unknown
        """
        with self._lock:
            player = PlayerState(
                player_id=player_id,
                name=name,
                role=role,
                location=Location(room_id or ""),
            )
            self.state.add_player(player)
            return player

    def start_round(self, now_ms: Optional[int] = None, respawn: bool = True) -> None:
        """Start the next round.

        Raises:
            InvalidStateError: If the match is over
        """
        with self._lock:
            now = current_ms() if now_ms is None else now_ms
            self.state.start_round(start_ms=now, respawn=respawn)

    # --- Round actions ---

    def move(self, player_id: str, room_id: str) -> ActionResult:
        with self._lock:
            return self.state.move_player(player_id, room_id,
                                          is_blocked=self.sabotage.is_movement_blocked)

    def vent(self, player_id: str, room_id: str) -> ActionResult:
        with self._lock:
            return self.state.vent_player(player_id, room_id)

    def attempt_task(self, player_id: str, task_id: str, success: bool) -> ActionResult:
        with self._lock:
            return self.tasks.attempt_task(player_id, task_id, success)

    def trigger_sabotage(
        self,
        player_id: str,
        request: SabotageRequest,
        now_ms: Optional[int] = None,
    ) -> ActionResult:
        with self._lock:
            return self.sabotage.trigger_sabotage(player_id, request, now_ms)

    def fix_sabotage(self, player_id: str, now_ms: Optional[int] = None) -> ActionResult:
        with self._lock:
            return self.sabotage.attempt_fix(player_id, now_ms)

    def kill(self, mole_id: str, target_id: str, now_ms: Optional[int] = None) -> ActionResult:
        with self._lock:
            return self.kills.attempt_kill(mole_id, target_id, now_ms)

    def can_call_emergency(self, player_id: str, now_ms: Optional[int] = None) -> ValidationResult:
        """Check the button from the player's current room."""
        with self._lock:
            if self.state.phase != Phase.ROUND:
                return ValidationResult.fail(ErrorKind.WRONG_PHASE, EMERGENCY_PHASE_REASON)

            player = self.state.get_player(player_id)
            room_id = player.location.room_id if player else ""
            return self.emergency.can_call_emergency(
                player_id, room_id, self.state.round_start_ms, now_ms
            )

    def call_emergency(self, player_id: str, now_ms: Optional[int] = None) -> ActionResult:
        """Press the button and, if accepted, open a council."""
        with self._lock:
            if self.state.phase != Phase.ROUND:
                if self.logger:
                    self.logger.log_rejection(player_id, "call_emergency",
                                              ErrorKind.WRONG_PHASE.value, EMERGENCY_PHASE_REASON)
                return ActionResult.fail(ErrorKind.WRONG_PHASE, EMERGENCY_PHASE_REASON)

            player = self.state.get_player(player_id)
            room_id = player.location.room_id if player else ""
            result = self.emergency.call_emergency(
                player_id, room_id, self.state.round_start_ms, now_ms
            )
            if result.success:
                self.council.start_council(REASON_EMERGENCY, caller_id=player_id)
            return result

    def report_body(self, player_id: str, body_player_id: Optional[str] = None) -> ActionResult:
        with self._lock:
            return self.council.report_body(player_id, body_player_id)

    # --- Council ---

    def vote(self, player_id: str, target=None, now_ms: Optional[int] = None) -> ActionResult:
        with self._lock:
            return self.council.cast_vote(player_id, target, now_ms)

    def close_council(self, now_ms: Optional[int] = None) -> ActionResult:
        with self._lock:
            return self.council.close_council(now_ms)

    # --- Clock ---

    def tick(self, now_ms: Optional[int] = None) -> None:
        """Advance time-based rules to ``now_ms``.

        Updates the round timer, resolves an expired self-destruct and opens
        a council once the round timer runs out.
        """
        with self._lock:
            if self.state.phase != Phase.ROUND:
                return
            now = current_ms() if now_ms is None else now_ms

            if self.sabotage.check_expiry(now):
                return

            elapsed_s = (now - self.state.round_start_ms) // 1000
            self.state.round_timer = max(0, self.config.round_duration_s - elapsed_s)
            if self.state.round_timer == 0:
                self.council.start_council(REASON_TIMER)

    # --- Queries ---

    def is_over(self) -> bool:
        with self._lock:
            return self.state.is_over()

    def get_winner(self) -> Optional[Faction]:
        with self._lock:
            return self.state.winner

    def get_win_reason(self) -> str:
        with self._lock:
            return self.state.win_reason

    def get_rooms(self) -> List:
        return self.room_graph.get_rooms()

    def snapshot(self) -> Dict[str, Any]:
        """Public view of the match."""
        with self._lock:
            data = self.state.to_dict()
            active = self.sabotage.get_active()
            data["sabotage"] = active.to_dict() if active else None
            data["completed_tasks"] = self.tasks.get_completed_task_count()
            data["task_catalog_size"] = len(self.tasks.get_catalog())
            return data

    # --- Lifecycle ---

    def reset(self) -> None:
        """Full reset for a rematch with the same players and map."""
        with self._lock:
            self.state.reset()
            self.sabotage.reset()
            self.emergency.reset()
            self.tasks.reset()
            self.council.reset()

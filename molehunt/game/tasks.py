"""Task completion ledger and the task victory condition."""

from typing import FrozenSet, List, Optional

from molehunt.core.types import ActionResult, ErrorKind
from molehunt.game import rules
from molehunt.game.state import MatchState
from molehunt.game.types import Faction, Phase, PlayerState, PlayerStatus, TaskRecord
from molehunt.logging.formats import EventType

LISTENER_KEY = "tasks"


class TaskManager:
    """Tracks which tasks each loyalist has completed.

    The task catalog is every Task interactable on the map at construction
    time; it is frozen then and never re-scanned. Loyalists win when every
    *living* loyalist has completed the whole catalog, so the number of
    completions required shrinks as loyalists die.
    """

    def __init__(self, state: MatchState, logger=None):
        self.state = state
        self.logger = logger if logger is not None else state.logger

        self.catalog: FrozenSet[str] = frozenset(
            i.interactable_id for i in state.room_graph.get_task_interactables()
        )
        self.history: List[TaskRecord] = []

        # A death can complete the condition for the survivors. One manager per
        # state: a newer manager replaces this subscription.
        state.add_status_listener(self._on_status_change, key=LISTENER_KEY)

    def get_catalog(self) -> FrozenSet[str]:
        return self.catalog

    def attempt_task(self, player_id: str, task_id: str, success: bool) -> ActionResult:
        """Record a task attempt.

        Args:
            player_id: Player attempting the task
            task_id: Task interactable ID
            success: Outcome of the task minigame

        Returns:
            ActionResult; on success ``data["task_progress"]`` holds the
            player's catalog percentage
        """
        player = self.state.get_player(player_id)
        if player is None:
            return self._reject(player_id, task_id, ErrorKind.PLAYER_NOT_FOUND, "Player not found")

        if player.is_mole:
            return self._reject(player_id, task_id, ErrorKind.WRONG_ROLE,
                                "Only loyalists can complete tasks")

        if not player.is_alive:
            return self._reject(player_id, task_id, ErrorKind.PLAYER_NOT_ALIVE,
                                "Player is not alive")

        if task_id in player.tasks:
            return self._reject(player_id, task_id, ErrorKind.ALREADY_COMPLETED,
                                "Task already completed by this player")

        if self.state.phase != Phase.ROUND:
            return self._reject(player_id, task_id, ErrorKind.WRONG_PHASE,
                                "Tasks can only be completed during rounds")

        if not success:
            if self.logger:
                self.logger.log(
                    EventType.TASK_FAILED,
                    {"task_id": task_id, "room": player.location.room_id},
                    player_id=player_id,
                )
            return ActionResult.fail(ErrorKind.TASK_FAILED,
                                     "Task minigame was not completed successfully")

        player.tasks.append(task_id)
        player.task_progress = rules.task_progress_percent(
            len(self.catalog.intersection(player.tasks)), len(self.catalog)
        )
        self.history.append(
            TaskRecord(player_id=player_id, task_id=task_id, room_id=player.location.room_id)
        )

        if self.logger:
            self.logger.log(
                EventType.TASK_COMPLETED,
                {
                    "task_id": task_id,
                    "room": player.location.room_id,
                    "player_progress": player.task_progress,
                    "overall_progress": self.get_overall_progress(),
                },
                player_id=player_id,
            )

        self.check_task_win()
        return ActionResult.ok(task_progress=player.task_progress)

    def get_completed_task_count(self) -> int:
        """Completed tasks summed over living loyalists only.

        Completions by dead or ejected loyalists no longer count.
        """
        return sum(len(set(p.tasks)) for p in self._living_loyalists())

    def get_overall_progress(self) -> int:
        """Percent of the catalog completed across living loyalists."""
        living = self._living_loyalists()
        required = len(self.catalog) * len(living)
        done = sum(len(self.catalog.intersection(p.tasks)) for p in living)
        return rules.task_progress_percent(done, required)

    def check_task_win(self) -> bool:
        """End the match for the loyalists if the task condition holds.

        Returns:
            True if this call ended the match
        """
        if self.state.is_over():
            return False
        if not rules.all_tasks_complete(self.state.players.values(), set(self.catalog)):
            return False
        return self.state.end_game(
            Faction.LOYALISTS,
            "All tasks completed",
            catalog_size=len(self.catalog),
        )

    def get_tasks_in_room(self, room_id: str) -> List[str]:
        return self.state.room_graph.get_tasks_in_room(room_id)

    def get_history(self, player_id: Optional[str] = None) -> List[TaskRecord]:
        if player_id is None:
            return list(self.history)
        return [r for r in self.history if r.player_id == player_id]

    def reset(self) -> None:
        """Clear the ledger. The catalog stays frozen."""
        self.history.clear()
        for player in self.state.players.values():
            player.tasks = []
            player.task_progress = 0

    def close(self) -> None:
        """Stop rechecking the task win on deaths and ejections."""
        self.state.remove_status_listener(LISTENER_KEY, self._on_status_change)

    def _living_loyalists(self) -> List[PlayerState]:
        return [p for p in self.state.players.values() if p.is_loyalist and p.is_alive]

    def _on_status_change(self, player: PlayerState, previous: PlayerStatus) -> None:
        if player.is_loyalist:
            self.check_task_win()

    def _reject(self, player_id: str, task_id: str, error: ErrorKind, reason: str) -> ActionResult:
        if self.logger:
            self.logger.log_rejection(player_id, "attempt_task", error.value, reason)
        return ActionResult.fail(error, reason, task_id=task_id)

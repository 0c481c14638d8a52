"""Match logger for tracking events and actions."""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime

from molehunt.logging.formats import LogEntry, EventType
from molehunt.core.utils import generate_game_id


class GameLogger:
    """Logger for match events and actions.

    Handles both in-memory and file-based logging with support for
    filtering private information (roles, kills nobody has seen yet).
    """

    def __init__(
        self,
        game_id: Optional[str] = None,
        output_dir: Optional[Path] = None,
        log_private: bool = True,
        enabled: bool = True,
    ):
        """Initialize match logger.

        Args:
            game_id: Unique match identifier
            output_dir: Directory to save logs (None for memory-only)
            log_private: Whether to log private information (default: True)
            enabled: Whether logging is enabled
        """
        self.game_id = game_id or generate_game_id()
        self.output_dir = Path(output_dir) if output_dir else None
        self.log_private = log_private
        self.enabled = enabled

        # In-memory log
        self.entries: List[LogEntry] = []

        # Current round number
        self.current_round = 0

        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.output_dir / f"{self.game_id}.jsonl"
        else:
            self.log_file = None

    def log(
        self,
        event_type: EventType,
        data: Dict[str, Any],
        player_id: Optional[str] = None,
        is_private: bool = False,
        **metadata
    ) -> None:
        """Log an event.

        Args:
            event_type: Type of event
            data: Event data
            player_id: Player associated with event (if any)
            is_private: Whether this is private information
            **metadata: Additional metadata
        """
        if not self.enabled:
            return

        if is_private and not self.log_private:
            return

        entry = LogEntry(
            timestamp=datetime.now(),
            event_type=event_type,
            game_id=self.game_id,
            round_number=self.current_round,
            data=data,
            player_id=player_id,
            is_private=is_private,
            metadata=metadata
        )

        self.entries.append(entry)

        if self.log_file:
            self._write_to_file(entry)

    def _write_to_file(self, entry: LogEntry) -> None:
        """Append entry to the JSONL log file."""
        try:
            with open(self.log_file, 'a') as f:
                f.write(entry.to_json() + '\n')
        except OSError as e:
            print(f"Warning: Failed to write log entry: {e}", file=sys.stderr)

    def log_game_start(self, config: Dict[str, Any]) -> None:
        """Log match start.

        Args:
            config: Match configuration
        """
        self.log(EventType.MATCH_START, {"config": config})

    def log_game_end(self, winner: Any, reason: str, stats: Optional[Dict[str, Any]] = None) -> None:
        """Log match end.

        Args:
            winner: Winning faction
            reason: Win reason
            stats: Match statistics
        """
        self.log(
            EventType.GAME_END,
            {"winner": winner, "reason": reason, "stats": stats or {}}
        )

    def log_phase_change(self, old_phase: str, new_phase: str, **data) -> None:
        """Log phase change."""
        self.log(
            EventType.PHASE_CHANGE,
            {"old_phase": old_phase, "new_phase": new_phase, **data}
        )

    def log_round_start(self, round_number: int, **data) -> None:
        """Log round start and advance the round counter stamped on entries."""
        self.current_round = round_number
        self.log(EventType.ROUND_START, {"round": round_number, **data})

    def log_rejection(
        self,
        player_id: Optional[str],
        action: str,
        error_code: str,
        reason: str,
    ) -> None:
        """Log a rejected player action.

        Args:
            player_id: Player whose action was rejected
            action: Action name (e.g. "call_emergency")
            error_code: Categorical error tag
            reason: Human-readable reason
        """
        self.log(
            EventType.ACTION_REJECTED,
            {"action": action, "error_code": error_code, "reason": reason},
            player_id=player_id,
        )

    def get_entries(
        self,
        event_type: Optional[EventType] = None,
        player_id: Optional[str] = None,
        include_private: bool = False
    ) -> List[LogEntry]:
        """Get log entries with optional filtering.

        Args:
            event_type: Filter by event type
            player_id: Filter by player ID
            include_private: Include private entries

        Returns:
            Filtered list of log entries
        """
        entries = self.entries

        if event_type:
            entries = [e for e in entries if e.event_type == event_type]

        if player_id is not None:
            entries = [e for e in entries if e.player_id == player_id]

        if not include_private:
            entries = [e for e in entries if not e.is_private]

        return entries

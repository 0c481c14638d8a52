"""Log formats and data structures."""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime

from molehunt.core.utils import safe_json_dumps


class EventType(Enum):
    """Types of loggable events."""

    # Match lifecycle
    MATCH_START = auto()
    MATCH_RESET = auto()
    GAME_END = auto()
    PHASE_CHANGE = auto()
    ROUND_START = auto()

    # Player actions
    PLAYER_JOINED = auto()
    PLAYER_MOVED = auto()
    TASK_COMPLETED = auto()
    TASK_FAILED = auto()
    EMERGENCY_CALLED = auto()
    VOTE_CAST = auto()

    # Game events
    SABOTAGE_TRIGGERED = auto()
    SABOTAGE_PROGRESS = auto()
    SABOTAGE_RESOLVED = auto()
    PLAYER_KILLED = auto()
    BODY_REPORTED = auto()
    COUNCIL_CALLED = auto()
    PLAYER_EJECTED = auto()
    ACTION_REJECTED = auto()

    # System events
    INFO = auto()


@dataclass
class LogEntry:
    """Single log entry."""

    timestamp: datetime
    event_type: EventType
    game_id: str
    round_number: int
    data: Dict[str, Any] = field(default_factory=dict)
    player_id: Optional[str] = None
    is_private: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.name,
            "game_id": self.game_id,
            "round_number": self.round_number,
            "data": self.data,
            "player_id": self.player_id,
            "is_private": self.is_private,
            "metadata": self.metadata,
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return safe_json_dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        """Create from dictionary."""
        data = data.copy()
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data["event_type"] = EventType[data["event_type"]]
        return cls(**data)

"""Match event logging for molehunt."""

from molehunt.logging.game_logger import GameLogger
from molehunt.logging.formats import LogEntry, EventType

__all__ = [
    "GameLogger",
    "LogEntry",
    "EventType",
]

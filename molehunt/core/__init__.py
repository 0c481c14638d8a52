"""Core framework components for molehunt."""

from molehunt.core.types import ActionResult, ValidationResult, ErrorKind
from molehunt.core.exceptions import (
    MolehuntException,
    InvalidStateError,
    ConfigurationError,
    MapValidationError,
)
from molehunt.core.utils import seed_everything, now_ms, deep_merge, generate_game_id

__all__ = [
    "ActionResult",
    "ValidationResult",
    "ErrorKind",
    "MolehuntException",
    "InvalidStateError",
    "ConfigurationError",
    "MapValidationError",
    "seed_everything",
    "now_ms",
    "deep_merge",
    "generate_game_id",
]

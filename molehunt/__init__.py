"""molehunt - authoritative match engine for a hidden-role social deduction game."""

__version__ = "0.1.0"

from molehunt.core.types import ActionResult, ValidationResult, ErrorKind
from molehunt.core.exceptions import (
    MolehuntException,
    InvalidStateError,
    ConfigurationError,
    MapValidationError,
)
from molehunt.game import Match, MatchConfig, PlayerRole, Phase, Faction

__all__ = [
    "__version__",
    "ActionResult",
    "ValidationResult",
    "ErrorKind",
    "MolehuntException",
    "InvalidStateError",
    "ConfigurationError",
    "MapValidationError",
    "Match",
    "MatchConfig",
    "PlayerRole",
    "Phase",
    "Faction",
]

"""Common result types and error kinds shared by every game system."""

from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field


class ErrorKind(Enum):
    """Categorical tag attached to every rejected action."""

    PLAYER_NOT_FOUND = "player_not_found"
    PLAYER_NOT_ALIVE = "player_not_alive"
    WRONG_ROOM = "wrong_room"
    WARM_UP_ACTIVE = "warm_up_active"
    SABOTAGE_ACTIVE = "sabotage_active"
    ALREADY_USED = "already_used"
    ALREADY_COMPLETED = "already_completed"
    WRONG_ROLE = "wrong_role"

    # Supplementary kinds for movement, kills, sabotage fixing and voting
    WRONG_PHASE = "wrong_phase"
    TASK_FAILED = "task_failed"
    INVALID_TARGET = "invalid_target"
    ON_COOLDOWN = "on_cooldown"
    MOVEMENT_BLOCKED = "movement_blocked"
    NOT_ADJACENT = "not_adjacent"
    NO_ACTIVE_SABOTAGE = "no_active_sabotage"
    ALREADY_CONTRIBUTED = "already_contributed"
    ALREADY_VOTED = "already_voted"


@dataclass
class ActionResult:
    """Outcome of a mutating action.

    Attributes:
        success: Whether the action was applied
        reason: Human-readable explanation (set on rejection, sometimes on success)
        error: Categorical tag for rejections
        data: Extra action-specific payload
    """

    success: bool
    reason: Optional[str] = None
    error: Optional[ErrorKind] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, reason: Optional[str] = None, **data) -> "ActionResult":
        """Build a successful result."""
        return cls(success=True, reason=reason, data=data)

    @classmethod
    def fail(cls, error: ErrorKind, reason: str, **data) -> "ActionResult":
        """Build a rejected result."""
        return cls(success=False, reason=reason, error=error, data=data)

    @classmethod
    def from_validation(cls, validation: "ValidationResult") -> "ActionResult":
        """Carry a failed validation over as an action rejection."""
        return cls(success=validation.valid, reason=validation.reason, error=validation.error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        result: Dict[str, Any] = {"success": self.success}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.error is not None:
            result["error"] = self.error.value
        if self.data:
            result["data"] = self.data
        return result

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ValidationResult:
    """Outcome of a read-only precondition check."""

    valid: bool
    reason: Optional[str] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: ErrorKind, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        result: Dict[str, Any] = {"valid": self.valid}
        if self.reason is not None:
            result["reason"] = self.reason
        if self.error is not None:
            result["error"] = self.error.value
        return result

    def __bool__(self) -> bool:
        return self.valid


# Type aliases for common patterns
PlayerID = str
RoomID = str
TaskID = str

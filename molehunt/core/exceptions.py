"""Custom exceptions for molehunt.

Runtime rule rejections are never raised; they come back as structured
results (see ``molehunt.core.types``). Exceptions here signal deployment
or programming errors: bad maps, bad config, broken invariants.
"""


class MolehuntException(Exception):
    """Base exception for all molehunt errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidStateError(MolehuntException):
    """Raised when the match state is invalid or inconsistent."""

    pass


class ConfigurationError(MolehuntException):
    """Raised when configuration is invalid."""

    pass


class MapValidationError(ConfigurationError):
    """Raised when a map definition fails schema or topology validation."""

    pass

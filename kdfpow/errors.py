"""Exception classes raised by the puzzle solver."""

from typing import Any


class PuzzleError(Exception):
    """Base exception for solver errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}')"


class InvalidParameter(PuzzleError, ValueError):
    """A parameter can never produce a meaningful derivation or threshold."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message, {"field": field, "value": value})
        self.field = field
        self.value = value


class DerivationFailure(PuzzleError):
    """The hash primitive is unavailable or an input could not be encoded."""


class Cancelled(PuzzleError):
    """A search was stopped by its caller before a solution was found."""

    def __init__(self, message: str, guess_count: int = 0):
        super().__init__(message, {"guess_count": guess_count})
        self.guess_count = guess_count

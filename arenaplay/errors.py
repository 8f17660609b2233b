"""
Exception hierarchy for arena match runs.
"""

from enum import Enum


class ArenaError(Exception):
    """Base exception for all arenaplay errors."""
    pass


class SessionStep(Enum):
    """Bootstrap call that produced a SessionBuildError."""
    SESSION_HANDLE = "session handle"
    IDENTITY = "identity"
    ROOM_LOOKUP = "room lookup"


class SessionBuildError(ArenaError):
    """Raised when the session context cannot be bootstrapped."""

    def __init__(self, step: SessionStep, message: str):
        self.step = step
        self.message = message
        super().__init__(f"Session bootstrap failed at {step.value} step: {message}")


class RemoteServiceError(ArenaError):
    """Raised for any remote failure that is not rate limiting. Not retried."""

    def __init__(self, message: str, error_id: int | None = None, status_code: int | None = None):
        self.message = message
        self.error_id = error_id
        self.status_code = status_code
        super().__init__(message)


class RateLimited(ArenaError):
    """Raised by the play call when the service asks us to slow down."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ResolutionError(ArenaError):
    """Raised when an opponent specifier or filter cannot be satisfied."""
    pass

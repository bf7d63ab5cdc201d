"""
Domain errors raised by the workout session engine.

Each error maps to one HTTP status in :mod:`athletica.main`; the
engine modules themselves stay transport-agnostic.
"""

from typing import Optional


class AthleticaError(Exception):
    """Base class for all engine errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransition(AthleticaError):
    """A command was issued in a state that does not permit it."""

    status_code = 409

    def __init__(self, operation: str, state: str, allowed: Optional[tuple[str, ...]] = None,
                 subject: str = "session"):
        detail = f"Cannot {operation} while {subject} is '{state}'"
        if allowed:
            detail += f" (allowed from: {', '.join(allowed)})"
        super().__init__(detail)
        self.operation = operation
        self.state = state


class NotFound(AthleticaError):
    """A referenced session, exercise log or set log does not exist."""

    status_code = 404

    def __init__(self, kind: str, identifier: object):
        super().__init__(f"{kind} '{identifier}' not found")
        self.kind = kind
        self.identifier = identifier


class PersistenceFailure(AthleticaError):
    """The backing store rejected a write; the unit of work was rolled back."""

    status_code = 503


class InsufficientData(AthleticaError):
    """No history for an analytics/adaptive computation.

    Never escapes the engines: callers catch it and fall back to the
    documented neutral default.
    """

    status_code = 422


class DuplicateUnlock(AthleticaError):
    """An achievement is already recorded for this user."""

    status_code = 409

    def __init__(self, user_id: str, achievement_id: str):
        super().__init__(f"Achievement '{achievement_id}' already unlocked for user '{user_id}'")
        self.user_id = user_id
        self.achievement_id = achievement_id

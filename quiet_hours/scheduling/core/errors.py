"""
Error taxonomy for the scheduling system.

Every error carries a human readable reason naming the precondition or
invariant that was violated. ``StoreUnavailableError`` is also an ``OSError``
so callers that only care about I/O failures can catch it as one.
"""

from typing import List, Optional


class SchedulingError(Exception):
    """Base class for every failure raised by the scheduling engine."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ValidationError(SchedulingError):
    """A required field is missing or invalid. Raised before any mutation."""

    def __init__(self, reason: str, field: Optional[str] = None):
        super().__init__(reason)
        self.field = field


class SchedulingConflict(SchedulingError):
    """The resolver rejected the request, or every automatic strategy failed."""

    def __init__(self, reason: str, conflicts: Optional[List] = None):
        super().__init__(reason)
        self.conflicts = list(conflicts or [])


class RecurrenceError(SchedulingError):
    """Unknown recurrence type or malformed custom pattern."""


class SessionNotFound(SchedulingError):
    def __init__(self, session_id: str):
        super().__init__(f"Session '{session_id}' not found")
        self.session_id = session_id


class StoreUnavailableError(SchedulingError, OSError):
    """The session or template store could not be read or written."""

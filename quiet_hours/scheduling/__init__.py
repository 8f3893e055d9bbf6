"""
Quiet Hours Scheduling System

Conflict-aware session scheduling: overlap detection, automatic conflict
resolution, recurrence expansion, slot search and historical scoring.
Works independently of the API layer; persistence is injected as a store.
"""

from .core.scheduler import SchedulingEngine
from .core.time_slot import TimeSlot
from .core.store import SessionStore, TemplateStore, InMemorySessionStore, InMemoryTemplateStore
from .core.errors import (
    SchedulingError, ValidationError, SchedulingConflict, RecurrenceError,
    SessionNotFound, StoreUnavailableError,
)

# Version for future API compatibility
__version__ = "1.0.0"

"""
Scheduler service that builds engines bound to a database session.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional
from sqlalchemy.orm import Session
from ..scheduling.core.scheduler import SchedulingEngine
from .session_store import SqlAlchemySessionStore, SqlAlchemyTemplateStore


class SchedulerService:
    """
    Hands out SchedulingEngines for a request's database session.

    Detecting conflicts and committing must not interleave between two
    requests, otherwise both could see a free slot and double-book it. Every
    mutating engine call runs inside ``locked()``.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or datetime.now
        self._lock = threading.RLock()

    def get_engine(self, db: Session) -> SchedulingEngine:
        return SchedulingEngine(
            store=SqlAlchemySessionStore(db),
            template_store=SqlAlchemyTemplateStore(db),
            clock=self.clock,
        )

    @contextmanager
    def locked(self):
        with self._lock:
            yield


# Global scheduler service instance
scheduler_service = SchedulerService()

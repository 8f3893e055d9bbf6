"""
Time-ordered queue of housekeeping tasks.

Tasks are drained by ``tick(now)``: whoever owns the clock (Celery beat in
deployment, the test suite directly) decides when a tick happens.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from ..models import SessionStatus, TaskType

logger = logging.getLogger(__name__)


@dataclass(order=True)
class QueuedTask:
    scheduled_for: datetime
    seq: int
    task_type: TaskType = field(compare=False)
    payload: dict = field(default_factory=dict, compare=False)


def log_session_reminder(task: QueuedTask):
    logger.info(f"Reminder: '{task.payload.get('title')}' starts at {task.payload.get('start')}")


def log_break_reminder(task: QueuedTask):
    logger.info(f"Break reminder: {task.payload.get('message', 'time for a break')}")


DEFAULT_HANDLERS = {
    TaskType.SESSION_REMINDER: log_session_reminder,
    TaskType.BREAK_REMINDER: log_break_reminder,
}


class TaskQueue:
    def __init__(self, handlers: Optional[Dict[TaskType, Callable[[QueuedTask], None]]] = None):
        self.handlers = dict(DEFAULT_HANDLERS if handlers is None else handlers)
        self._heap: List[QueuedTask] = []
        self._counter = itertools.count()

    def push(self, scheduled_for: datetime, task_type: TaskType, payload: Optional[dict] = None) -> QueuedTask:
        task = QueuedTask(scheduled_for, next(self._counter), task_type, payload or {})
        heapq.heappush(self._heap, task)
        return task

    def tick(self, now: datetime) -> List[QueuedTask]:
        """Run every task due at ``now``, earliest first. Returns the tasks that were popped."""
        executed = []
        while self._heap and self._heap[0].scheduled_for <= now:
            task = heapq.heappop(self._heap)
            handler = self.handlers.get(task.task_type)
            if handler is None:
                logger.warning(f"No handler for task type {task.task_type!r}, dropping task")
            else:
                logger.debug(f"Dispatching {task.task_type} scheduled for {task.scheduled_for}")
                handler(task)
            executed.append(task)
        return executed

    def snooze(self, task: QueuedTask, now: datetime, minutes: int) -> QueuedTask:
        """Queue ``task`` again, due ``minutes`` after ``now``."""
        return self.push(now + timedelta(minutes=minutes), task.task_type, {**task.payload, "snoozed": True})

    def peek(self) -> Optional[QueuedTask]:
        return self._heap[0] if self._heap else None

    def __len__(self):
        return len(self._heap)


def reminder_payload(session) -> dict:
    return {"session_id": session.id, "title": session.title, "start": session.start.isoformat()}


def schedule_session_reminders(queue: TaskQueue, sessions: Iterable, minutes_before: int) -> List[QueuedTask]:
    """Enqueue a reminder ahead of every upcoming session that has notifications on."""
    queued = []
    for session in sessions:
        if session.status != SessionStatus.UPCOMING or not session.notifications:
            continue
        queued.append(queue.push(
            session.start - timedelta(minutes=minutes_before),
            TaskType.SESSION_REMINDER,
            reminder_payload(session),
        ))
    return queued

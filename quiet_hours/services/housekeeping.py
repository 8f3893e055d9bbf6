"""
Periodic maintenance: overdue sessions and persisted reminder tasks.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from ..models import ScheduledTask, SessionStatus, TaskType
from ..scheduling.core.store import SessionStore
from .session_store import SqlAlchemySessionStore
from .task_queue import TaskQueue, reminder_payload, schedule_session_reminders

logger = logging.getLogger(__name__)


def mark_missed_sessions(store: SessionStore, now: datetime) -> int:
    """Move every upcoming session whose end has passed to ``missed``."""
    missed = 0
    for session in store.list_all():
        if session.status == SessionStatus.UPCOMING and session.end <= now:
            # Row by row, so sessions committed meanwhile by another process survive
            if store.update(session.model_copy(update={"status": SessionStatus.MISSED})):
                missed += 1

    if missed:
        logger.info(f"Marked {missed} overdue session(s) as missed")
    return missed


def enqueue_reminders(db: Session, sessions: Iterable, minutes_before: int) -> int:
    """Persist reminder tasks for freshly scheduled sessions."""
    queue = TaskQueue(handlers={})
    tasks = schedule_session_reminders(queue, sessions, minutes_before)
    for task in tasks:
        db.add(ScheduledTask(task_type=task.task_type, scheduled_for=task.scheduled_for, payload=task.payload))
    if tasks:
        db.commit()
    return len(tasks)


def snooze_session_reminder(db: Session, session, now: datetime, minutes: int) -> ScheduledTask:
    """Persist a one-off reminder for ``session``, due ``minutes`` after ``now``."""
    task = ScheduledTask(
        task_type=TaskType.SESSION_REMINDER,
        scheduled_for=now + timedelta(minutes=minutes),
        payload={**reminder_payload(session), "snoozed": True},
    )
    db.add(task)
    db.commit()
    logger.info(f"Reminder for session {session.id} snoozed for {minutes} minutes")
    return task


def run_housekeeping(db: Session, now: datetime, queue: TaskQueue = None) -> dict:
    """
    One housekeeping tick.

    Pending ScheduledTask rows that are due get dispatched through a
    TaskQueue and flagged as executed, then overdue sessions are marked
    missed. Running it twice for the same ``now`` does nothing the second time.
    """
    queue = queue or TaskQueue()
    pending = db.query(ScheduledTask).filter(
        ScheduledTask.executed == False,
        ScheduledTask.scheduled_for <= now,
    ).order_by(ScheduledTask.scheduled_for, ScheduledTask.id).all()

    for row in pending:
        queue.push(row.scheduled_for, row.task_type, row.payload)
    dispatched = queue.tick(now)

    for row in pending:
        row.executed = True
    if pending:
        db.commit()

    missed = mark_missed_sessions(SqlAlchemySessionStore(db), now)
    logger.info(f"Housekeeping at {now}: {len(dispatched)} task(s) dispatched, {missed} session(s) missed")
    return {"tasks_dispatched": len(dispatched), "sessions_missed": missed}

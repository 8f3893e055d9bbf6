"""
Session status transitions.
"""

import logging
from datetime import datetime
from ...models import SessionStatus
from .errors import SessionNotFound, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    SessionStatus.UPCOMING: {SessionStatus.ACTIVE, SessionStatus.CANCELLED, SessionStatus.MISSED},
    SessionStatus.ACTIVE: {SessionStatus.COMPLETED, SessionStatus.INCOMPLETE, SessionStatus.CANCELLED},
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(SessionStatus(current), set())


def transition_session(store, session_id: str, status: SessionStatus, now: datetime):
    """
    Move a stored session to ``status``, writing back only that session.

    Starting records started_at, completing records completed_at. Terminal
    sessions cannot change status again.
    """
    status = SessionStatus(status)
    session = store.get(session_id)
    if session is None:
        raise SessionNotFound(session_id)

    if not can_transition(session.status, status):
        raise ValidationError(
            f"Cannot move session '{session_id}' from {SessionStatus(session.status).value} to {status.value}",
            field="status",
        )

    update = {"status": status}
    if status == SessionStatus.ACTIVE:
        update["started_at"] = now
    elif status == SessionStatus.COMPLETED:
        update["completed_at"] = now

    updated = session.model_copy(update=update)
    if not store.update(updated):
        raise SessionNotFound(session_id)
    logger.info(f"Session {session_id} moved to {status.value}")
    return updated

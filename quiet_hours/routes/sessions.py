"""Session endpoints: schedule, batch, list, export/import, delete, status changes and reminder snoozing."""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import REMINDER_MINUTES, SNOOZE_MINUTES
from ..database import get_db
from ..models import SessionStatus
from ..schemas import (
    SessionRequest, ScheduledSession, SessionStatusUpdate, BatchResult, SessionExport, ImportResult, SnoozeOut,
)
from ..scheduling import SchedulingEngine
from ..scheduling.core.errors import SchedulingError
from ..services.housekeeping import enqueue_reminders, snooze_session_reminder
from ..services.scheduler_service import scheduler_service
from .deps import get_engine, to_http_exception

router = APIRouter(tags=["sessions"])


@router.post("/", response_model=List[ScheduledSession], status_code=status.HTTP_201_CREATED)
def schedule_session(
    request: SessionRequest,
    replace_conflicts: bool = Query(False, description="Evict sessions occupying the requested slot"),
    engine: SchedulingEngine = Depends(get_engine),
    db: Session = Depends(get_db),
):
    try:
        with scheduler_service.locked():
            sessions = engine.schedule_session(request, replace_conflicts=replace_conflicts)
    except SchedulingError as e:
        raise to_http_exception(e)
    enqueue_reminders(db, sessions, REMINDER_MINUTES)
    return sessions


@router.post("/batch", response_model=BatchResult)
def batch_schedule(
    requests: List[Dict[str, Any]],
    engine: SchedulingEngine = Depends(get_engine),
    db: Session = Depends(get_db),
):
    """Schedule every request independently; failures are reported, not raised."""
    try:
        with scheduler_service.locked():
            result = engine.batch_schedule(requests)
    except SchedulingError as e:
        raise to_http_exception(e)
    enqueue_reminders(db, result.successful, REMINDER_MINUTES)
    return result


@router.get("/", response_model=List[ScheduledSession])
def list_sessions(
    status_filter: Optional[SessionStatus] = Query(None, alias="status", description="Only sessions in this status"),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.list_sessions(status_filter)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.get("/export", response_model=SessionExport)
def export_sessions(engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.export_data()
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/import", response_model=ImportResult)
def import_sessions(payload: Dict[str, Any], engine: SchedulingEngine = Depends(get_engine)):
    """Replace every stored session with the contents of an export."""
    try:
        with scheduler_service.locked():
            return ImportResult(imported=engine.import_data(payload))
    except SchedulingError as e:
        raise to_http_exception(e)


@router.get("/{session_id}", response_model=ScheduledSession)
def get_session(session_id: str, engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.get_session(session_id)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, engine: SchedulingEngine = Depends(get_engine)):
    try:
        with scheduler_service.locked():
            engine.delete_session(session_id)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/{session_id}/status", response_model=ScheduledSession)
def update_status(session_id: str, update: SessionStatusUpdate, engine: SchedulingEngine = Depends(get_engine)):
    try:
        with scheduler_service.locked():
            return engine.update_status(session_id, update.status)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.post("/{session_id}/snooze", response_model=SnoozeOut)
def snooze_reminder(
    session_id: str,
    minutes: int = Query(SNOOZE_MINUTES, gt=0),
    engine: SchedulingEngine = Depends(get_engine),
    db: Session = Depends(get_db),
):
    try:
        session = engine.get_session(session_id)
    except SchedulingError as e:
        raise to_http_exception(e)
    task = snooze_session_reminder(db, session, engine.clock(), minutes)
    return SnoozeOut(session_id=session_id, remind_at=task.scheduled_for)

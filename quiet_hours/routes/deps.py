"""Shared route dependencies and error mapping."""

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..scheduling import SchedulingEngine
from ..scheduling.core.errors import (
    SchedulingError, SchedulingConflict, ValidationError, RecurrenceError, SessionNotFound, StoreUnavailableError,
)
from ..services.scheduler_service import scheduler_service


def get_engine(db: Session = Depends(get_db)) -> SchedulingEngine:
    return scheduler_service.get_engine(db)


def to_http_exception(error: SchedulingError) -> HTTPException:
    if isinstance(error, SchedulingConflict):
        return HTTPException(status_code=409, detail={
            "reason": error.reason,
            "conflicts": [session.id for session in error.conflicts],
        })
    if isinstance(error, (ValidationError, RecurrenceError)):
        return HTTPException(status_code=422, detail={"reason": error.reason, "field": getattr(error, "field", None)})
    if isinstance(error, SessionNotFound):
        return HTTPException(status_code=404, detail=error.reason)
    if isinstance(error, StoreUnavailableError):
        return HTTPException(status_code=503, detail=error.reason)
    return HTTPException(status_code=400, detail=error.reason)

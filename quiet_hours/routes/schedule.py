"""
Slot search and analytics endpoints
"""

from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Query

from ..schemas import (
    OptimalTimeRequest, OptimalTimeOut, SchedulingPreferences, Suggestion, HistoricalPatterns, ProductivityReport,
)
from ..scheduling import SchedulingEngine
from ..scheduling.core.errors import SchedulingError
from .deps import get_engine, to_http_exception

router = APIRouter(tags=["schedule"])


@router.post("/optimal-time", response_model=OptimalTimeOut)
def find_optimal_time(request: OptimalTimeRequest, engine: SchedulingEngine = Depends(get_engine)):
    """
    First preferred hour on the requested day that is clear of other
    sessions (with the min_gap buffer). ``time`` is null when the day is full.
    """
    try:
        slot = engine.find_optimal_time(request.date, request.duration, request.preferences)
    except SchedulingError as e:
        raise to_http_exception(e)
    return OptimalTimeOut(date=request.date, time=slot)


@router.post("/suggestions", response_model=List[Suggestion])
def suggest_schedule(
    preferences: Optional[SchedulingPreferences] = Body(None),
    duration: int = Query(60, gt=0),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return engine.suggest_schedule(preferences, duration)
    except SchedulingError as e:
        raise to_http_exception(e)


@router.get("/patterns", response_model=HistoricalPatterns)
def get_patterns(engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.analyze_historical()
    except SchedulingError as e:
        raise to_http_exception(e)


@router.get("/report", response_model=ProductivityReport)
def get_report(engine: SchedulingEngine = Depends(get_engine)):
    try:
        return engine.build_report()
    except SchedulingError as e:
        raise to_http_exception(e)

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, date as _date, time as _time, timedelta
from typing import Optional, List, Dict, Union, Any
from .models import SessionStatus, PatternKind

MIN_TITLE_LENGTH = 3

# ----------------- Session Schemas ---------------------

class RecurrenceRuleIn(BaseModel):
    type: str  # daily, weekly, monthly, weekdays, custom
    end_date: Optional[_date] = None
    # Either a list of indices (see pattern_kind) or the compact "1w,3w,5w" / "1,15" form
    custom_pattern: Optional[Union[List[int], str]] = None
    pattern_kind: Optional[PatternKind] = None


class SessionBase(BaseModel):
    title: str = Field(..., min_length=MIN_TITLE_LENGTH)
    date: _date
    time: _time
    duration: int = Field(..., gt=0, description="Duration in minutes")
    category: str
    notifications: bool
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_TITLE_LENGTH:
            raise ValueError(f"title must be at least {MIN_TITLE_LENGTH} characters")
        return value

    @field_validator("time")
    @classmethod
    def whole_minutes(cls, value: _time) -> _time:
        if value.second or value.microsecond:
            raise ValueError("time must be given as HH:MM")
        return value

    @property
    def start(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)


class SessionRequest(SessionBase):
    recurring: Optional[RecurrenceRuleIn] = None


class ScheduledSession(SessionBase):
    id: str
    status: SessionStatus = SessionStatus.UPCOMING
    recurring_group: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionStatusUpdate(BaseModel):
    status: SessionStatus


class SnoozeOut(BaseModel):
    session_id: str
    remind_at: datetime


# ----------------- Batch Schemas ---------------------

class BatchFailure(BaseModel):
    request: Dict[str, Any]
    error: str
    error_type: str


class BatchResult(BaseModel):
    successful: List[ScheduledSession] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)


# ----------------- Slot Search Schemas ---------------------

class SchedulingPreferences(BaseModel):
    preferred_hours: List[int] = Field(default_factory=lambda: [9, 10, 11, 14, 15, 16],
                                       description="Ordered by preference, best first")
    avoid_hours: List[int] = Field(default_factory=lambda: [12, 13])  # Lunch
    min_gap: int = Field(30, ge=0, description="Buffer minutes around neighbouring sessions")
    max_sessions_per_day: int = Field(4, gt=0)


class OptimalTimeRequest(BaseModel):
    date: _date
    duration: int = Field(..., gt=0)
    preferences: SchedulingPreferences = Field(default_factory=SchedulingPreferences)


class OptimalTimeOut(BaseModel):
    date: _date
    time: Optional[_time] = None


class Suggestion(BaseModel):
    date: _date
    time: _time
    confidence: float


# ----------------- Analytics Schemas ---------------------

class HistoricalPatterns(BaseModel):
    hour_preferences: Dict[int, int] = Field(default_factory=dict)
    day_preferences: Dict[int, int] = Field(default_factory=dict)  # 0 = Sunday
    duration_preferences: Dict[int, int] = Field(default_factory=dict)
    category_preferences: Dict[str, int] = Field(default_factory=dict)


class DailyTotal(BaseModel):
    date: _date
    day: str  # Mon, Tue, ...
    hours: float
    sessions: int


class CategoryTotal(BaseModel):
    category: str
    hours: float
    sessions: int


class ProductivityReport(BaseModel):
    generated_at: datetime
    total_sessions: int
    completed_sessions: int
    total_hours: float
    average_session_minutes: float
    completion_rate: float
    current_streak: int
    top_category: Optional[str] = None
    best_hour: Optional[int] = None
    weekly_data: List[DailyTotal] = Field(default_factory=list)
    category_data: List[CategoryTotal] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)


# ----------------- Export Schemas ---------------------

class SessionExport(BaseModel):
    version: str
    exported: datetime
    sessions: List[ScheduledSession]


class ImportResult(BaseModel):
    imported: int


# ----------------- Template Schemas ---------------------

class TemplateOut(BaseModel):
    name: str
    data: Dict[str, Any]
    created_at: Optional[datetime] = None


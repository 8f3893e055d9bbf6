from sqlalchemy import String, Integer, Boolean, Enum, DateTime, Date, Time, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, date as _date, time as _time
from typing import Optional
from .database import Base
import enum

# Enums

class SessionStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    MISSED = "missed"
    CANCELLED = "cancelled"
    INCOMPLETE = "incomplete"

class RecurrenceType(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    WEEKDAYS = "weekdays"         # Monday through Friday
    CUSTOM = "custom"             # Explicit weekdays or days of month

class PatternKind(str, enum.Enum):
    WEEKDAY = "weekday"           # 0 = Sunday ... 6 = Saturday
    MONTHDAY = "monthday"         # 1 ... 31

class TaskType(str, enum.Enum):
    SESSION_REMINDER = "session_reminder"
    BREAK_REMINDER = "break_reminder"

# Models

class SessionRecord(Base):
    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[_date] = mapped_column(Date, nullable=False, index=True)
    time: Mapped[_time] = mapped_column(Time, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    category: Mapped[str] = mapped_column(String, default="general")
    status: Mapped[SessionStatus] = mapped_column(Enum(SessionStatus), default=SessionStatus.UPCOMING)
    recurring_group: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    notifications: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class SessionTemplate(Base):
    __tablename__ = "session_templates"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class ScheduledTask(Base):
    __tablename__ = "scheduled_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    task_type: Mapped[TaskType] = mapped_column(Enum(TaskType), default=TaskType.SESSION_REMINDER)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime, index=True)
    payload: Mapped[dict] = mapped_column(JSON, default=dict)
    executed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

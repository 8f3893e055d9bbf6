"""Shared fixtures for the Quiet Hours test suite."""

import itertools
import os
from datetime import date, datetime, time

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quiet_hours.models import Base, SessionStatus
from quiet_hours.schemas import ScheduledSession
from quiet_hours.scheduling import SchedulingEngine, InMemorySessionStore

# Monday
NOW = datetime(2024, 1, 15, 8, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_session():
    """Factory for stored sessions; keyword overrides win over the defaults."""
    counter = itertools.count(1)

    def _make(start="10:00", duration=60, day=date(2024, 1, 15), **overrides):
        hour, minute = (int(part) for part in start.split(":"))
        fields = {
            "id": f"existing-{next(counter)}",
            "title": "Existing session",
            "date": day,
            "time": time(hour, minute),
            "duration": duration,
            "category": "Work",
            "notifications": False,
            "status": SessionStatus.UPCOMING,
        }
        fields.update(overrides)
        return ScheduledSession(**fields)

    return _make


@pytest.fixture
def request_data():
    def _request(start="10:00", duration=60, day="2024-01-15", **overrides):
        data = {
            "title": "Deep work",
            "date": day,
            "time": start,
            "duration": duration,
            "category": "Work",
            "notifications": True,
        }
        data.update(overrides)
        return data

    return _request


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def engine(store):
    ids = itertools.count(1)
    return SchedulingEngine(store, clock=lambda: NOW, id_factory=lambda: f"session-{next(ids)}")


@pytest.fixture
def db_session():
    """In-memory SQLite session shared across threads for the lifetime of one test."""
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=db_engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=db_engine)
        db_engine.dispose()


@pytest.fixture
def client(db_session):
    from fastapi.testclient import TestClient
    from quiet_hours.database import get_db
    from quiet_hours.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()

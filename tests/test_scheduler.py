"""Tests for the SchedulingEngine facade."""

from datetime import date, time

import pytest

from quiet_hours.models import SessionStatus
from quiet_hours.schemas import SchedulingPreferences, SessionRequest
from quiet_hours.scheduling.constraints.overlap import find_conflicts
from quiet_hours.scheduling import (
    InMemorySessionStore,
    RecurrenceError,
    SchedulingConflict,
    SchedulingEngine,
    SessionNotFound,
    StoreUnavailableError,
    ValidationError,
)


class TestScheduleSession:
    def test_empty_store_accepts_request(self, engine, store, request_data, now):
        created = engine.schedule_session(request_data())
        assert len(created) == 1
        session = created[0]
        assert session.id == "session-1"
        assert session.status == SessionStatus.UPCOMING
        assert session.created_at == now
        assert session.time == time(10, 0)
        assert store.list_all() == created

    def test_accepts_request_model(self, engine, request_data):
        created = engine.schedule_session(SessionRequest(**request_data()))
        assert created[0].title == "Deep work"

    def test_reject_leaves_store_unchanged(self, engine, store, make_session, request_data):
        existing = make_session(start="10:00", duration=60)
        store.append(existing)

        with pytest.raises(SchedulingConflict) as exc_info:
            engine.schedule_session(request_data(start="10:30", duration=60))
        assert exc_info.value.conflicts == [existing]
        assert store.list_all() == [existing]

    def test_adjust_to_first_clear_offset(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:00", duration=30))

        created = engine.schedule_session(request_data(start="10:00", duration=60))
        assert [s.time for s in created] == [time(10, 30)]
        assert len(store) == 2

    def test_adjust_earlier(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:30", duration=30))

        created = engine.schedule_session(request_data(start="10:00", duration=60))
        assert created[0].time == time(9, 30)

    def test_split_commits_fragments(self, engine, store, make_session, request_data):
        for start, duration in (("10:45", 15), ("08:00", 60), ("12:30", 60)):
            store.append(make_session(start=start, duration=duration))

        created = engine.schedule_session(request_data(start="10:00", duration=120))
        assert [s.id for s in created] == ["session-1_part1", "session-1_part2"]
        assert [(s.time, s.duration) for s in created] == [(time(10, 0), 45), (time(11, 0), 75)]
        assert len(store) == 5

    def test_split_fragment_never_lands_on_neighbour(self, engine, store, make_session, request_data):
        # The neighbour starts exactly where the requested slot ends
        for start, duration in (("08:00", 105), ("10:30", 15), ("12:00", 60)):
            store.append(make_session(start=start, duration=duration))

        created = engine.schedule_session(request_data(start="10:00", duration=120))
        assert [(s.time, s.duration) for s in created] == [(time(10, 0), 30)]
        stored = store.list_all()
        for fragment in created:
            assert find_conflicts(fragment, stored) == []

    def test_split_with_every_fragment_blocked_is_a_conflict(self, engine, store, make_session, request_data):
        for start, duration in (("08:00", 120), ("10:00", 20), ("11:00", 90)):
            store.append(make_session(start=start, duration=duration))
        before = store.list_all()

        with pytest.raises(SchedulingConflict):
            engine.schedule_session(request_data(start="10:00", duration=60))
        assert store.list_all() == before

    def test_no_strategy_fits(self, engine, store, make_session, request_data):
        # Every offset is blocked and the 14 minutes left are below the fragment minimum
        for start, duration in (("08:30", 90), ("10:05", 5), ("10:30", 90)):
            store.append(make_session(start=start, duration=duration))
        before = store.list_all()

        with pytest.raises(SchedulingConflict) as exc_info:
            engine.schedule_session(request_data(start="10:00", duration=14))
        assert "fragment" in exc_info.value.reason
        assert store.list_all() == before

    def test_replace_conflicts_evicts_occupant(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:00", duration=60, id="old"))

        created = engine.schedule_session(request_data(start="10:00", duration=60), replace_conflicts=True)
        assert [s.id for s in store.list_all()] == [created[0].id]
        assert created[0].time == time(10, 0)

    def test_terminal_sessions_free_their_slot(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:00", duration=60, status=SessionStatus.CANCELLED))
        created = engine.schedule_session(request_data(start="10:00"))
        assert created[0].time == time(10, 0)


    def test_replace_with_recurring_rule(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:00", day=date(2024, 1, 1), id="first"))
        store.append(make_session(start="10:00", day=date(2024, 1, 8), id="second"))

        created = engine.schedule_session(
            request_data(day="2024-01-01", recurring={"type": "weekly", "end_date": "2024-01-22"}),
            replace_conflicts=True,
        )
        # Only the base slot is cleared; later clashes are skipped as usual
        assert [s.date for s in created] == [date(2024, 1, d) for d in (1, 15, 22)]
        assert sorted(s.id for s in store.list_all()) == sorted(["second"] + [s.id for s in created])


class TestValidation:
    @pytest.mark.parametrize("override, field", [
        ({"title": "ab"}, "title"),
        ({"duration": 0}, "duration"),
        ({"time": "25:00"}, "time"),
        ({"time": "10:00:30"}, "time"),
    ])
    def test_invalid_fields(self, engine, store, request_data, override, field):
        with pytest.raises(ValidationError) as exc_info:
            engine.schedule_session(request_data(**override))
        assert exc_info.value.field == field
        assert len(store) == 0

    def test_missing_field(self, engine, store, request_data):
        data = request_data()
        del data["category"]
        with pytest.raises(ValidationError) as exc_info:
            engine.schedule_session(data)
        assert exc_info.value.field == "category"

    def test_bad_recurrence_raises_before_mutation(self, engine, store, request_data):
        with pytest.raises(RecurrenceError):
            engine.schedule_session(request_data(recurring={"type": "yearly"}))
        with pytest.raises(RecurrenceError):
            engine.schedule_session(request_data(recurring={"type": "custom", "custom_pattern": "9w"}))
        assert len(store) == 0


class TestRecurringSessions:
    def test_weekly_series(self, engine, store, request_data):
        created = engine.schedule_session(request_data(
            day="2024-01-01", recurring={"type": "weekly", "end_date": "2024-01-22"},
        ))
        assert [s.date for s in created] == [date(2024, 1, d) for d in (1, 8, 15, 22)]
        assert [s.id for s in created] == [f"session-1_{i}" for i in range(4)]
        assert {s.recurring_group for s in created} == {"session-1"}
        assert len(store) == 4

    def test_conflicting_occurrences_are_skipped(self, engine, store, make_session, request_data):
        store.append(make_session(start="10:00", day=date(2024, 1, 8)))

        created = engine.schedule_session(request_data(
            day="2024-01-01", recurring={"type": "weekly", "end_date": "2024-01-22"},
        ))
        assert [s.date for s in created] == [date(2024, 1, 1), date(2024, 1, 15), date(2024, 1, 22)]

    def test_series_does_not_overlap_itself(self, engine, request_data):
        created = engine.schedule_session(request_data(
            day="2024-01-01", duration=60, recurring={"type": "daily", "end_date": "2024-01-10"},
        ))
        assert len(created) == 10
        assert len({s.date for s in created}) == 10


class TestBatchSchedule:
    def test_failures_do_not_stop_batch(self, engine, store, request_data):
        requests = [
            request_data(start="10:00"),
            {"title": "x"},
            request_data(start="10:00"),
            request_data(start="15:00"),
        ]
        result = engine.batch_schedule(requests)

        assert [s.time for s in result.successful] == [time(10, 0), time(15, 0)]
        assert [f.error_type for f in result.failed] == ["ValidationError", "SchedulingConflict"]
        assert result.failed[0].request == {"title": "x"}
        assert len(store) == 2

    def test_store_failure_propagates(self, request_data):
        class BrokenStore(InMemorySessionStore):
            def list_all(self):
                raise StoreUnavailableError("database is down")

        engine = SchedulingEngine(BrokenStore())
        with pytest.raises(StoreUnavailableError):
            engine.batch_schedule([request_data()])

    def test_store_error_is_os_error(self):
        assert issubclass(StoreUnavailableError, OSError)


class TestQueries:
    def test_find_optimal_time(self, engine, store, make_session):
        store.append(make_session(start="09:00", duration=60))
        assert engine.find_optimal_time(date(2024, 1, 15), 60) == time(11, 0)

    def test_max_sessions_per_day(self, engine, store, make_session):
        for hour in (6, 7, 8, 9):
            store.append(make_session(start=f"{hour}:00", duration=30))
        preferences = SchedulingPreferences(max_sessions_per_day=4)
        assert engine.find_optimal_time(date(2024, 1, 15), 60, preferences) is None

    def test_suggestions_start_tomorrow(self, engine):
        suggestions = engine.suggest_schedule()
        assert min(s.date for s in suggestions) == date(2024, 1, 16)

    def test_report_uses_clock(self, engine, now):
        assert engine.build_report().generated_at == now

    def test_list_sessions_by_status(self, engine, store, make_session):
        store.append(make_session(id="a"))
        store.append(make_session(id="b", start="12:00", status=SessionStatus.COMPLETED))
        assert [s.id for s in engine.list_sessions()] == ["a", "b"]
        assert [s.id for s in engine.list_sessions(SessionStatus.COMPLETED)] == ["b"]
        assert engine.list_sessions("missed") == []

    def test_get_and_delete(self, engine, store, make_session):
        store.append(make_session(id="keep"))
        assert engine.get_session("keep").id == "keep"
        engine.delete_session("keep")
        assert len(store) == 0
        with pytest.raises(SessionNotFound):
            engine.delete_session("keep")
        with pytest.raises(SessionNotFound):
            engine.get_session("keep")


class TestTemplates:
    def test_save_and_load(self, engine, request_data):
        engine.save_template("morning", request_data())
        template = engine.load_template("morning")
        assert template["title"] == "Deep work"
        assert "created_at" in template
        assert list(engine.get_templates()) == ["morning"]

    def test_unknown_template(self, engine):
        assert engine.load_template("missing") is None

    def test_empty_name_rejected(self, engine, request_data):
        with pytest.raises(ValidationError):
            engine.save_template("  ", request_data())

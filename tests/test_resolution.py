"""Tests for the conflict resolver and the splitter."""

from datetime import time

from quiet_hours.scheduling.algorithms.chunking import fragment_minutes, split_around_conflicts
from quiet_hours.scheduling.algorithms.resolution import (
    Adjust,
    ConflictResolver,
    Reject,
    Replace,
    Split,
    shift_session,
)
from quiet_hours.scheduling.constraints.overlap import find_conflicts, sessions_overlap


class TestConflictResolver:
    def test_reject_when_conflicts_cover_duration(self, make_session):
        existing = make_session(start="10:00", duration=60)
        candidate = make_session(start="10:30", duration=60, id="candidate")
        conflicts = find_conflicts(candidate, [existing])

        decision = ConflictResolver().resolve(candidate, conflicts, [existing])
        assert isinstance(decision, Reject)
        assert decision.conflicts == (existing,)

    def test_adjust_to_earlier_slot(self, make_session):
        existing = make_session(start="10:30", duration=30)
        candidate = make_session(start="10:00", duration=60, id="candidate")
        conflicts = find_conflicts(candidate, [existing])

        decision = ConflictResolver().resolve(candidate, conflicts, [existing])
        assert isinstance(decision, Adjust)
        assert decision.offset_minutes == -30
        assert decision.candidate.time == time(9, 30)

    def test_adjust_skips_offsets_that_still_conflict(self, make_session):
        # -30 gives 09:30-10:30, which still touches the 10:00-10:30 session
        existing = make_session(start="10:00", duration=30)
        candidate = make_session(start="10:00", duration=60, id="candidate")
        conflicts = find_conflicts(candidate, [existing])

        decision = ConflictResolver().resolve(candidate, conflicts, [existing])
        assert isinstance(decision, Adjust)
        assert decision.offset_minutes == 30
        assert decision.candidate.time == time(10, 30)

    def test_split_when_no_offset_is_clear(self, make_session):
        blocker = make_session(start="10:45", duration=15, id="blocker")
        before = make_session(start="08:00", duration=60, id="before")
        after = make_session(start="12:30", duration=60, id="after")
        candidate = make_session(start="10:00", duration=120, id="candidate")
        sessions = [blocker, before, after]

        decision = ConflictResolver().resolve(candidate, find_conflicts(candidate, sessions), sessions)
        assert isinstance(decision, Split)
        assert [(f.time, f.duration) for f in decision.fragments] == [(time(10, 0), 45), (time(11, 0), 75)]

    def test_resolution_is_deterministic(self, make_session):
        existing = make_session(start="10:30", duration=30)
        candidate = make_session(start="10:00", duration=60, id="candidate")
        conflicts = find_conflicts(candidate, [existing])
        resolver = ConflictResolver()

        assert resolver.resolve(candidate, conflicts, [existing]) == resolver.resolve(candidate, conflicts, [existing])

    def test_force_replace_lists_conflict_ids(self, make_session):
        a = make_session(start="10:00", id="a")
        b = make_session(start="10:30", id="b")
        candidate = make_session(start="10:00", id="candidate")
        decision = ConflictResolver().force_replace(candidate, [a, b])
        assert decision == Replace(ids_to_remove=("a", "b"))

    def test_shift_crosses_midnight(self, make_session):
        shifted = shift_session(make_session(start="23:45", duration=30), 30)
        assert shifted.time == time(0, 15)
        assert shifted.date.day == 16


class TestSplitter:
    def test_fragments_avoid_conflicts(self, make_session):
        candidate = make_session(start="09:00", duration=120, id="focus", title="Focus block")
        conflict = make_session(start="09:45", duration=30, id="meeting")

        fragments = split_around_conflicts(candidate, [conflict])
        assert [f.id for f in fragments] == ["focus_part1", "focus_part2"]
        assert [f.title for f in fragments] == ["Focus block (Part 1)", "Focus block (Part 2)"]
        assert [(f.time, f.duration) for f in fragments] == [(time(9, 0), 45), (time(10, 15), 75)]
        for fragment in fragments:
            assert not sessions_overlap(fragment, conflict)
        assert not sessions_overlap(*fragments)

    def test_total_never_exceeds_duration(self, make_session):
        candidate = make_session(start="09:00", duration=90)
        conflicts = [make_session(start="09:20", duration=10), make_session(start="09:40", duration=40)]

        fragments = split_around_conflicts(candidate, conflicts)
        assert fragment_minutes(fragments) <= candidate.duration
        assert all(f.duration >= 15 for f in fragments)

    def test_short_gaps_are_dropped(self, make_session):
        candidate = make_session(start="09:00", duration=60)
        conflict = make_session(start="09:10", duration=50)

        fragments = split_around_conflicts(candidate, [conflict])
        # The 10 minute gap is too short, so the whole hour goes after the conflict
        assert [(f.time, f.duration) for f in fragments] == [(time(10, 0), 60)]

    def test_skipped_gap_keeps_remaining_duration(self, make_session):
        candidate = make_session(start="09:00", duration=30)
        conflict = make_session(start="09:10", duration=15)

        fragments = split_around_conflicts(candidate, [conflict])
        assert [(f.time, f.duration) for f in fragments] == [(time(9, 25), 30)]

    def test_no_fragment_long_enough(self, make_session):
        candidate = make_session(start="09:00", duration=20)
        conflicts = [make_session(start="09:10", duration=30), make_session(start="09:50", duration=30)]
        # Both gaps are 10 minutes and the 20 minutes left fall short of 25
        fragments = split_around_conflicts(candidate, conflicts, min_fragment=25)
        assert fragments == []

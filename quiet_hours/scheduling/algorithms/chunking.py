"""
Chunking algorithms for splitting a session around the sessions it collides with.
"""

from datetime import timedelta
from typing import List
from ..core.constants import MIN_FRAGMENT_MINUTES
from ..core.time_slot import TimeSlot


def make_fragment(session, slot_start, minutes: int, part: int):
    """Create fragment ``part`` of ``session`` starting at ``slot_start``."""
    base_id = getattr(session, 'id', None) or "session"
    return session.model_copy(update={
        "id": f"{base_id}_part{part}",
        "title": f"{session.title} (Part {part})",
        "date": slot_start.date(),
        "time": slot_start.time(),
        "duration": minutes,
    })


def split_around_conflicts(session, conflicts: List, min_fragment: int = MIN_FRAGMENT_MINUTES) -> List:
    """
    Divide ``session`` into fragments that fit between its conflicts.

    A cursor walks from the session start through the conflicts in start order.
    Each gap before a conflict becomes a fragment when it is at least
    ``min_fragment`` minutes long (capped by the duration still to place); the
    cursor then jumps past the conflict. Whatever duration is left after the
    last conflict becomes one final fragment, again only if it is long enough.

    Fragments never overlap each other or any conflict, and their total
    duration never exceeds the session's. A gap that is too short is skipped
    without consuming any of the remaining duration.
    """
    ordered = sorted((TimeSlot.from_session(c) for c in conflicts), key=lambda slot: slot.start)

    fragments = []
    cursor = TimeSlot.from_session(session).start
    remaining = session.duration

    for conflict in ordered:
        if cursor < conflict.start:
            gap_minutes = int((conflict.start - cursor).total_seconds() // 60)
            fragment_minutes = min(gap_minutes, remaining)
            if fragment_minutes >= min_fragment:
                fragments.append(make_fragment(session, cursor, fragment_minutes, len(fragments) + 1))
                remaining -= fragment_minutes
        cursor = max(cursor, conflict.end)

    if remaining >= min_fragment:
        fragments.append(make_fragment(session, cursor, remaining, len(fragments) + 1))

    return fragments


def fragment_minutes(fragments: List) -> int:
    return sum(fragment.duration for fragment in fragments)

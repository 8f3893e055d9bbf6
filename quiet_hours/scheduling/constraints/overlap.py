"""
Overlap detection between a candidate session and the stored sessions.
"""

from typing import Iterable, List
from ..core.constants import TERMINAL_STATUSES
from ..core.time_slot import TimeSlot


def is_terminal(session) -> bool:
    """Completed, cancelled and missed sessions no longer occupy time."""
    status = getattr(session, 'status', None)
    return getattr(status, 'value', status) in TERMINAL_STATUSES


def sessions_overlap(a, b) -> bool:
    """
    Symmetric overlap predicate on half-open intervals.

    Two sessions overlap when each one starts before the other ends and
    neither is in a terminal status.
    """
    if is_terminal(a) or is_terminal(b):
        return False
    return TimeSlot.from_session(a).overlaps(TimeSlot.from_session(b))


def find_conflicts(candidate, sessions: Iterable) -> List:
    """
    Return the non-terminal sessions overlapping ``candidate``, ordered by start.

    Sessions sharing the candidate's id are ignored so that a stored session is
    never reported as conflicting with itself. Ties on start keep store order.
    """
    candidate_slot = TimeSlot.from_session(candidate)
    candidate_id = getattr(candidate, 'id', None)

    conflicts = []
    for session in sessions:
        if is_terminal(session):
            continue
        if candidate_id is not None and getattr(session, 'id', None) == candidate_id:
            continue
        slot = TimeSlot.from_session(session)
        if candidate_slot.overlaps(slot):
            conflicts.append(slot)

    conflicts.sort(key=lambda slot: slot.start)
    return [slot.occupant for slot in conflicts]


def total_conflict_minutes(conflicts: Iterable) -> int:
    return sum(session.duration for session in conflicts)

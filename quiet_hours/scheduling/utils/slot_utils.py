"""
Slot search utilities: find a free time of day that matches user preferences.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional
from ..core.time_slot import TimeSlot
from ..constraints.overlap import is_terminal


def day_window(day: date, duration: int = 0, min_gap: int = 0) -> TimeSlot:
    """Every instant a slot starting on ``day`` could touch, buffer included."""
    start = datetime.combine(day, time.min)
    return TimeSlot(start - timedelta(minutes=min_gap),
                    start + timedelta(days=1, minutes=duration + min_gap))


def sessions_on_date(day: date, sessions: List) -> List:
    """Non-terminal sessions that start on ``day``. These count toward the daily cap."""
    return [s for s in sessions if s.date == day and not is_terminal(s)]


def sessions_touching(window: TimeSlot, sessions: List) -> List:
    """Non-terminal sessions occupying any part of ``window``, including ones that started the day before."""
    return [s for s in sessions if not is_terminal(s) and TimeSlot.from_session(s).overlaps(window)]


def is_time_slot_available(start: datetime, duration: int, min_gap: int, day_sessions: List) -> bool:
    """True when [start, start+duration) padded by ``min_gap`` on both sides touches nothing."""
    padded = TimeSlot(start, start + timedelta(minutes=duration)).padded(min_gap)
    return not any(padded.overlaps(TimeSlot.from_session(s)) for s in day_sessions)


def find_optimal_time(day: date, duration: int, preferences, sessions: List) -> Optional[time]:
    """
    Find the best hour on ``day`` for a session of ``duration`` minutes.

    Preferred hours are tried in the order given (that order is the ranking);
    avoided hours are skipped. Returns None when the day already holds
    ``max_sessions_per_day`` live sessions or no preferred hour is clear.
    """
    if len(sessions_on_date(day, sessions)) >= preferences.max_sessions_per_day:
        return None

    nearby = sessions_touching(day_window(day, duration, preferences.min_gap), sessions)
    avoid = set(preferences.avoid_hours)
    for hour in preferences.preferred_hours:
        if hour in avoid or not 0 <= hour <= 23:
            continue
        proposed = datetime.combine(day, time(hour, 0))
        if is_time_slot_available(proposed, duration, preferences.min_gap, nearby):
            return proposed.time()

    return None

"""
Half-open time interval representation for the scheduling system.
"""

from datetime import datetime, timedelta
from typing import Any


class TimeSlot:
    """
    A half-open interval [start, end) on the local wall clock.

    Back-to-back slots (one ending exactly when the next starts) do not overlap.
    The occupant is the session that fills the slot, if any.
    """
    def __init__(self, start: datetime, end: datetime, occupant: Any = None):
        if end <= start:
            raise ValueError(f"Slot must end after it starts ({start} - {end})")
        self.start = start
        self.end = end
        self.occupant = occupant

    @classmethod
    def from_session(cls, session) -> "TimeSlot":
        start = datetime.combine(session.date, session.time)
        return cls(start, start + timedelta(minutes=session.duration), session)

    def duration(self) -> timedelta:
        return self.end - self.start

    def minutes(self) -> int:
        return int(self.duration().total_seconds() // 60)

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.start < other.end and other.start < self.end

    def padded(self, minutes: int) -> "TimeSlot":
        """Grow the slot by ``minutes`` on both ends."""
        pad = timedelta(minutes=minutes)
        return TimeSlot(self.start - pad, self.end + pad, self.occupant)

    def __lt__(self, other):
        return self.start < other.start

    def __repr__(self):
        span = f"{self.start.strftime('%Y-%m-%d %H:%M')} - {self.end.strftime('%H:%M')}"
        if self.occupant is not None:
            occupant_name = getattr(self.occupant, 'title', str(self.occupant))
            return f"SessionSlot({span}, {occupant_name})"
        return f"TimeSlot({span})"

"""
Conflict resolution: decide what to do with a session that collides with others.

The decision is a closed set of variants. Automatic resolution only ever
produces Reject, Adjust or Split; Replace is reserved for callers that
explicitly ask to evict whatever occupies the slot.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Tuple, Union
from ..core.constants import ADJUST_OFFSETS
from ..core.time_slot import TimeSlot
from ..constraints.overlap import find_conflicts, total_conflict_minutes
from .chunking import split_around_conflicts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reject:
    reason: str
    conflicts: Tuple = field(default_factory=tuple)


@dataclass(frozen=True)
class Adjust:
    candidate: object
    offset_minutes: int


@dataclass(frozen=True)
class Replace:
    ids_to_remove: Tuple[str, ...]


@dataclass(frozen=True)
class Split:
    fragments: Tuple


Decision = Union[Reject, Adjust, Replace, Split]


def shift_session(session, minutes: int):
    """Move a session by ``minutes``; the date follows when midnight is crossed."""
    new_start = TimeSlot.from_session(session).start + timedelta(minutes=minutes)
    return session.model_copy(update={"date": new_start.date(), "time": new_start.time()})


class ConflictResolver:
    """
    Chooses a resolution for a candidate and its conflicts.

    Same candidate, conflicts and sessions always give the same decision: the
    offsets are tried in a fixed order and the first clear one wins.
    """
    def __init__(self, offsets: Tuple[int, ...] = ADJUST_OFFSETS):
        self.offsets = tuple(offsets)

    def resolve(self, candidate, conflicts: List, sessions: List) -> Decision:
        conflict_minutes = total_conflict_minutes(conflicts)
        if conflict_minutes >= candidate.duration:
            reason = (f"Too many conflicts to resolve automatically: {conflict_minutes} conflicting "
                      f"minutes against a {candidate.duration} minute session")
            logger.info(f"Rejecting '{candidate.title}': {reason}")
            return Reject(reason=reason, conflicts=tuple(conflicts))

        offset, adjusted = self.find_nearby_slot(candidate, sessions)
        if adjusted is not None:
            logger.info(f"Adjusting '{candidate.title}' by {offset:+d} minutes to {adjusted.date} {adjusted.time}")
            return Adjust(candidate=adjusted, offset_minutes=offset)

        fragments = split_around_conflicts(candidate, conflicts)
        logger.info(f"Splitting '{candidate.title}' into {len(fragments)} fragment(s)")
        return Split(fragments=tuple(fragments))

    def find_nearby_slot(self, candidate, sessions: List):
        """Return (offset, shifted candidate) for the first conflict-free offset, else (None, None)."""
        for offset in self.offsets:
            shifted = shift_session(candidate, offset)
            if not find_conflicts(shifted, sessions):
                return offset, shifted
        return None, None

    def force_replace(self, candidate, conflicts: List) -> Replace:
        """Evict every conflict so the candidate keeps its requested slot."""
        ids = tuple(conflict.id for conflict in conflicts)
        logger.info(f"Replacing {len(ids)} session(s) with '{candidate.title}'")
        return Replace(ids_to_remove=ids)

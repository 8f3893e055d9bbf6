"""
Recurrence expansion using dateutil.rrule.
RRULE is the engine behind every supported pattern (RFC 5545 semantics).

Supported rule types: daily, weekly, monthly, weekdays and custom. Every
expansion is capped at MAX_OCCURRENCES and bounded by an end date (one year
after the base date when none is given).

Monthly rules clamp to the last day of shorter months: a series starting on
Jan 31 produces Feb 29 (or 28), Mar 31, Apr 30 and so on.
"""

import logging
from datetime import date, datetime, time
from itertools import islice
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from dateutil import rrule
from dateutil.relativedelta import relativedelta

from ...models import PatternKind, RecurrenceType
from ..core.constants import MAX_OCCURRENCES, DEFAULT_RECURRENCE_YEARS
from ..core.errors import RecurrenceError

logger = logging.getLogger(__name__)

# Custom weekday indices use 0 = Sunday ... 6 = Saturday
WEEKDAY_CODES = (rrule.SU, rrule.MO, rrule.TU, rrule.WE, rrule.TH, rrule.FR, rrule.SA)
WORKING_DAYS = (rrule.MO, rrule.TU, rrule.WE, rrule.TH, rrule.FR)


class OccurrenceSequence:
    """
    Lazy, restartable and finite sequence of occurrence dates, capped at
    MAX_OCCURRENCES.

    Iterating twice yields the same dates; nothing is computed until iterated.
    """
    def __init__(self, rule: rrule.rrule):
        self.rule = rule

    def __iter__(self) -> Iterator[date]:
        for occurrence in islice(self.rule, MAX_OCCURRENCES):
            yield occurrence.date()

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self):
        return f"OccurrenceSequence({self.rule})"


def default_end_date(base_date: date) -> date:
    return base_date + relativedelta(years=DEFAULT_RECURRENCE_YEARS)


def parse_custom_pattern(pattern: Union[Sequence[int], str, None],
                         kind: Optional[PatternKind] = None) -> Tuple[PatternKind, List[int]]:
    """
    Normalise a custom pattern into (kind, sorted unique indices).

    Accepts a list of ints (interpreted by ``kind``, days of month when absent)
    or the compact string form: "1w,3w,5w" for weekdays, "1,15" for days of
    the month.
    """
    if pattern is None or (not isinstance(pattern, str) and len(pattern) == 0):
        raise RecurrenceError("Custom recurrence requires a non-empty pattern")

    if isinstance(pattern, str):
        parts = [part.strip() for part in pattern.split(",") if part.strip()]
        if not parts:
            raise RecurrenceError(f"Custom pattern '{pattern}' is empty")
        if any(part.lower().endswith("w") for part in parts):
            if kind == PatternKind.MONTHDAY:
                raise RecurrenceError(f"Custom pattern '{pattern}' uses weekday markers but pattern_kind is monthday")
            kind = PatternKind.WEEKDAY
        try:
            indices = [int(part.rstrip("wW")) for part in parts]
        except ValueError:
            raise RecurrenceError(f"Custom pattern '{pattern}' is malformed")
    else:
        indices = list(pattern)

    kind = kind or PatternKind.MONTHDAY
    if kind == PatternKind.WEEKDAY:
        low, high = 0, 6
    else:
        low, high = 1, 31
    out_of_range = [i for i in indices if not isinstance(i, int) or not low <= i <= high]
    if out_of_range:
        raise RecurrenceError(f"Custom {kind.value} indices out of range {low}-{high}: {out_of_range}")

    return kind, sorted(set(indices))


def _monthly_kwargs(base_date: date) -> dict:
    # Clamp to month end: pick the last existing day in [28, base_day]
    if base_date.day <= 28:
        return {"bymonthday": base_date.day}
    return {"bymonthday": tuple(range(28, base_date.day + 1)), "bysetpos": -1}


def build_rrule(rule_type: str, base_date: date, end_date: Optional[date] = None,
                custom_pattern: Union[Sequence[int], str, None] = None,
                pattern_kind: Optional[PatternKind] = None) -> rrule.rrule:
    """Build the dateutil rrule for a rule type. Raises RecurrenceError for unknown types."""
    try:
        rule_type = RecurrenceType(rule_type)
    except ValueError:
        raise RecurrenceError(f"Unknown recurrence type '{rule_type}'")

    dtstart = datetime.combine(base_date, time.min)
    until = datetime.combine(end_date or default_end_date(base_date), time.min)
    common = {"dtstart": dtstart, "until": until}

    if rule_type == RecurrenceType.DAILY:
        return rrule.rrule(rrule.DAILY, **common)
    if rule_type == RecurrenceType.WEEKLY:
        return rrule.rrule(rrule.WEEKLY, **common)
    if rule_type == RecurrenceType.MONTHLY:
        return rrule.rrule(rrule.MONTHLY, **common, **_monthly_kwargs(base_date))
    if rule_type == RecurrenceType.WEEKDAYS:
        return rrule.rrule(rrule.DAILY, byweekday=WORKING_DAYS, **common)

    kind, indices = parse_custom_pattern(custom_pattern, pattern_kind)
    if kind == PatternKind.WEEKDAY:
        return rrule.rrule(rrule.DAILY, byweekday=[WEEKDAY_CODES[i] for i in indices], **common)
    return rrule.rrule(rrule.DAILY, bymonthday=indices, **common)


def generate_occurrences(rule, base_date: date, end_date: Optional[date] = None) -> OccurrenceSequence:
    """
    Expand a recurrence rule into its occurrence dates.

    Args:
        rule: RecurrenceRuleIn (or anything with type/end_date/custom_pattern/pattern_kind)
        base_date: First candidate date, included when it matches the rule
        end_date: Inclusive bound; falls back to rule.end_date, then to one year out

    Returns:
        OccurrenceSequence of at most MAX_OCCURRENCES dates within [base_date, end_date]
    """
    end_date = end_date or getattr(rule, "end_date", None)
    if end_date is not None and end_date < base_date:
        logger.debug(f"Recurrence end {end_date} precedes base date {base_date}; no occurrences")

    return OccurrenceSequence(build_rrule(
        rule.type,
        base_date,
        end_date,
        custom_pattern=getattr(rule, "custom_pattern", None),
        pattern_kind=getattr(rule, "pattern_kind", None),
    ))


def create_occurrence(session, occurrence_date: date, group: str, index: int):
    """
    Create one dated occurrence of a recurring session.

    The occurrence inherits every field from ``session`` except the date and
    its identity: ids are "{group}_{index}" and all occurrences share the
    recurring group.
    """
    return session.model_copy(update={
        "id": f"{group}_{index}",
        "date": occurrence_date,
        "recurring_group": group,
    })

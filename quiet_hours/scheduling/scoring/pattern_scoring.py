"""
Historical pattern scoring: how well does a slot match when the user usually works?
"""

from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from ...models import SessionStatus
from ...schemas import CategoryTotal, DailyTotal, HistoricalPatterns, ProductivityReport, Suggestion
from ..core.constants import SUGGESTION_LOOKAHEAD_DAYS, SUGGESTION_DURATION_MINUTES
from ..utils.slot_utils import find_optimal_time


def day_index(day: date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def completed_sessions(sessions: List) -> List:
    return [s for s in sessions if s.status == SessionStatus.COMPLETED]


def analyze_historical(sessions: List) -> HistoricalPatterns:
    """Frequency maps over hour, weekday, duration and category of completed sessions."""
    hours, days, durations, categories = Counter(), Counter(), Counter(), Counter()
    for session in completed_sessions(sessions):
        hours[session.time.hour] += 1
        days[day_index(session.date)] += 1
        durations[session.duration] += 1
        categories[session.category] += 1

    return HistoricalPatterns(
        hour_preferences=dict(hours),
        day_preferences=dict(days),
        duration_preferences=dict(durations),
        category_preferences=dict(categories),
    )


def calculate_confidence(day: date, slot_time: time, patterns: HistoricalPatterns) -> float:
    """
    Average of the normalised hour score and day score, in [0, 1].

    Each score is divided by the busiest hour/day seen (at least 1), so a slot
    on the user's favourite hour and weekday scores 1.0 and an unseen slot 0.0.
    """
    hour_score = patterns.hour_preferences.get(slot_time.hour, 0)
    day_score = patterns.day_preferences.get(day_index(day), 0)

    max_hour_score = max([*patterns.hour_preferences.values(), 1])
    max_day_score = max([*patterns.day_preferences.values(), 1])

    hour_term = min(max(hour_score / max_hour_score, 0.0), 1.0)
    day_term = min(max(day_score / max_day_score, 0.0), 1.0)
    return (hour_term + day_term) / 2


def suggest_schedule(preferences, sessions: List, today: date,
                     duration: int = SUGGESTION_DURATION_MINUTES) -> List[Suggestion]:
    """
    One suggestion per day for the week starting tomorrow, best confidence first.

    Days without a free preferred hour are left out. Equal confidences keep
    chronological order.
    """
    patterns = analyze_historical(sessions)
    suggestions = []
    for offset in range(1, SUGGESTION_LOOKAHEAD_DAYS + 1):
        day = today + timedelta(days=offset)
        slot_time = find_optimal_time(day, duration, preferences, sessions)
        if slot_time is not None:
            suggestions.append(Suggestion(
                date=day,
                time=slot_time,
                confidence=calculate_confidence(day, slot_time, patterns),
            ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions


def calculate_streak(sessions: List, today: date) -> int:
    """Consecutive days, ending today, with at least one completed session."""
    completed_days = {s.date for s in completed_sessions(sessions)}
    streak = 0
    day = today
    while day in completed_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def weekly_totals(sessions: List, today: date) -> List[DailyTotal]:
    """Completed hours and session counts for the seven days ending today, oldest first."""
    by_day = {}
    for session in completed_sessions(sessions):
        minutes, count = by_day.get(session.date, (0, 0))
        by_day[session.date] = (minutes + session.duration, count + 1)

    totals = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        minutes, count = by_day.get(day, (0, 0))
        totals.append(DailyTotal(date=day, day=day.strftime("%a"), hours=round(minutes / 60, 2), sessions=count))
    return totals


def category_totals(sessions: List) -> List[CategoryTotal]:
    """Completed hours per category, most hours first. Ties keep first-seen order."""
    totals = {}
    for session in completed_sessions(sessions):
        minutes, count = totals.get(session.category, (0, 0))
        totals[session.category] = (minutes + session.duration, count + 1)

    ranked = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)
    return [
        CategoryTotal(category=category, hours=round(minutes / 60, 2), sessions=count)
        for category, (minutes, count) in ranked
    ]


def build_report(sessions: List, now: datetime) -> ProductivityReport:
    """Summary statistics and short insights over the whole session history."""
    completed = completed_sessions(sessions)
    total_minutes = sum(s.duration for s in completed)
    average = total_minutes / len(completed) if completed else 0.0
    completion_rate = len(completed) / len(sessions) if sessions else 0.0
    streak = calculate_streak(sessions, now.date())

    patterns = analyze_historical(sessions)
    best_hour = _most_common(patterns.hour_preferences)
    categories = category_totals(sessions)
    top_category = categories[0].category if categories else None

    return ProductivityReport(
        generated_at=now,
        total_sessions=len(sessions),
        completed_sessions=len(completed),
        total_hours=round(total_minutes / 60, 2),
        average_session_minutes=round(average, 1),
        completion_rate=round(completion_rate, 3),
        current_streak=streak,
        top_category=top_category,
        best_hour=best_hour,
        weekly_data=weekly_totals(sessions, now.date()),
        category_data=categories,
        insights=_insights(completed, average, streak, best_hour, top_category),
    )


def _most_common(counts: dict) -> Optional[object]:
    if not counts:
        return None
    # Highest count wins; ties go to the smallest key
    return min(counts, key=lambda key: (-counts[key], key))


def _insights(completed: List, average: float, streak: int, best_hour, top_category) -> List[str]:
    if not completed:
        return ["Start completing sessions to get personalized insights!"]

    insights = [f"Your most productive time is around {time(best_hour).strftime('%I %p').lstrip('0')}"]

    if average < 45:
        insights.append("You prefer shorter, focused sessions")
    elif average > 90:
        insights.append("You excel at longer, deep work sessions")
    else:
        insights.append("You maintain good balance with medium-length sessions")

    if streak >= 7:
        insights.append(f"Excellent consistency! You're on a {streak}-day streak")
    elif streak >= 3:
        insights.append(f"Good momentum with a {streak}-day streak")

    if top_category:
        insights.append(f"You focus most on {top_category.lower()} sessions")

    return insights

"""Habit metrics derived from completion logs.

Nothing here is stored: streaks and weekly counts are recomputed from the raw
dates on every read, with ``today`` passed in by the caller.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from ..clock import parse_calendar_date
from ..models.habit import Habit, HabitWithLogs


def _as_dates(values: Iterable[date | str]) -> set[date]:
    days: set[date] = set()
    for value in values:
        day = value if isinstance(value, date) else parse_calendar_date(value)
        if day is not None:
            days.add(day)
    return days


def current_streak(completed: Iterable[date | str], *, today: date) -> int:
    """Consecutive completed days ending today, or ending yesterday.

    A habit not yet logged today keeps yesterday's streak alive.
    """

    days = _as_dates(completed)
    if today in days:
        cursor = today
    elif today - timedelta(days=1) in days:
        cursor = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def this_week_count(completed: Iterable[date | str], *, today: date) -> int:
    """Completions inside the Monday-to-Sunday week containing ``today``."""

    week_start = today - timedelta(days=today.weekday())
    week_end = week_start + timedelta(days=6)
    return sum(1 for day in _as_dates(completed) if week_start <= day <= week_end)


def build_habit_with_logs(habit: Habit, log_dates: Iterable[str], *, today: date) -> HabitWithLogs:
    dates = sorted(set(log_dates), reverse=True)
    return HabitWithLogs(
        id=habit.id,
        title=habit.title,
        description=habit.description,
        target_per_week=habit.target_per_week,
        color=habit.color,
        created_at=habit.created_at,
        updated_at=habit.updated_at,
        completed_dates=dates,
        current_streak=current_streak(dates, today=today),
        this_week_count=this_week_count(dates, today=today),
    )


__all__ = ["current_streak", "this_week_count", "build_habit_with_logs"]

"""Goal helpers."""

from __future__ import annotations

from datetime import date, timedelta

from ..clock import parse_calendar_date
from ..models.goal import Goal

# Listing order of statuses; anything unknown sorts last.
GOAL_STATUS_ORDER = {"active": 0, "paused": 1, "completed": 2, "archived": 3}


def is_goal_near_deadline(goal: Goal, threshold_days: int, *, today: date) -> bool:
    """True when an open goal's target date falls within the next ``threshold_days``."""

    if not goal.target_date or goal.status in {"completed", "archived"}:
        return False
    target = parse_calendar_date(goal.target_date[:10])
    if target is None:
        return False
    return today <= target <= today + timedelta(days=threshold_days)


__all__ = ["GOAL_STATUS_ORDER", "is_goal_near_deadline"]

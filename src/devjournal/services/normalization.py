"""Input coercion applied before anything is persisted.

Invalid enum or range values are never errors: they are silently replaced
by the nearest valid value or the default.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..clock import parse_calendar_date
from ..models.habit import DEFAULT_HABIT_COLOR

TASK_STATUSES = ("todo", "in_progress", "done")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")
GOAL_STATUSES = ("active", "paused", "completed", "archived")

DEFAULT_TASK_STATUS = "todo"
DEFAULT_TASK_PRIORITY = "medium"
DEFAULT_GOAL_STATUS = "active"

MAX_TIME_ESTIMATE_MINUTES = 7 * 24 * 60
MIN_TARGET_PER_WEEK = 1
MAX_TARGET_PER_WEEK = 14
DEFAULT_TARGET_PER_WEEK = 5


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None


def normalize_task_status(status: Optional[str]) -> str:
    return status if status in TASK_STATUSES else DEFAULT_TASK_STATUS


def normalize_task_priority(priority: Optional[str]) -> str:
    return priority if priority in TASK_PRIORITIES else DEFAULT_TASK_PRIORITY


def clamp_time_estimate(minutes: Any) -> int:
    """Clamp an estimate to [0, one week] minutes; absent or garbage -> 0."""
    value = _as_int(minutes)
    if value is None:
        return 0
    return _clamp(value, 0, MAX_TIME_ESTIMATE_MINUTES)


def normalize_goal_status(status: Optional[str]) -> str:
    return status if status in GOAL_STATUSES else DEFAULT_GOAL_STATUS


def clamp_goal_progress(progress: Any, status: str) -> int:
    """Clamp progress to [0, 100]; a completed goal is always at 100."""
    if status == "completed":
        return 100
    value = _as_int(progress)
    return 0 if value is None else _clamp(value, 0, 100)


def clamp_target_per_week(target: Any) -> int:
    value = _as_int(target)
    if value is None:
        return DEFAULT_TARGET_PER_WEEK
    return _clamp(value, MIN_TARGET_PER_WEEK, MAX_TARGET_PER_WEEK)


def normalize_habit_color(color: Optional[str]) -> str:
    trimmed = (color or "").strip()
    return trimmed or DEFAULT_HABIT_COLOR


def normalize_log_date(value: Optional[str], today: date) -> str:
    """Return ``value`` as ``YYYY-MM-DD``, or ``today`` if it does not parse."""
    parsed = parse_calendar_date(value)
    return (parsed or today).isoformat()


def normalize_optional_text(value: Optional[str]) -> Optional[str]:
    """Blank optional strings (due/target dates) are stored as NULL."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


__all__ = [
    "TASK_STATUSES",
    "TASK_PRIORITIES",
    "GOAL_STATUSES",
    "MAX_TIME_ESTIMATE_MINUTES",
    "MIN_TARGET_PER_WEEK",
    "MAX_TARGET_PER_WEEK",
    "DEFAULT_TARGET_PER_WEEK",
    "normalize_task_status",
    "normalize_task_priority",
    "clamp_time_estimate",
    "normalize_goal_status",
    "clamp_goal_progress",
    "clamp_target_per_week",
    "normalize_habit_color",
    "normalize_log_date",
    "normalize_optional_text",
]

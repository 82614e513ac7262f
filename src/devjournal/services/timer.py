"""Task time tracking.

A task's timer is either stopped (``timer_started_at is None``) or running.
``timer_accumulated_seconds`` only grows, except on an explicit reset. The
same helpers back direct edits, status-only updates and backup import, so a
done task is never observed with a running timer.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..clock import parse_iso, to_iso
from ..models.task import Task
from .normalization import normalize_task_status


def elapsed_seconds(started_at: Optional[str], now: datetime) -> int:
    """Whole seconds since ``started_at``; zero if unparsable or in the future."""

    started = parse_iso(started_at)
    if started is None:
        return 0
    return max(0, int((now - started).total_seconds()))


def _fold_running_time(task: Task, now: datetime) -> None:
    if task.timer_started_at is None:
        return
    task.timer_accumulated_seconds = max(0, task.timer_accumulated_seconds or 0) + elapsed_seconds(
        task.timer_started_at, now
    )
    task.timer_started_at = None


def start_timer(task: Task, now: datetime) -> bool:
    """Start the timer; returns False when it was already running.

    Starting work on a done task moves it back to ``in_progress``.
    """

    if task.timer_started_at is not None:
        return False
    task.timer_started_at = to_iso(now)
    if task.status == "done":
        task.status = "in_progress"
        task.completed_at = None
    return True


def pause_timer(task: Task, now: datetime) -> bool:
    """Fold running time into the total and stop; False if it was not running."""

    if task.timer_started_at is None:
        return False
    _fold_running_time(task, now)
    return True


def reset_timer(task: Task) -> None:
    task.timer_started_at = None
    task.timer_accumulated_seconds = 0


def apply_status(task: Task, status: Optional[str], now: datetime) -> None:
    """Set a normalized status, keeping ``completed_at`` and the timer consistent.

    Moving into done stops a running timer and stamps ``completed_at`` (an
    existing stamp on an already-done task is kept). Any other status clears
    ``completed_at`` and leaves a running timer alone.
    """

    normalized = normalize_task_status(status)
    if normalized == "done":
        _fold_running_time(task, now)
        if task.status != "done" or not task.completed_at:
            task.completed_at = to_iso(now)
    else:
        task.completed_at = None
    task.status = normalized


def task_elapsed_seconds(task: Task, now: datetime) -> int:
    """Accumulated time plus the currently running session."""

    return max(0, (task.timer_accumulated_seconds or 0) + elapsed_seconds(task.timer_started_at, now))


def is_task_overdue(task: Task, today: date) -> bool:
    if not task.due_date or task.status == "done":
        return False
    try:
        due = date.fromisoformat(task.due_date[:10])
    except ValueError:
        return False
    return due < today


__all__ = [
    "elapsed_seconds",
    "start_timer",
    "pause_timer",
    "reset_timer",
    "apply_status",
    "task_elapsed_seconds",
    "is_task_overdue",
]

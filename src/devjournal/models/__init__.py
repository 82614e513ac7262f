"""SQLModel table exports."""

from .backup import (
    BackupPayload,
    EntryRecord,
    GoalRecord,
    HabitLogRecord,
    HabitRecord,
    ImportSummary,
    PageRecord,
    TaskRecord,
)
from .entry import Entry
from .goal import Goal
from .habit import DEFAULT_HABIT_COLOR, Habit, HabitLog, HabitWithLogs
from .page import Page
from .task import Task

__all__ = [
    "Entry",
    "Page",
    "Task",
    "Goal",
    "Habit",
    "HabitLog",
    "HabitWithLogs",
    "DEFAULT_HABIT_COLOR",
    "BackupPayload",
    "EntryRecord",
    "PageRecord",
    "TaskRecord",
    "GoalRecord",
    "HabitRecord",
    "HabitLogRecord",
    "ImportSummary",
]

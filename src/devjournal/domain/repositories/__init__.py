"""Repository protocol definitions for domain layer."""

from .entry import EntryRepository
from .goal import GoalRepository
from .habit import HabitRepository
from .page import PageRepository
from .task import TaskRepository

__all__ = [
    "EntryRepository",
    "GoalRepository",
    "HabitRepository",
    "PageRepository",
    "TaskRepository",
]

"""Concrete repository implementations using SQLModel."""

from .entry import SQLModelEntryRepository
from .goal import SQLModelGoalRepository
from .habit import SQLModelHabitRepository
from .page import SQLModelPageRepository
from .task import SQLModelTaskRepository

__all__ = [
    "SQLModelEntryRepository",
    "SQLModelGoalRepository",
    "SQLModelHabitRepository",
    "SQLModelPageRepository",
    "SQLModelTaskRepository",
]

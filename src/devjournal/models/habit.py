"""Habits tracking data structures."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

DEFAULT_HABIT_COLOR = "#60a5fa"


class Habit(SQLModel, table=True):
    """A habit the user wants to complete a number of times per week."""

    __tablename__: ClassVar[str] = "habits"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)
    target_per_week: int = Field(default=5, nullable=False)
    color: str = Field(default=DEFAULT_HABIT_COLOR, nullable=False)
    created_at: str = Field(nullable=False)
    updated_at: str = Field(nullable=False)


class HabitLog(SQLModel, table=True):
    """Completion record for a habit on a calendar day."""

    __tablename__: ClassVar[str] = "habit_logs"
    __table_args__ = (UniqueConstraint("habit_id", "date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habits.id", nullable=False, index=True)
    date: str = Field(nullable=False)
    created_at: str = Field(nullable=False)


class HabitWithLogs(SQLModel):
    """A habit plus its completion dates and the metrics derived from them."""

    id: int
    title: str
    description: str = ""
    target_per_week: int = 5
    color: str = DEFAULT_HABIT_COLOR
    created_at: str
    updated_at: str
    completed_dates: list[str] = Field(default_factory=list)
    current_streak: int = 0
    this_week_count: int = 0

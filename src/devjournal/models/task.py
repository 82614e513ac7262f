"""Tasks with priority, due date and a pausable timer."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Task(SQLModel, table=True):
    """A unit of work on the planner board.

    ``completed_at`` is set only while ``status == "done"`` and the timer is
    never running on a done task.
    """

    __tablename__: ClassVar[str] = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)
    status: str = Field(default="todo", nullable=False)
    priority: str = Field(default="medium", nullable=False)
    due_date: Optional[str] = Field(default=None, index=True)
    completed_at: Optional[str] = Field(default=None)
    time_estimate_minutes: int = Field(default=0, nullable=False)
    timer_started_at: Optional[str] = Field(default=None)
    timer_accumulated_seconds: int = Field(default=0, nullable=False)
    created_at: str = Field(nullable=False)
    updated_at: str = Field(nullable=False)

"""Snapshot shapes for backup import and export.

Every record may carry an explicit ``id``; records without one are inserted
as new rows. Timestamps are optional and default at import time.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel


class EntryRecord(SQLModel):
    id: Optional[int] = None
    date: str
    yesterday: str = ""
    today: str = ""
    created_at: Optional[str] = None


class PageRecord(SQLModel):
    id: Optional[int] = None
    title: str = ""
    content: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TaskRecord(SQLModel):
    id: Optional[int] = None
    # Left optional so a missing title reaches the NOT NULL constraint.
    title: Optional[str] = None
    description: str = ""
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None
    completed_at: Optional[str] = None
    time_estimate_minutes: Optional[int] = None
    timer_started_at: Optional[str] = None
    timer_accumulated_seconds: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class GoalRecord(SQLModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    status: Optional[str] = None
    progress: Optional[int] = None
    target_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class HabitRecord(SQLModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    target_per_week: Optional[int] = None
    color: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class HabitLogRecord(SQLModel):
    id: Optional[int] = None
    habit_id: int
    date: str
    created_at: Optional[str] = None


class BackupPayload(SQLModel):
    """Full data snapshot. Any entity list may be empty."""

    exported_at: Optional[str] = None
    entries: list[EntryRecord] = Field(default_factory=list)
    pages: list[PageRecord] = Field(default_factory=list)
    tasks: list[TaskRecord] = Field(default_factory=list)
    goals: list[GoalRecord] = Field(default_factory=list)
    habits: list[HabitRecord] = Field(default_factory=list)
    habit_logs: list[HabitLogRecord] = Field(default_factory=list)


class ImportSummary(SQLModel):
    """Per-entity counts of rows applied by one import call."""

    replaced: bool = False
    entries: int = 0
    pages: int = 0
    tasks: int = 0
    goals: int = 0
    habits: int = 0
    habit_logs: int = 0

"""Longer-running goals with a progress percentage."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Goal(SQLModel, table=True):
    __tablename__: ClassVar[str] = "goals"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    description: str = Field(default="", nullable=False)
    status: str = Field(default="active", nullable=False)
    progress: int = Field(default=0, nullable=False)
    target_date: Optional[str] = Field(default=None)
    created_at: str = Field(nullable=False)
    updated_at: str = Field(nullable=False)

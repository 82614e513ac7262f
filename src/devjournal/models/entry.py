"""Daily journal entries."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Entry(SQLModel, table=True):
    """One stand-up style entry per calendar date."""

    __tablename__: ClassVar[str] = "entries"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(nullable=False, unique=True)
    yesterday: str = Field(default="", nullable=False)
    today: str = Field(default="", nullable=False)
    created_at: str = Field(nullable=False)

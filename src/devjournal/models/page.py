"""Free-form notes pages."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Page(SQLModel, table=True):
    __tablename__: ClassVar[str] = "pages"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    content: str = Field(default="", nullable=False)
    created_at: str = Field(nullable=False)
    updated_at: str = Field(nullable=False)

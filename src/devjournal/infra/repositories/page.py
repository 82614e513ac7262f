"""SQLModel implementation of Page repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.page import Page
from ..database import Database


class SQLModelPageRepository:
    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> list[Page]:
        with self.db.session() as session:
            statement = select(Page).order_by(Page.updated_at.desc(), Page.id.desc())  # type: ignore[attr-defined]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get(self, page_id: int) -> Optional[Page]:
        with self.db.session() as session:
            obj = session.get(Page, page_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(self, title: str, content: str) -> Page:
        now = self.db.now()
        with self.db.session() as session:
            page = Page(title=title, content=content, created_at=now, updated_at=now)
            session.add(page)
            session.commit()
            session.refresh(page)
            session.expunge(page)
            return page

    def update(self, page_id: int, title: str, content: str) -> Optional[Page]:
        with self.db.session() as session:
            page = session.get(Page, page_id)
            if page is None:
                return None
            page.title = title
            page.content = content
            page.updated_at = self.db.now()
            session.add(page)
            session.commit()
            session.refresh(page)
            session.expunge(page)
            return page

    def delete(self, page_id: int) -> None:
        with self.db.session() as session:
            page = session.get(Page, page_id)
            if page:
                session.delete(page)
                session.commit()


__all__ = ["SQLModelPageRepository"]

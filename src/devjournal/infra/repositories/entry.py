"""SQLModel implementation of Entry repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import or_
from sqlmodel import select

from ...models.entry import Entry
from ..database import Database


class SQLModelEntryRepository:
    """Daily entries keyed by their unique calendar date."""

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> list[Entry]:
        with self.db.session() as session:
            rows = list(session.exec(select(Entry).order_by(Entry.date.desc())).all())  # type: ignore[attr-defined]
            session.expunge_all()
            return rows

    def get(self, date: str) -> Optional[Entry]:
        with self.db.session() as session:
            obj = session.exec(select(Entry).where(Entry.date == date)).first()
            if obj:
                session.expunge(obj)
            return obj

    def save(self, date: str, yesterday: str, today: str) -> Entry:
        """Insert the entry for ``date`` or overwrite its text.

        ``created_at`` is stamped once, on first insert.
        """
        with self.db.session() as session:
            entry = session.exec(select(Entry).where(Entry.date == date)).first()
            if entry is None:
                entry = Entry(date=date, created_at=self.db.now())
            entry.yesterday = yesterday
            entry.today = today
            session.add(entry)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry

    def delete(self, date: str) -> None:
        with self.db.session() as session:
            entry = session.exec(select(Entry).where(Entry.date == date)).first()
            if entry:
                session.delete(entry)
                session.commit()

    def search(self, query: str) -> list[Entry]:
        if not query:
            return []
        pattern = f"%{query}%"
        with self.db.session() as session:
            statement = (
                select(Entry)
                .where(or_(Entry.yesterday.like(pattern), Entry.today.like(pattern)))  # type: ignore[attr-defined]
                .order_by(Entry.date.desc())  # type: ignore[attr-defined]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows


__all__ = ["SQLModelEntryRepository"]

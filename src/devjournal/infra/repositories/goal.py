"""SQLModel implementation of Goal repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import case
from sqlmodel import select

from ...models.goal import Goal
from ...services.goals import GOAL_STATUS_ORDER
from ...services.normalization import (
    clamp_goal_progress,
    normalize_goal_status,
    normalize_optional_text,
)
from ..database import Database


class SQLModelGoalRepository:
    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> list[Goal]:
        """Goals grouped by status (active, paused, completed, archived, other).

        Within a group, goals with a target date come first in ascending date
        order, then the most recently updated.
        """
        status_rank = case(GOAL_STATUS_ORDER, value=Goal.status, else_=len(GOAL_STATUS_ORDER))
        undated_last = case((Goal.target_date.is_(None), 1), else_=0)  # type: ignore[union-attr]
        statement = select(Goal).order_by(
            status_rank,
            undated_last,
            Goal.target_date.asc(),  # type: ignore[union-attr]
            Goal.updated_at.desc(),  # type: ignore[attr-defined]
            Goal.id.desc(),  # type: ignore[union-attr]
        )
        with self.db.session() as session:
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get(self, goal_id: int) -> Optional[Goal]:
        with self.db.session() as session:
            obj = session.get(Goal, goal_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(
        self,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        progress: Optional[int] = None,
        target_date: Optional[str] = None,
    ) -> Goal:
        now = self.db.now()
        normalized = normalize_goal_status(status)
        goal = Goal(
            title=title,
            description=description or "",
            status=normalized,
            progress=clamp_goal_progress(progress, normalized),
            target_date=normalize_optional_text(target_date),
            created_at=now,
            updated_at=now,
        )
        with self.db.session() as session:
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def update(
        self,
        goal_id: int,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        progress: Optional[int] = None,
        target_date: Optional[str] = None,
    ) -> Optional[Goal]:
        with self.db.session() as session:
            goal = session.get(Goal, goal_id)
            if goal is None:
                return None
            normalized = normalize_goal_status(status)
            goal.title = title
            goal.description = description or ""
            goal.status = normalized
            goal.progress = clamp_goal_progress(progress, normalized)
            goal.target_date = normalize_optional_text(target_date)
            goal.updated_at = self.db.now()
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def delete(self, goal_id: int) -> None:
        with self.db.session() as session:
            goal = session.get(Goal, goal_id)
            if goal:
                session.delete(goal)
                session.commit()


__all__ = ["SQLModelGoalRepository"]

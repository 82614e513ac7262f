"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional

from sqlalchemy import delete
from sqlmodel import select

from ...models.habit import Habit, HabitLog, HabitWithLogs
from ...services.habits import build_habit_with_logs
from ...services.normalization import (
    clamp_target_per_week,
    normalize_habit_color,
    normalize_log_date,
)
from ..database import Database


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, db: Database):
        self.db = db

    def _today(self) -> date:
        return self.db.clock().date()

    def list_all(self) -> list[Habit]:
        with self.db.session() as session:
            statement = select(Habit).order_by(Habit.updated_at.desc(), Habit.id.desc())  # type: ignore[attr-defined]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_with_logs(self, today: Optional[date] = None) -> list[HabitWithLogs]:
        """Every habit with its completion dates and derived metrics."""
        today = today or self._today()
        with self.db.session() as session:
            habits = list(
                session.exec(
                    select(Habit).order_by(Habit.updated_at.desc(), Habit.id.desc())  # type: ignore[attr-defined]
                ).all()
            )
            dates_by_habit: dict[int, list[str]] = defaultdict(list)
            for log in session.exec(select(HabitLog)).all():
                dates_by_habit[log.habit_id].append(log.date)
            return [
                build_habit_with_logs(habit, dates_by_habit.get(habit.id, []), today=today)
                for habit in habits
            ]

    def get(self, habit_id: int) -> Optional[Habit]:
        with self.db.session() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(
        self,
        title: str,
        description: str = "",
        target_per_week: Optional[int] = None,
        color: Optional[str] = None,
    ) -> Habit:
        now = self.db.now()
        habit = Habit(
            title=title,
            description=description or "",
            target_per_week=clamp_target_per_week(target_per_week),
            color=normalize_habit_color(color),
            created_at=now,
            updated_at=now,
        )
        with self.db.session() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(
        self,
        habit_id: int,
        title: str,
        description: str = "",
        target_per_week: Optional[int] = None,
        color: Optional[str] = None,
    ) -> Optional[Habit]:
        with self.db.session() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return None
            habit.title = title
            habit.description = description or ""
            habit.target_per_week = clamp_target_per_week(target_per_week)
            habit.color = normalize_habit_color(color)
            habit.updated_at = self.db.now()
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete(self, habit_id: int) -> None:
        """Delete a habit and its logs in one transaction."""
        with self.db.transaction() as session:
            session.exec(delete(HabitLog).where(HabitLog.habit_id == habit_id))  # type: ignore[call-overload]
            session.exec(delete(Habit).where(Habit.id == habit_id))  # type: ignore[call-overload]

    # Habit log operations
    def list_logs(self, habit_id: int) -> list[HabitLog]:
        with self.db.session() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.habit_id == habit_id)
                .order_by(HabitLog.date.desc())  # type: ignore[attr-defined]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def toggle_completion(self, habit_id: int, date: Optional[str], completed: bool) -> None:
        """Insert or remove the log for ``date``; unparsable dates mean today."""
        day = normalize_log_date(date, self._today())
        with self.db.session() as session:
            existing = session.exec(
                select(HabitLog).where(HabitLog.habit_id == habit_id, HabitLog.date == day)
            ).first()
            if completed and existing is None:
                session.add(HabitLog(habit_id=habit_id, date=day, created_at=self.db.now()))
            elif not completed and existing is not None:
                session.delete(existing)
            session.commit()


__all__ = ["SQLModelHabitRepository"]

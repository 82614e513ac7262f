"""SQLModel implementation of Task repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import select

from ...clock import to_iso
from ...models.task import Task
from ...services import timer
from ...services.normalization import (
    clamp_time_estimate,
    normalize_optional_text,
    normalize_task_priority,
)
from ..database import Database


class SQLModelTaskRepository:
    """Tasks plus the start/pause/reset timer transitions."""

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> list[Task]:
        with self.db.session() as session:
            statement = select(Task).order_by(Task.updated_at.desc(), Task.id.desc())  # type: ignore[attr-defined]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get(self, task_id: int) -> Optional[Task]:
        with self.db.session() as session:
            obj = session.get(Task, task_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(
        self,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        time_estimate_minutes: Optional[int] = None,
    ) -> Task:
        moment = self.db.clock()
        now = to_iso(moment)
        task = Task(
            title=title,
            description=description or "",
            status="todo",
            priority=normalize_task_priority(priority),
            due_date=normalize_optional_text(due_date),
            time_estimate_minutes=clamp_time_estimate(time_estimate_minutes),
            timer_accumulated_seconds=0,
            created_at=now,
            updated_at=now,
        )
        timer.apply_status(task, status, moment)
        with self.db.session() as session:
            session.add(task)
            session.commit()
            session.refresh(task)
            session.expunge(task)
            return task

    def update(
        self,
        task_id: int,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        time_estimate_minutes: Optional[int] = None,
    ) -> Optional[Task]:
        """Full edit. The timer keeps running unless the task moves into done."""

        def _edit(task: Task) -> None:
            task.title = title
            task.description = description or ""
            task.priority = normalize_task_priority(priority)
            task.due_date = normalize_optional_text(due_date)
            task.time_estimate_minutes = clamp_time_estimate(time_estimate_minutes)
            timer.apply_status(task, status, self.db.clock())

        return self._mutate(task_id, _edit)

    def update_status(self, task_id: int, status: Optional[str]) -> Optional[Task]:
        return self._mutate(task_id, lambda task: timer.apply_status(task, status, self.db.clock()))

    def start_timer(self, task_id: int) -> Optional[Task]:
        return self._mutate(task_id, lambda task: timer.start_timer(task, self.db.clock()))

    def pause_timer(self, task_id: int) -> Optional[Task]:
        return self._mutate(task_id, lambda task: timer.pause_timer(task, self.db.clock()))

    def reset_timer(self, task_id: int) -> Optional[Task]:
        return self._mutate(task_id, timer.reset_timer)

    def delete(self, task_id: int) -> None:
        with self.db.session() as session:
            task = session.get(Task, task_id)
            if task:
                session.delete(task)
                session.commit()

    def _mutate(self, task_id: int, change: Callable[[Task], Optional[bool]]) -> Optional[Task]:
        """Load, apply ``change`` and persist with a fresh ``updated_at``.

        ``change`` returns False for a no-op transition, which leaves the row untouched.
        """
        with self.db.session() as session:
            task = session.get(Task, task_id)
            if task is None:
                return None
            if change(task) is not False:
                task.updated_at = self.db.now()
                session.add(task)
                session.commit()
                session.refresh(task)
            session.expunge(task)
            return task


__all__ = ["SQLModelTaskRepository"]

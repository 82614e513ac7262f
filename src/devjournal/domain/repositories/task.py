"""Task repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.task import Task


class TaskRepository(Protocol):
    """Repository for tasks and their timers."""

    def list_all(self) -> list[Task]:
        """List tasks, most recently updated first."""
        ...

    def get(self, task_id: int) -> Optional[Task]:
        """Retrieve a task by ID."""
        ...

    def create(
        self,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        time_estimate_minutes: Optional[int] = None,
    ) -> Task:
        """Create a task from normalized input."""
        ...

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
        """Overwrite every editable field of a task."""
        ...

    def update_status(self, task_id: int, status: Optional[str]) -> Optional[Task]:
        """Change only the status."""
        ...

    def start_timer(self, task_id: int) -> Optional[Task]:
        ...

    def pause_timer(self, task_id: int) -> Optional[Task]:
        ...

    def reset_timer(self, task_id: int) -> Optional[Task]:
        ...

    def delete(self, task_id: int) -> None:
        ...

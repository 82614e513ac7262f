"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitLog, HabitWithLogs


class HabitRepository(Protocol):
    """Repository for habits and their completion logs."""

    def list_all(self) -> list[Habit]:
        """List habits, most recently updated first."""
        ...

    def list_with_logs(self, today: Optional[date] = None) -> list[HabitWithLogs]:
        """List habits with completion dates, streak and weekly count."""
        ...

    def get(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def create(
        self,
        title: str,
        description: str = "",
        target_per_week: Optional[int] = None,
        color: Optional[str] = None,
    ) -> Habit:
        """Create a new habit."""
        ...

    def update(
        self,
        habit_id: int,
        title: str,
        description: str = "",
        target_per_week: Optional[int] = None,
        color: Optional[str] = None,
    ) -> Optional[Habit]:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> None:
        """Delete a habit and all of its logs."""
        ...

    # Habit log operations
    def list_logs(self, habit_id: int) -> list[HabitLog]:
        """Logs for a habit, newest date first."""
        ...

    def toggle_completion(self, habit_id: int, date: Optional[str], completed: bool) -> None:
        """Mark or unmark a habit as done on a date."""
        ...

"""Goal repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.goal import Goal


class GoalRepository(Protocol):
    def list_all(self) -> list[Goal]:
        """List goals grouped by status, then by target date."""
        ...

    def get(self, goal_id: int) -> Optional[Goal]:
        ...

    def create(
        self,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        progress: Optional[int] = None,
        target_date: Optional[str] = None,
    ) -> Goal:
        ...

    def update(
        self,
        goal_id: int,
        title: str,
        description: str = "",
        status: Optional[str] = None,
        progress: Optional[int] = None,
        target_date: Optional[str] = None,
    ) -> Optional[Goal]:
        ...

    def delete(self, goal_id: int) -> None:
        ...

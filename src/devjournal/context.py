"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock import Clock, utc_now
from .config import BaseConfig
from .domain.repositories import (
    EntryRepository,
    GoalRepository,
    HabitRepository,
    PageRepository,
    TaskRepository,
)
from .infra.database import Database, bootstrap_database
from .infra.repositories import (
    SQLModelEntryRepository,
    SQLModelGoalRepository,
    SQLModelHabitRepository,
    SQLModelPageRepository,
    SQLModelTaskRepository,
)
from .services.backup import BackupService


@dataclass
class AppContext:
    """Everything the command layer needs, built once at startup."""

    config: BaseConfig
    db: Database

    # Repositories
    entry_repo: EntryRepository
    page_repo: PageRepository
    task_repo: TaskRepository
    goal_repo: GoalRepository
    habit_repo: HabitRepository

    backup_service: BackupService

    def close(self) -> None:
        self.db.dispose()


def create_app_context(config: Optional[BaseConfig] = None, *, clock: Clock = utc_now) -> AppContext:
    """Open the database, migrate it to the latest schema and wire repositories.

    Raises ``StorageUnavailable`` or ``MigrationFailed``; both are fatal at startup.
    """

    if config is None:
        config = BaseConfig()

    db = bootstrap_database(config, clock=clock)

    return AppContext(
        config=config,
        db=db,
        entry_repo=SQLModelEntryRepository(db),
        page_repo=SQLModelPageRepository(db),
        task_repo=SQLModelTaskRepository(db),
        goal_repo=SQLModelGoalRepository(db),
        habit_repo=SQLModelHabitRepository(db),
        backup_service=BackupService(db),
    )


__all__ = ["AppContext", "create_app_context"]

"""Pytest configuration and shared fixtures for DevJournal tests.

This module provides database fixtures, a controllable clock and repository
fixtures for testing domain logic, repositories, and services without
touching the real application data directory.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from devjournal.config import TestConfig
from devjournal.infra.database import bootstrap_database
from devjournal.infra.repositories import (
    SQLModelEntryRepository,
    SQLModelGoalRepository,
    SQLModelHabitRepository,
    SQLModelPageRepository,
    SQLModelTaskRepository,
)
from devjournal.services.backup import BackupService

# Wednesday, so the current week spans Mon 2024-05-13 .. Sun 2024-05-19.
FIXED_NOW = datetime(2024, 5, 15, 9, 30, tzinfo=timezone.utc)


class FrozenClock:
    """Injectable "now" source that only moves when a test moves it."""

    def __init__(self, moment: datetime = FIXED_NOW):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> datetime:
        self.moment = self.moment + timedelta(**kwargs)
        return self.moment


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def config(tmp_path) -> TestConfig:
    """Configuration rooted in a per-test data directory (not yet created)."""
    return TestConfig(tmp_path / "data")


@pytest.fixture
def db(config, clock):
    """A migrated on-disk database for each test.

    Yields:
        Database: storage handle wired to the frozen clock
    """
    database = bootstrap_database(config, clock=clock)
    yield database
    database.dispose()


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def entry_repo(db) -> SQLModelEntryRepository:
    return SQLModelEntryRepository(db)


@pytest.fixture
def page_repo(db) -> SQLModelPageRepository:
    return SQLModelPageRepository(db)


@pytest.fixture
def task_repo(db) -> SQLModelTaskRepository:
    return SQLModelTaskRepository(db)


@pytest.fixture
def goal_repo(db) -> SQLModelGoalRepository:
    return SQLModelGoalRepository(db)


@pytest.fixture
def habit_repo(db) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(db)


@pytest.fixture
def backup_service(db) -> BackupService:
    return BackupService(db)

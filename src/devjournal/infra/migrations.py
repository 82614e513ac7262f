"""Versioned, additive-only schema migrations.

Each step runs in its own transaction together with the row that records it
in ``schema_migrations``, so a step that fails halfway is never marked as
applied. Steps only create tables, add columns or add indexes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..clock import Clock, to_iso, utc_now
from ..errors import MigrationFailed
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    apply: Callable[[Connection], None]


def column_exists(conn: Connection, table: str, column: str) -> bool:
    """Check live schema metadata for ``table.column``."""

    return any(col["name"] == column for col in inspect(conn).get_columns(table))


def ensure_column(conn: Connection, table: str, column: str, ddl: str) -> bool:
    """Add ``column`` to ``table`` unless it already exists. Returns True if added."""

    if column_exists(conn, table, column):
        return False
    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
    return True


def ensure_index(conn: Connection, name: str, table: str, columns: str) -> None:
    conn.execute(text(f"CREATE INDEX IF NOT EXISTS {name} ON {table} ({columns})"))


def _create_base_tables(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS entries (
                id INTEGER PRIMARY KEY,
                date TEXT NOT NULL UNIQUE,
                yesterday TEXT NOT NULL,
                today TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS pages (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS tasks (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
    )


def _add_task_planning_columns(conn: Connection) -> None:
    ensure_column(conn, "tasks", "priority", "TEXT NOT NULL DEFAULT 'medium'")
    ensure_column(conn, "tasks", "due_date", "TEXT")
    ensure_column(conn, "tasks", "completed_at", "TEXT")
    ensure_index(conn, "idx_tasks_status_due_date", "tasks", "status, due_date")


def _create_goals_table(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS goals (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                status TEXT NOT NULL,
                progress INTEGER NOT NULL DEFAULT 0,
                target_date TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
    )
    ensure_index(conn, "idx_goals_status_target_date", "goals", "status, target_date")


def _create_habit_tables(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS habits (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT NOT NULL,
                target_per_week INTEGER NOT NULL DEFAULT 5,
                color TEXT NOT NULL DEFAULT '#60a5fa',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
    )
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS habit_logs (
                id INTEGER PRIMARY KEY,
                habit_id INTEGER NOT NULL REFERENCES habits(id) ON DELETE CASCADE,
                date TEXT NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE (habit_id, date)
            )
            """
        )
    )
    ensure_index(conn, "idx_habit_logs_habit_date", "habit_logs", "habit_id, date")


def _add_task_timer_columns(conn: Connection) -> None:
    ensure_column(conn, "tasks", "time_estimate_minutes", "INTEGER NOT NULL DEFAULT 0")
    ensure_column(conn, "tasks", "timer_started_at", "TEXT")
    ensure_column(conn, "tasks", "timer_accumulated_seconds", "INTEGER NOT NULL DEFAULT 0")
    ensure_index(conn, "idx_tasks_timer_started_at", "tasks", "timer_started_at")


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "base_tables", _create_base_tables),
    Migration(2, "task_planning", _add_task_planning_columns),
    Migration(3, "goals", _create_goals_table),
    Migration(4, "habits", _create_habit_tables),
    Migration(5, "task_timer", _add_task_timer_columns),
)

LATEST_VERSION = MIGRATIONS[-1].version


def ensure_version_table(conn: Connection) -> None:
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version INTEGER PRIMARY KEY,
                applied_at TEXT NOT NULL
            )
            """
        )
    )


def applied_versions(conn: Connection) -> set[int]:
    rows = conn.execute(text("SELECT version FROM schema_migrations"))
    return {int(row[0]) for row in rows}


def run_migrations(
    engine: Engine,
    *,
    migrations: tuple[Migration, ...] = MIGRATIONS,
    clock: Clock = utc_now,
) -> list[int]:
    """Apply every pending step in ascending version order.

    Returns the versions applied by this call (empty when already current).

    Raises:
        MigrationFailed: a step's SQL failed; callers must not serve requests.
    """

    try:
        with engine.begin() as conn:
            ensure_version_table(conn)
    except SQLAlchemyError as exc:
        logger.error("Cannot create schema_migrations table", exc_info=True)
        raise MigrationFailed(0, str(exc)) from exc

    applied: list[int] = []
    for migration in sorted(migrations, key=lambda m: m.version):
        try:
            with engine.begin() as conn:
                if migration.version in applied_versions(conn):
                    logger.debug("Migration already applied", extra={"version": migration.version})
                    continue
                migration.apply(conn)
                conn.execute(
                    text("INSERT INTO schema_migrations (version, applied_at) VALUES (:version, :applied_at)"),
                    {"version": migration.version, "applied_at": to_iso(clock())},
                )
        except SQLAlchemyError as exc:
            logger.error(
                "Migration failed",
                extra={"version": migration.version, "migration": migration.name},
                exc_info=True,
            )
            raise MigrationFailed(migration.version, str(exc)) from exc
        applied.append(migration.version)
        logger.info(
            "Migration applied",
            extra={"version": migration.version, "migration": migration.name},
        )
    return applied


__all__ = [
    "Migration",
    "MIGRATIONS",
    "LATEST_VERSION",
    "column_exists",
    "ensure_column",
    "ensure_index",
    "run_migrations",
]

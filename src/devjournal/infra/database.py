"""Database infrastructure: the single storage handle every component shares."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import Engine, RowMapping, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from ..clock import Clock, to_iso, utc_now
from ..config import BaseConfig
from ..errors import DevJournalError, QueryFailed, StorageUnavailable, TransactionAborted
from ..logging_config import get_logger
from .migrations import run_migrations

logger = get_logger(__name__)


def _install_sqlite_hooks(engine: Engine, pragmas: Mapping[str, str]) -> None:
    """Apply pragmas on connect and let SQLAlchemy own transaction boundaries.

    pysqlite's implicit transactions skip DDL statements; emitting BEGIN
    ourselves makes schema changes roll back together with their bookkeeping.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            for name, value in pragmas.items():
                cursor.execute(f"PRAGMA {name} = {value}")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(config: BaseConfig) -> Engine:
    """Create the SQLModel engine from configuration, creating the data directory."""

    url = make_url(config.DATABASE_URL)
    database = url.database
    if url.get_backend_name() == "sqlite" and database and database != ":memory:":
        try:
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailable(f"Cannot create data directory for {database}: {exc}") from exc

    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if url.get_backend_name() == "sqlite":
        _install_sqlite_hooks(engine, config.SQLITE_PRAGMAS)
    return engine


class Database:
    """Owned storage handle guarded by a mutual-exclusion lock.

    Every session or statement holds the lock for its full duration, so at
    most one operation touches the database at a time.
    """

    def __init__(self, engine: Engine, *, clock: Clock = utc_now) -> None:
        self.engine = engine
        self.clock = clock
        self._lock = threading.RLock()

    @classmethod
    def open(cls, config: BaseConfig, *, clock: Clock = utc_now) -> "Database":
        """Open (creating if absent) the database described by ``config``."""

        engine = create_db_engine(config)
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
        except SQLAlchemyError as exc:
            engine.dispose()
            raise StorageUnavailable(f"Cannot open database {config.DATABASE_URL}: {exc}") from exc
        logger.info("Database opened", extra={"url": config.DATABASE_URL})
        return cls(engine, clock=clock)

    def now(self) -> str:
        """Current wall-clock time as a persisted ISO-8601 UTC string."""
        return to_iso(self.clock())

    def migrate(self) -> list[int]:
        """Bring the schema to the latest version; returns versions applied now."""
        with self._lock:
            return run_migrations(self.engine, clock=self.clock)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a transactional scope for a single operation.

        SQL failures are rolled back and surfaced as ``QueryFailed``.
        """
        with self._lock:
            session = Session(self.engine, expire_on_commit=False)
            try:
                yield session
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.warning("Query failed", extra={"error": str(exc)})
                raise QueryFailed(str(exc)) from exc
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Provide an all-or-nothing scope for multi-statement units.

        Any error inside the block rolls back every statement and is surfaced
        as ``TransactionAborted``.
        """
        with self._lock:
            session = Session(self.engine, expire_on_commit=False)
            try:
                yield session
                session.commit()
            except Exception as exc:
                session.rollback()
                logger.error("Transaction rolled back", extra={"error": str(exc)})
                if isinstance(exc, TransactionAborted):
                    raise
                raise TransactionAborted(str(exc)) from exc
            finally:
                session.close()

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> None:
        """Run a statement that returns no rows."""
        with self._lock:
            try:
                with self.engine.begin() as conn:
                    conn.execute(text(sql), dict(params or {}))
            except SQLAlchemyError as exc:
                raise QueryFailed(str(exc)) from exc

    def query_one(
        self, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> Optional[RowMapping]:
        """Return zero or one row as a mapping."""
        rows = self.query_many(sql, params)
        return rows[0] if rows else None

    def query_many(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> list[RowMapping]:
        """Return every row produced by ``sql`` as mappings."""
        with self._lock:
            try:
                with self.engine.begin() as conn:
                    return list(conn.execute(text(sql), dict(params or {})).mappings().all())
            except SQLAlchemyError as exc:
                raise QueryFailed(str(exc)) from exc

    def dispose(self) -> None:
        self.engine.dispose()


def bootstrap_database(config: BaseConfig | None = None, *, clock: Clock = utc_now) -> Database:
    """Open the database and migrate it to the latest schema.

    Used by startup and tests to ensure the schema is current before any
    repository is handed out. ``MigrationFailed`` propagates as fatal.
    """

    cfg = config or BaseConfig()
    db = Database.open(cfg, clock=clock)
    try:
        db.migrate()
    except DevJournalError:
        db.dispose()
        raise
    return db


__all__ = ["Database", "create_db_engine", "bootstrap_database"]

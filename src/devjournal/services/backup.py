"""Backup export and transactional import.

Export is a list-all across the six tables. Import reconciles a snapshot
into the store inside one transaction: either every record lands, or the
store is left exactly as it was.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError
from sqlalchemy import delete
from sqlmodel import Session, select

from ..clock import parse_iso, to_iso, utc_now
from ..errors import TransactionAborted
from ..infra.database import Database
from ..logging_config import get_logger
from ..models import (
    BackupPayload,
    Entry,
    EntryRecord,
    Goal,
    GoalRecord,
    Habit,
    HabitLog,
    HabitLogRecord,
    HabitRecord,
    ImportSummary,
    Page,
    PageRecord,
    Task,
    TaskRecord,
)
from . import timer
from .normalization import (
    clamp_goal_progress,
    clamp_target_per_week,
    clamp_time_estimate,
    normalize_goal_status,
    normalize_habit_color,
    normalize_log_date,
    normalize_optional_text,
    normalize_task_priority,
    normalize_task_status,
)

logger = get_logger(__name__)

BACKUP_FILE_PREFIX = "dev-journal-backup-"
DEFAULT_RETENTION = 10

PayloadLike = Union[BackupPayload, Mapping[str, Any]]
R = TypeVar("R", EntryRecord, PageRecord, TaskRecord, GoalRecord, HabitRecord, HabitLogRecord)

# Children before parents.
_DELETE_ORDER = (HabitLog, Habit, Task, Goal, Page, Entry)


def parse_payload(payload: PayloadLike) -> BackupPayload:
    """Validate a raw snapshot; malformed input aborts before any write."""

    if isinstance(payload, BackupPayload):
        return payload
    try:
        return BackupPayload.model_validate(payload)
    except ValidationError as exc:
        raise TransactionAborted(f"Invalid backup payload: {exc}") from exc


class BackupService:
    """Import/export of full data snapshots over the shared database handle."""

    def __init__(self, db: Database):
        self.db = db

    def export_snapshot(self) -> BackupPayload:
        with self.db.session() as session:
            return BackupPayload(
                exported_at=self.db.now(),
                entries=[EntryRecord.model_validate(row.model_dump()) for row in _all(session, Entry)],
                pages=[PageRecord.model_validate(row.model_dump()) for row in _all(session, Page)],
                tasks=[TaskRecord.model_validate(row.model_dump()) for row in _all(session, Task)],
                goals=[GoalRecord.model_validate(row.model_dump()) for row in _all(session, Goal)],
                habits=[HabitRecord.model_validate(row.model_dump()) for row in _all(session, Habit)],
                habit_logs=[
                    HabitLogRecord.model_validate(row.model_dump()) for row in _all(session, HabitLog)
                ],
            )

    def import_snapshot(self, payload: PayloadLike, *, replace_existing: bool = False) -> ImportSummary:
        """Apply every record of ``payload`` as an upsert, all-or-nothing.

        Records with an ``id`` overwrite or insert at that id and are applied
        before records without one, which insert as new rows. Entries and
        habit logs reconcile on their natural keys (``date``, and
        ``(habit_id, date)``) before any id is considered. With
        ``replace_existing`` all six tables are emptied first, inside the
        same transaction.

        Raises:
            TransactionAborted: the payload is malformed or any row failed.
        """
        snapshot = parse_payload(payload)
        moment = self.db.clock()
        summary = ImportSummary(replaced=replace_existing)
        logger.info(
            "Backup import started",
            extra={"replace_existing": replace_existing, "tasks": len(snapshot.tasks)},
        )

        with self.db.transaction() as session:
            if replace_existing:
                for model in _DELETE_ORDER:
                    session.exec(delete(model))  # type: ignore[call-overload]

            for entry in _ids_first(snapshot.entries):
                _upsert_entry(session, entry, moment)
            session.flush()
            summary.entries = len(snapshot.entries)

            for page in _ids_first(snapshot.pages):
                _upsert(session, _page_from_record(page, moment))
            session.flush()
            summary.pages = len(snapshot.pages)

            for task in _ids_first(snapshot.tasks):
                _upsert(session, _task_from_record(task, moment))
            session.flush()
            summary.tasks = len(snapshot.tasks)

            for goal in _ids_first(snapshot.goals):
                _upsert(session, _goal_from_record(goal, moment))
            session.flush()
            summary.goals = len(snapshot.goals)

            for habit in _ids_first(snapshot.habits):
                _upsert(session, _habit_from_record(habit, moment))
            session.flush()
            summary.habits = len(snapshot.habits)

            for log in _ids_first(snapshot.habit_logs):
                _upsert_habit_log(session, log, moment)
            session.flush()
            summary.habit_logs = len(snapshot.habit_logs)

        logger.info("Backup import finished", extra=summary.model_dump())
        return summary


def _all(session: Session, model):
    return session.exec(select(model).order_by(model.id)).all()


def _ids_first(records: list[R]) -> list[R]:
    """Records with an explicit id, then the rest, each in payload order.

    New rows must not take a rowid that a later explicit id overwrites.
    """
    return sorted(records, key=lambda record: record.id is None)


def _upsert(session: Session, row) -> None:
    if row.id is None:
        session.add(row)
    else:
        session.merge(row)


def _timestamps(created: Optional[str], updated: Optional[str], moment: datetime) -> tuple[str, str]:
    now = to_iso(moment)
    return created or now, updated or now


def _upsert_entry(session: Session, record: EntryRecord, moment: datetime) -> None:
    """Reconcile on ``date`` first; the id only applies to a date not yet stored."""
    existing = session.exec(select(Entry).where(Entry.date == record.date)).first()
    if existing is None and record.id is not None:
        session.merge(
            Entry(
                id=record.id,
                date=record.date,
                yesterday=record.yesterday,
                today=record.today,
                created_at=record.created_at or to_iso(moment),
            )
        )
        return
    if existing is None:
        existing = Entry(date=record.date, created_at=record.created_at or to_iso(moment))
    elif record.created_at:
        existing.created_at = record.created_at
    existing.yesterday = record.yesterday
    existing.today = record.today
    session.add(existing)


def _page_from_record(record: PageRecord, moment: datetime) -> Page:
    created_at, updated_at = _timestamps(record.created_at, record.updated_at, moment)
    return Page(
        id=record.id,
        title=record.title,
        content=record.content,
        created_at=created_at,
        updated_at=updated_at,
    )


def _task_from_record(record: TaskRecord, moment: datetime) -> Task:
    created_at, updated_at = _timestamps(record.created_at, record.updated_at, moment)
    task = Task(
        id=record.id,
        title=record.title,
        description=record.description or "",
        status=normalize_task_status(record.status),
        priority=normalize_task_priority(record.priority),
        due_date=normalize_optional_text(record.due_date),
        completed_at=record.completed_at,
        time_estimate_minutes=clamp_time_estimate(record.time_estimate_minutes),
        timer_started_at=record.timer_started_at,
        timer_accumulated_seconds=max(0, record.timer_accumulated_seconds or 0),
        created_at=created_at,
        updated_at=updated_at,
    )
    # Folds a running timer on done tasks and fixes completed_at either way.
    timer.apply_status(task, task.status, moment)
    return task


def _goal_from_record(record: GoalRecord, moment: datetime) -> Goal:
    created_at, updated_at = _timestamps(record.created_at, record.updated_at, moment)
    status = normalize_goal_status(record.status)
    return Goal(
        id=record.id,
        title=record.title,
        description=record.description,
        status=status,
        progress=clamp_goal_progress(record.progress, status),
        target_date=normalize_optional_text(record.target_date),
        created_at=created_at,
        updated_at=updated_at,
    )


def _habit_from_record(record: HabitRecord, moment: datetime) -> Habit:
    created_at, updated_at = _timestamps(record.created_at, record.updated_at, moment)
    return Habit(
        id=record.id,
        title=record.title,
        description=record.description,
        target_per_week=clamp_target_per_week(record.target_per_week),
        color=normalize_habit_color(record.color),
        created_at=created_at,
        updated_at=updated_at,
    )


def _upsert_habit_log(session: Session, record: HabitLogRecord, moment: datetime) -> None:
    """A day already logged for the habit is kept as is, whatever its id."""
    day = normalize_log_date(record.date, moment.date())
    existing = session.exec(
        select(HabitLog).where(HabitLog.habit_id == record.habit_id, HabitLog.date == day)
    ).first()
    if existing is not None:
        return
    log = HabitLog(
        id=record.id, habit_id=record.habit_id, date=day, created_at=record.created_at or to_iso(moment)
    )
    _upsert(session, log)


def _ensure_secure_directory(directory: Path) -> None:
    """Create the directory and set restrictive permissions when possible."""

    directory.mkdir(parents=True, exist_ok=True)
    try:
        os.chmod(directory, 0o700)
    except (NotImplementedError, PermissionError):  # pragma: no cover - platform specific
        pass


def _prune_old_backups(directory: Path, keep: int) -> list[Path]:
    """Remove backup files beyond the retention count, oldest first."""

    files = sorted(directory.glob(f"{BACKUP_FILE_PREFIX}*.json"), key=lambda p: p.name, reverse=True)
    removed: list[Path] = []
    for old in files[keep:]:
        try:
            old.unlink()
            removed.append(old)
        except OSError:  # pragma: no cover - best-effort cleanup
            logger.warning("Could not prune backup", extra={"path": str(old)})
    return removed


def write_backup_file(
    payload: BackupPayload,
    output_dir: Path | str,
    *,
    retention: int = DEFAULT_RETENTION,
) -> Path:
    """Write ``payload`` as pretty JSON and prune old backups. Returns the path."""

    directory = Path(output_dir)
    _ensure_secure_directory(directory)

    moment = parse_iso(payload.exported_at) or utc_now()
    path = directory / f"{BACKUP_FILE_PREFIX}{moment.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.json"
    path.write_text(json.dumps(payload.model_dump(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Backup written", extra={"path": str(path)})

    if retention > 0:
        for old in _prune_old_backups(directory, retention):
            logger.info("Backup pruned", extra={"path": str(old)})
    return path


def read_backup_file(path: Path | str) -> BackupPayload:
    """Load and validate a backup file written by :func:`write_backup_file`."""

    source = Path(path)
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise TransactionAborted(f"Cannot read backup {source}: {exc}") from exc
    return parse_payload(raw)


__all__ = [
    "BackupService",
    "BACKUP_FILE_PREFIX",
    "parse_payload",
    "write_backup_file",
    "read_backup_file",
]

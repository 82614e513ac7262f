"""Tests for backup export, transactional import and backup files."""

from __future__ import annotations

import json

import pytest

from devjournal.errors import TransactionAborted
from devjournal.models import BackupPayload
from devjournal.services.backup import (
    BACKUP_FILE_PREFIX,
    read_backup_file,
    write_backup_file,
)


def _seed(entry_repo, page_repo, task_repo, goal_repo, habit_repo):
    entry_repo.save("2024-05-14", "planning", "coding")
    page_repo.create("Notes", "body")
    task = task_repo.create("Task", status="in_progress", priority="high", time_estimate_minutes=45)
    task_repo.start_timer(task.id)
    goal_repo.create("Goal", progress=30, target_date="2024-06-01")
    habit = habit_repo.create("Habit", target_per_week=3, color="#abcdef")
    habit_repo.toggle_completion(habit.id, "2024-05-14", True)
    habit_repo.toggle_completion(habit.id, "2024-05-15", True)


def _counts(db) -> dict[str, int]:
    tables = ("entries", "pages", "tasks", "goals", "habits", "habit_logs")
    return {table: db.query_one(f"SELECT COUNT(*) AS n FROM {table}")["n"] for table in tables}


@pytest.fixture
def seeded(entry_repo, page_repo, task_repo, goal_repo, habit_repo):
    _seed(entry_repo, page_repo, task_repo, goal_repo, habit_repo)


def test_export_contains_every_table(seeded, backup_service, db):
    snapshot = backup_service.export_snapshot()

    assert snapshot.exported_at == db.now()
    assert len(snapshot.entries) == 1
    assert len(snapshot.pages) == 1
    assert len(snapshot.tasks) == 1
    assert len(snapshot.goals) == 1
    assert len(snapshot.habits) == 1
    assert [log.date for log in snapshot.habit_logs] == ["2024-05-14", "2024-05-15"]
    assert snapshot.tasks[0].timer_started_at is not None


def test_export_then_replace_import_round_trips(seeded, backup_service, db):
    before = backup_service.export_snapshot()

    summary = backup_service.import_snapshot(before, replace_existing=True)
    after = backup_service.export_snapshot()

    assert summary.replaced is True
    assert summary.tasks == 1
    assert summary.habit_logs == 2
    assert after.model_dump(exclude={"exported_at"}) == before.model_dump(exclude={"exported_at"})


def test_import_without_replace_upserts_by_id(seeded, backup_service, task_repo):
    snapshot = backup_service.export_snapshot()
    task_id = snapshot.tasks[0].id

    payload = snapshot.model_dump()
    payload["tasks"][0]["title"] = "Renamed"
    backup_service.import_snapshot(payload)

    assert task_repo.get(task_id).title == "Renamed"
    assert len(task_repo.list_all()) == 1


def test_failed_import_leaves_store_untouched(seeded, backup_service, db):
    before_counts = _counts(db)
    before = backup_service.export_snapshot()

    payload = {
        "pages": [{"title": "Would be added", "content": ""}],
        "tasks": [{"title": None, "status": "todo"}],
    }
    with pytest.raises(TransactionAborted):
        backup_service.import_snapshot(payload)

    assert _counts(db) == before_counts
    assert backup_service.export_snapshot().model_dump(exclude={"exported_at"}) == before.model_dump(
        exclude={"exported_at"}
    )


def test_failed_replace_import_keeps_existing_rows(seeded, backup_service, db):
    before_counts = _counts(db)

    with pytest.raises(TransactionAborted):
        backup_service.import_snapshot({"tasks": [{"status": "done"}]}, replace_existing=True)

    assert _counts(db) == before_counts


def test_log_for_unknown_habit_aborts(backup_service, db):
    with pytest.raises(TransactionAborted):
        backup_service.import_snapshot(
            {
                "habits": [{"title": "Real"}],
                "habit_logs": [{"habit_id": 999, "date": "2024-05-15"}],
            }
        )

    assert _counts(db)["habits"] == 0


def test_malformed_payload_is_rejected_before_writing(backup_service, db):
    with pytest.raises(TransactionAborted):
        backup_service.import_snapshot({"entries": [{"yesterday": "no date"}]})
    with pytest.raises(TransactionAborted):
        backup_service.import_snapshot({"tasks": "not a list"})

    assert sum(_counts(db).values()) == 0


def test_records_without_ids_are_inserted_with_defaults(backup_service, task_repo, habit_repo, goal_repo, db):
    summary = backup_service.import_snapshot(
        {
            "tasks": [
                {"title": "Imported", "status": "weird", "priority": "nope", "time_estimate_minutes": -1},
            ],
            "goals": [{"title": "Finish", "status": "completed", "progress": 3}],
            "habits": [{"title": "Swim", "target_per_week": 0, "color": " "}],
        }
    )

    assert summary.tasks == 1
    (task,) = task_repo.list_all()
    assert (task.status, task.priority, task.time_estimate_minutes) == ("todo", "medium", 0)
    assert task.created_at == db.now()
    assert task.updated_at == task.created_at
    assert goal_repo.list_all()[0].progress == 100
    habit = habit_repo.list_all()[0]
    assert (habit.target_per_week, habit.color) == (1, "#60a5fa")


def test_missing_updated_at_defaults_to_import_time(backup_service, page_repo, db):
    backup_service.import_snapshot({"pages": [{"title": "Old", "created_at": "2023-01-01T00:00:00+00:00"}]})

    (page,) = page_repo.list_all()
    assert page.created_at == "2023-01-01T00:00:00+00:00"
    assert page.updated_at == db.now()


def test_imported_done_task_with_running_timer_is_folded(backup_service, task_repo, db):
    backup_service.import_snapshot(
        {
            "tasks": [
                {
                    "id": 7,
                    "title": "Stale",
                    "status": "done",
                    "timer_started_at": "2024-05-15T09:00:00+00:00",
                    "timer_accumulated_seconds": 60,
                }
            ]
        }
    )

    task = task_repo.get(7)
    assert task.timer_started_at is None
    # 60 carried over plus 30 minutes up to the frozen "now"
    assert task.timer_accumulated_seconds == 60 + 30 * 60
    assert task.completed_at == db.now()


def test_imported_open_task_drops_stray_completed_at(backup_service, task_repo):
    backup_service.import_snapshot(
        {"tasks": [{"id": 3, "title": "Open", "status": "todo", "completed_at": "2024-01-01T00:00:00+00:00"}]}
    )

    assert task_repo.get(3).completed_at is None


def test_entries_without_id_reconcile_on_date(entry_repo, backup_service):
    entry_repo.save("2024-05-14", "old", "old")

    backup_service.import_snapshot({"entries": [{"date": "2024-05-14", "yesterday": "new", "today": "new"}]})

    (entry,) = entry_repo.list_all()
    assert (entry.yesterday, entry.today) == ("new", "new")


def test_new_records_do_not_collide_with_explicit_ids(backup_service, page_repo, entry_repo):
    summary = backup_service.import_snapshot(
        {
            "pages": [{"title": "a"}, {"id": 1, "title": "b"}],
            "entries": [
                {"date": "2024-05-13", "today": "fresh"},
                {"id": 1, "date": "2024-05-14", "today": "kept id"},
            ],
        }
    )

    assert summary.pages == 2
    assert sorted((page.id, page.title) for page in page_repo.list_all()) == [(1, "b"), (2, "a")]
    assert entry_repo.get("2024-05-14").id == 1
    assert entry_repo.get("2024-05-13").today == "fresh"


def test_entry_with_foreign_id_reconciles_on_date(entry_repo, backup_service):
    local = entry_repo.save("2024-05-14", "local", "local")

    backup_service.import_snapshot(
        {"entries": [{"id": local.id + 50, "date": "2024-05-14", "yesterday": "remote", "today": "remote"}]}
    )

    (entry,) = entry_repo.list_all()
    assert entry.id == local.id
    assert (entry.yesterday, entry.today) == ("remote", "remote")


def test_habit_log_with_foreign_id_for_logged_day_is_skipped(habit_repo, backup_service):
    habit = habit_repo.create("Run")
    habit_repo.toggle_completion(habit.id, "2024-05-15", True)
    (local_log,) = habit_repo.list_logs(habit.id)

    backup_service.import_snapshot(
        {
            "habit_logs": [
                {"id": local_log.id + 50, "habit_id": habit.id, "date": "2024-05-15"},
                {"id": local_log.id + 51, "habit_id": habit.id, "date": "2024-05-14"},
            ]
        }
    )

    logs = habit_repo.list_logs(habit.id)
    assert [(log.id, log.date) for log in logs] == [
        (local_log.id, "2024-05-15"),
        (local_log.id + 51, "2024-05-14"),
    ]


def test_duplicate_habit_logs_without_id_are_skipped(habit_repo, backup_service):
    habit = habit_repo.create("Run")
    habit_repo.toggle_completion(habit.id, "2024-05-15", True)

    backup_service.import_snapshot(
        {
            "habit_logs": [
                {"habit_id": habit.id, "date": "2024-05-15"},
                {"habit_id": habit.id, "date": "2024-05-14"},
            ]
        }
    )

    assert [log.date for log in habit_repo.list_logs(habit.id)] == ["2024-05-15", "2024-05-14"]


def test_write_and_read_backup_file(seeded, backup_service, tmp_path):
    snapshot = backup_service.export_snapshot()

    path = write_backup_file(snapshot, tmp_path / "backups")

    assert path.name == f"{BACKUP_FILE_PREFIX}20240515T093000Z.json"
    assert json.loads(path.read_text(encoding="utf-8"))["entries"][0]["date"] == "2024-05-14"
    loaded = read_backup_file(path)
    assert isinstance(loaded, BackupPayload)
    assert loaded.model_dump() == snapshot.model_dump()


def test_write_backup_prunes_beyond_retention(tmp_path):
    directory = tmp_path / "backups"
    for hour in range(4):
        write_backup_file(BackupPayload(exported_at=f"2024-05-15T0{hour}:00:00+00:00"), directory, retention=2)

    names = sorted(path.name for path in directory.iterdir())
    assert names == [
        f"{BACKUP_FILE_PREFIX}20240515T020000Z.json",
        f"{BACKUP_FILE_PREFIX}20240515T030000Z.json",
    ]


def test_read_backup_file_errors(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(TransactionAborted):
        read_backup_file(broken)
    with pytest.raises(TransactionAborted):
        read_backup_file(tmp_path / "missing.json")

"""Tests for task persistence and field normalization."""

from __future__ import annotations

from datetime import date

import pytest

from devjournal.models import Task
from devjournal.services.normalization import MAX_TIME_ESTIMATE_MINUTES
from devjournal.services.timer import is_task_overdue


@pytest.mark.parametrize(
    ("given", "stored"),
    [(-5, 0), (0, 0), (90, 90), (MAX_TIME_ESTIMATE_MINUTES, MAX_TIME_ESTIMATE_MINUTES), (999999, 10080), (None, 0)],
)
def test_time_estimate_is_clamped(task_repo, given, stored):
    task = task_repo.create("Estimate", time_estimate_minutes=given)
    assert task.time_estimate_minutes == stored


def test_unknown_status_and_priority_fall_back_to_defaults(task_repo):
    task = task_repo.create("Odd", status="blocked", priority="critical")

    assert task.status == "todo"
    assert task.priority == "medium"


def test_status_match_is_exact(task_repo):
    task = task_repo.create("Case", status="DONE", priority="High")

    assert task.status == "todo"
    assert task.priority == "medium"
    assert task.completed_at is None


def test_create_done_task_stamps_completed_at(task_repo, db):
    task = task_repo.create("Finished", status="done", priority="urgent")

    assert task.status == "done"
    assert task.priority == "urgent"
    assert task.completed_at == db.now()


def test_completed_at_follows_status(task_repo, clock):
    task = task_repo.create("Flow")
    assert task.completed_at is None

    done = task_repo.update_status(task.id, "done")
    assert done.completed_at is not None
    stamped = done.completed_at

    clock.advance(hours=1)
    again = task_repo.update_status(task.id, "done")
    assert again.completed_at == stamped

    reopened = task_repo.update_status(task.id, "in_progress")
    assert reopened.status == "in_progress"
    assert reopened.completed_at is None


def test_blank_due_date_is_stored_as_null(task_repo):
    task = task_repo.create("Due", due_date="   ")
    assert task.due_date is None

    updated = task_repo.update(task.id, "Due", due_date="2024-06-01")
    assert updated.due_date == "2024-06-01"


def test_update_missing_task_returns_none(task_repo):
    assert task_repo.update(999, "ghost") is None
    assert task_repo.update_status(999, "done") is None
    assert task_repo.start_timer(999) is None


def test_update_rewrites_fields_and_updated_at(task_repo, clock):
    task = task_repo.create("Draft", description="v1", priority="low")
    clock.advance(minutes=10)

    updated = task_repo.update(
        task.id, "Final", description="v2", status="in_progress", priority="high", time_estimate_minutes=30
    )

    assert (updated.title, updated.description, updated.status, updated.priority) == (
        "Final",
        "v2",
        "in_progress",
        "high",
    )
    assert updated.time_estimate_minutes == 30
    assert updated.updated_at > task.updated_at
    assert updated.created_at == task.created_at


def test_list_all_most_recent_first_and_delete(task_repo, clock):
    first = task_repo.create("First")
    clock.advance(seconds=1)
    second = task_repo.create("Second")

    assert [task.id for task in task_repo.list_all()] == [second.id, first.id]

    task_repo.delete(first.id)
    assert [task.id for task in task_repo.list_all()] == [second.id]


def test_is_task_overdue():
    today = date(2024, 5, 15)
    base = dict(title="t", created_at="x", updated_at="x")

    assert is_task_overdue(Task(due_date="2024-05-14", status="todo", **base), today)
    assert not is_task_overdue(Task(due_date="2024-05-15", status="todo", **base), today)
    assert not is_task_overdue(Task(due_date="2024-05-01", status="done", **base), today)
    assert not is_task_overdue(Task(due_date=None, status="todo", **base), today)
    assert not is_task_overdue(Task(due_date="soon", status="todo", **base), today)

"""Tests for habit persistence and completion logs."""

from __future__ import annotations

from datetime import date

import pytest

from devjournal.errors import QueryFailed
from devjournal.models import DEFAULT_HABIT_COLOR


@pytest.mark.parametrize(("given", "stored"), [(0, 1), (-3, 1), (1, 1), (7, 7), (14, 14), (99, 14), (None, 5)])
def test_target_per_week_clamped(habit_repo, given, stored):
    assert habit_repo.create("Read", target_per_week=given).target_per_week == stored


@pytest.mark.parametrize("color", [None, "", "   "])
def test_blank_color_gets_default(habit_repo, color):
    assert habit_repo.create("Read", color=color).color == DEFAULT_HABIT_COLOR


def test_color_is_trimmed(habit_repo):
    assert habit_repo.create("Read", color="  #ff0000 ").color == "#ff0000"


def test_update_habit(habit_repo, clock):
    habit = habit_repo.create("Read", target_per_week=3)
    clock.advance(minutes=1)

    updated = habit_repo.update(habit.id, "Read more", "books", target_per_week=50, color="#123456")

    assert (updated.title, updated.description, updated.target_per_week, updated.color) == (
        "Read more",
        "books",
        14,
        "#123456",
    )
    assert updated.updated_at > habit.updated_at
    assert habit_repo.update(999, "ghost") is None


def test_toggle_completion_is_idempotent(habit_repo):
    habit = habit_repo.create("Run")

    habit_repo.toggle_completion(habit.id, "2024-05-14", True)
    habit_repo.toggle_completion(habit.id, "2024-05-14", True)
    assert [log.date for log in habit_repo.list_logs(habit.id)] == ["2024-05-14"]

    habit_repo.toggle_completion(habit.id, "2024-05-14", False)
    habit_repo.toggle_completion(habit.id, "2024-05-14", False)
    assert habit_repo.list_logs(habit.id) == []


@pytest.mark.parametrize("bad_date", [None, "", "yesterday", "2024-13-40"])
def test_invalid_toggle_date_means_today(habit_repo, bad_date):
    habit = habit_repo.create("Run")

    habit_repo.toggle_completion(habit.id, bad_date, True)

    assert [log.date for log in habit_repo.list_logs(habit.id)] == ["2024-05-15"]


def test_toggle_for_unknown_habit_fails(habit_repo):
    with pytest.raises(QueryFailed):
        habit_repo.toggle_completion(4242, "2024-05-15", True)


def test_delete_removes_logs(habit_repo, db):
    keep = habit_repo.create("Keep")
    drop = habit_repo.create("Drop")
    for day in ("2024-05-13", "2024-05-14"):
        habit_repo.toggle_completion(keep.id, day, True)
        habit_repo.toggle_completion(drop.id, day, True)

    habit_repo.delete(drop.id)

    assert habit_repo.get(drop.id) is None
    assert habit_repo.list_logs(drop.id) == []
    assert len(habit_repo.list_logs(keep.id)) == 2
    assert db.query_one("SELECT COUNT(*) AS n FROM habit_logs WHERE habit_id = :id", {"id": drop.id})["n"] == 0


def test_list_with_logs_derives_metrics(habit_repo):
    habit = habit_repo.create("Meditate", target_per_week=4)
    other = habit_repo.create("Stretch")
    for day in ("2024-05-12", "2024-05-13", "2024-05-14", "2024-05-15"):
        habit_repo.toggle_completion(habit.id, day, True)

    rows = {row.id: row for row in habit_repo.list_with_logs()}

    meditate = rows[habit.id]
    assert meditate.completed_dates == ["2024-05-15", "2024-05-14", "2024-05-13", "2024-05-12"]
    assert meditate.current_streak == 4
    # 2024-05-12 is the previous Sunday
    assert meditate.this_week_count == 3
    assert meditate.target_per_week == 4

    assert rows[other.id].completed_dates == []
    assert rows[other.id].current_streak == 0


def test_list_with_logs_accepts_explicit_today(habit_repo):
    habit = habit_repo.create("Walk")
    habit_repo.toggle_completion(habit.id, "2024-05-14", True)

    (row,) = habit_repo.list_with_logs(today=date(2024, 5, 20))

    assert row.current_streak == 0
    assert row.this_week_count == 0

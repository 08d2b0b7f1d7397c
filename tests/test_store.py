"""Record store tests: row conversion and failure reporting. No database needed."""

from contextlib import asynccontextmanager
from datetime import datetime
from types import SimpleNamespace

import pytest

from healthlog.database.store import RecordStore, to_exercise_record, to_food_record


class BrokenDatabase:
    """Stands in for DatabaseManager when the database is unreachable."""

    @asynccontextmanager
    async def get_session(self):
        raise ConnectionError("Can't connect to MySQL server")
        yield  # pragma: no cover


def test_exercise_row_defaults():
    row = SimpleNamespace(
        logged_at=datetime(2026, 10, 19, 8, 0),
        user_id="u1",
        duration_minutes=None,
        exercise_type=None,
        distance=None,
        raw_message="ran",
    )
    record = to_exercise_record(row)
    assert record.duration == 0
    assert record.type == "Unknown"
    assert record.distance == ""
    assert record.date == datetime(2026, 10, 19, 8, 0)


def test_food_row_defaults():
    row = SimpleNamespace(
        logged_at=datetime(2026, 10, 19, 8, 0), user_id="u1", food_items="", raw_message=None
    )
    record = to_food_record(row)
    assert record.food_items == "Unknown"
    assert record.raw_message == ""


@pytest.mark.asyncio
async def test_write_failures_are_reported():
    store = RecordStore(BrokenDatabase())
    result = await store.write_exercise("u1", "running", 30, "5k", "ran a 5k")
    assert result.success is False
    assert "MySQL" in result.error

    result = await store.write_food("u1", "toast", "had toast")
    assert result.success is False


@pytest.mark.asyncio
async def test_read_failures_are_reported():
    store = RecordStore(BrokenDatabase())
    exercise = await store.read_exercise("u1")
    food = await store.read_food("u1")
    assert exercise.success is False and exercise.records == []
    assert food.success is False and food.records == []


@pytest.mark.asyncio
async def test_ensure_user_failure_returns_default_goals():
    user = await RecordStore(BrokenDatabase()).ensure_user("u1")
    assert user.error
    assert user.exercise_goal == 3
    assert user.food_log_goal == 1
    assert user.is_new is False


@pytest.mark.asyncio
async def test_blank_user_id_rejected():
    store = RecordStore(BrokenDatabase())
    assert (await store.write_food("", "toast", "had toast")).error == "User ID is required"
    assert (await store.read_exercise("")).success is False

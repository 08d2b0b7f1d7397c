"""Shared in-memory doubles for the record store and the model."""

import asyncio
from datetime import datetime

import pytest

from healthlog.llm.schemas import (
    ExerciseRecord,
    FoodRecord,
    GenerationConfig,
    ReadResult,
    UserInfo,
    WriteResult,
)


class FakeStore:
    """Records writes in lists; reads return whatever the test put in."""

    def __init__(self) -> None:
        self.exercise_writes: list[dict] = []
        self.food_writes: list[dict] = []
        self.ensured: list[str] = []
        self.exercise_records: list[ExerciseRecord] = []
        self.food_records: list[FoodRecord] = []
        self.fail_writes = False
        self.fail_exercise_read = False
        self.fail_food_read = False
        self.raise_on_write = False

    async def write_exercise(self, user_id, exercise_type, duration, distance, raw_text, processed=None):
        if self.raise_on_write:
            raise ConnectionError("db down")
        if self.fail_writes:
            return WriteResult(success=False, error="db down")
        self.exercise_writes.append({
            "user_id": user_id,
            "exercise_type": exercise_type,
            "duration": duration,
            "distance": distance,
            "raw_text": raw_text,
        })
        return WriteResult(success=True)

    async def write_food(self, user_id, food_items, raw_text, processed=None):
        if self.raise_on_write:
            raise ConnectionError("db down")
        if self.fail_writes:
            return WriteResult(success=False, error="db down")
        self.food_writes.append({"user_id": user_id, "food_items": food_items, "raw_text": raw_text})
        return WriteResult(success=True)

    async def read_exercise(self, user_id):
        if self.fail_exercise_read:
            return ReadResult(success=False, error="timeout")
        return ReadResult(
            success=True, records=[r for r in self.exercise_records if r.user_id == user_id]
        )

    async def read_food(self, user_id):
        if self.fail_food_read:
            raise ConnectionError("food table unreachable")
        return ReadResult(
            success=True, records=[r for r in self.food_records if r.user_id == user_id]
        )

    async def ensure_user(self, user_id):
        self.ensured.append(user_id)
        return UserInfo(user_id=user_id, is_new=len(self.ensured) == 1)

    @property
    def write_count(self) -> int:
        return len(self.exercise_writes) + len(self.food_writes)


class FakeGenerator:
    """Model double: returns a canned reply, raises, or hangs."""

    def __init__(self, reply: str | None = None, *, error: Exception | None = None, delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate(self, prompt: str, generation: GenerationConfig) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def make_generator():
    return FakeGenerator

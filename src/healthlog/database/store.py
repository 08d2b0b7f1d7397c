"""Record store: the persistence operations the message handler depends on.

Every method catches its own failures and reports them in the returned result,
so a database outage never propagates into message handling.
"""

import json
import logging
from typing import Optional

from ..llm.schemas import ExerciseRecord, FoodRecord, ReadResult, UserInfo, WriteResult
from .connection import DatabaseManager, db_manager
from .models import ExerciseLog, FoodLog, _now_local
from .repository import exercise_log_repo, food_log_repo, user_repo

logger = logging.getLogger(__name__)

DEFAULT_EXERCISE_GOAL = 3
DEFAULT_FOOD_LOG_GOAL = 1


def _dump(processed: Optional[dict]) -> Optional[str]:
    if processed is None:
        return None
    return json.dumps(processed, default=str)


def to_exercise_record(row: ExerciseLog) -> ExerciseRecord:
    return ExerciseRecord(
        date=row.logged_at,
        user_id=row.user_id,
        duration=row.duration_minutes or 0,
        type=row.exercise_type or "Unknown",
        distance=row.distance or "",
        raw_message=row.raw_message or "",
    )


def to_food_record(row: FoodLog) -> FoodRecord:
    return FoodRecord(
        date=row.logged_at,
        user_id=row.user_id,
        food_items=row.food_items or "Unknown",
        raw_message=row.raw_message or "",
    )


class RecordStore:
    """SQLAlchemy-backed users, exercise logs and food logs."""

    def __init__(self, db: DatabaseManager = db_manager) -> None:
        self._db = db

    async def write_exercise(
        self,
        user_id: str,
        exercise_type: str,
        duration: Optional[int],
        distance: Optional[str],
        raw_text: str,
        processed: Optional[dict] = None,
    ) -> WriteResult:
        if not user_id:
            return WriteResult(success=False, error="User ID is required")
        try:
            async with self._db.get_session() as session:
                await exercise_log_repo.create(
                    session,
                    obj_in={
                        "user_id": user_id,
                        "logged_at": _now_local(),
                        "exercise_type": exercise_type or None,
                        "duration_minutes": duration,
                        "distance": distance or None,
                        "raw_message": raw_text or "",
                        "processed_data": _dump(processed),
                    },
                )
        except Exception as e:
            logger.exception("Failed to write exercise log for %s", user_id)
            return WriteResult(success=False, error=str(e))
        return WriteResult(success=True)

    async def write_food(
        self,
        user_id: str,
        food_items: str,
        raw_text: str,
        processed: Optional[dict] = None,
    ) -> WriteResult:
        if not user_id:
            return WriteResult(success=False, error="User ID is required")
        try:
            async with self._db.get_session() as session:
                await food_log_repo.create(
                    session,
                    obj_in={
                        "user_id": user_id,
                        "logged_at": _now_local(),
                        "food_items": food_items or "",
                        "raw_message": raw_text or "",
                        "processed_data": _dump(processed),
                    },
                )
        except Exception as e:
            logger.exception("Failed to write food log for %s", user_id)
            return WriteResult(success=False, error=str(e))
        return WriteResult(success=True)

    async def read_exercise(self, user_id: str) -> ReadResult:
        """All exercise records for a user, without any date filter."""
        if not user_id:
            return ReadResult(success=False, error="User ID is required")
        try:
            async with self._db.get_session() as session:
                rows = await exercise_log_repo.get_by_user(session, user_id)
                records = [to_exercise_record(r) for r in rows]
        except Exception as e:
            logger.exception("Failed to read exercise logs for %s", user_id)
            return ReadResult(success=False, error=str(e))
        logger.info("Found %d exercise records for %s", len(records), user_id)
        return ReadResult(success=True, records=records)

    async def read_food(self, user_id: str) -> ReadResult:
        """All food records for a user, without any date filter."""
        if not user_id:
            return ReadResult(success=False, error="User ID is required")
        try:
            async with self._db.get_session() as session:
                rows = await food_log_repo.get_by_user(session, user_id)
                records = [to_food_record(r) for r in rows]
        except Exception as e:
            logger.exception("Failed to read food logs for %s", user_id)
            return ReadResult(success=False, error=str(e))
        logger.info("Found %d food records for %s", len(records), user_id)
        return ReadResult(success=True, records=records)

    async def ensure_user(self, user_id: str) -> UserInfo:
        """Look up the user, creating them with default goals on first contact."""
        if not user_id:
            return UserInfo(user_id="", error="User ID is required")
        try:
            async with self._db.get_session() as session:
                user = await user_repo.get_by_user_id(session, user_id)
                if user is None:
                    user = await user_repo.create(
                        session,
                        obj_in={
                            "user_id": user_id,
                            "name": "",
                            "onboarding_complete": False,
                            "exercise_goal": DEFAULT_EXERCISE_GOAL,
                            "food_log_goal": DEFAULT_FOOD_LOG_GOAL,
                        },
                    )
                    logger.info("Created user %s", user_id)
                    return UserInfo(
                        user_id=user_id,
                        is_new=True,
                        exercise_goal=user.exercise_goal,
                        food_log_goal=user.food_log_goal,
                    )
                return UserInfo(
                    user_id=user_id,
                    is_new=False,
                    exercise_goal=user.exercise_goal or DEFAULT_EXERCISE_GOAL,
                    food_log_goal=user.food_log_goal or DEFAULT_FOOD_LOG_GOAL,
                )
        except Exception as e:
            logger.exception("Failed to ensure user %s", user_id)
            return UserInfo(user_id=user_id, error=str(e))

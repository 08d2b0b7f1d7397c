"""Async repository pattern implementation for database operations."""

from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Base, ExerciseLog, FoodLog, User

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with async create."""

    def __init__(self, model: Type[ModelType]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, *, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        session.add(db_obj)
        await session.flush()
        await session.refresh(db_obj)
        return db_obj


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    async def get_by_user_id(self, session: AsyncSession, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


class ExerciseLogRepository(BaseRepository[ExerciseLog]):
    """Repository for ExerciseLog operations."""

    async def get_by_user(self, session: AsyncSession, user_id: str) -> List[ExerciseLog]:
        """Get every exercise log for a user, newest first.

        No date filter here: the status report filters by date in memory.
        """
        stmt = (
            select(ExerciseLog)
            .where(ExerciseLog.user_id == user_id)
            .order_by(ExerciseLog.logged_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


class FoodLogRepository(BaseRepository[FoodLog]):
    """Repository for FoodLog operations."""

    async def get_by_user(self, session: AsyncSession, user_id: str) -> List[FoodLog]:
        """Get every food log for a user, newest first."""
        stmt = (
            select(FoodLog)
            .where(FoodLog.user_id == user_id)
            .order_by(FoodLog.logged_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


# Repository instances
user_repo = UserRepository(User)
exercise_log_repo = ExerciseLogRepository(ExerciseLog)
food_log_repo = FoodLogRepository(FoodLog)

"""SQLAlchemy async models for healthlog."""

from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..config import config


def _now_local() -> datetime:
    return datetime.now(ZoneInfo(config.timezone)).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class User(Base):
    """A chat user, keyed by the transport's user id (phone number, Telegram id)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    onboarding_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    exercise_goal: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    food_log_goal: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=_now_local
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, user_id='{self.user_id}')>"


class ExerciseLog(Base):
    """One logged exercise session."""

    __tablename__ = "exercise_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    logged_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now_local)
    exercise_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    distance: Mapped[str | None] = mapped_column(String(50), nullable=True)
    raw_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    processed_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_exercise_logs_user_id", "user_id"),
        Index("idx_exercise_logs_logged_at", "logged_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ExerciseLog(id={self.id}, user_id='{self.user_id}', "
            f"type='{self.exercise_type}', duration={self.duration_minutes})>"
        )


class FoodLog(Base):
    """One logged meal or snack."""

    __tablename__ = "food_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    logged_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_now_local)
    food_items: Mapped[str] = mapped_column(Text, nullable=False, default="")
    raw_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    processed_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_food_logs_user_id", "user_id"),
        Index("idx_food_logs_logged_at", "logged_at"),
    )

    def __repr__(self) -> str:
        return f"<FoodLog(id={self.id}, user_id='{self.user_id}', food_items='{self.food_items}')>"

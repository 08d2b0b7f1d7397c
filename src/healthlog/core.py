"""Core message processing, shared by the CLI and the Telegram bot."""

import logging
from typing import Optional, Protocol

from .config import config
from .database.connection import db_manager
from .database.store import RecordStore
from .llm.classifier import ModelClassifier
from .llm.client import LLMClient
from .llm.schemas import (
    Classification,
    ProcessedMessage,
    ReadResult,
    UserInfo,
    WriteResult,
)
from .status import StatusAggregator, render_report

logger = logging.getLogger(__name__)

STATUS_SHORTCUTS = {"status"}

UNKNOWN_REPLY = (
    "I'm not sure what you meant. Please send a message about your exercise, "
    "food, or type 'status' for a report."
)
EXERCISE_APOLOGY = "Sorry, I couldn't log your exercise. Please try again later."
FOOD_APOLOGY = "Sorry, I couldn't log your food. Please try again later."
STATUS_APOLOGY = "Sorry, I couldn't create your status report. Please try again later."


class InvalidMessageError(ValueError):
    """Raised when a message arrives without a user id or without text."""


class Store(Protocol):
    async def write_exercise(
        self,
        user_id: str,
        exercise_type: str,
        duration: Optional[int],
        distance: Optional[str],
        raw_text: str,
        processed: Optional[dict] = None,
    ) -> WriteResult: ...

    async def write_food(
        self, user_id: str, food_items: str, raw_text: str, processed: Optional[dict] = None
    ) -> WriteResult: ...

    async def read_exercise(self, user_id: str) -> ReadResult: ...

    async def read_food(self, user_id: str) -> ReadResult: ...

    async def ensure_user(self, user_id: str) -> UserInfo: ...


class MessageHandler:
    """Classifies a message and routes it to status, exercise, food or unknown."""

    def __init__(
        self,
        store: Store,
        classifier: ModelClassifier,
        *,
        lookback_days: Optional[int] = None,
        recent_limit: Optional[int] = None,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._aggregator = StatusAggregator(store)
        self._lookback_days = lookback_days or config.status.lookback_days
        self._recent_limit = recent_limit or config.status.recent_limit
        self._llm: Optional[LLMClient] = None

    @classmethod
    def from_config(cls) -> "MessageHandler":
        """Wire the database-backed store and, if enabled, the model client."""
        llm = LLMClient() if config.llm.enabled else None
        generation = llm.generation_config() if llm else None
        handler = cls(RecordStore(db_manager), ModelClassifier(llm, generation=generation))
        handler._llm = llm
        return handler

    async def initialize(self) -> None:
        await db_manager.initialize()
        if self._llm:
            await self._llm.initialize()

    async def close(self) -> None:
        if self._llm:
            await self._llm.close()
        await db_manager.close()

    async def process(self, message: str, user_id: str) -> ProcessedMessage:
        """Classify and route one inbound message.

        Raises InvalidMessageError when the user id or text is missing; every
        other failure is turned into a polite reply.
        """
        user_id = (user_id or "").strip()
        text = (message or "").strip()
        if not user_id:
            raise InvalidMessageError("User ID is required")
        if not text:
            raise InvalidMessageError("Message text is required")

        logger.info("Received message from %s: %s", user_id, text)

        if text.lower() in STATUS_SHORTCUTS:
            classification = Classification(
                type="status", is_status_request=True, confidence=99
            )
        else:
            classification = await self._classifier.classify(text)

        if classification.type in ("exercise", "food"):
            user = await self._store.ensure_user(user_id)
            if user.error:
                logger.warning("Could not ensure user %s: %s", user_id, user.error)
            elif user.is_new:
                logger.info("New user %s", user_id)

        response = await self.route(classification, user_id, text)
        logger.info("Replying to %s: %s", user_id, response)
        return ProcessedMessage(classification=classification, response=response)

    async def route(self, classification: Classification, user_id: str, raw_text: str) -> str:
        """Dispatch a classification to its handler and return the reply text."""
        if classification.is_status_request or classification.type == "status":
            return await self._handle_status(user_id)
        elif classification.type == "exercise":
            return await self._handle_exercise(classification, user_id, raw_text)
        elif classification.type == "food":
            return await self._handle_food(classification, user_id, raw_text)
        else:
            return UNKNOWN_REPLY

    async def _handle_status(self, user_id: str) -> str:
        try:
            summary = await self._aggregator.summarize(user_id, days=self._lookback_days)
        except Exception:
            logger.exception("Error generating status report for %s", user_id)
            return STATUS_APOLOGY
        return render_report(summary, limit=self._recent_limit)

    async def _handle_exercise(
        self, classification: Classification, user_id: str, raw_text: str
    ) -> str:
        try:
            result = await self._store.write_exercise(
                user_id,
                classification.exercise_type,
                classification.duration_minutes,
                classification.distance,
                raw_text,
                processed=classification.model_dump(),
            )
        except Exception:
            logger.exception("Error logging exercise for %s", user_id)
            return EXERCISE_APOLOGY
        if not result.success:
            logger.error("Failed to log exercise for %s: %s", user_id, result.error)
            return EXERCISE_APOLOGY
        return self._exercise_confirmation(classification)

    async def _handle_food(
        self, classification: Classification, user_id: str, raw_text: str
    ) -> str:
        try:
            result = await self._store.write_food(
                user_id,
                classification.food_items,
                raw_text,
                processed=classification.model_dump(),
            )
        except Exception:
            logger.exception("Error logging food for %s", user_id)
            return FOOD_APOLOGY
        if not result.success:
            logger.error("Failed to log food for %s: %s", user_id, result.error)
            return FOOD_APOLOGY
        return self._food_confirmation(classification)

    @staticmethod
    def _exercise_confirmation(classification: Classification) -> str:
        lines = ["✅ *Exercise Logged!* ✅", ""]
        if classification.duration_minutes:
            lines.append(f"Duration: {classification.duration_minutes} minutes")
        if classification.exercise_type:
            lines.append(f"Type: {classification.exercise_type}")
        if classification.distance:
            lines.append(f"Distance: {classification.distance}")
        lines += ["", "Keep up the good work! \U0001F4AA"]
        return "\n".join(lines)

    @staticmethod
    def _food_confirmation(classification: Classification) -> str:
        lines = ["✅ *Food Logged!* ✅", ""]
        if classification.food_items:
            lines.append(f"Food: {classification.food_items}")
        lines += ["", "Thanks for logging your meal! \U0001F34E"]
        return "\n".join(lines)

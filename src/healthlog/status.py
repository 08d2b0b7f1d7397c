"""Weekly status: summary statistics over a user's records and the report text."""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol

from .database.models import _now_local
from .llm.schemas import ExerciseRecord, FoodRecord, ReadResult, StatusSummary

logger = logging.getLogger(__name__)

REPORT_HEADER = "\U0001F4CA *Your Weekly Health Report* \U0001F4CA"


class RecordReader(Protocol):
    async def read_exercise(self, user_id: str) -> ReadResult: ...

    async def read_food(self, user_id: str) -> ReadResult: ...


def _records_or_empty(outcome, category: str, user_id: str) -> list:
    """Unwrap one category's read, substituting [] for any failure."""
    if isinstance(outcome, BaseException):
        logger.error("Reading %s logs for %s raised: %s", category, user_id, outcome)
        return []
    if not outcome.success:
        logger.error("Reading %s logs for %s failed: %s", category, user_id, outcome.error)
        return []
    return list(outcome.records)


def _in_window(records: list, threshold: datetime) -> list:
    return [r for r in records if r.date is not None and r.date >= threshold]


def average_duration(logs: list[ExerciseRecord]) -> int:
    """Mean duration over sessions that have one, rounded half up; 0 when none do."""
    durations = [log.duration for log in logs if log.duration and log.duration > 0]
    if not durations:
        return 0
    return int(sum(durations) / len(durations) + 0.5)


class StatusAggregator:
    """Builds a StatusSummary from the record store."""

    def __init__(self, reader: RecordReader) -> None:
        self._reader = reader

    async def summarize(
        self, user_id: str, days: int = 7, now: Optional[datetime] = None
    ) -> StatusSummary:
        """Summarize the last ``days`` days of records for ``user_id``.

        Both categories are read in full and filtered by date here rather than
        in the query. A failed read for one category leaves it empty without
        affecting the other.
        """
        now = now or _now_local()
        threshold = now - timedelta(days=days)
        logger.info("Building status for %s since %s", user_id, threshold.isoformat())

        exercise_outcome, food_outcome = await asyncio.gather(
            self._reader.read_exercise(user_id),
            self._reader.read_food(user_id),
            return_exceptions=True,
        )
        exercise_logs = _in_window(
            _records_or_empty(exercise_outcome, "exercise", user_id), threshold
        )
        food_logs = _in_window(_records_or_empty(food_outcome, "food", user_id), threshold)

        return StatusSummary(
            exercise_count=len(exercise_logs),
            average_duration=average_duration(exercise_logs),
            food_log_count=len(food_logs),
            days=days,
            date_threshold=threshold,
            exercise_logs=exercise_logs,
            food_logs=food_logs,
        )


def _fmt_date(d: datetime) -> str:
    return d.strftime("%b %-d")


def _fmt_exercise(log: ExerciseRecord) -> str:
    line = f"• {_fmt_date(log.date)}: {log.duration} mins of {log.type}"
    if log.distance:
        line += f" ({log.distance})"
    return line


def _fmt_food(log: FoodRecord) -> str:
    return f"• {_fmt_date(log.date)}: {log.food_items}"


def window_phrase(days: int) -> str:
    if days == 7:
        return "the past week"
    if days == 1:
        return "the past day"
    return f"the past {days} days"


def render_report(summary: StatusSummary, limit: int = 5) -> str:
    """Render the chat reply for a status request."""
    lines = [
        REPORT_HEADER,
        "",
        "*Weekly Summary:*",
        f"• Exercise sessions: {summary.exercise_count} sessions",
        f"• Average duration: {summary.average_duration} minutes",
        f"• Food logs: {summary.food_log_count} entries",
        "",
        "*Recent Exercise Logs:*",
    ]
    if summary.exercise_logs:
        recent = sorted(summary.exercise_logs, key=lambda log: log.date, reverse=True)
        lines.extend(_fmt_exercise(log) for log in recent[:limit])
    else:
        lines.append(f"No exercise logs in {window_phrase(summary.days)}.")

    lines += ["", "*Recent Food Logs:*"]
    if summary.food_logs:
        recent = sorted(summary.food_logs, key=lambda log: log.date, reverse=True)
        lines.extend(_fmt_food(log) for log in recent[:limit])
    else:
        lines.append(f"No food logs in {window_phrase(summary.days)}.")

    return "\n".join(lines)

"""Schemas for message classification, health records and status summaries."""

import math
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

IntentType = Literal["exercise", "food", "status", "unknown"]


class Classification(BaseModel):
    """Structured reading of one inbound message. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    type: IntentType = Field(description="Message category")
    is_status_request: bool = Field(
        default=False, description="True exactly when type is 'status'"
    )
    exercise_type: str = Field(
        default="", description="Exercise label, e.g. 'running' (exercise only)"
    )
    duration_minutes: Optional[int] = Field(
        default=None, ge=0, description="Exercise duration in minutes"
    )
    distance: str = Field(
        default="", description="Distance with unit as written, e.g. '5 miles'"
    )
    food_items: str = Field(default="", description="What was eaten (food only)")
    confidence: int = Field(default=0, description="Confidence 0-100")
    fallback: bool = Field(
        default=False, description="Produced by the keyword heuristics"
    )

    @model_validator(mode="before")
    @classmethod
    def _align_with_type(cls, data: Any) -> Any:
        """Keep is_status_request and type in step and blank fields of other categories."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        flag = data.get("is_status_request")
        if flag is True or (isinstance(flag, str) and flag.strip().lower() == "true"):
            data["type"] = "status"
        kind = data.get("type")
        data["is_status_request"] = kind == "status"
        if kind != "exercise":
            data["exercise_type"] = ""
            data["distance"] = ""
            data["duration_minutes"] = None
        if kind != "food":
            data["food_items"] = ""
        return data

    @field_validator("exercise_type", "distance", "food_items", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, bool):
            raise ValueError("expected text")
        if isinstance(value, (int, float)):
            return f"{value:g}"
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _whole_minutes(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            value = float(value.strip())
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("duration must be a finite number")
            return int(value + 0.5)
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, str):
            value = float(value.strip())
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("confidence must be a finite number")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return max(0, min(100, int(value + 0.5)))
        return value


class ClassificationError(BaseModel):
    """Why the model stage produced no usable classification."""

    reason: Literal["unavailable", "transport", "timeout", "parse", "schema"]
    detail: str = ""
    raw: Optional[str] = None


class GenerationConfig(BaseModel):
    """Sampling parameters passed to the model collaborator."""

    temperature: float = 0.2
    top_p: float = 0.8
    top_k: int = 40
    max_tokens: int = 500


class ExerciseRecord(BaseModel):
    """A stored exercise log as read back for reporting."""

    date: Optional[datetime] = None
    user_id: str
    duration: int = 0
    type: str = "Unknown"
    distance: str = ""
    raw_message: str = ""


class FoodRecord(BaseModel):
    """A stored food log as read back for reporting."""

    date: Optional[datetime] = None
    user_id: str
    food_items: str = "Unknown"
    raw_message: str = ""


class WriteResult(BaseModel):
    success: bool
    error: Optional[str] = None


class ReadResult(BaseModel):
    success: bool
    records: List[Any] = Field(default_factory=list)
    error: Optional[str] = None


class UserInfo(BaseModel):
    """Outcome of ensure_user."""

    user_id: str
    is_new: bool = False
    exercise_goal: int = 3
    food_log_goal: int = 1
    error: Optional[str] = None


class StatusSummary(BaseModel):
    """Statistics over one user's records inside the lookback window."""

    exercise_count: int = 0
    average_duration: int = 0
    food_log_count: int = 0
    days: int = 7
    date_threshold: datetime
    exercise_logs: List[ExerciseRecord] = Field(default_factory=list)
    food_logs: List[FoodRecord] = Field(default_factory=list)


class ProcessedMessage(BaseModel):
    """Result handed back to a transport: the reply and how the message was read."""

    classification: Classification
    response: str

"""Model-backed message classification with repair of sloppy JSON and keyword fallback.

Classification runs as two stages. ``classify_with_model`` makes one bounded
model call and returns either a ``Classification`` or a ``ClassificationError``
value; ``classify`` turns any error into the keyword heuristic result, so
callers always receive a usable classification.
"""

import asyncio
import json
import logging
import re
from typing import Optional, Protocol

from pydantic import ValidationError

from ..config import config
from ..extract import estimate_duration
from ..heuristics import classify_fallback
from .schemas import Classification, ClassificationError, GenerationConfig

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str, generation: GenerationConfig) -> str: ...


CLASSIFICATION_PROMPT = """
You are a health tracking assistant that extracts information from user messages.

The message is: "{message}"

Extract the following information if present:
1. Is this about exercise or food?
2. If exercise: What was the duration? What was the distance (if mentioned)? What type of exercise?
3. If food: What food items were consumed?
4. Is this a "status" request?

Return ONLY a JSON object with the following structure:
{{
  "type": "exercise" OR "food" OR "status" OR "unknown",
  "duration_minutes": number (if exercise, can be estimated based on typical pace if only distance is given),
  "distance": text (if mentioned),
  "exercise_type": text (if mentioned, default to "running" for messages about running/jogging/ran),
  "food_items": text (if food),
  "is_status_request": true/false,
  "confidence": 0-100
}}

If someone mentions running, classify it as exercise even if details are minimal.
If food is eaten before or after a workout ("protein shake after pilates"), it is food.

EXAMPLES:
"I ran 5 miles today" -> {{"type": "exercise", "duration_minutes": 50, "distance": "5 miles", "exercise_type": "running", "food_items": "", "is_status_request": false, "confidence": 95}}
"I ran" -> {{"type": "exercise", "duration_minutes": null, "distance": "", "exercise_type": "running", "food_items": "", "is_status_request": false, "confidence": 90}}
"I had oatmeal for breakfast" -> {{"type": "food", "duration_minutes": null, "distance": "", "exercise_type": "", "food_items": "oatmeal", "is_status_request": false, "confidence": 95}}
"status" -> {{"type": "status", "duration_minutes": null, "distance": "", "exercise_type": "", "food_items": "", "is_status_request": true, "confidence": 99}}
"""

LEADING_FENCE_RE = re.compile(r"^\s*`+[a-zA-Z0-9_-]*")
TRAILING_FENCE_RE = re.compile(r"`+\s*$")


def strip_code_fences(raw: str) -> str:
    """Remove ```json fences and stray backticks at the ends of a model reply."""
    cleaned = LEADING_FENCE_RE.sub("", raw, count=1)
    return TRAILING_FENCE_RE.sub("", cleaned, count=1).strip()


def extract_json_object(raw: str) -> Optional[str]:
    """Return the first balanced {...} substring, skipping braces inside strings."""
    start = raw.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(raw)):
            ch = raw[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return raw[start:i + 1]
        # Unbalanced from this brace; try the next one.
        start = raw.find("{", start + 1)
    return None


def parse_classification(raw: str) -> Classification | ClassificationError:
    """Repair and validate raw model text into a Classification."""
    cleaned = strip_code_fences(raw)
    candidate = extract_json_object(cleaned)
    if candidate is None:
        return ClassificationError(reason="parse", detail="no JSON object in reply", raw=raw)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return ClassificationError(reason="parse", detail=str(e), raw=raw)

    if not isinstance(data, dict):
        return ClassificationError(reason="schema", detail="reply is not an object", raw=raw)
    if not data.get("type"):
        return ClassificationError(reason="schema", detail="missing 'type'", raw=raw)

    # Only the fallback path may set this flag.
    data.pop("fallback", None)
    try:
        return Classification.model_validate(data)
    except ValidationError as e:
        return ClassificationError(reason="schema", detail=str(e), raw=raw)
    except Exception as e:
        # Validators can still trip on values json.loads accepts.
        return ClassificationError(reason="schema", detail=f"{type(e).__name__}: {e}", raw=raw)


def with_estimated_duration(classification: Classification) -> Classification:
    """Fill a missing exercise duration from its distance using a fixed pace."""
    if (
        classification.type != "exercise"
        or classification.duration_minutes is not None
        or not classification.distance
    ):
        return classification
    estimate = estimate_duration(classification.distance, classification.exercise_type)
    if estimate is None:
        return classification
    return classification.model_copy(update={"duration_minutes": estimate})


class ModelClassifier:
    """Classifies messages with the model, degrading to keyword heuristics."""

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        *,
        generation: Optional[GenerationConfig] = None,
        timeout: Optional[float] = None,
        prompt_template: str = CLASSIFICATION_PROMPT,
    ) -> None:
        self._generator = generator
        self._generation = generation or GenerationConfig()
        self._timeout = timeout if timeout is not None else config.llm.timeout
        self._prompt_template = prompt_template

    @property
    def generation(self) -> GenerationConfig:
        return self._generation

    async def classify_with_model(self, message: str) -> Classification | ClassificationError:
        """One bounded model call; failures come back as a ClassificationError."""
        if self._generator is None:
            return ClassificationError(reason="unavailable", detail="no model configured")

        prompt = self._prompt_template.format(message=message)
        try:
            raw = await asyncio.wait_for(
                self._generator.generate(prompt, self._generation),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            return ClassificationError(
                reason="timeout", detail=f"no reply within {self._timeout:g}s"
            )
        except Exception as e:
            return ClassificationError(reason="transport", detail=f"{type(e).__name__}: {e}")

        if not isinstance(raw, str):
            return ClassificationError(reason="parse", detail="reply is not text")
        return parse_classification(raw)

    async def classify(self, message: str) -> Classification:
        """Classify a message. Never raises."""
        outcome = await self.classify_with_model(message)
        if isinstance(outcome, ClassificationError):
            if outcome.reason != "unavailable":
                logger.warning(
                    "Model classification failed (%s: %s); using keyword fallback",
                    outcome.reason,
                    outcome.detail,
                )
            result = classify_fallback(message)
        else:
            result = with_estimated_duration(outcome)

        logger.info(
            "Classified as %s (confidence %d%s)",
            result.type,
            result.confidence,
            ", fallback" if result.fallback else "",
        )
        return result

"""Keyword heuristic classifier, used when the model is unavailable or misbehaves.

Rules are tried in order and the first matching predicate wins, so the order of
``RULES`` is the precedence: status beats everything, exercise beats food unless
something eaten is mentioned ("before breakfast" only says when the exercise
happened), and a bare session keyword ("yoga", "workout") pulls an otherwise
food-looking message back to exercise unless a food cue such as "shake" or
"after" ties the food to the session.
"""

import logging
import re
from typing import Callable

from .extract import estimate_duration, extract
from .llm.schemas import Classification

logger = logging.getLogger(__name__)

HEURISTIC_CONFIDENCE = 75
STATUS_CONFIDENCE = 85

STATUS_KEYWORDS = ("status", "report")

EXERCISE_KEYWORDS = (
    "run", "ran", "jog", "exercise", "workout", "mile", "gym", "training",
    "walk", "ride", "cycl", "bik", "pilates", "dance", "zumba", "boxing",
    "martial", "karate", "taekwondo", "kickboxing", "crossfit", "hiit",
    "circuit", "sport", "yoga", "hik",
)

FOOD_KEYWORDS = (
    "food", "meal", "breakfast", "lunch", "dinner", "snack",
    "salad", "fruit", "vegetable", "protein", "shake",
)
# "ate"/"eat" only count at the start of a word ("moderate", "sweat" are not food).
EATING_RE = re.compile(r"\b(?:ate\b|eat)")
MEAL_TIME_PHRASES = ("for breakfast", "for lunch", "for dinner", "for snack", "for a snack")

SESSION_KEYWORDS = ("workout", "exercise", "pilates", "yoga")
FOOD_CONTEXT_TERMS = ("shake", "before", "after")

# Ordered: the first entry with a matching keyword names the exercise.
EXERCISE_LABELS = (
    (("walk",), "walking"),
    (("swim",), "swimming"),
    (("bik", "ride", "cycl"), "cycling"),
    (("gym", "lift", "weight"), "strength training"),
    (("yoga",), "yoga"),
    (("pilates",), "pilates"),
    (("dance",), "dance"),
    (("zumba",), "zumba"),
    (("boxing", "kickboxing"), "boxing"),
    (("martial", "karate", "taekwondo"), "martial arts"),
    (("crossfit",), "crossfit"),
    (("hiit", "circuit"), "hiit"),
    (("hik",), "hiking"),
)
DEFAULT_EXERCISE_LABEL = "running"

LEADING_VERB_PATTERNS = (
    re.compile(r"^\s*i\s+(?:had|ate|consumed|eat)\b", re.IGNORECASE),
    re.compile(r"^\s*(?:had|ate|consumed)\b", re.IGNORECASE),
)
MEAL_PHRASE_PATTERNS = (
    re.compile(r"\b(?:for|at|as)\s+(?:my\s+|a\s+)?(?:breakfast|lunch|dinner|snack)\b", re.IGNORECASE),
    re.compile(
        r"\b(?:before|after)\s+(?:my\s+|the\s+|a\s+)?"
        r"(?:workout|exercise|pilates|yoga|run|gym|class|training|practice)\b",
        re.IGNORECASE,
    ),
)
# A meal named only as a point in time ("before breakfast") says when, not what.
MEAL_TIMING_RE = re.compile(
    r"\b(?:before|after)\s+(?:my\s+|the\s+|a\s+)?(?:breakfast|lunch|dinner|snack|meal)\b"
)


def _contains_any(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


def is_status(text: str) -> bool:
    return _contains_any(text, STATUS_KEYWORDS)


def has_exercise_vocabulary(text: str) -> bool:
    return _contains_any(text, EXERCISE_KEYWORDS)


def has_food_vocabulary(text: str) -> bool:
    if _contains_any(text, FOOD_KEYWORDS) or EATING_RE.search(text):
        return True
    return "had" in text and _contains_any(text, MEAL_TIME_PHRASES)


def exercise_label(text: str) -> str:
    """Map lowered text to an exercise label via the ordered label table."""
    for keywords, label in EXERCISE_LABELS:
        if _contains_any(text, keywords):
            return label
    return DEFAULT_EXERCISE_LABEL


def extract_food_items(message: str) -> str:
    """Strip eating verbs and meal-time/session phrases, leaving what was eaten."""
    items = message
    for pattern in LEADING_VERB_PATTERNS:
        items = pattern.sub("", items, count=1).strip()
    for pattern in MEAL_PHRASE_PATTERNS:
        items = pattern.sub("", items)
    items = re.sub(r"\s{2,}", " ", items).strip(" ,.;:!-")
    return items or message.strip()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _status(message: str, text: str) -> Classification:
    return Classification(
        type="status",
        is_status_request=True,
        confidence=STATUS_CONFIDENCE,
        fallback=True,
    )


def _exercise(message: str, text: str) -> Classification:
    fields = extract(message)
    label = exercise_label(text)
    duration = fields["duration_minutes"]
    if duration is None and fields["distance"]:
        duration = estimate_duration(fields["distance"], label)
    return Classification(
        type="exercise",
        exercise_type=label,
        duration_minutes=duration,
        distance=fields["distance"],
        confidence=HEURISTIC_CONFIDENCE,
        fallback=True,
    )


def _session_exercise(message: str, text: str) -> Classification:
    return Classification(
        type="exercise",
        exercise_type=exercise_label(text),
        confidence=HEURISTIC_CONFIDENCE,
        fallback=True,
    )


def _food(message: str, text: str) -> Classification:
    return Classification(
        type="food",
        food_items=extract_food_items(message),
        confidence=HEURISTIC_CONFIDENCE,
        fallback=True,
    )


def _unknown(message: str, text: str) -> Classification:
    return Classification(type="unknown", confidence=0, fallback=True)


def food_overrides_exercise(text: str) -> bool:
    """True when the text mentions food beyond a meal used as a time marker."""
    return has_food_vocabulary(MEAL_TIMING_RE.sub(" ", text))


def _exercise_without_food(text: str) -> bool:
    return has_exercise_vocabulary(text) and not food_overrides_exercise(text)


def _food_around_bare_session(text: str) -> bool:
    return (
        has_food_vocabulary(text)
        and _contains_any(text, SESSION_KEYWORDS)
        and not _contains_any(text, FOOD_CONTEXT_TERMS)
    )


Rule = tuple[str, Callable[[str], bool], Callable[[str, str], Classification]]

RULES: tuple[Rule, ...] = (
    ("status", is_status, _status),
    ("exercise", _exercise_without_food, _exercise),
    ("session", _food_around_bare_session, _session_exercise),
    ("food", has_food_vocabulary, _food),
    ("unknown", lambda text: True, _unknown),
)


def classify_fallback(message: str | None) -> Classification:
    """Classify a message from keywords alone. Never raises."""
    message = message or ""
    text = message.strip().lower()
    for name, matches, build in RULES:
        if matches(text):
            logger.info("Fallback rule '%s' matched", name)
            return build(message, text)
    # Unreachable: the last rule always matches.
    return _unknown(message, text)

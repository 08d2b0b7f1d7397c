"""Regex extraction of duration and distance from free text.

Everything here is pure: no I/O, no state, and no input makes it raise.
"""

import re

DURATION_RE = re.compile(
    r"(?<![\d.])(\d+(?:\.\d+)?)\s*(minutes|minute|mins|min|hours|hour|hrs|hr)\b",
    re.IGNORECASE,
)
DISTANCE_RE = re.compile(
    r"(?<![\d.])(\d+(?:\.\d+)?)\s*(miles|mile|kilometers|kilometer|km|k)\b",
    re.IGNORECASE,
)

HOUR_UNITS = {"hour", "hours", "hr", "hrs"}
KM_PER_MILE = 1.609344

# Minutes per mile used to estimate a duration when only a distance was given.
PACE_MIN_PER_MILE = {
    "walking": 20.0,
    "hiking": 24.0,
    "cycling": 4.0,
    "swimming": 30.0,
}
DEFAULT_PACE_MIN_PER_MILE = 10.0


def extract_duration(text: str | None) -> int | None:
    """Return the first duration in ``text`` in whole minutes, or None."""
    if not text:
        return None
    match = DURATION_RE.search(text)
    if not match:
        return None
    value = float(match.group(1))
    if match.group(2).lower() in HOUR_UNITS:
        value *= 60
    return int(value + 0.5)


def extract_distance(text: str | None) -> str | None:
    """Return the first distance in ``text`` verbatim ("5 miles", "5k"), or None."""
    if not text:
        return None
    match = DISTANCE_RE.search(text)
    return match.group(0) if match else None


def extract(text: str | None) -> dict:
    """Extract both quantities.

    Returns dict with keys: duration_minutes, distance.
    """
    return {
        "duration_minutes": extract_duration(text),
        "distance": extract_distance(text),
    }


def distance_in_miles(distance: str | None) -> float | None:
    """Convert a distance string such as '5 miles' or '10k' to miles."""
    if not distance:
        return None
    match = DISTANCE_RE.search(distance)
    if not match:
        return None
    value = float(match.group(1))
    if match.group(2).lower().startswith("k"):
        value /= KM_PER_MILE
    return value


def estimate_duration(distance: str | None, exercise_type: str | None = None) -> int | None:
    """Estimate minutes from a distance using a fixed pace for the activity.

    Running pace (10 min/mile) is the default for unlisted activities.
    """
    miles = distance_in_miles(distance)
    if miles is None:
        return None
    pace = PACE_MIN_PER_MILE.get((exercise_type or "").lower(), DEFAULT_PACE_MIN_PER_MILE)
    return int(miles * pace + 0.5)

"""
Pure metric computation functions.

All functions are pure and typed for testability.  Rounding is half-up
(away from the banker's rounding of the built-in ``round``) so that
values like 2.5 sets always round to 3.
"""

import math
from datetime import datetime, timezone

from .config import PROGRESSION_WEIGHT_STEP, TECHNIQUE_WEIGHT_STEP


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    Args:
        value: Any finite number

    Returns:
        Nearest integer (2.5 -> 3, -2.5 -> -2)
    """
    return math.floor(value + 0.5)


def round_to_half(weight: float) -> float:
    """
    Round a weight to the nearest 0.5 kg.

    Used for every weight in a technique expansion (common plate increment).

        w' = round(w * 2) / 2
    """
    steps = 1 / TECHNIQUE_WEIGHT_STEP
    return math.floor(weight * steps + 0.5) / steps


def round_to_quarter(weight: float) -> float:
    """
    Round a weight to the nearest 0.25 kg.

    Used for progressive-overload targets; deliberately separate from
    round_to_half so the two conventions never drift together.

        w' = round(w * 4) / 4
    """
    steps = 1 / PROGRESSION_WEIGHT_STEP
    return math.floor(weight * steps + 0.5) / steps


def round_to_tenth(value: float) -> float:
    """Round to one decimal place, halves going up."""
    return math.floor(value * 10 + 0.5) / 10


def percentage_of(actual: float, target: float) -> int:
    """
    Whole-number percentage of target reached.

    Returns:
        round(actual / target * 100), or 0 when target is not positive
    """
    if target <= 0:
        return 0
    return round_half_up(actual / target * 100)


def percent_change(current: float, previous: float) -> float:
    """
    Relative change from previous to current, in percent.

    Returns:
        (current - previous) / previous * 100, or 0.0 when previous is 0
    """
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def best_set_score(weight: float, reps: int) -> float:
    """
    Score a single set for best-set comparisons.

    Loaded sets score weight x reps.  Unloaded (bodyweight) sets score
    their reps, otherwise every bodyweight session would tie at zero.
    """
    if weight > 0:
        return weight * reps
    return float(reps)


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def as_utc(moment: datetime) -> datetime:
    """
    Timezone-aware view of a timestamp for ordering and window checks.

    Naive timestamps are read as UTC, so histories that mix naive and
    offset timestamps still sort and compare.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)

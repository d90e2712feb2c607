"""
Progressive overload: next weight/rep target from recent performance.

The core rule reads the most recent working set and takes one of three
branches (add load, add a rep, or a small fallback load bump).  Around it
sit the default-value policies that keep the rule total, and the target
pipeline used when an exercise has no history yet.
"""

import logging
import math
from typing import Iterable, Mapping, Sequence

from .config import (
    BASELINE_WEIGHT_FRACTION,
    BODYWEIGHT_RATIOS,
    DEFAULT_RIR,
    DEFAULT_STARTING_WEIGHT_KG,
    FALLBACK_INCREMENT_KG,
    FEMALE_WEIGHT_MULTIPLIER,
    HEAVY_LOAD_INCREMENT_KG,
    HEAVY_LOAD_THRESHOLD_KG,
    LEARNED_WEIGHT_VARIANCE_THRESHOLD,
    LIGHT_LOAD_INCREMENT_KG,
    RECENT_SETS_LIMIT,
    RIR_INCREASE_THRESHOLD,
    STARTING_WEIGHTS_KG,
)
from .metrics import as_utc, round_half_up, round_to_quarter
from .models import (
    LearnedWeight,
    ProgressiveTarget,
    SetRecord,
    Sex,
    StrengthBaseline,
)

logger = logging.getLogger(__name__)

RepRange = tuple[int, int]


# =============================================================================
# Default-value policies
# =============================================================================


def normalize_rep_range(rep_range: Sequence[int]) -> RepRange:
    """Inverted ranges are swapped and the floor is at least 1 rep."""
    low, high = int(rep_range[0]), int(rep_range[1])
    if low > high:
        low, high = high, low
    low = max(1, low)
    return low, max(low, high)


def effective_rir(rir: int | None) -> int:
    """Missing RIR is assumed to be DEFAULT_RIR (3); negative RIR means failure (0)."""
    if rir is None:
        return DEFAULT_RIR
    return max(0, int(rir))


def effective_weight(weight: float | None) -> float:
    """Missing, NaN, infinite or negative weight is treated as unloaded (0)."""
    if weight is None or not math.isfinite(weight):
        return 0.0
    return max(0.0, float(weight))


def effective_reps(reps: int | None, rep_range: RepRange) -> int:
    """Missing or non-positive reps fall back to the bottom of the range."""
    if reps is None or reps <= 0:
        return rep_range[0]
    return int(reps)


# =============================================================================
# History selection
# =============================================================================


def _most_recent_first(sets: Sequence[SetRecord]) -> list[SetRecord]:
    """
    Order sets newest first.

    Timestamped sets are sorted by completed_at; untimestamped sets keep
    their supplied order after them (providers return newest first).
    """
    stamped = [s for s in sets if s.completed_at is not None]
    unstamped = [s for s in sets if s.completed_at is None]
    stamped.sort(key=lambda s: as_utc(s.completed_at), reverse=True)
    return stamped + unstamped


def recent_working_sets(
    exercise_name: str,
    history: Iterable[SetRecord],
    limit: int = RECENT_SETS_LIMIT,
) -> list[SetRecord]:
    """
    The last ``limit`` working sets for an exercise, newest first.

    Matches exercise names case-insensitively and drops warmups and
    skipped sets, mirroring what the history provider returns.
    """
    name = exercise_name.strip().lower()
    matching = [
        s for s in history
        if s.is_working and s.exercise_name.strip().lower() == name
    ]
    return _most_recent_first(matching)[: max(0, limit)]


# =============================================================================
# Core rule
# =============================================================================


def get_progressive_target(
    exercise_name: str,
    rep_range: Sequence[int],
    recent_sets: Sequence[SetRecord],
) -> ProgressiveTarget:
    """
    Compute the next weight/rep target from the most recent working set.

    Branch 1 (increase load): RIR < 2 or reps at/above the top of the
        range -> weight + 2.5 kg (>= 40 kg) or + 1.25 kg, rounded to 0.25,
        reps reset to the bottom of the range.
    Branch 2 (add reps): reps below the top -> reps + 1 (capped), same
        weight.
    Branch 3 (fallback): weight + 1.25 kg rounded to 0.25, bottom reps.

    Never raises.  Malformed values go through the effective_* policies.

    Args:
        exercise_name: Exercise the sets belong to (used for logging only)
        rep_range: [min, max] target reps
        recent_sets: Recent sets for this exercise

    Returns:
        ProgressiveTarget; weight 0 and bottom reps when there is no history
    """
    reps_range = normalize_rep_range(rep_range)
    working = _most_recent_first([s for s in recent_sets if s.is_working])

    if not working:
        return ProgressiveTarget(
            weight=0.0,
            reps=reps_range[0],
            has_history=False,
            last_performed_at=None,
            based_on_sets=0,
            rule="no_history",
        )

    last = working[0]
    last_weight = effective_weight(last.weight)
    last_reps = effective_reps(last.reps, reps_range)
    last_rir = effective_rir(last.rir)
    rep_min, rep_max = reps_range

    if last_rir < RIR_INCREASE_THRESHOLD or last_reps >= rep_max:
        increment = (
            HEAVY_LOAD_INCREMENT_KG
            if last_weight >= HEAVY_LOAD_THRESHOLD_KG
            else LIGHT_LOAD_INCREMENT_KG
        )
        target_weight = round_to_quarter(last_weight + increment)
        target_reps = rep_min
        rule = "increase_load"
    elif last_reps < rep_max:
        target_weight = last_weight
        target_reps = min(last_reps + 1, rep_max)
        rule = "add_reps"
    else:
        target_weight = round_to_quarter(last_weight + FALLBACK_INCREMENT_KG)
        target_reps = rep_min
        rule = "fallback_load"

    logger.debug(
        "%s: last %.2f x %d @ RIR %d -> %s %.2f x %d",
        exercise_name, last_weight, last_reps, last_rir, rule, target_weight, target_reps,
    )

    return ProgressiveTarget(
        weight=target_weight,
        reps=target_reps,
        has_history=True,
        last_performed_at=last.completed_at,
        based_on_sets=len(working),
        rule=rule,
    )


# =============================================================================
# Targets without (or beyond) history
# =============================================================================


def blend_learned_weight(calculated: float, learned: LearnedWeight | None) -> float:
    """
    Blend a high-confidence learned weight into a calculated target.

    Only when they disagree by more than 10% of the calculated weight is
    the result the (half-up rounded) average of both.
    """
    if learned is None or learned.confidence != "high" or calculated <= 0:
        return calculated
    variance = abs(learned.target_weight - calculated) / calculated
    if variance <= LEARNED_WEIGHT_VARIANCE_THRESHOLD:
        return calculated
    logger.debug(
        "%s: learned weight %.2f differs %.0f%% from %.2f; averaging",
        learned.exercise_name, learned.target_weight, variance * 100, calculated,
    )
    return float(round_half_up((calculated + learned.target_weight) / 2))


def _lookup(name: str, table: tuple[tuple[tuple[str, ...], float], ...]) -> float | None:
    for keywords, value in table:
        if all(k in name for k in keywords):
            return value
    return None


def estimate_initial_weight(
    exercise_name: str,
    sex: Sex = "other",
    bodyweight_kg: float | None = None,
    strength_baseline: Mapping[str, StrengthBaseline] | None = None,
) -> float:
    """
    Conservative starting weight for an exercise with no history.

    Order of preference:
    1. 85% of a matching baseline lift (names match when either contains
       the other's first word)
    2. Bodyweight ratio for the major lifts
    3. Fixed starting weights by movement keyword (20 kg otherwise)

    Options 2 and 3 are scaled by 0.6 for female lifters.
    """
    name = exercise_name.lower()

    if strength_baseline:
        first_word = name.split(" ")[0] if name else ""
        for baseline_name, baseline in strength_baseline.items():
            key = baseline_name.lower()
            if key and (key in name or (first_word and first_word in key)):
                return float(round_half_up(baseline.weight * BASELINE_WEIGHT_FRACTION))

    multiplier = FEMALE_WEIGHT_MULTIPLIER if sex == "female" else 1.0

    if bodyweight_kg is not None and bodyweight_kg > 0:
        ratio = _lookup(name, BODYWEIGHT_RATIOS)
        if ratio is not None:
            return float(round_half_up(bodyweight_kg * ratio * multiplier))

    start = _lookup(name, STARTING_WEIGHTS_KG)
    if start is None:
        start = DEFAULT_STARTING_WEIGHT_KG
    return float(round_half_up(start * multiplier))


def resolve_exercise_target(
    exercise_name: str,
    rep_range: Sequence[int],
    history: Iterable[SetRecord],
    learned: LearnedWeight | None = None,
    sex: Sex = "other",
    bodyweight_kg: float | None = None,
    strength_baseline: Mapping[str, StrengthBaseline] | None = None,
) -> ProgressiveTarget:
    """
    Full target pipeline for one prescribed exercise.

    With history: the progressive target, blended with a high-confidence
    learned weight.  Without history: the learned weight if one exists,
    else an initial estimate, at the bottom of the rep range.
    """
    recent = recent_working_sets(exercise_name, history)
    target = get_progressive_target(exercise_name, rep_range, recent)

    if target.has_history:
        target.weight = blend_learned_weight(target.weight, learned)
        return target

    if learned is not None:
        target.weight = effective_weight(learned.target_weight)
    else:
        target.weight = estimate_initial_weight(
            exercise_name, sex, bodyweight_kg, strength_baseline
        )
    return target

"""
Split scheduling for weak-point specialization.

Turns a specialization muscle and a weekly training frequency into a
cyclic day-by-day list of workout types, and sizes the boosted volume
for the specialized muscle.  Every function is total: out-of-range
numbers are clamped, unknown muscles fall back to defaults.
"""

import logging
from typing import Mapping

from .config import (
    DEFAULT_AGGRESSIVENESS,
    FREQUENCY_BANDS,
    MAX_SPECIALIZATION_FREQUENCY,
    MIN_WEEKLY_FREQUENCY,
    REST_DAYS_PER_CYCLE,
    SPECIALIZATION_MULTIPLIERS,
    FrequencyBand,
)
from .metrics import round_half_up
from .models import Aggressiveness, Schedule, SpecializationVolume, SplitPlan
from .muscles import (
    COMPLEMENTARY_ROTATIONS,
    DEFAULT_WORKOUT_TYPES,
    MUSCLE_WORKOUT_TYPES,
    SPECIALIZABLE_MUSCLES,
    WORKOUT_TYPE_MUSCLES,
    MuscleGroup,
    WorkoutType,
    muscle_focus,
    muscle_size,
)

logger = logging.getLogger(__name__)


def get_specializable_muscles() -> list[MuscleGroup]:
    """Return every muscle that can be chosen for specialization."""
    return list(SPECIALIZABLE_MUSCLES)


def is_specializable(muscle: str) -> bool:
    """Return True if the name is a specializable muscle."""
    return muscle in SPECIALIZABLE_MUSCLES


def get_workout_types_for_muscle(muscle: MuscleGroup) -> list[WorkoutType]:
    """
    Workout types that train the given muscle, primary type first.

    Args:
        muscle: Muscle group name

    Returns:
        One or two workout types; ["full_body"] for unknown muscles
    """
    return list(MUSCLE_WORKOUT_TYPES.get(muscle, DEFAULT_WORKOUT_TYPES))


def get_complementary_workout_type(muscle: MuscleGroup, day_index: int) -> WorkoutType:
    """
    Workout type for a non-specialization day.

    Upper-body specialization rotates push/pull/legs, lower-body rotates
    upper/legs, and core/arms rotates upper/lower.
    """
    rotation = COMPLEMENTARY_ROTATIONS[muscle_focus(muscle)]
    return rotation[day_index % len(rotation)]


def generate_schedule(
    muscle: MuscleGroup,
    weekly_frequency: int,
    target_frequency: int | None = None,
) -> Schedule:
    """
    Generate a weak-point focus cycle.

    cycle_days = weekly_frequency + 1 and the specialization muscle's
    primary workout type is spread every floor(cycle_days / target)
    days until target_frequency days train the muscle.  Any day whose
    type trains the muscle (e.g. a complementary push day for chest)
    counts toward that total.

    Args:
        muscle: Specialization muscle
        weekly_frequency: Training days per week; values <= 0 clamp to 1
        target_frequency: Specialization days per cycle; defaults to
            min(weekly_frequency - 1, 4)

    Returns:
        Schedule with one workout type per cycle day
    """
    if weekly_frequency < MIN_WEEKLY_FREQUENCY:
        logger.debug("weekly_frequency %s clamped to %s", weekly_frequency, MIN_WEEKLY_FREQUENCY)
        weekly_frequency = MIN_WEEKLY_FREQUENCY

    cycle_days = weekly_frequency + REST_DAYS_PER_CYCLE

    if target_frequency is None:
        target_frequency = min(weekly_frequency - 1, MAX_SPECIALIZATION_FREQUENCY)
    if target_frequency <= 0:
        logger.debug("target_frequency %s clamped to 1", target_frequency)
        target_frequency = 1
    target_frequency = min(target_frequency, cycle_days)

    muscle_types = get_workout_types_for_muscle(muscle)
    interval = max(1, cycle_days // target_frequency)

    workout_types: list[WorkoutType] = []
    for day in range(cycle_days):
        # Complementary days that also train the muscle count toward the target
        trained = sum(t in muscle_types for t in workout_types)
        if day % interval == 0 and trained < target_frequency:
            workout_types.append(muscle_types[0])
        else:
            workout_types.append(get_complementary_workout_type(muscle, day))

    return Schedule(
        workout_types=workout_types,
        cycle_days=cycle_days,
        specialization_frequency=target_frequency,
    )


def calculate_specialization_volume(
    base_volume: float,
    frequency: int,
    aggressiveness: Aggressiveness = DEFAULT_AGGRESSIVENESS,
) -> SpecializationVolume:
    """
    Boost a muscle's per-cycle volume for specialization.

    total = round(base * multiplier), per_session = round(total / frequency)
    with multipliers moderate 1.3, high 1.5, very_high 1.8.

    Args:
        base_volume: Normal per-cycle sets for the muscle
        frequency: Sessions per cycle that train it; values <= 0 clamp to 1
        aggressiveness: "moderate", "high" or "very_high"; unknown -> "high"

    Returns:
        SpecializationVolume
    """
    multiplier = SPECIALIZATION_MULTIPLIERS.get(
        aggressiveness, SPECIALIZATION_MULTIPLIERS[DEFAULT_AGGRESSIVENESS]
    )
    if frequency <= 0:
        logger.debug("specialization frequency %s clamped to 1", frequency)
        frequency = 1

    total_volume = round_half_up(base_volume * multiplier)
    return SpecializationVolume(
        total_volume=total_volume,
        volume_multiplier=multiplier,
        volume_per_session=round_half_up(total_volume / frequency),
    )


def get_recommended_frequency(muscle: MuscleGroup) -> FrequencyBand:
    """
    Recommended sessions per cycle based on recovery capacity.

    Small muscles recover fastest (3-6, optimal 4); large compound groups
    need the most recovery (2-4, optimal 3); everything else is medium
    (2-5, optimal 3).
    """
    return FREQUENCY_BANDS[muscle_size(muscle)]


def build_split_plan(
    muscle: MuscleGroup,
    weekly_frequency: int,
    base_volumes: Mapping[MuscleGroup, float],
    target_frequency: int | None = None,
    aggressiveness: Aggressiveness = DEFAULT_AGGRESSIVENESS,
) -> SplitPlan:
    """
    Build a full SplitPlan around a specialization muscle.

    frequency_map counts, for every muscle, the cycle sessions whose
    workout type trains it.  volume_distribution carries the base
    per-cycle volume of each trained muscle, with the specialization
    muscle's entry replaced by its boosted total.

    Args:
        muscle: Specialization muscle
        weekly_frequency: Training days per week
        base_volumes: Normal per-cycle sets per muscle (e.g. landmark MAVs)
        target_frequency: Optional specialization days per cycle
        aggressiveness: Specialization volume multiplier key

    Returns:
        Active SplitPlan
    """
    schedule = generate_schedule(muscle, weekly_frequency, target_frequency)

    frequency_map: dict[MuscleGroup, int] = {}
    for workout_type in schedule.workout_types:
        for trained in WORKOUT_TYPE_MUSCLES.get(workout_type, ()):
            frequency_map[trained] = frequency_map.get(trained, 0) + 1

    volume_distribution: dict[MuscleGroup, int] = {
        m: round_half_up(v)
        for m, v in base_volumes.items()
        if m in frequency_map and v > 0
    }

    base = base_volumes.get(muscle, 0)
    if base > 0:
        boosted = calculate_specialization_volume(
            base, schedule.specialization_frequency, aggressiveness
        )
        volume_distribution[muscle] = boosted.total_volume
    else:
        logger.debug("no base volume for %s; distribution left unboosted", muscle)

    return SplitPlan(
        cycle_days=schedule.cycle_days,
        sessions=list(schedule.workout_types),
        frequency_map=frequency_map,
        volume_distribution=volume_distribution,
        specialization_muscle=muscle,
    )


def next_cycle_day(current_day: int, cycle_days: int) -> int:
    """
    Advance a 1-indexed cycle day, wrapping back to 1 after the last day.

    Out-of-range current days restart the cycle at 1.
    """
    if cycle_days < 1 or current_day < 1 or current_day >= cycle_days:
        return 1
    return current_day + 1

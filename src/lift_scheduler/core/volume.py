"""
Volume landmark tracking.

Compares actual per-muscle set volume against MEV/MAV/MRV landmarks, or
against the previous cycle, and summarises cycle progress toward a split
plan's volume distribution.
"""

from collections import defaultdict
from typing import Iterable, Mapping

from .config import (
    NEAR_MRV_MARGIN_SETS,
    PRIMARY_MUSCLE_SET_FRACTION,
    SECONDARY_MUSCLE_SET_FRACTION,
    VOLUME_PROGRESS_LIMIT,
)
from .metrics import percent_change, percentage_of
from .models import (
    ExerciseVolume,
    MuscleVolumeProgress,
    VolumeChange,
    VolumeLandmark,
    VolumeStatus,
)
from .muscles import MuscleGroup, parent_muscle


def classify(
    muscle: MuscleGroup,
    landmark: VolumeLandmark,
    actual_volume: float,
    near_mrv_margin: int = NEAR_MRV_MARGIN_SETS,
) -> VolumeStatus:
    """
    Classify actual weekly sets against a muscle's landmarks.

    actual < MEV           -> under_mev
    MEV <= actual < MAV    -> in_range (sub-optimal zone)
    MAV <= actual < MRV    -> in_range (optimal zone)
    actual >= MRV          -> over_mrv

    With a positive near_mrv_margin, volume within that many sets below
    MRV reports near_mrv instead of in_range.

    Args:
        muscle: Muscle being classified
        landmark: Its landmark table entry
        actual_volume: Sets performed (may be fractional)
        near_mrv_margin: Sets below MRV that count as "near"; 0 disables

    Returns:
        VolumeStatus with percentage = round(actual / MAV * 100)
    """
    percentage = percentage_of(actual_volume, landmark.mav)

    if actual_volume < landmark.mev:
        status, zone = "under_mev", "below_mev"
    elif actual_volume >= landmark.mrv:
        status, zone = "over_mrv", "above_mrv"
    elif near_mrv_margin > 0 and actual_volume >= landmark.mrv - near_mrv_margin:
        status, zone = "near_mrv", "near_mrv"
    elif actual_volume < landmark.mav:
        status, zone = "in_range", "sub_optimal"
    else:
        status, zone = "in_range", "optimal"

    return VolumeStatus(
        muscle=muscle,
        actual_volume=actual_volume,
        target_volume=landmark.mav,
        percentage=percentage,
        status=status,
        zone=zone,
    )


def classify_all(
    landmarks: Mapping[MuscleGroup, VolumeLandmark],
    actuals: Mapping[MuscleGroup, float],
    near_mrv_margin: int = NEAR_MRV_MARGIN_SETS,
) -> list[VolumeStatus]:
    """Classify every landmarked muscle; missing actuals count as 0 sets."""
    return [
        classify(muscle, landmark, actuals.get(muscle, 0), near_mrv_margin)
        for muscle, landmark in landmarks.items()
    ]


def compare_to_previous(
    muscle: MuscleGroup,
    current: float,
    previous: float,
) -> VolumeChange:
    """
    Compare a muscle's volume with the previous cycle.

    percent_change = (current - previous) / previous * 100, 0 when the
    previous cycle had no volume.
    """
    return VolumeChange(
        muscle=muscle,
        current=current,
        previous=previous,
        delta=current - previous,
        percent_change=percent_change(current, previous),
    )


def compare_cycles(
    current: Mapping[MuscleGroup, float],
    previous: Mapping[MuscleGroup, float],
) -> list[VolumeChange]:
    """Cycle-over-cycle change for every muscle seen in either cycle, sorted by name."""
    muscles = sorted(set(current) | set(previous))
    return [
        compare_to_previous(m, current.get(m, 0), previous.get(m, 0))
        for m in muscles
    ]


def aggregate_parent_muscles(volumes: Mapping[str, float]) -> dict[MuscleGroup, float]:
    """
    Fold granular muscles into their parents.

    {"shoulders_rear": 4, "shoulders_side": 8} -> {"shoulders": 12}
    """
    result: dict[MuscleGroup, float] = defaultdict(float)
    for muscle, sets in volumes.items():
        result[parent_muscle(muscle)] += sets
    return dict(result)


def fractional_volume(exercises: Iterable[ExerciseVolume]) -> dict[MuscleGroup, float]:
    """
    Sets per muscle with fractional counting.

    Each set counts 1.0 toward its primary muscles and 0.5 toward its
    secondary muscles.  Muscle names are lower-cased.
    """
    breakdown: dict[MuscleGroup, float] = defaultdict(float)
    for exercise in exercises:
        for muscle in exercise.primary_muscles:
            breakdown[muscle.lower()] += exercise.sets * PRIMARY_MUSCLE_SET_FRACTION
        for muscle in exercise.secondary_muscles:
            breakdown[muscle.lower()] += exercise.sets * SECONDARY_MUSCLE_SET_FRACTION
    return dict(breakdown)


def volume_progress(
    distribution: Mapping[str, float],
    actual: Mapping[str, float],
    limit: int = VOLUME_PROGRESS_LIMIT,
) -> list[MuscleVolumeProgress]:
    """
    Progress toward a split plan's per-cycle volume distribution.

    Both mappings are folded to parent muscles first.  Muscles without a
    positive target are skipped; the result is ordered by target,
    largest first, and truncated to ``limit`` entries.
    """
    targets = aggregate_parent_muscles(distribution)
    done = aggregate_parent_muscles(actual)

    progress = [
        MuscleVolumeProgress(
            muscle=muscle,
            target=target,
            current=done.get(muscle, 0.0),
            percentage=percentage_of(done.get(muscle, 0.0), target),
        )
        for muscle, target in targets.items()
        if target > 0
    ]
    progress.sort(key=lambda p: p.target, reverse=True)
    return progress[: max(0, limit)]

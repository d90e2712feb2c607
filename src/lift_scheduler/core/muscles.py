"""
Muscle-group vocabulary and the static lookup tables built on it.

Every table here is immutable module-level configuration: tuples,
frozensets, and read-only mappings created once at import time.
"""

from types import MappingProxyType
from typing import Final, Literal, Mapping

MuscleGroup = str  # one of SPECIALIZABLE_MUSCLES (plus granular sub-muscles in volume data)
WorkoutType = Literal[
    "chest",
    "shoulders",
    "arms",
    "back",
    "legs",
    "push",
    "pull",
    "upper",
    "lower",
    "full_body",
]
MuscleSize = Literal["small", "medium", "large"]
MuscleFocus = Literal["upper", "lower", "core_arms"]

SPECIALIZABLE_MUSCLES: Final[tuple[MuscleGroup, ...]] = (
    "chest",
    "shoulders",
    "shoulders_front",
    "shoulders_side",
    "shoulders_rear",
    "triceps",
    "back",
    "lats",
    "traps",
    "biceps",
    "forearms",
    "quads",
    "hamstrings",
    "glutes",
    "calves",
    "abs",
    "obliques",
    "lower_back",
)

# Primary workout type first; the scheduler places index 0 on specialization days.
MUSCLE_WORKOUT_TYPES: Final[Mapping[MuscleGroup, tuple[WorkoutType, ...]]] = MappingProxyType({
    "chest": ("chest", "push"),
    "shoulders": ("shoulders", "push"),
    "shoulders_front": ("shoulders", "push"),
    "shoulders_side": ("shoulders",),
    "shoulders_rear": ("shoulders", "pull"),
    "triceps": ("arms", "push"),
    "back": ("back", "pull"),
    "lats": ("back", "pull"),
    "traps": ("back", "pull"),
    "biceps": ("arms", "pull"),
    "forearms": ("arms", "pull"),
    "quads": ("legs", "lower"),
    "hamstrings": ("legs", "lower"),
    "glutes": ("legs", "lower"),
    "calves": ("legs", "lower"),
    "abs": ("full_body",),
    "obliques": ("full_body",),
    "lower_back": ("back", "lower"),
})
DEFAULT_WORKOUT_TYPES: Final[tuple[WorkoutType, ...]] = ("full_body",)

UPPER_FOCUS_MUSCLES: Final[frozenset[MuscleGroup]] = frozenset({
    "chest", "back", "shoulders", "shoulders_front", "shoulders_side",
    "shoulders_rear", "biceps", "triceps", "traps", "lats",
})
LOWER_FOCUS_MUSCLES: Final[frozenset[MuscleGroup]] = frozenset({
    "quads", "hamstrings", "glutes", "calves",
})

# Complementary day rotations, indexed by day % len(rotation)
COMPLEMENTARY_ROTATIONS: Final[Mapping[MuscleFocus, tuple[WorkoutType, ...]]] = MappingProxyType({
    "upper": ("push", "pull", "legs"),
    "lower": ("upper", "legs"),
    "core_arms": ("upper", "lower"),
})

SMALL_MUSCLES: Final[frozenset[MuscleGroup]] = frozenset({
    "biceps", "triceps", "forearms", "calves", "abs", "obliques",
    "shoulders_front", "shoulders_side", "shoulders_rear",
})
LARGE_MUSCLES: Final[frozenset[MuscleGroup]] = frozenset({
    "back", "lats", "chest", "quads", "hamstrings", "glutes",
})

# Which muscles a session of each workout type trains (frequency map source)
WORKOUT_TYPE_MUSCLES: Final[Mapping[WorkoutType, tuple[MuscleGroup, ...]]] = MappingProxyType({
    "chest": ("chest",),
    "shoulders": ("shoulders", "shoulders_front", "shoulders_side", "shoulders_rear"),
    "arms": ("biceps", "triceps", "forearms"),
    "back": ("back", "lats", "traps", "lower_back"),
    "legs": ("quads", "hamstrings", "glutes", "calves"),
    "push": ("chest", "shoulders", "shoulders_front", "shoulders_side", "triceps"),
    "pull": ("back", "lats", "traps", "shoulders_rear", "biceps", "forearms"),
    "upper": (
        "chest", "back", "lats", "shoulders", "shoulders_front",
        "shoulders_side", "shoulders_rear", "biceps", "triceps",
    ),
    "lower": ("quads", "hamstrings", "glutes", "calves", "lower_back"),
    "full_body": (
        "chest", "back", "shoulders", "quads", "hamstrings", "glutes", "abs", "obliques",
    ),
})

# Granular muscle -> parent used for cycle volume summaries
PARENT_MUSCLES: Final[Mapping[str, MuscleGroup]] = MappingProxyType({
    "shoulders_front": "shoulders",
    "shoulders_side": "shoulders",
    "shoulders_rear": "shoulders",
    "chest_upper": "chest",
    "chest_lower": "chest",
    "triceps_long": "triceps",
    "triceps_lateral": "triceps",
    "triceps_medial": "triceps",
    "biceps_long": "biceps",
    "biceps_short": "biceps",
})


def muscle_size(muscle: MuscleGroup) -> MuscleSize:
    """Size class used for recovery-frequency defaults (unknown -> medium)."""
    if muscle in SMALL_MUSCLES:
        return "small"
    if muscle in LARGE_MUSCLES:
        return "large"
    return "medium"


def muscle_focus(muscle: MuscleGroup) -> MuscleFocus:
    """Which complementary rotation a specialization muscle uses."""
    if muscle in UPPER_FOCUS_MUSCLES:
        return "upper"
    if muscle in LOWER_FOCUS_MUSCLES:
        return "lower"
    return "core_arms"


def parent_muscle(muscle: str) -> MuscleGroup:
    """Map a granular muscle name to its parent; other names pass through."""
    return PARENT_MUSCLES.get(muscle, muscle)

"""
Data models for lift-scheduler.

Inputs supplied by the surrounding application (set history, landmark
tables) are frozen snapshots; results computed by the engine are plain
dataclasses that the caller owns and discards after use.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal

from .muscles import MuscleGroup, WorkoutType

SetType = Literal["working", "warmup"]
Aggressiveness = Literal["moderate", "high", "very_high"]
VolumeStatusName = Literal["under_mev", "in_range", "near_mrv", "over_mrv"]
VolumeZone = Literal["below_mev", "sub_optimal", "optimal", "near_mrv", "above_mrv"]
ProgressionRule = Literal["no_history", "increase_load", "add_reps", "fallback_load"]
TechniqueLabel = Literal["DROP", "MYO", "CLUSTER", "+15s", "FST-7"]
PlateauState = Literal["progressing", "stalled", "plateaued"]
SuggestedAction = Literal["rotate_exercise", "escalate_technique"]
Confidence = Literal["low", "medium", "high"]
Sex = Literal["male", "female", "other"]


# =============================================================================
# Split scheduling
# =============================================================================


@dataclass
class Schedule:
    """Cyclic day-by-day workout types for one specialization muscle."""

    workout_types: list[WorkoutType]
    cycle_days: int
    specialization_frequency: int


@dataclass
class SpecializationVolume:
    """Boosted per-cycle volume for a specialization muscle."""

    total_volume: int
    volume_multiplier: float
    volume_per_session: int


@dataclass
class SplitPlan:
    """
    A complete training split.

    Created at onboarding or when the training approach changes.  A
    superseded plan is deactivated, never deleted.
    """

    cycle_days: int
    sessions: list[WorkoutType]
    frequency_map: dict[MuscleGroup, int] = field(default_factory=dict)
    volume_distribution: dict[MuscleGroup, int] = field(default_factory=dict)
    specialization_muscle: MuscleGroup | None = None
    active: bool = True

    def __post_init__(self) -> None:
        """Validate plan shape."""
        if self.cycle_days < 2:
            raise ValueError("cycle_days must be at least 2")
        if len(self.sessions) != self.cycle_days:
            raise ValueError(
                f"sessions has {len(self.sessions)} entries, expected {self.cycle_days}"
            )

    @property
    def weekly_frequency(self) -> int:
        """Training days per cycle (one day of every cycle is rest)."""
        return self.cycle_days - 1

    def deactivate(self) -> "SplitPlan":
        """Return an inactive copy of this plan."""
        return replace(
            self,
            sessions=list(self.sessions),
            frequency_map=dict(self.frequency_map),
            volume_distribution=dict(self.volume_distribution),
            active=False,
        )


# =============================================================================
# Volume tracking
# =============================================================================


@dataclass(frozen=True)
class VolumeLandmark:
    """Weekly set-count landmarks for one muscle: MEV < MAV < MRV."""

    muscle: MuscleGroup
    mev: int
    mav: int
    mrv: int

    def __post_init__(self) -> None:
        """Validate landmark ordering."""
        if self.mev < 0:
            raise ValueError(f"{self.muscle}: mev must be non-negative")
        if not self.mev < self.mav < self.mrv:
            raise ValueError(
                f"{self.muscle}: landmarks must satisfy mev < mav < mrv, "
                f"got {self.mev}/{self.mav}/{self.mrv}"
            )


@dataclass
class VolumeStatus:
    """Actual volume classified against a landmark."""

    muscle: MuscleGroup
    actual_volume: float
    target_volume: int  # the landmark's MAV
    percentage: int
    status: VolumeStatusName
    zone: VolumeZone


@dataclass
class VolumeChange:
    """Cycle-over-cycle volume change for one muscle."""

    muscle: MuscleGroup
    current: float
    previous: float
    delta: float
    percent_change: float  # 0.0 when there is no previous volume


@dataclass
class MuscleVolumeProgress:
    """Progress toward a muscle's per-cycle volume target."""

    muscle: MuscleGroup
    target: float
    current: float
    percentage: int


@dataclass(frozen=True)
class ExerciseVolume:
    """Sets performed for one exercise, with the muscles it trains."""

    name: str
    sets: int
    primary_muscles: tuple[str, ...] = ()
    secondary_muscles: tuple[str, ...] = ()


# =============================================================================
# Progressive overload
# =============================================================================


@dataclass(frozen=True)
class SetRecord:
    """
    One logged set, as supplied by the history provider.

    Read-only input.  Values are not validated here: the engine applies its
    default-value policies to anything malformed.
    """

    exercise_name: str
    weight: float | None
    reps: int | None
    rir: int | None = None
    set_type: SetType = "working"
    skipped: bool = False
    completed_at: datetime | None = None

    @property
    def is_working(self) -> bool:
        """True for non-skipped working sets (the ones that count)."""
        return self.set_type == "working" and not self.skipped


@dataclass
class ProgressiveTarget:
    """Next weight/rep target for an exercise.  Computed on demand."""

    weight: float
    reps: int
    has_history: bool
    last_performed_at: datetime | None = None
    based_on_sets: int = 0
    rule: ProgressionRule = "no_history"


@dataclass(frozen=True)
class LearnedWeight:
    """A target weight learned from previously completed workouts."""

    exercise_name: str
    target_weight: float
    confidence: Confidence = "low"
    updated_at: datetime | None = None


@dataclass(frozen=True)
class StrengthBaseline:
    """A self-reported baseline lift from onboarding."""

    weight: float
    reps: int
    rir: int = 2


# =============================================================================
# Technique expansion
# =============================================================================


@dataclass(frozen=True)
class VirtualSet:
    """A concrete, orderable unit of work produced by technique expansion."""

    set_number: int  # 1-indexed, contiguous within one expansion
    weight: float
    target_reps: int
    label: TechniqueLabel | None = None
    rest_seconds_override: int | None = None


@dataclass
class ExpansionResult:
    """Virtual sets for one exercise plus whether the technique was expanded."""

    virtual_sets: list[VirtualSet]
    is_supported: bool
    unsupported_reason: str | None = None

    @property
    def total_sets(self) -> int:
        """Number of virtual sets to perform."""
        return len(self.virtual_sets)


# =============================================================================
# Plateau detection
# =============================================================================


@dataclass(frozen=True)
class SessionPerformance:
    """Best set of one session for one exercise."""

    session_date: str  # ISO format: YYYY-MM-DD
    best_weight: float
    best_reps: int
    score: float  # weight x reps (reps alone for unloaded sets)


@dataclass
class PlateauSuggestion:
    """Emitted on reaching "plateaued"; consumed by exercise selection."""

    exercise_name: str
    suggested_action: SuggestedAction


@dataclass
class PlateauAssessment:
    """Result of running the plateau state machine over one exercise."""

    exercise_name: str
    state: PlateauState
    sessions_analyzed: int
    non_improving_sessions: int
    best_score: float
    last_score: float
    suggestion: PlateauSuggestion | None = None

    @property
    def drop_from_best(self) -> float:
        """Fraction the last session scored below the best (0.0 if not below)."""
        if self.best_score <= 0 or self.last_score >= self.best_score:
            return 0.0
        return (self.best_score - self.last_score) / self.best_score


@dataclass
class ExerciseStagnation:
    """Week-bucketed stagnation summary for one exercise."""

    name: str
    weeks_used: int
    is_plateaued: bool
    avg_weight_change: float  # percent, first vs last week, 1 decimal


@dataclass
class DeloadRecommendation:
    """Whether enough deload triggers fired, and which ones."""

    recommended: bool
    triggers: list[str] = field(default_factory=list)
    min_triggers: int = 2

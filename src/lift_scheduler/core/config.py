"""
Configuration constants for the training program engine.

All adjustable parameters are centralized here for easy tuning.
Threshold groups that users may override from YAML are wrapped in frozen
dataclasses; see core/engine/config_loader.py for the override path.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Mapping

# =============================================================================
# SPLIT SCHEDULING
# =============================================================================

MAX_SPECIALIZATION_FREQUENCY: Final[int] = 4  # Default cap on specialization days per cycle
MIN_WEEKLY_FREQUENCY: Final[int] = 1  # Non-positive weekly frequency clamps here
REST_DAYS_PER_CYCLE: Final[int] = 1  # cycle_days = weekly_frequency + 1

SPECIALIZATION_MULTIPLIERS: Final[Mapping[str, float]] = MappingProxyType({
    "moderate": 1.3,
    "high": 1.5,
    "very_high": 1.8,
})
DEFAULT_AGGRESSIVENESS: Final[str] = "high"


@dataclass(frozen=True)
class FrequencyBand:
    """Recommended sessions per cycle for one muscle-size class."""

    min: int
    max: int
    optimal: int


FREQUENCY_BANDS: Final[Mapping[str, FrequencyBand]] = MappingProxyType({
    "small": FrequencyBand(min=3, max=6, optimal=4),
    "medium": FrequencyBand(min=2, max=5, optimal=3),
    "large": FrequencyBand(min=2, max=4, optimal=3),
})

# =============================================================================
# VOLUME TRACKING
# =============================================================================

PRIMARY_MUSCLE_SET_FRACTION: Final[float] = 1.0
SECONDARY_MUSCLE_SET_FRACTION: Final[float] = 0.5
VOLUME_PROGRESS_LIMIT: Final[int] = 8  # Muscles shown in a cycle progress summary
NEAR_MRV_MARGIN_SETS: Final[int] = 0  # 0 disables the near_mrv status

# =============================================================================
# PROGRESSIVE OVERLOAD
# =============================================================================

DEFAULT_RIR: Final[int] = 3  # Assumed when a set has no reported RIR
RIR_INCREASE_THRESHOLD: Final[int] = 2  # RIR below this triggers a load increase
HEAVY_LOAD_THRESHOLD_KG: Final[float] = 40.0
HEAVY_LOAD_INCREMENT_KG: Final[float] = 2.5
LIGHT_LOAD_INCREMENT_KG: Final[float] = 1.25
FALLBACK_INCREMENT_KG: Final[float] = 1.25
RECENT_SETS_LIMIT: Final[int] = 5  # Sets requested from the history provider

LEARNED_WEIGHT_VARIANCE_THRESHOLD: Final[float] = 0.10  # Blend above 10% disagreement

BASELINE_WEIGHT_FRACTION: Final[float] = 0.85  # Start at 85% of a known baseline lift
FEMALE_WEIGHT_MULTIPLIER: Final[float] = 0.6

# (keywords, bodyweight ratio) checked in order; all keywords must match
BODYWEIGHT_RATIOS: Final[tuple[tuple[tuple[str, ...], float], ...]] = (
    (("bench",), 0.5),
    (("squat",), 0.6),
    (("deadlift",), 0.8),
    (("leg", "press"), 0.7),
    (("row",), 0.4),
    (("press", "shoulder"), 0.3),
)

# (keywords, starting kg) checked in order; all keywords must match
STARTING_WEIGHTS_KG: Final[tuple[tuple[tuple[str, ...], float], ...]] = (
    (("bench",), 40.0),
    (("squat",), 50.0),
    (("deadlift",), 60.0),
    (("leg", "press"), 70.0),
    (("row",), 30.0),
    (("press", "shoulder"), 20.0),
    (("curl",), 15.0),
    (("extension",), 15.0),
    (("raise",), 10.0),
    (("fly",), 15.0),
)
DEFAULT_STARTING_WEIGHT_KG: Final[float] = 20.0


# =============================================================================
# ROUNDING
# =============================================================================

TECHNIQUE_WEIGHT_STEP: Final[float] = 0.5  # Plate increment for expanded sets
PROGRESSION_WEIGHT_STEP: Final[float] = 0.25  # Increment for overload targets

# =============================================================================
# TECHNIQUE EXPANSION
# =============================================================================

DROP_SET_MIN_REPS: Final[int] = 6
DROP_SET_REP_REDUCTION: Final[int] = 2
DROP_SET_REST_SECONDS: Final[int] = 10
REST_PAUSE_MIN_REPS: Final[int] = 2
REST_PAUSE_REP_DIVISOR: Final[int] = 3
FST7_SET_COUNT: Final[int] = 7

# =============================================================================
# PLATEAU AND DELOAD
# =============================================================================


@dataclass(frozen=True)
class PlateauConfig:
    """Thresholds for the per-exercise progressing/stalled/plateaued machine."""

    stall_sessions: int = 2  # Non-improving sessions before "stalled"
    plateau_sessions: int = 2  # Further non-improving sessions before "plateaued"
    regression_threshold: float = 0.10  # Last session this far below best = regression

    def __post_init__(self) -> None:
        if self.stall_sessions < 1:
            raise ValueError("stall_sessions must be at least 1")
        if self.plateau_sessions < 0:
            raise ValueError("plateau_sessions must be non-negative")
        if not 0.0 <= self.regression_threshold < 1.0:
            raise ValueError("regression_threshold must be in [0, 1)")


@dataclass(frozen=True)
class StagnationConfig:
    """Week-based stagnation scan over recent working sets."""

    window_weeks: int = 8
    min_weeks: int = 4  # Weeks an exercise must be used before it can plateau
    change_threshold_pct: float = 2.5  # |avg weight change| below this = plateaued

    def __post_init__(self) -> None:
        if self.window_weeks < 1:
            raise ValueError("window_weeks must be at least 1")
        if self.min_weeks < 1:
            raise ValueError("min_weeks must be at least 1")
        if self.change_threshold_pct < 0:
            raise ValueError("change_threshold_pct must be non-negative")


@dataclass(frozen=True)
class DeloadConfig:
    """How many of the deload triggers must fire, and their thresholds."""

    min_triggers: int = 2  # out of: stalled share, over MRV, regression
    stalled_share: float = 0.5  # Fraction of exercises stalled or plateaued

    def __post_init__(self) -> None:
        if not 1 <= self.min_triggers <= 3:
            raise ValueError("min_triggers must be between 1 and 3")
        if not 0.0 < self.stalled_share <= 1.0:
            raise ValueError("stalled_share must be in (0, 1]")


DEFAULT_PLATEAU_CONFIG: Final[PlateauConfig] = PlateauConfig()
DEFAULT_STAGNATION_CONFIG: Final[StagnationConfig] = StagnationConfig()
DEFAULT_DELOAD_CONFIG: Final[DeloadConfig] = DeloadConfig()

# =============================================================================
# CONFIG FILE LOCATIONS
# =============================================================================

USER_CONFIG_DIRNAME: Final[str] = ".lift-scheduler"
DEFAULT_APPROACH: Final[str] = "fst7"

"""
Advanced training techniques and their expansion into virtual sets.

Each technique kind has its own frozen config dataclass carrying a
class-level ``technique`` tag, so an AppliedTechnique's kind is always
derived from its config.  Five kinds can be expanded into a concrete set
list; the remaining nine are explicitly unsupported and fall back to plain
sets with a reason.  The dispatch table is checked for exhaustiveness at
import time.

Example: a drop set with 2 drops of 30% on 3 sets of 50 kg x 10 becomes

    1: 50 x 10
    2: 50 x 10
    3: 50 x 10          (trigger set)
    4: 35 x 8   DROP
    5: 24.5 x 8 DROP
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, ClassVar, Final, Literal, Mapping, Union

from .config import (
    DROP_SET_MIN_REPS,
    DROP_SET_REP_REDUCTION,
    DROP_SET_REST_SECONDS,
    FST7_SET_COUNT,
    REST_PAUSE_MIN_REPS,
    REST_PAUSE_REP_DIVISOR,
)
from .metrics import round_to_half
from .models import ExpansionResult, TechniqueLabel, VirtualSet
from .progression import effective_weight

logger = logging.getLogger(__name__)

TechniqueType = Literal[
    "drop_set",
    "rest_pause",
    "superset",
    "top_set_backoff",
    "myo_reps",
    "giant_set",
    "cluster_set",
    "pyramid",
    "fst7_protocol",
    "loaded_stretching",
    "mechanical_drop_set",
    "lengthened_partials",
    "forced_reps",
    "pre_exhaust",
]

TECHNIQUE_TYPES: Final[tuple[str, ...]] = TechniqueType.__args__  # type: ignore[attr-defined]


# =============================================================================
# Technique configurations
# =============================================================================


@dataclass(frozen=True)
class DropSetConfig:
    technique: ClassVar[str] = "drop_set"

    drops: int  # Weight drops after the trigger set (typically 2-4)
    drop_percentage: float  # Reduction per drop (typically 20-25%)


@dataclass(frozen=True)
class RestPauseConfig:
    technique: ClassVar[str] = "rest_pause"

    mini_sets: int  # Mini-sets after the trigger set (typically 2-4)
    rest_seconds: int  # Rest between mini-sets (typically 10-15 s)


@dataclass(frozen=True)
class MyoRepsConfig:
    technique: ClassVar[str] = "myo_reps"

    activation_reps: int  # typically 12-20
    mini_set_reps: int  # typically 3-5
    mini_sets: int  # typically 3-5
    rest_seconds: int  # typically 3-5 s


@dataclass(frozen=True)
class ClusterSetConfig:
    technique: ClassVar[str] = "cluster_set"

    reps_per_cluster: int  # typically 2-3
    clusters: int  # typically 4-6
    intra_rest_seconds: int  # typically 15-30 s


@dataclass(frozen=True)
class Fst7ProtocolConfig:
    technique: ClassVar[str] = "fst7_protocol"

    target_reps: int  # typically 10-12
    rest_seconds: int  # 30 or 45 s
    inter_set_posing: bool = False


@dataclass(frozen=True)
class SupersetConfig:
    technique: ClassVar[str] = "superset"

    paired_exercise_index: int
    rest_after_both: int


@dataclass(frozen=True)
class TopSetBackoffConfig:
    technique: ClassVar[str] = "top_set_backoff"

    top_set_reps: int
    backoff_sets: int
    backoff_percentage: float
    backoff_reps: int


@dataclass(frozen=True)
class GiantSetConfig:
    technique: ClassVar[str] = "giant_set"

    exercise_indices: tuple[int, ...]
    rest_after_all: int


@dataclass(frozen=True)
class PyramidConfig:
    technique: ClassVar[str] = "pyramid"

    direction: Literal["ascending", "descending", "full"]
    steps: int


@dataclass(frozen=True)
class LoadedStretchingConfig:
    technique: ClassVar[str] = "loaded_stretching"

    hold_seconds: int
    target_rpe: float
    breathing_pattern: str | None = None


@dataclass(frozen=True)
class MechanicalDropSetConfig:
    technique: ClassVar[str] = "mechanical_drop_set"

    variations: tuple[str, ...]
    reps_per_variation: int
    rest_between: int


@dataclass(frozen=True)
class LengthenedPartialsConfig:
    technique: ClassVar[str] = "lengthened_partials"

    partial_reps: int
    range_percentage: float


@dataclass(frozen=True)
class ForcedRepsConfig:
    technique: ClassVar[str] = "forced_reps"

    assisted_reps: int
    requires_partner: bool = True


@dataclass(frozen=True)
class PreExhaustConfig:
    technique: ClassVar[str] = "pre_exhaust"

    isolation_exercise_index: int
    compound_exercise_index: int
    rest_between: int


TechniqueConfig = Union[
    DropSetConfig,
    RestPauseConfig,
    MyoRepsConfig,
    ClusterSetConfig,
    Fst7ProtocolConfig,
    SupersetConfig,
    TopSetBackoffConfig,
    GiantSetConfig,
    PyramidConfig,
    LoadedStretchingConfig,
    MechanicalDropSetConfig,
    LengthenedPartialsConfig,
    ForcedRepsConfig,
    PreExhaustConfig,
]

CONFIG_CLASSES: Final[Mapping[str, type]] = MappingProxyType({
    cls.technique: cls for cls in TechniqueConfig.__args__  # type: ignore[attr-defined]
})


@dataclass(frozen=True)
class AppliedTechnique:
    """A technique assigned to an exercise by the exercise-selection step."""

    config: TechniqueConfig
    rationale: str = ""

    @property
    def technique(self) -> str:
        """The technique kind, taken from the config."""
        return self.config.technique


DEFAULT_TECHNIQUE_CONFIGS: Final[Mapping[str, TechniqueConfig]] = MappingProxyType({
    "drop_set": DropSetConfig(drops=2, drop_percentage=20),
    "rest_pause": RestPauseConfig(mini_sets=2, rest_seconds=15),
    "superset": SupersetConfig(paired_exercise_index=-1, rest_after_both=90),
    "top_set_backoff": TopSetBackoffConfig(
        top_set_reps=5, backoff_sets=2, backoff_percentage=15, backoff_reps=8
    ),
    "myo_reps": MyoRepsConfig(activation_reps=15, mini_set_reps=5, mini_sets=4, rest_seconds=5),
    "giant_set": GiantSetConfig(exercise_indices=(), rest_after_all=120),
    "cluster_set": ClusterSetConfig(reps_per_cluster=2, clusters=5, intra_rest_seconds=20),
    "pyramid": PyramidConfig(direction="ascending", steps=4),
    "fst7_protocol": Fst7ProtocolConfig(target_reps=12, rest_seconds=30),
    "loaded_stretching": LoadedStretchingConfig(hold_seconds=45, target_rpe=7),
    "mechanical_drop_set": MechanicalDropSetConfig(
        variations=(), reps_per_variation=10, rest_between=0
    ),
    "lengthened_partials": LengthenedPartialsConfig(partial_reps=8, range_percentage=40),
    "forced_reps": ForcedRepsConfig(assisted_reps=2),
    "pre_exhaust": PreExhaustConfig(
        isolation_exercise_index=0, compound_exercise_index=1, rest_between=0
    ),
})


def default_config(technique: str) -> TechniqueConfig:
    """
    Suggested configuration for a technique kind.

    Raises:
        ValueError: If the technique kind is unknown
    """
    if technique not in DEFAULT_TECHNIQUE_CONFIGS:
        valid = ", ".join(TECHNIQUE_TYPES)
        raise ValueError(f"Unknown technique '{technique}'. Valid types: {valid}")
    return DEFAULT_TECHNIQUE_CONFIGS[technique]


# =============================================================================
# Expansion
# =============================================================================

UNSUPPORTED_REASONS: Final[Mapping[str, str]] = MappingProxyType({
    "superset": "Requires pairing with another exercise",
    "giant_set": "Requires multiple exercises in sequence",
    "top_set_backoff": "Requires understanding of top set vs backoff sets",
    "pyramid": "Requires understanding of weight progression direction",
    "mechanical_drop_set": "Requires changing exercise variation",
    "loaded_stretching": "Requires timer and RPE tracking",
    "forced_reps": "Requires a training partner",
    "pre_exhaust": "Requires exercise pairing",
    "lengthened_partials": "Requires understanding of partial ROM",
})

UNRECOGNIZED_REASON: Final[str] = "Technique type not supported in simple mode"


def _count(value: int) -> int:
    return max(0, int(value))


def _plain_sets(
    weight: float, reps: int, count: int, first_number: int = 1
) -> list[VirtualSet]:
    rounded = round_to_half(weight)
    return [
        VirtualSet(set_number=first_number + i, weight=rounded, target_reps=reps)
        for i in range(count)
    ]


def _extension_sets(
    weight: float,
    reps: int,
    count: int,
    first_number: int,
    label: TechniqueLabel,
    rest_seconds: int,
) -> list[VirtualSet]:
    rounded = round_to_half(weight)
    return [
        VirtualSet(
            set_number=first_number + i,
            weight=rounded,
            target_reps=reps,
            label=label,
            rest_seconds_override=rest_seconds,
        )
        for i in range(count)
    ]


def _expand_drop_set(
    config: DropSetConfig, base_weight: float, base_reps: int, base_sets: int
) -> list[VirtualSet]:
    # base_sets - 1 normal sets, then the trigger set, all at base load
    virtual_sets = _plain_sets(base_weight, base_reps, base_sets)

    fraction = 1 - min(100.0, max(0.0, config.drop_percentage)) / 100
    drop_reps = max(DROP_SET_MIN_REPS, base_reps - DROP_SET_REP_REDUCTION)
    current = base_weight
    for drop in range(1, _count(config.drops) + 1):
        # Compound on the unrounded weight; only the displayed value is rounded
        current = current * fraction
        virtual_sets.append(
            VirtualSet(
                set_number=base_sets + drop,
                weight=round_to_half(current),
                target_reps=drop_reps,
                label="DROP",
                rest_seconds_override=DROP_SET_REST_SECONDS,
            )
        )
    return virtual_sets


def _expand_rest_pause(
    config: RestPauseConfig, base_weight: float, base_reps: int, base_sets: int
) -> list[VirtualSet]:
    mini_reps = max(REST_PAUSE_MIN_REPS, base_reps // REST_PAUSE_REP_DIVISOR)
    return _plain_sets(base_weight, base_reps, base_sets) + _extension_sets(
        base_weight, mini_reps, _count(config.mini_sets), base_sets + 1,
        "+15s", config.rest_seconds,
    )


def _expand_myo_reps(
    config: MyoRepsConfig, base_weight: float, base_reps: int, base_sets: int
) -> list[VirtualSet]:
    # The last working set is the activation set; all run at activation reps
    return _plain_sets(base_weight, config.activation_reps, base_sets) + _extension_sets(
        base_weight, config.mini_set_reps, _count(config.mini_sets), base_sets + 1,
        "MYO", config.rest_seconds,
    )


def _expand_cluster_set(
    config: ClusterSetConfig, base_weight: float, base_reps: int, base_sets: int
) -> list[VirtualSet]:
    clusters = _count(config.clusters)
    # Clusters replace the last working set; earlier sets carry the equivalent volume
    equivalent_reps = config.reps_per_cluster * clusters
    return _plain_sets(base_weight, equivalent_reps, base_sets - 1) + _extension_sets(
        base_weight, config.reps_per_cluster, clusters, base_sets,
        "CLUSTER", config.intra_rest_seconds,
    )


def _expand_fst7(
    config: Fst7ProtocolConfig, base_weight: float, base_reps: int, base_sets: int
) -> list[VirtualSet]:
    return _extension_sets(
        base_weight, config.target_reps, FST7_SET_COUNT, 1, "FST-7", config.rest_seconds,
    )


_Expander = Callable[..., list[VirtualSet]]

_EXPANDERS: Final[Mapping[type, _Expander]] = MappingProxyType({
    DropSetConfig: _expand_drop_set,
    RestPauseConfig: _expand_rest_pause,
    MyoRepsConfig: _expand_myo_reps,
    ClusterSetConfig: _expand_cluster_set,
    Fst7ProtocolConfig: _expand_fst7,
})


def _check_exhaustive() -> None:
    """Every technique kind must be expandable or carry an unsupported reason, not both."""
    expandable = {cls.technique for cls in _EXPANDERS}
    unsupported = set(UNSUPPORTED_REASONS)
    missing = set(TECHNIQUE_TYPES) - expandable - unsupported
    both = expandable & unsupported
    unknown_configs = set(TECHNIQUE_TYPES) ^ set(CONFIG_CLASSES)
    if missing or both or unknown_configs:
        raise RuntimeError(
            "lift-scheduler: technique dispatch is not exhaustive "
            f"(missing={sorted(missing)}, duplicated={sorted(both)}, "
            f"config mismatch={sorted(unknown_configs)})"
        )


_check_exhaustive()


def expand(
    technique: AppliedTechnique,
    base_weight: float,
    base_reps: int,
    base_sets: int,
) -> ExpansionResult:
    """
    Expand an applied technique into an ordered list of virtual sets.

    Unsupported techniques return ``base_sets`` plain sets with
    is_supported=False and a reason, so rendering never breaks.

    Args:
        technique: Technique assigned upstream
        base_weight: Working weight for the exercise (missing, non-finite
            or negative -> 0)
        base_reps: Target reps per working set
        base_sets: Working sets prescribed (<= 0 -> 1)

    Returns:
        ExpansionResult with contiguous set numbers starting at 1
    """
    base_weight = effective_weight(base_weight)
    base_reps = max(0, int(base_reps))
    if base_sets < 1:
        logger.debug("base_sets %s clamped to 1", base_sets)
        base_sets = 1

    config = technique.config
    kind = config.technique

    if kind in UNSUPPORTED_REASONS:
        return ExpansionResult(
            virtual_sets=_plain_sets(base_weight, base_reps, base_sets),
            is_supported=False,
            unsupported_reason=UNSUPPORTED_REASONS[kind],
        )

    expander = _EXPANDERS.get(type(config))
    if expander is None:
        logger.warning("no expander for technique config %r", type(config).__name__)
        return ExpansionResult(
            virtual_sets=_plain_sets(base_weight, base_reps, base_sets),
            is_supported=False,
            unsupported_reason=UNRECOGNIZED_REASON,
        )

    return ExpansionResult(
        virtual_sets=expander(config, base_weight, base_reps, base_sets),
        is_supported=True,
    )


def total_virtual_set_count(
    technique: AppliedTechnique | None,
    base_sets: int,
    base_weight: float,
    base_reps: int,
) -> int:
    """Number of sets to perform for an exercise, with or without a technique."""
    if technique is None:
        return base_sets
    return expand(technique, base_weight, base_reps, base_sets).total_sets


def is_supported_in_simple_mode(technique: str) -> bool:
    """True if the technique kind expands into virtual sets."""
    return technique in TECHNIQUE_TYPES and technique not in UNSUPPORTED_REASONS


def list_supported_types() -> list[str]:
    """Technique kinds that expand into virtual sets, in canonical order."""
    return [t for t in TECHNIQUE_TYPES if t not in UNSUPPORTED_REASONS]

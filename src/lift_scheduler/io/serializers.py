"""
JSON serialization for engine inputs and results.

Handles conversion between dataclasses and JSON-compatible dicts.  Inbound
payloads (set history lines, technique assignments) are validated here;
everything past this boundary is trusted by type.
"""

import json
import re
from dataclasses import asdict, fields
from datetime import datetime
from typing import Any, Literal, get_args, get_origin

from ..core.models import (
    DeloadRecommendation,
    ExerciseStagnation,
    ExpansionResult,
    PlateauAssessment,
    PlateauSuggestion,
    ProgressiveTarget,
    SetRecord,
    SplitPlan,
    VirtualSet,
    VolumeChange,
    VolumeStatus,
)
from ..core.techniques import CONFIG_CLASSES, TECHNIQUE_TYPES, AppliedTechnique


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# =============================================================================
# Field validators
# =============================================================================


def validate_number(value: Any, name: str, allow_none: bool = False) -> float | None:
    """
    Validate a JSON number (bool is rejected).

    Args:
        value: Raw value
        name: Field name for the error message
        allow_none: Whether null is acceptable

    Returns:
        The value as float, or None

    Raises:
        ValidationError: If value is not a number
    """
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    return float(value)


def validate_int(value: Any, name: str, allow_none: bool = False) -> int | None:
    """Validate a whole number; integral floats such as 8.0 are accepted."""
    number = validate_number(value, name, allow_none)
    if number is None:
        return None
    if not number.is_integer():
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def validate_datetime(value: Any, name: str = "completed_at") -> datetime | None:
    """
    Parse an ISO 8601 timestamp; a trailing "Z" is read as UTC.

    Raises:
        ValidationError: If the string is not a valid timestamp
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be an ISO timestamp string, got {value!r}")
    text = re.sub(r"Z$", "+00:00", value.strip())
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid {name}: {value}") from e


# =============================================================================
# Set records
# =============================================================================


def set_record_from_dict(data: dict[str, Any]) -> SetRecord:
    """
    Convert a history line to a SetRecord.

    Only types are checked.  Out-of-range numbers (negative weight, zero
    reps) are left for the engine's default-value policies.

    Raises:
        ValidationError: If a field is missing or has the wrong type
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Set record must be an object, got {type(data).__name__}")

    name = data.get("exercise_name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("exercise_name must be a non-empty string")

    set_type = data.get("set_type", "working")
    if set_type not in ("working", "warmup"):
        raise ValidationError(f"Invalid set_type: {set_type}. Must be 'working' or 'warmup'")

    skipped = data.get("skipped", False)
    if not isinstance(skipped, bool):
        raise ValidationError(f"skipped must be true or false, got {skipped!r}")

    return SetRecord(
        exercise_name=name,
        weight=validate_number(data.get("weight"), "weight", allow_none=True),
        reps=validate_int(data.get("reps"), "reps", allow_none=True),
        rir=validate_int(data.get("rir"), "rir", allow_none=True),
        set_type=set_type,
        skipped=skipped,
        completed_at=validate_datetime(data.get("completed_at")),
    )


def set_record_to_dict(record: SetRecord) -> dict[str, Any]:
    """Convert a SetRecord to a history line dict."""
    return {
        "exercise_name": record.exercise_name,
        "weight": record.weight,
        "reps": record.reps,
        "rir": record.rir,
        "set_type": record.set_type,
        "skipped": record.skipped,
        "completed_at": record.completed_at.isoformat() if record.completed_at else None,
    }


def set_record_to_json_line(record: SetRecord) -> str:
    """Convert a SetRecord to a single JSON line."""
    return json.dumps(set_record_to_dict(record), separators=(",", ":"))


# =============================================================================
# Technique assignments
# =============================================================================


def _snake_case(key: str) -> str:
    """dropPercentage -> drop_percentage"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _coerce_field(technique: str, name: str, annotation: Any, value: Any) -> Any:
    label = f"{technique}.{name}"
    if annotation is bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{label} must be true or false, got {value!r}")
        return value
    if annotation is int:
        return validate_int(value, label)
    if annotation is float:
        return validate_number(value, label)
    if get_origin(annotation) is tuple:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"{label} must be a list, got {value!r}")
        return tuple(value)
    if get_origin(annotation) is Literal:
        if value not in get_args(annotation):
            raise ValidationError(f"{label} must be one of {get_args(annotation)}, got {value!r}")
        return value
    # str | None
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{label} must be a string, got {value!r}")
    return value


def technique_from_dict(data: dict[str, Any]) -> AppliedTechnique:
    """
    Convert a technique assignment payload to an AppliedTechnique.

    Expected shape (config keys may be snake_case or camelCase):
        {"technique": "drop_set",
         "config": {"drops": 2, "drop_percentage": 20},
         "rationale": "..."}

    Raises:
        ValidationError: If the kind is unknown or the config does not match it
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Technique must be an object, got {type(data).__name__}")

    technique = data.get("technique")
    if technique not in CONFIG_CLASSES:
        raise ValidationError(
            f"Invalid technique: {technique!r}. Must be one of {TECHNIQUE_TYPES}"
        )

    raw_config = data.get("config", {})
    if not isinstance(raw_config, dict):
        raise ValidationError("config must be an object")
    raw_config = {_snake_case(k): v for k, v in raw_config.items()}

    config_cls = CONFIG_CLASSES[technique]
    known = {f.name: f for f in fields(config_cls)}

    unknown = set(raw_config) - set(known)
    if unknown:
        raise ValidationError(f"Unknown {technique} config fields: {sorted(unknown)}")

    kwargs = {}
    for name, f in known.items():
        if name in raw_config:
            kwargs[name] = _coerce_field(technique, name, f.type, raw_config[name])
    try:
        config = config_cls(**kwargs)
    except TypeError as e:
        raise ValidationError(f"Incomplete {technique} config: {e}") from e

    rationale = data.get("rationale", "")
    if not isinstance(rationale, str):
        raise ValidationError("rationale must be a string")

    return AppliedTechnique(config=config, rationale=rationale)


def technique_to_dict(applied: AppliedTechnique) -> dict[str, Any]:
    """Convert an AppliedTechnique to a JSON-compatible dict."""
    config = {
        k: list(v) if isinstance(v, tuple) else v
        for k, v in asdict(applied.config).items()
    }
    return {
        "technique": applied.technique,
        "config": config,
        "rationale": applied.rationale,
    }


# =============================================================================
# Results
# =============================================================================


def split_plan_to_dict(plan: SplitPlan) -> dict[str, Any]:
    """Convert a SplitPlan to dict."""
    return {
        "cycle_days": plan.cycle_days,
        "sessions": list(plan.sessions),
        "frequency_map": dict(plan.frequency_map),
        "volume_distribution": dict(plan.volume_distribution),
        "specialization_muscle": plan.specialization_muscle,
        "active": plan.active,
    }


def progressive_target_to_dict(target: ProgressiveTarget) -> dict[str, Any]:
    """Convert a ProgressiveTarget to dict."""
    return {
        "weight": target.weight,
        "reps": target.reps,
        "has_history": target.has_history,
        "last_performed_at": (
            target.last_performed_at.isoformat() if target.last_performed_at else None
        ),
        "based_on_sets": target.based_on_sets,
        "rule": target.rule,
    }


def virtual_set_to_dict(virtual_set: VirtualSet) -> dict[str, Any]:
    """Convert a VirtualSet to dict."""
    return asdict(virtual_set)


def expansion_result_to_dict(result: ExpansionResult) -> dict[str, Any]:
    """Convert an ExpansionResult to dict."""
    return {
        "virtual_sets": [virtual_set_to_dict(v) for v in result.virtual_sets],
        "is_supported": result.is_supported,
        "unsupported_reason": result.unsupported_reason,
        "total_sets": result.total_sets,
    }


def volume_status_to_dict(status: VolumeStatus) -> dict[str, Any]:
    """Convert a VolumeStatus to dict."""
    return asdict(status)


def volume_change_to_dict(change: VolumeChange) -> dict[str, Any]:
    """Convert a VolumeChange to dict."""
    return asdict(change)


def plateau_suggestion_to_dict(suggestion: PlateauSuggestion) -> dict[str, Any]:
    """Convert a PlateauSuggestion to dict."""
    return {
        "exercise_name": suggestion.exercise_name,
        "suggested_action": suggestion.suggested_action,
    }


def plateau_assessment_to_dict(assessment: PlateauAssessment) -> dict[str, Any]:
    """Convert a PlateauAssessment to dict."""
    return {
        "exercise_name": assessment.exercise_name,
        "state": assessment.state,
        "sessions_analyzed": assessment.sessions_analyzed,
        "non_improving_sessions": assessment.non_improving_sessions,
        "best_score": assessment.best_score,
        "last_score": assessment.last_score,
        "suggestion": (
            plateau_suggestion_to_dict(assessment.suggestion)
            if assessment.suggestion
            else None
        ),
    }


def stagnation_to_dict(stagnation: ExerciseStagnation) -> dict[str, Any]:
    """Convert an ExerciseStagnation to dict."""
    return asdict(stagnation)


def deload_to_dict(recommendation: DeloadRecommendation) -> dict[str, Any]:
    """Convert a DeloadRecommendation to dict."""
    return asdict(recommendation)

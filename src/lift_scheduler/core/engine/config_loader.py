"""
YAML -> typed config loader.

Loads adaptation thresholds from model.yaml and per-approach volume
landmark tables from approaches/<approach_id>.yaml (both bundled with the
package), deep-merging user overrides from ~/.lift-scheduler/.

Usage:
    from lift_scheduler.core.engine.config_loader import load_plateau_config
    cfg = load_plateau_config()
    landmarks = load_approach_landmarks("fst7")

Loading never crashes on bad files: a file that cannot be read or parsed
is ignored with a warning, and a section that fails validation falls back
to the Python defaults from config.py.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    DEFAULT_DELOAD_CONFIG,
    DEFAULT_PLATEAU_CONFIG,
    DEFAULT_STAGNATION_CONFIG,
    NEAR_MRV_MARGIN_SETS,
    USER_CONFIG_DIRNAME,
    DeloadConfig,
    PlateauConfig,
    StagnationConfig,
)
from ..models import VolumeLandmark

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} (with a warning) on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-scheduler: ignoring {path} ({exc})", stacklevel=3)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _package_root() -> Path:
    # config_loader.py lives at src/lift_scheduler/core/engine/config_loader.py
    return Path(__file__).parent.parent.parent


def _user_root() -> Path:
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / USER_CONFIG_DIRNAME


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def get_bundled_model_path() -> Path | None:
    """Return the bundled model.yaml, or None if not found."""
    candidate = _package_root() / "model.yaml"
    return candidate if candidate.exists() else None


def get_user_model_path() -> Path | None:
    """Return ~/.lift-scheduler/model.yaml if it exists, else None."""
    p = _user_root() / "model.yaml"
    return p if p.exists() else None


def get_bundled_approaches_dir() -> Path | None:
    """Return the bundled approaches/ data directory, or None if not found."""
    candidate = _package_root() / "approaches"
    return candidate if candidate.is_dir() else None


def get_user_approaches_dir() -> Path | None:
    """Return ~/.lift-scheduler/approaches/ if it exists, else None."""
    p = _user_root() / "approaches"
    return p if p.is_dir() else None


# ---------------------------------------------------------------------------
# Model thresholds
# ---------------------------------------------------------------------------


def load_model_config() -> dict[str, Any]:
    """
    Load and merge model configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_scheduler/model.yaml
    2. User override at ~/.lift-scheduler/model.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_model_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_model_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def _section(config: dict[str, Any] | None, name: str) -> dict[str, Any]:
    if config is None:
        config = load_model_config()
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}


def load_plateau_config(config: dict[str, Any] | None = None) -> PlateauConfig:
    """PlateauConfig from the ``plateau`` section, or the defaults if invalid."""
    raw = _section(config, "plateau")
    try:
        return PlateauConfig(
            stall_sessions=int(raw.get("stall_sessions", DEFAULT_PLATEAU_CONFIG.stall_sessions)),
            plateau_sessions=int(
                raw.get("plateau_sessions", DEFAULT_PLATEAU_CONFIG.plateau_sessions)
            ),
            regression_threshold=float(
                raw.get("regression_threshold", DEFAULT_PLATEAU_CONFIG.regression_threshold)
            ),
        )
    except (TypeError, ValueError) as exc:
        warnings.warn(f"lift-scheduler: invalid plateau config ({exc}); using defaults", stacklevel=2)
        return DEFAULT_PLATEAU_CONFIG


def load_stagnation_config(config: dict[str, Any] | None = None) -> StagnationConfig:
    """StagnationConfig from the ``stagnation`` section, or the defaults if invalid."""
    raw = _section(config, "stagnation")
    try:
        return StagnationConfig(
            window_weeks=int(raw.get("window_weeks", DEFAULT_STAGNATION_CONFIG.window_weeks)),
            min_weeks=int(raw.get("min_weeks", DEFAULT_STAGNATION_CONFIG.min_weeks)),
            change_threshold_pct=float(
                raw.get("change_threshold_pct", DEFAULT_STAGNATION_CONFIG.change_threshold_pct)
            ),
        )
    except (TypeError, ValueError) as exc:
        warnings.warn(
            f"lift-scheduler: invalid stagnation config ({exc}); using defaults", stacklevel=2
        )
        return DEFAULT_STAGNATION_CONFIG


def load_deload_config(config: dict[str, Any] | None = None) -> DeloadConfig:
    """DeloadConfig from the ``deload`` section, or the defaults if invalid."""
    raw = _section(config, "deload")
    try:
        return DeloadConfig(
            min_triggers=int(raw.get("min_triggers", DEFAULT_DELOAD_CONFIG.min_triggers)),
            stalled_share=float(raw.get("stalled_share", DEFAULT_DELOAD_CONFIG.stalled_share)),
        )
    except (TypeError, ValueError) as exc:
        warnings.warn(f"lift-scheduler: invalid deload config ({exc}); using defaults", stacklevel=2)
        return DEFAULT_DELOAD_CONFIG


def load_near_mrv_margin(config: dict[str, Any] | None = None) -> int:
    """Sets below MRV reported as near_mrv (0 disables)."""
    raw = _section(config, "volume")
    try:
        return max(0, int(raw.get("near_mrv_margin", NEAR_MRV_MARGIN_SETS)))
    except (TypeError, ValueError):
        warnings.warn("lift-scheduler: invalid near_mrv_margin; using 0", stacklevel=2)
        return NEAR_MRV_MARGIN_SETS


# ---------------------------------------------------------------------------
# Approach landmark tables
# ---------------------------------------------------------------------------


def landmarks_from_dict(raw: dict) -> dict[str, VolumeLandmark]:
    """
    Convert a ``volume_landmarks`` mapping to VolumeLandmark objects.

    Raises:
        ValueError: If an entry is missing a field or violates mev < mav < mrv
    """
    result: dict[str, VolumeLandmark] = {}
    for muscle, values in raw.items():
        if not isinstance(values, dict):
            raise ValueError(f"{muscle}: expected a mapping with mev/mav/mrv")
        missing = {"mev", "mav", "mrv"} - set(values)
        if missing:
            raise ValueError(f"{muscle}: missing fields {sorted(missing)}")
        result[str(muscle)] = VolumeLandmark(
            muscle=str(muscle),
            mev=int(values["mev"]),
            mav=int(values["mav"]),
            mrv=int(values["mrv"]),
        )
    return result


def _approach_paths() -> dict[str, list[Path]]:
    """approach_id -> [bundled path, user path] (either may be absent)."""
    paths: dict[str, list[Path]] = {}
    for directory in (get_bundled_approaches_dir(), get_user_approaches_dir()):
        if directory is None:
            continue
        for p in sorted(directory.glob("*.yaml")):
            paths.setdefault(p.stem, []).append(p)
    return paths


def _load_approach_raw(approach_id: str) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for p in _approach_paths().get(approach_id, []):
        raw = _deep_merge(raw, _load_yaml_file(p))
    return raw


def list_approaches() -> list[dict[str, Any]]:
    """
    Summaries of every available approach, bundled and user-defined.

    Approaches whose landmark table fails validation are skipped with a
    warning.
    """
    summaries = []
    for approach_id in _approach_paths():
        raw = _load_approach_raw(approach_id)
        try:
            landmarks = landmarks_from_dict(raw.get("volume_landmarks") or {})
        except (TypeError, ValueError) as exc:
            warnings.warn(
                f"lift-scheduler: skipping approach '{approach_id}' ({exc})", stacklevel=2
            )
            continue
        summaries.append(
            {
                "approach_id": approach_id,
                "display_name": str(raw.get("display_name", approach_id)),
                "creator": raw.get("creator"),
                "recommended_level": raw.get("recommended_level"),
                "muscles": list(landmarks),
            }
        )
    return summaries


def load_approach_landmarks(approach_id: str) -> dict[str, VolumeLandmark]:
    """
    Volume landmarks for one approach, with user overrides merged in.

    Load order (later overrides earlier):
    1. Bundled src/lift_scheduler/approaches/<approach_id>.yaml
    2. User override at ~/.lift-scheduler/approaches/<approach_id>.yaml

    Raises:
        ValueError: If the approach is unknown or its table is invalid
    """
    if approach_id not in _approach_paths():
        valid = ", ".join(_approach_paths())
        raise ValueError(f"Unknown approach '{approach_id}'. Valid IDs: {valid}")

    raw = _load_approach_raw(approach_id)
    landmarks = raw.get("volume_landmarks")
    if not isinstance(landmarks, dict) or not landmarks:
        raise ValueError(f"Approach '{approach_id}' has no volume_landmarks")
    return landmarks_from_dict(landmarks)

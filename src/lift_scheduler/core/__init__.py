"""
Pure engine logic for lift-scheduler.

Every function here is synchronous and side-effect free over its inputs;
configuration files and set history are read by core.engine and io.
"""

from .adaptation import analyze_stagnation, detect_plateau, should_deload
from .progression import get_progressive_target, resolve_exercise_target
from .scheduler import build_split_plan, calculate_specialization_volume, generate_schedule
from .techniques import AppliedTechnique, expand
from .volume import classify, compare_to_previous

__all__ = [
    "AppliedTechnique",
    "analyze_stagnation",
    "build_split_plan",
    "calculate_specialization_volume",
    "classify",
    "compare_to_previous",
    "detect_plateau",
    "expand",
    "generate_schedule",
    "get_progressive_target",
    "resolve_exercise_target",
    "should_deload",
]

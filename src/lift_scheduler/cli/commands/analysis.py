"""Analysis commands: volume, plateau, stagnation, deload."""

import json
from datetime import datetime, timezone
from typing import Annotated, Optional

import typer

from ...core.adaptation import analyze_stagnation, detect_plateau, should_deload
from ...core.config import DEFAULT_APPROACH
from ...core.engine.config_loader import (
    load_approach_landmarks,
    load_deload_config,
    load_model_config,
    load_near_mrv_margin,
    load_plateau_config,
    load_stagnation_config,
)
from ...core.models import SetRecord, VolumeLandmark
from ...core.volume import aggregate_parent_muscles, classify_all, compare_cycles
from ...io.serializers import (
    ValidationError,
    deload_to_dict,
    plateau_assessment_to_dict,
    stagnation_to_dict,
    validate_datetime,
    volume_change_to_dict,
    volume_status_to_dict,
)
from .. import views
from ..app import HistoryOption, JsonOption, app, load_history, parse_pairs

ActualOption = Annotated[
    Optional[list[str]],
    typer.Option("--actual", help="Weekly sets performed, e.g. --actual chest=12"),
]


def _landmarks_or_exit(approach: str) -> dict[str, VolumeLandmark]:
    try:
        return load_approach_landmarks(approach)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _distinct_names(history: list[SetRecord]) -> list[str]:
    seen: dict[str, str] = {}
    for s in history:
        seen.setdefault(s.exercise_name.lower(), s.exercise_name)
    return list(seen.values())


@app.command()
def volume(
    approach: Annotated[
        str,
        typer.Option("--approach", help="Approach whose landmarks to compare against"),
    ] = DEFAULT_APPROACH,
    actual: ActualOption = None,
    previous: Annotated[
        Optional[list[str]],
        typer.Option("--previous", help="Previous cycle's sets, e.g. --previous chest=10"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Classify weekly sets per muscle against MEV/MAV/MRV landmarks.
    """
    landmarks = _landmarks_or_exit(approach)
    current = aggregate_parent_muscles(parse_pairs(actual, "--actual"))
    margin = load_near_mrv_margin(load_model_config())

    statuses = classify_all(landmarks, current, margin)
    changes = None
    if previous:
        changes = compare_cycles(current, aggregate_parent_muscles(parse_pairs(previous, "--previous")))

    if json_out:
        print(json.dumps({
            "approach": approach,
            "statuses": [volume_status_to_dict(s) for s in statuses],
            "changes": [volume_change_to_dict(c) for c in changes or []],
        }, indent=2))
        return

    views.console.print()
    views.console.print(views.format_volume_table(statuses, changes))
    unknown = sorted(set(current) - set(landmarks))
    if unknown:
        views.print_warning(f"No {approach} landmarks for: {', '.join(unknown)}")
    views.console.print()


@app.command()
def plateau(
    exercise: Annotated[str, typer.Argument(help="Exercise name as logged")],
    history_path: HistoryOption,
    has_technique: Annotated[
        bool,
        typer.Option("--has-technique", help="An advanced technique is already applied"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Check an exercise for stalled or plateaued progress.
    """
    history = load_history(history_path)
    assessment = detect_plateau(exercise, history, load_plateau_config(), has_technique)

    if json_out:
        print(json.dumps(plateau_assessment_to_dict(assessment), indent=2))
        return

    if assessment.sessions_analyzed == 0:
        views.print_warning(f"No working sets logged for {exercise}")
    views.console.print()
    views.console.print(views.format_plateau(assessment))
    views.console.print()


@app.command()
def stagnation(
    history_path: HistoryOption,
    exercises: Annotated[
        Optional[list[str]],
        typer.Option("--exercise", "-e", help="Exercise to include (default: all logged)"),
    ] = None,
    now: Annotated[
        Optional[str],
        typer.Option("--now", help="End of the window as ISO timestamp (default: now)"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Week-by-week weight stagnation over the recent window.
    """
    history = load_history(history_path)
    try:
        end = validate_datetime(now, "--now") if now else datetime.now(timezone.utc)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    names = exercises or _distinct_names(history)
    results = analyze_stagnation(names, history, end, load_stagnation_config())

    if json_out:
        print(json.dumps([stagnation_to_dict(r) for r in results], indent=2))
        return

    if not results:
        views.print_info("No working sets in the window.")
        return
    views.console.print(views.format_stagnation_table(results))


@app.command()
def deload(
    history_path: HistoryOption,
    approach: Annotated[
        str,
        typer.Option("--approach", help="Approach whose landmarks to compare against"),
    ] = DEFAULT_APPROACH,
    actual: ActualOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Decide whether a deload week is warranted.
    """
    history = load_history(history_path)
    landmarks = _landmarks_or_exit(approach)
    model = load_model_config()
    plateau_config = load_plateau_config(model)

    assessments = [
        detect_plateau(name, history, plateau_config) for name in _distinct_names(history)
    ]
    statuses = classify_all(
        landmarks,
        aggregate_parent_muscles(parse_pairs(actual, "--actual")),
        load_near_mrv_margin(model),
    )
    recommendation = should_deload(
        assessments, statuses, load_deload_config(model), plateau_config
    )

    if json_out:
        payload = deload_to_dict(recommendation)
        payload["exercises"] = [plateau_assessment_to_dict(a) for a in assessments]
        print(json.dumps(payload, indent=2))
        return

    views.console.print()
    views.console.print(views.format_deload(recommendation))
    views.console.print()

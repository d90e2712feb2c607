"""Training prescription commands: target, expand."""

import json
from typing import Annotated, Optional

import typer
import yaml

from ...core.progression import resolve_exercise_target
from ...core.techniques import (
    TECHNIQUE_TYPES,
    AppliedTechnique,
    default_config,
    expand as expand_technique,
)
from ...io.serializers import (
    ValidationError,
    expansion_result_to_dict,
    progressive_target_to_dict,
    technique_from_dict,
    technique_to_dict,
)
from .. import views
from ..app import HistoryOption, JsonOption, app, load_history, parse_rep_range


@app.command()
def target(
    exercise: Annotated[str, typer.Argument(help="Exercise name as logged, e.g. 'Bench Press'")],
    history_path: HistoryOption,
    rep_range: Annotated[
        str,
        typer.Option("--rep-range", "-r", help="Target rep range, e.g. 8-12"),
    ] = "8-12",
    sex: Annotated[
        str,
        typer.Option("--sex", help="male, female or other (starting estimates only)"),
    ] = "other",
    bodyweight_kg: Annotated[
        Optional[float],
        typer.Option("--bodyweight-kg", help="Bodyweight for starting estimates"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compute the next weight/rep target from recent working sets.
    """
    if sex not in ("male", "female", "other"):
        views.print_error(f"Invalid sex '{sex}'. Must be male, female or other")
        raise typer.Exit(1)

    reps = parse_rep_range(rep_range)
    history = load_history(history_path)
    result = resolve_exercise_target(
        exercise, reps, history, sex=sex, bodyweight_kg=bodyweight_kg
    )

    if json_out:
        payload = progressive_target_to_dict(result)
        payload["exercise_name"] = exercise
        print(json.dumps(payload, indent=2))
        return

    views.console.print()
    views.console.print(views.format_target(exercise, result))
    views.console.print()


def _parse_overrides(values: list[str] | None) -> dict:
    """Parse repeated key=value options; values are read as YAML scalars."""
    overrides = {}
    for item in values or []:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--set")
        try:
            overrides[key.strip()] = yaml.safe_load(raw)
        except yaml.YAMLError:
            raise typer.BadParameter(f"cannot parse value '{raw}'", param_hint="--set")
    return overrides


@app.command()
def expand(
    technique: Annotated[str, typer.Argument(help="Technique, e.g. drop_set, rest_pause, fst7_protocol")],
    weight: Annotated[
        float,
        typer.Option("--weight", "-w", help="Working weight in kg"),
    ],
    reps: Annotated[
        int,
        typer.Option("--reps", "-r", help="Target reps per working set"),
    ],
    sets: Annotated[
        int,
        typer.Option("--sets", "-s", help="Working sets prescribed"),
    ] = 3,
    config_values: Annotated[
        Optional[list[str]],
        typer.Option("--set", help="Override a config field, e.g. --set drops=3"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Expand an advanced technique into its concrete sets.
    """
    if technique not in TECHNIQUE_TYPES:
        views.print_error(f"Unknown technique '{technique}'")
        views.print_info("Valid: " + ", ".join(TECHNIQUE_TYPES))
        raise typer.Exit(1)

    payload = technique_to_dict(AppliedTechnique(config=default_config(technique)))
    payload["config"].update(_parse_overrides(config_values))

    try:
        applied = technique_from_dict(payload)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = expand_technique(applied, weight, reps, sets)

    if json_out:
        out = expansion_result_to_dict(result)
        out["technique"] = technique_to_dict(applied)
        print(json.dumps(out, indent=2))
        return

    views.console.print()
    views.console.print(views.format_expansion_table(technique, result))
    if not result.is_supported:
        views.print_warning(f"{technique} is not expanded: {result.unsupported_reason}")
    views.console.print()

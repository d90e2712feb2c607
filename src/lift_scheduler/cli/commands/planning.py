"""Planning commands: schedule, approaches."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_AGGRESSIVENESS, DEFAULT_APPROACH, SPECIALIZATION_MULTIPLIERS
from ...core.engine.config_loader import list_approaches, load_approach_landmarks
from ...core.muscles import parent_muscle
from ...core.scheduler import (
    build_split_plan,
    generate_schedule,
    get_recommended_frequency,
    get_specializable_muscles,
    is_specializable,
)
from ...io.serializers import split_plan_to_dict
from .. import views
from ..app import JsonOption, app


@app.command()
def schedule(
    muscle: Annotated[str, typer.Argument(help="Muscle to specialize, e.g. chest, shoulders_side")],
    days: Annotated[
        int,
        typer.Option("--days", "-d", help="Training days per week"),
    ] = 4,
    target_frequency: Annotated[
        Optional[int],
        typer.Option("--target-frequency", "-f", help="Specialization days per cycle"),
    ] = None,
    aggressiveness: Annotated[
        str,
        typer.Option("--aggressiveness", "-a", help="moderate, high or very_high"),
    ] = DEFAULT_AGGRESSIVENESS,
    approach: Annotated[
        str,
        typer.Option("--approach", help="Approach whose MAV values seed the base volume"),
    ] = DEFAULT_APPROACH,
    json_out: JsonOption = False,
) -> None:
    """
    Build a weak-point specialization split.
    """
    muscle = muscle.strip().lower()
    if not is_specializable(muscle):
        views.print_error(f"Unknown muscle '{muscle}'")
        views.print_info("Valid: " + ", ".join(get_specializable_muscles()))
        raise typer.Exit(1)

    if aggressiveness not in SPECIALIZATION_MULTIPLIERS:
        valid = ", ".join(SPECIALIZATION_MULTIPLIERS)
        views.print_error(f"Unknown aggressiveness '{aggressiveness}'. Valid: {valid}")
        raise typer.Exit(1)

    try:
        landmarks = load_approach_landmarks(approach)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    base_volumes = {m: float(lm.mav) for m, lm in landmarks.items()}
    # A granular muscle takes over its parent's base volume
    parent = parent_muscle(muscle)
    if muscle not in base_volumes and parent in base_volumes:
        base_volumes[muscle] = base_volumes.pop(parent)

    plan = build_split_plan(muscle, days, base_volumes, target_frequency, aggressiveness)
    specialization_frequency = generate_schedule(muscle, days, target_frequency).specialization_frequency
    band = get_recommended_frequency(muscle)

    if json_out:
        payload = split_plan_to_dict(plan)
        payload["specialization_frequency"] = specialization_frequency
        payload["recommended_frequency"] = asdict(band)
        print(json.dumps(payload, indent=2))
        return

    views.console.print()
    views.console.print(views.format_schedule_table(plan))
    views.console.print(views.format_distribution_table(plan))
    views.console.print(
        f"{muscle} trained on {specialization_frequency} of {plan.cycle_days} days"
    )
    views.console.print(views.format_frequency_band(muscle, band))
    views.console.print()


@app.command()
def approaches(
    json_out: JsonOption = False,
) -> None:
    """
    List the training approaches with volume landmark tables.
    """
    available = list_approaches()

    if json_out:
        print(json.dumps(available, indent=2))
        return

    if not available:
        views.print_warning("No approaches found.")
        return
    views.console.print(views.format_approaches_table(available))

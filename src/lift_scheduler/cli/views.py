"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of engine results.
"""

from typing import Any

from rich.console import Console
from rich.table import Table

from ..core.config import FrequencyBand
from ..core.models import (
    DeloadRecommendation,
    ExerciseStagnation,
    ExpansionResult,
    PlateauAssessment,
    ProgressiveTarget,
    SplitPlan,
    VolumeChange,
    VolumeStatus,
)


console = Console()


_STATUS_STYLES = {
    "under_mev": "yellow",
    "in_range": "green",
    "near_mrv": "magenta",
    "over_mrv": "red",
}


_STATE_STYLES = {
    "progressing": "green",
    "stalled": "yellow",
    "plateaued": "red",
}


def _fmt_weight(weight: float) -> str:
    return f"{weight:g}" if weight > 0 else "BW"


def format_schedule_table(plan: SplitPlan) -> Table:
    """
    Create a Rich table with one row per cycle day.

    Args:
        plan: Split plan to display

    Returns:
        Rich Table object
    """
    title = f"{plan.cycle_days}-day cycle"
    if plan.specialization_muscle:
        title += f" ({plan.specialization_muscle} specialization)"
    table = Table(title=title)

    table.add_column("Day", justify="right", style="dim", width=4)
    table.add_column("Workout", style="cyan")

    for day, workout_type in enumerate(plan.sessions, 1):
        table.add_row(str(day), workout_type)

    return table


def format_distribution_table(plan: SplitPlan) -> Table:
    """Sessions and sets per cycle for each trained muscle."""
    table = Table(title="Volume distribution")

    table.add_column("Muscle", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Sets/cycle", justify="right", style="bold")

    for muscle, sets in sorted(plan.volume_distribution.items(), key=lambda kv: -kv[1]):
        style = "bold magenta" if muscle == plan.specialization_muscle else ""
        table.add_row(
            f"[{style}]{muscle}[/{style}]" if style else muscle,
            str(plan.frequency_map.get(muscle, 0)),
            str(sets),
        )

    return table


def format_frequency_band(muscle: str, band: FrequencyBand) -> str:
    return (
        f"Recommended {muscle} frequency: {band.min}-{band.max} sessions/cycle "
        f"(optimal {band.optimal})"
    )


def format_volume_table(
    statuses: list[VolumeStatus],
    changes: list[VolumeChange] | None = None,
) -> Table:
    """Actual weekly sets against landmarks, with cycle-over-cycle change if given."""
    by_muscle = {c.muscle: c for c in changes or []}
    table = Table(title="Weekly volume")

    table.add_column("Muscle", style="cyan")
    table.add_column("Sets", justify="right", style="bold")
    table.add_column("MAV", justify="right")
    table.add_column("%MAV", justify="right")
    table.add_column("Status")
    if changes:
        table.add_column("Change", justify="right")

    for s in statuses:
        style = _STATUS_STYLES.get(s.status, "")
        row = [
            s.muscle,
            f"{s.actual_volume:g}",
            str(s.target_volume),
            f"{s.percentage}%",
            f"[{style}]{s.status}[/{style}] ({s.zone})",
        ]
        if changes:
            change = by_muscle.get(s.muscle)
            row.append(f"{change.percent_change:+.0f}%" if change and change.previous else "-")
        table.add_row(*row)

    return table


def format_target(exercise_name: str, target: ProgressiveTarget) -> str:
    """Format a progressive target as a text block."""
    lines = [f"Next target for {exercise_name}"]
    lines.append(f"- Weight: {_fmt_weight(target.weight)} kg")
    lines.append(f"- Reps:   {target.reps}")
    if target.has_history:
        lines.append(f"- Rule:   {target.rule} (from {target.based_on_sets} recent sets)")
        if target.last_performed_at:
            lines.append(f"- Last performed: {target.last_performed_at:%Y-%m-%d}")
    else:
        lines.append("- No history: starting estimate")
    return "\n".join(lines)


def format_expansion_table(technique: str, result: ExpansionResult) -> Table:
    """One row per virtual set."""
    table = Table(title=f"{technique} ({result.total_sets} sets)")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("Label", style="magenta")
    table.add_column("Rest(s)", justify="right")

    for v in result.virtual_sets:
        table.add_row(
            str(v.set_number),
            _fmt_weight(v.weight),
            str(v.target_reps),
            v.label or "",
            str(v.rest_seconds_override) if v.rest_seconds_override is not None else "-",
        )

    return table


def format_plateau(assessment: PlateauAssessment) -> str:
    """Format a plateau assessment as a text block."""
    style = _STATE_STYLES.get(assessment.state, "")
    lines = [
        f"{assessment.exercise_name}: [{style}]{assessment.state}[/{style}]",
        f"- Sessions analyzed: {assessment.sessions_analyzed}",
        f"- Non-improving sessions: {assessment.non_improving_sessions}",
        f"- Best set score: {assessment.best_score:g}  (last {assessment.last_score:g})",
    ]
    if assessment.suggestion:
        action = assessment.suggestion.suggested_action.replace("_", " ")
        lines.append(f"- Suggestion: {action}")
    return "\n".join(lines)


def format_stagnation_table(results: list[ExerciseStagnation]) -> Table:
    table = Table(title="Stagnation (weekly average weight)")

    table.add_column("Exercise", style="cyan")
    table.add_column("Weeks", justify="right")
    table.add_column("Change", justify="right", style="bold")
    table.add_column("Plateaued")

    for r in results:
        table.add_row(
            r.name,
            str(r.weeks_used),
            f"{r.avg_weight_change:+.1f}%",
            "[red]yes[/red]" if r.is_plateaued else "no",
        )

    return table


def format_deload(recommendation: DeloadRecommendation) -> str:
    verdict = "[red]yes[/red]" if recommendation.recommended else "[green]no[/green]"
    fired = ", ".join(recommendation.triggers) or "none"
    return (
        f"Deload recommended: {verdict}\n"
        f"- Triggers ({len(recommendation.triggers)}/{recommendation.min_triggers} needed): {fired}"
    )


def format_approaches_table(approaches: list[dict[str, Any]]) -> Table:
    table = Table(title="Training approaches")

    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Creator")
    table.add_column("Level")
    table.add_column("Muscles", justify="right")

    for a in approaches:
        table.add_row(
            a["approach_id"],
            a["display_name"],
            a.get("creator") or "-",
            a.get("recommended_level") or "-",
            str(len(a["muscles"])),
        )

    return table


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")

"""Shared Typer app object, shared option types, and argument helpers."""

from pathlib import Path
from typing import Annotated

import typer

from ..core.models import SetRecord
from ..io.history_store import SetHistoryStore
from ..io.serializers import ValidationError
from . import views

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

HistoryOption = Annotated[
    Path,
    typer.Option("--history", "-H", help="Path to set history JSONL file"),
]

app = typer.Typer(
    name="lift-scheduler",
    help="Specialization splits, volume landmarks, progressive overload and technique expansion.",
    no_args_is_help=True,
)


def parse_pairs(values: list[str] | None, option: str) -> dict[str, float]:
    """
    Parse repeated ``muscle=sets`` options into a dict.

    Raises:
        typer.BadParameter: If an entry is not NAME=NUMBER
    """
    result: dict[str, float] = {}
    for item in values or []:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected NAME=NUMBER, got '{item}'", param_hint=option)
        try:
            result[name.strip().lower()] = float(raw)
        except ValueError:
            raise typer.BadParameter(f"'{raw}' is not a number", param_hint=option)
    return result


def parse_rep_range(value: str) -> tuple[int, int]:
    """Parse "8-12" (or a single "10") into a rep range."""
    low, sep, high = value.partition("-")
    try:
        if not sep:
            return int(low), int(low)
        return int(low), int(high)
    except ValueError:
        raise typer.BadParameter(f"expected MIN-MAX, got '{value}'", param_hint="--rep-range")


def load_history(history_path: Path) -> list[SetRecord]:
    """Load set history, printing the error and exiting 1 on failure."""
    store = SetHistoryStore(history_path)
    try:
        return store.load_sets()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

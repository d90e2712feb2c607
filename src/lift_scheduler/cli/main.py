"""
CLI entry point using Typer.

Provides commands over the program generation engine:
- schedule: Build a specialization split
- approaches: List approaches with landmark tables
- volume: Classify weekly sets against landmarks
- target: Next weight/rep target from history
- expand: Expand an advanced technique into sets
- plateau: Plateau state for one exercise
- stagnation: Week-by-week weight stagnation
- deload: Deload recommendation
"""

from typing import Annotated

import typer

from ..logging_config import setup_logging
from .app import app

# Importing the command modules registers their commands on the shared app
from .commands import analysis, planning, training  # noqa: F401


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Training program generation engine.
    """
    setup_logging("DEBUG" if verbose else "WARNING")


if __name__ == "__main__":
    app()

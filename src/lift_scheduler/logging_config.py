from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "lift_scheduler"


def setup_logging(level: str = "WARNING") -> None:
    """
    Send lift_scheduler logs to stderr through Rich.

    Safe to call more than once: the handler is installed on the first
    call and later calls only change the level.  Logs go to stderr so that
    --json output on stdout stays machine-readable.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if any(isinstance(h, RichHandler) for h in logger.handlers):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

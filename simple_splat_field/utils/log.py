"""
Logging setup for the command-line entry points.

Library modules only create loggers; handlers are installed here, once, by the
CLI so embedding applications keep control of their own logging.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """
    Route package logs through rich.

    Args:
        verbose: Log per-frame debug messages when True
        console: Optional console to write to, shared with CLI output
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("simple_splat_field")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

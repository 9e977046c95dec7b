"""Logging configuration for reposweep CLI."""

import logging
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "reposweep"


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def resolve_log_level(verbosity: int = 0, quiet: bool = False) -> LogLevel:
    """Map CLI flags to a log level. --quiet wins over any -v."""
    if quiet:
        return LogLevel.QUIET
    if verbosity >= 1:
        return LogLevel.VERBOSE
    return LogLevel.NORMAL


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
) -> Console:
    """Configure logging based on CLI options.

    Only reposweep's own loggers follow the verbosity flags; other libraries
    stay at WARNING.

    Args:
        verbosity: Number of -v flags (1 = debug, 2+ adds times and paths)
        quiet: Suppress non-error output
        no_color: Disable colored output
        stream: Output stream for logs (default: stderr at write time)

    Returns:
        Configured Rich console for output
    """
    console = Console(
        file=stream,
        stderr=stream is None,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
    )

    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    logging.getLogger(LOGGER_NAME).setLevel(resolve_log_level(verbosity, quiet))

    return console

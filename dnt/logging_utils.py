"""Console logging for build progress."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

LOGGER_NAME = "dnt"
LOG_PREFIX = "[dnt]"

_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"


def supports_color(stream: TextIO) -> bool:
    """Whether ANSI colours should be written to `stream`."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class DntFormatter(logging.Formatter):
    """Prefix every record with `[dnt]` and colour warnings and errors."""

    def __init__(self, use_color: bool = False) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = f"{LOG_PREFIX} {super().format(record)}"
        if not self.use_color:
            return text
        if record.levelno >= logging.ERROR:
            return f"{_RED}{text}{_RESET}"
        if record.levelno >= logging.WARNING:
            return f"{_YELLOW}{text}{_RESET}"
        return text


def configure_logging(stream: TextIO | None = None, verbose: bool = False) -> logging.Logger:
    """
    Attach a single console handler to the `dnt` logger.

    Calling this again replaces the previous handler.

    Args:
        stream: Output stream (default: stdout)
        verbose: Log DEBUG records as well

    Returns:
        The configured logger
    """
    stream = stream or sys.stdout
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_dnt_console", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(DntFormatter(use_color=supports_color(stream)))
    handler._dnt_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger

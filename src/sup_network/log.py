"""
Logging setup for applications embedding sup-network.

Library modules only create loggers with `logging.getLogger(__name__)`.
Installing handlers is left to the application, which can call
`setup_logging` once at startup.
"""

from __future__ import annotations

import logging

from sup_network.config import DEFAULT_LOG_LEVEL

__all__ = [
    "ColoredFormatter",
    "setup_logging",
]

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)

        timestamp = self.formatTime(record, self.datefmt)
        colored_time = f"{self.CYAN}{timestamp}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"

        return f"{colored_time} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool | None = None, no_color: bool = False) -> logging.Handler:
    """
    Attach a stream handler to the root logger.

    Args:
        verbose: Log at DEBUG instead of INFO. Defaults to
            DEFAULT_LOG_LEVEL, which is DEBUG in the 'test' environment.
        no_color: Use a plain formatter without ANSI escapes.

    Returns:
        The installed handler, so callers can remove it again.
    """
    if verbose is None:
        level = DEFAULT_LOG_LEVEL
    else:
        level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt=_DATE_FORMAT,
        )
    else:
        formatter = ColoredFormatter(datefmt=_DATE_FORMAT)

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    return handler

"""
Logging utilities for depbump.

The update engine is a library first, so nothing is emitted unless the
host application (or the ``depbump`` CLI) calls :func:`setup_logging`.
All loggers live under the ``depbump`` namespace; updaters log their
bump decisions at DEBUG level.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from depbump.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

#: Root logger name for the package.
LOGGER_NAME = "depbump"

_logging_configured: bool = False
_lock = threading.Lock()


def _color_allowed(stream: Optional[IO[str]] = None) -> bool:
    """Return True when ANSI colors may be written to ``stream``."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    target = stream if stream is not None else sys.stderr
    try:
        return target.isatty()
    except (AttributeError, OSError, ValueError):
        return False


class ColoredFormatter(logging.Formatter):
    """Formatter that tints the level name when writing to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if not color or not _color_allowed():
            return super().format(record)

        # Tint a copy so other handlers see the plain level name
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


def level_for_verbosity(verbose: int) -> int:
    """Map a ``-v`` count to a logging level (0=WARNING, 1=INFO, 2+=DEBUG)."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Attach a single stream handler to the ``depbump`` logger.

    Calling this again replaces the previous handler rather than adding
    a second one.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Use the verbose format with timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger inside the ``depbump`` namespace.

    ``get_logger("updaters.npm")`` and ``get_logger("depbump.updaters.npm")``
    return the same logger.
    """
    if not name or name == LOGGER_NAME:
        qualified = LOGGER_NAME
    elif name.startswith(LOGGER_NAME + "."):
        qualified = name
    else:
        qualified = f"{LOGGER_NAME}.{name}"

    logger = logging.getLogger(qualified)

    root_logger = logging.getLogger(LOGGER_NAME)
    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True if :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Drop all depbump handlers and fall back to a ``NullHandler``."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False

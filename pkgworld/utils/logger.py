"""
Logging for pkgworld.

Every module logs through a child of the ``pkgworld`` logger obtained from
:func:`get_logger`. As a library pkgworld stays silent (a ``NullHandler``
is attached); the CLI calls :func:`setup_logging` once to route records to
stderr at the level chosen by ``-v``.

Resolver traces (one line per edge walked, per record kept by the
flattener) are emitted at DEBUG on ``pkgworld.client`` and are only
visible with ``-vv``.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Dict, Optional

from pkgworld.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_NAMESPACE = "pkgworld"

_configured = False
_config_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal.

    The record is copied before its level name is decorated, so other
    handlers attached to the same logger still see the plain name.
    """

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
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
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None or not self.use_color or not self._should_use_color():
            return super().format(record)

        decorated = logging.makeLogRecord(record.__dict__)
        decorated.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(decorated)

    @staticmethod
    def _should_use_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        isatty = getattr(sys.stderr, "isatty", None)
        try:
            return bool(isatty and isatty())
        except (ValueError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Route pkgworld log records to ``stream`` (stderr by default).

    Calling it again replaces the previous handler instead of adding a
    second one.

    Args:
        level: Minimum level to emit.
        verbose: Use the long format with timestamps and logger names.
        stream: Destination stream.
    """
    global _configured

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )
    )

    with _config_lock:
        package_logger = logging.getLogger(_NAMESPACE)
        package_logger.handlers.clear()
        package_logger.addHandler(handler)
        package_logger.setLevel(level)
        package_logger.propagate = False
        _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``pkgworld`` or one of its children.

    ``get_logger("queue")`` and ``get_logger("pkgworld.queue")`` name the
    same logger.
    """
    if not name or name == _NAMESPACE:
        full_name = _NAMESPACE
    elif name.startswith(_NAMESPACE + "."):
        full_name = name
    else:
        full_name = f"{_NAMESPACE}.{name}"

    logger = logging.getLogger(full_name)
    parent = logger.parent
    if not logger.handlers and (parent is None or not parent.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def is_logging_configured() -> bool:
    return _configured


def disable_logging() -> None:
    """Drop the handler installed by :func:`setup_logging`."""
    global _configured

    with _config_lock:
        package_logger = logging.getLogger(_NAMESPACE)
        package_logger.handlers.clear()
        package_logger.addHandler(logging.NullHandler())
        package_logger.setLevel(logging.NOTSET)
        _configured = False

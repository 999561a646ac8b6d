"""
User-facing terminal output for pkgworld, rendered with Rich.

Commands print resolve results and status lines through this module;
diagnostics belong in :mod:`pkgworld.utils.logger` instead. The Rich
console is created lazily and writes to whatever ``sys.stdout`` is at
print time, so output captured by click's ``CliRunner`` or pytest's
``capsys`` ends up in the right place.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

PKGWORLD_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "package": "bold cyan",
        "private": "magenta",
        "dim": "dim",
    }
)

_state_lock = threading.Lock()
_console: Optional[Console] = None


def _color_enabled() -> bool:
    # NO_COLOR and CI both force plain output; otherwise follow the tty
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    try:
        return bool(isatty and isatty())
    except (ValueError, OSError):
        return False


def get_raw_console() -> Console:
    """Return the shared Rich console, creating it on first use."""
    global _console

    with _state_lock:
        if _console is None:
            colored = _color_enabled()
            _console = Console(
                theme=PKGWORLD_THEME,
                no_color=not colored,
                highlight=colored,
            )
        return _console


def reconfigure_console() -> None:
    """Forget the shared console so the next print re-reads the environment."""
    global _console

    with _state_lock:
        _console = None


def _status(style: str, prefix: str, message: str) -> None:
    get_raw_console().print(f"{prefix} {message}", style=style, highlight=False)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _status("success", prefix, message)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _status("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _status("warning", prefix, message)


def print_table(
    data: Sequence[Mapping[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Print rows of a resolved world as a Rich table.

    Args:
        data: One mapping per row, keyed by column header.
        headers: Column order; defaults to the first row's keys.
        title: Table title, e.g. ``"Requires"``.
        column_styles: Per-header keyword arguments for
            :meth:`rich.table.Table.add_column` (``style``, ``justify``,
            ``no_wrap``).

    Nothing is printed for an empty ``data``.
    """
    if not data:
        return

    columns = headers if headers is not None else list(data[0])
    styles = column_styles or {}

    table = Table(title=title, header_style="bold")
    for column in columns:
        options = {"overflow": "fold", **styles.get(column, {})}
        table.add_column(column, **options)

    for row in data:
        table.add_row(*[str(row.get(column, "")) for column in columns])

    get_raw_console().print(table)

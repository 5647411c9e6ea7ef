"""
Console output helpers for depbump using Rich.

User-facing output from CLI commands goes through here; diagnostics go
through :mod:`depbump.utils.logger` instead.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

DEPBUMP_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the shared Rich console, creating it on first use."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=DEPBUMP_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the shared console so the next call picks up a changed environment."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    return _get_console()


# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{prefix} {message}", style="warning")


def print_info(message: str) -> None:
    _get_console().print(message, style="info")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render rows of dictionaries as a Rich table.

    Args:
        data: Row dictionaries.
        headers: Column order; defaults to the keys of the first row.
        title: Optional table title.
        column_styles: Per-column ``style``/``justify``/``no_wrap`` settings.
        row_styler: Callback returning a style for a row, or ``None``.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow="fold",
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


def colorize_update_type(update_type: str) -> str:
    """Return Rich markup coloring an update classification."""
    color_map = {
        "major": "red",
        "minor": "yellow",
        "patch": "green",
        "update": "yellow",
        "source": "cyan",
    }
    color = color_map.get(update_type.lower())
    return f"[{color}]{update_type}[/{color}]" if color else update_type


# ---------------------------------------------------------------------------
# Interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question.

    Empty or unrecognised answers return ``default``; Ctrl+C and EOF
    return False.
    """
    console = _get_console()
    suffix = " [Y/n]: " if default else " [y/N]: "
    console.print(f"{message}{suffix}", end="", style="info")

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in ("y", "yes"):
        return True
    if response in ("n", "no"):
        return False
    return default

"""
Shared context object for depbump CLI commands.

One :class:`DepBumpContext` is created per invocation by the top-level
group and handed to subcommands through Click's context mechanism.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depbump.config import DepBumpConfig


class DepBumpContext:
    """Global options and loaded configuration for one CLI run.

    Attributes:
        config_path: Configuration file in use, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration (defaults when no file was found).
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: DepBumpConfig = DepBumpConfig()


#: Click decorator injecting :class:`DepBumpContext` into commands.
pass_context = click.make_pass_decorator(DepBumpContext, ensure=True)

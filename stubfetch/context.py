"""
Shared context object for stubfetch CLI commands.

This module defines the Click context object used to share configuration
and runtime options between the ``stubfetch`` group and its subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from stubfetch.config import StubFetchConfig


class StubFetchContext:
    """Per-invocation state handed from the CLI group to its commands.

    Attributes:
        config_path: Path to the configuration file, if one was used.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration (defaults when no file was found).
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: StubFetchConfig = StubFetchConfig()


#: Click decorator for injecting :class:`StubFetchContext` into commands.
pass_context = click.make_pass_decorator(StubFetchContext, ensure=True)

"""stubfetch version information (single source of truth)."""

from __future__ import annotations

__version__ = "0.1.0.dev0"

#: Human-readable version (for CLI)
VERSION_STRING = f"stubfetch {__version__}"

"""
Package data models for stubfetch.

This module defines the records the resolver produces and consumes for a
single package: the parsed form of a ``Requires-Dist`` entry, and the
record kept for every package that was fetched and unpacked.
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass


@dataclass(frozen=True)
class DependencySpecifier:
    """A dependency declaration split into name and constraint.

    The raw ``Requires-Dist`` value is split on its first whitespace run:
    everything before is the package name, everything after (trimmed) is
    the constraint. Markers and extras stay inside the constraint verbatim.

    Attributes:
        name: Package name, case preserved.
        constraint: Remainder of the declaration; empty when absent.

    Example::

        >>> DependencySpecifier.parse("typing-extensions (>=4.0)")
        DependencySpecifier(name='typing-extensions', constraint='(>=4.0)')
    """

    name: str
    constraint: str = ""

    @classmethod
    def parse(cls, raw: str) -> "DependencySpecifier":
        parts = raw.strip().split(None, 1)
        if not parts:
            return cls(name="")
        if len(parts) == 1:
            return cls(name=parts[0])
        return cls(name=parts[0], constraint=parts[1].strip())

    def __str__(self) -> str:
        return f"{self.name} {self.constraint}".strip()


@dataclass(frozen=True)
class ProcessedPackage:
    """A package that was downloaded and unpacked during a run.

    Attributes:
        name: Package name as requested.
        version: Full release id that was selected.
        path: Scratch directory the wheel was unpacked into.
    """

    name: str
    version: str
    path: Path

    def to_dict(self) -> dict:
        return {"name": self.name, "version": self.version, "path": str(self.path)}

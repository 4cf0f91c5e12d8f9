"""
Core functionality exports for stubfetch.

    from stubfetch.core import DependencyResolver, match
"""

from __future__ import annotations

from stubfetch.core.matcher import match
from stubfetch.core.extractor import extract
from stubfetch.core.scanner import find_dependencies
from stubfetch.core.registry import RegistryClient
from stubfetch.core.fetcher import ArtifactFetcher
from stubfetch.core.resolver import (
    DependencyResolver,
    ResolutionContext,
    ResolutionResult,
)

__all__ = [
    "match",
    "extract",
    "find_dependencies",
    "RegistryClient",
    "ArtifactFetcher",
    "DependencyResolver",
    "ResolutionContext",
    "ResolutionResult",
]

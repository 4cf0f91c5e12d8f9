"""
Unified data model exports for stubfetch.

Example:
    >>> from stubfetch.models import ReleaseIndex, ProcessedPackage
"""

from __future__ import annotations

from stubfetch.models.release import ArtifactDescriptor, ReleaseIndex
from stubfetch.models.package import DependencySpecifier, ProcessedPackage

__all__ = [
    "ArtifactDescriptor",
    "ReleaseIndex",
    "DependencySpecifier",
    "ProcessedPackage",
]

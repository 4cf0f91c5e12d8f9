"""
Release index data model for stubfetch.

This module describes what the registry knows about a package: an ordered
mapping of release ids to the artifacts uploaded for each release.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from stubfetch.constants import WHEEL_SUFFIX


@dataclass(frozen=True)
class ArtifactDescriptor:
    """A downloadable file belonging to one release.

    Attributes:
        url: Absolute download URL.
        filename: Filename reported by the registry.
    """

    url: str
    filename: str

    @property
    def is_wheel(self) -> bool:
        """True if this artifact is a binary wheel (the only accepted kind)."""
        return self.filename.endswith(WHEEL_SUFFIX)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ArtifactDescriptor":
        return cls(url=str(data.get("url", "")), filename=str(data.get("filename", "")))


@dataclass
class ReleaseIndex:
    """Release id → artifacts, in the order the registry listed them.

    Attributes:
        name: Package the index belongs to.
        releases: Ordered mapping of release id to its artifacts.

    Example::

        >>> index = ReleaseIndex.from_json("demo", {"releases": {"1.0": []}})
        >>> index.release_ids()
        ['1.0']
    """

    name: str
    releases: Dict[str, List[ArtifactDescriptor]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, name: str, data: Mapping[str, Any]) -> "ReleaseIndex":
        """Build an index from a registry JSON document.

        Entries that are not JSON objects are skipped, and a release whose
        value is not a list has no artifacts. A missing or malformed
        ``releases`` table yields an empty index.
        """
        raw_releases = data.get("releases")
        releases: Dict[str, List[ArtifactDescriptor]] = {}

        if isinstance(raw_releases, Mapping):
            for release_id, files in raw_releases.items():
                if not isinstance(files, list):
                    files = []
                artifacts = [
                    ArtifactDescriptor.from_json(entry)
                    for entry in files
                    if isinstance(entry, Mapping)
                ]
                releases[str(release_id)] = artifacts

        return cls(name=name, releases=releases)

    def release_ids(self) -> List[str]:
        """Release ids in document order."""
        return list(self.releases)

    def artifacts(self, release_id: str) -> List[ArtifactDescriptor]:
        """Artifacts of ``release_id`` (empty for unknown releases)."""
        return list(self.releases.get(release_id, []))

    def first_wheel(self, release_id: str) -> Optional[ArtifactDescriptor]:
        """First wheel of ``release_id`` in listing order, if any."""
        return next((a for a in self.artifacts(release_id) if a.is_wheel), None)

    def __contains__(self, release_id: object) -> bool:
        return release_id in self.releases

    def __iter__(self) -> Iterator[str]:
        return iter(self.releases)

    def __len__(self) -> int:
        return len(self.releases)

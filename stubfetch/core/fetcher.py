"""Release selection and artifact download for stubfetch.

Selection rules, applied in this order:

1. With a constraint, the greatest release satisfying it is picked
   (see :mod:`stubfetch.core.matcher`); without one the bare release
   prefix is the starting selection.
2. Then every release id is scanned in index order, and the **last** one
   starting with the release prefix replaces the selection. A prefix
   therefore wins over a constraint whenever any release shares it, and
   an empty prefix selects the last listed release.
3. The first ``.whl`` artifact of the selected release is downloaded.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

from stubfetch.core.matcher import match as match_constraint
from stubfetch.models.release import ArtifactDescriptor, ReleaseIndex
from stubfetch.utils.http import HTTPClient
from stubfetch.utils.logger import get_logger
from stubfetch.constants import DEFAULT_VERSION_ORDERING
from stubfetch.exceptions import (
    ArtifactDownloadError,
    NetworkError,
    NoArtifactFoundError,
    NoReleaseFoundError,
)

logger = get_logger("fetcher")

__all__ = ["ArtifactFetcher", "select_release", "select_artifact", "artifact_filename"]


def select_release(
    index: ReleaseIndex,
    release_prefix: str,
    constraint: str = "",
    *,
    ordering: str = DEFAULT_VERSION_ORDERING,
) -> str:
    """Pick the release to download from ``index``.

    Raises:
        NoReleaseFoundError: The constraint matched nothing, or the final
            selection is not a release of the index.
    """
    matched: Optional[str] = None
    if constraint:
        matched = match_constraint(index.release_ids(), constraint, ordering=ordering)
        if matched is None:
            raise NoReleaseFoundError(
                f"No release of {index.name} matches '{constraint}'",
                package_name=index.name,
            )
        selected = matched
    else:
        selected = release_prefix

    for release_id in index:
        if release_id.startswith(release_prefix):
            selected = release_id

    if matched is not None and selected != matched:
        logger.debug(
            "Release prefix '%s' replaced %s %s (matched '%s') with %s",
            release_prefix,
            index.name,
            matched,
            constraint,
            selected,
        )

    if not selected or selected not in index:
        raise NoReleaseFoundError(
            f"No release of {index.name} starts with '{release_prefix}'",
            package_name=index.name,
            release=selected or None,
        )

    return selected


def select_artifact(index: ReleaseIndex, release_id: str) -> ArtifactDescriptor:
    """Return the first wheel listed for ``release_id``.

    Raises:
        NoArtifactFoundError: The release has no wheel.
    """
    artifact = index.first_wheel(release_id)
    if artifact is None:
        raise NoArtifactFoundError(
            f"No wheel files found for release {release_id}",
            package_name=index.name,
            release=release_id,
        )
    return artifact


def artifact_filename(artifact: ArtifactDescriptor) -> str:
    """Local filename for ``artifact``: the last path segment of its URL."""
    name = PurePosixPath(unquote(urlparse(artifact.url).path)).name
    return name or artifact.filename


class ArtifactFetcher:
    """Select a release from an index and stream its wheel to disk.

    Args:
        http_client: Open HTTP client used for downloads.
        ordering: Candidate ordering passed to the matcher.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        ordering: str = DEFAULT_VERSION_ORDERING,
    ) -> None:
        self.http_client = http_client
        self.ordering = ordering

    async def select_and_download(
        self,
        index: ReleaseIndex,
        release_prefix: str,
        constraint: str,
        dest_dir: Path,
    ) -> Tuple[Path, str]:
        """Choose a release and download its wheel into ``dest_dir``.

        Returns:
            ``(wheel_path, full_release_id)``; the wheel is complete on disk.

        Raises:
            NoReleaseFoundError: No release could be selected.
            NoArtifactFoundError: The selected release has no wheel.
            ArtifactDownloadError: The download failed.
        """
        release_id = select_release(
            index, release_prefix, constraint, ordering=self.ordering
        )
        artifact = select_artifact(index, release_id)
        destination = Path(dest_dir) / artifact_filename(artifact)

        try:
            await self.http_client.download(artifact.url, destination)
        except NetworkError as exc:
            raise ArtifactDownloadError(
                f"Failed to download {artifact.filename}",
                filename=artifact.filename,
                url=artifact.url,
                status_code=exc.status_code,
            ) from exc

        logger.info("Downloaded wheel to %s", destination)
        return destination, release_id

"""Dependency discovery inside an unpacked wheel.

Reads ``<name>-<release>.dist-info/METADATA`` and returns the value of
every ``Requires-Dist:`` line, verbatim apart from trimming. Environment
markers and extras are not interpreted::

    Requires-Dist: micropython-stdlib-stubs (<2.0,>=1.26)
    Requires-Dist: pytest ; extra == "test"

yields ``["micropython-stdlib-stubs (<2.0,>=1.26)", 'pytest ; extra == "test"']``.

A wheel without metadata simply has no dependencies; that case is logged
as a warning and never fails the package.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from stubfetch.utils.logger import get_logger
from stubfetch.utils.filesystem import safe_read_file
from stubfetch.exceptions import FileOperationError, MetadataReadError
from stubfetch.constants import (
    DIST_INFO_SUFFIX,
    METADATA_FILENAME,
    REQUIRES_DIST_PREFIX,
)

logger = get_logger("scanner")

__all__ = ["find_dist_info", "read_metadata", "parse_requires_dist", "find_dependencies"]


def find_dist_info(extracted_path: Union[str, Path], full_release: str) -> Optional[Path]:
    """Return the dist-info directory whose name ends with ``<full_release>.dist-info``.

    Entries are examined in sorted order; the first match wins.
    """
    root = Path(extracted_path)
    suffix = f"{full_release}{DIST_INFO_SUFFIX}"

    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Cannot list %s: %s", root, exc)
        return None

    return next((entry for entry in entries if entry.name.endswith(suffix)), None)


def read_metadata(metadata_path: Path) -> str:
    """Read a METADATA file.

    Raises:
        MetadataReadError: The file exists but could not be read.
    """
    try:
        return safe_read_file(metadata_path)
    except FileOperationError as exc:
        raise MetadataReadError(
            f"Cannot read {METADATA_FILENAME}: {exc.message}",
            file_path=str(metadata_path),
            operation="read",
            original_error=exc.original_error,
        ) from exc


def parse_requires_dist(content: str) -> List[str]:
    """Return the trimmed value of every ``Requires-Dist:`` line of ``content``."""
    prefix_len = len(REQUIRES_DIST_PREFIX)
    return [
        line[prefix_len:].strip()
        for line in content.splitlines()
        if line.startswith(REQUIRES_DIST_PREFIX)
    ]


def find_dependencies(extracted_path: Union[str, Path], full_release: str) -> List[str]:
    """List the dependency declarations of the wheel unpacked at ``extracted_path``.

    Args:
        extracted_path: Directory the wheel was extracted into.
        full_release: Release id the wheel belongs to, e.g. ``"1.26.0.post3"``.

    Returns:
        Raw ``Requires-Dist`` values; empty when the metadata is missing or
        unreadable.
    """
    dist_info = find_dist_info(extracted_path, full_release)
    if dist_info is None:
        logger.warning("No dist-info directory found for release %s", full_release)
        return []

    metadata_path = dist_info / METADATA_FILENAME
    if not metadata_path.is_file():
        logger.warning("%s file not found in %s", METADATA_FILENAME, dist_info.name)
        return []

    try:
        content = read_metadata(metadata_path)
    except MetadataReadError as exc:
        logger.warning("%s", exc)
        return []

    return parse_requires_dist(content)

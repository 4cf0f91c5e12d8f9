"""Wheel extraction for stubfetch."""

from __future__ import annotations

import zlib
import zipfile
from pathlib import Path
from typing import Union

from stubfetch.exceptions import ExtractionError
from stubfetch.utils.logger import get_logger

logger = get_logger("extractor")

__all__ = ["extract"]


def extract(archive_path: Union[str, Path], dest_dir: Union[str, Path]) -> Path:
    """Unpack the wheel at ``archive_path`` into ``dest_dir``.

    ``dest_dir`` is created if needed; files already present at the same
    paths are overwritten.

    Returns:
        ``dest_dir`` as a :class:`Path`.

    Raises:
        ExtractionError: The archive is missing or not a zip file, a member
            is corrupt or uses an unsupported compression method, or the
            files could not be written out.
    """
    archive = Path(archive_path)
    destination = Path(dest_dir)

    try:
        destination.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive) as wheel:
            wheel.extractall(destination)
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        NotImplementedError,
        EOFError,
        OSError,
    ) as exc:
        raise ExtractionError(
            f"Failed to extract {archive.name}: {exc}",
            file_path=str(archive),
            operation="extract",
            original_error=exc,
        ) from exc

    logger.debug("Extracted %s to %s", archive, destination)
    return destination

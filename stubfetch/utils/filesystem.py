"""
Filesystem utilities for stubfetch.

This module provides the helpers the resolver uses to touch the disk:
atomic writes for downloaded documents and artifacts, size-limited text
reads, overwrite-on-collision tree merges and scratch cleanup. All
filesystem errors are normalized to :class:`FileOperationError` or one of
its subclasses.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, Union

from stubfetch.utils.logger import get_logger
from stubfetch.constants import MAX_FILE_SIZE
from stubfetch.exceptions import (
    FileOperationError,
    FilesystemCleanupError,
    FilesystemMergeError,
)

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure ``path`` exists and is a regular file, then resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _discard(temp_path: Optional[Path]) -> None:
    """Best-effort removal of a temporary file."""
    if temp_path is None or not temp_path.exists():
        return
    try:
        temp_path.unlink()
        logger.debug("Cleaned up temporary file: %s", temp_path)
    except OSError as exc:
        logger.warning("Failed to clean up temporary file %s: %s", temp_path, exc)


@contextmanager
def atomic_binary_writer(target: PathLike) -> Iterator[BinaryIO]:
    """Open a temporary file that replaces ``target`` when the block exits.

    The handle is flushed and fsynced before the rename, so ``target``
    either keeps its old content or holds the complete new content. If the
    block raises, the temporary file is deleted and the exception
    propagates (OS errors are wrapped in :class:`FileOperationError`).

    Example:
        >>> with atomic_binary_writer("pkg.whl") as fh:
        ...     fh.write(b"...")
    """
    path = Path(target)
    temp_path: Optional[Path] = None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=str(path.parent),
            delete=False,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            yield tmp
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(path)

    except OSError as exc:
        _discard(temp_path)
        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(path),
            operation="write",
            original_error=exc,
        ) from exc
    except BaseException:
        _discard(temp_path)
        raise


def write_text_atomic(file_path: PathLike, content: str, *, encoding: str = "utf-8") -> Path:
    """Atomically write ``content`` to ``file_path`` and return the path."""
    path = Path(file_path)
    with atomic_binary_writer(path) as fh:
        fh.write(content.encode(encoding))
    return path


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than ``max_size`` bytes.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def ensure_directory(directory: PathLike) -> Path:
    """Create ``directory`` (and parents) if missing and return it."""
    path = Path(directory)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(
            f"Cannot create directory: {exc}",
            file_path=str(path),
            operation="mkdir",
            original_error=exc,
        ) from exc
    return path


def merge_tree(source: PathLike, destination: PathLike) -> Path:
    """Copy every file under ``source`` into ``destination``.

    Existing directories are reused and existing files at the same
    relative path are overwritten without warning.

    Raises:
        FilesystemMergeError: The copy failed part-way or ``source`` is
            not a directory.
    """
    src = Path(source)
    dst = Path(destination)

    if not src.is_dir():
        raise FilesystemMergeError(
            f"Merge source is not a directory: {src}",
            file_path=str(src),
            operation="merge",
        )

    try:
        shutil.copytree(src, dst, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise FilesystemMergeError(
            f"Failed to merge {src} into {dst}: {exc}",
            file_path=str(dst),
            operation="merge",
            original_error=exc,
        ) from exc

    return dst


def remove_tree(directory: PathLike) -> None:
    """Delete ``directory`` recursively; a missing directory is not an error.

    Raises:
        FilesystemCleanupError: The directory exists but could not be removed.
    """
    path = Path(directory)
    if not path.exists():
        return

    try:
        shutil.rmtree(path)
    except OSError as exc:
        raise FilesystemCleanupError(
            f"Failed to remove {path}: {exc}",
            file_path=str(path),
            operation="delete",
            original_error=exc,
        ) from exc


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve a filesystem path, optionally requiring it to sit under ``base_dir``."""
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"Path outside allowed base directory: {resolved}",
                file_path=str(path),
                operation="validate",
            )

    return resolved

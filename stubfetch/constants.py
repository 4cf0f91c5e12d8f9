"""
Centralized constants for stubfetch.

This module defines immutable configuration values used across stubfetch,
including registry endpoints, network settings, wheel metadata markers,
directory naming and logging formats. All values are intended to be
treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "stubfetch/{version}"

# ---------------------------------------------------------------------------
# Registry endpoints
# ---------------------------------------------------------------------------

#: Base URL of the PyPI JSON API.
DEFAULT_REGISTRY_URL: Final[str] = "https://pypi.org/pypi"

#: Path template appended to the registry base for a package's release index.
RELEASE_INDEX_PATH: Final[str] = "{package}/json"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Number of retries for failed HTTP requests. Failures are not retried.
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Chunk size used when streaming artifacts to disk.
DOWNLOAD_CHUNK_SIZE: Final[int] = 64 * 1024

# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

#: Deepest dependency level that is still processed. The root is level 1.
DEFAULT_MAX_DEPTH: Final[int] = 10

#: Depth assigned to the root package of a run.
ROOT_DEPTH: Final[int] = 1

#: Filename suffix of accepted artifacts (binary wheels).
WHEEL_SUFFIX: Final[str] = ".whl"

#: Suffix of the wheel metadata directory.
DIST_INFO_SUFFIX: Final[str] = ".dist-info"

#: Metadata file inside the dist-info directory.
METADATA_FILENAME: Final[str] = "METADATA"

#: Line prefix of a dependency declaration in METADATA.
REQUIRES_DIST_PREFIX: Final[str] = "Requires-Dist:"

#: Comparison operators understood by the constraint matcher. Two-character
#: operators come first so that ``>=`` is never read as ``>`` + ``=...``.
CONSTRAINT_OPERATORS: Final[Sequence[str]] = (">=", "<=", "==", ">", "<")

#: Supported candidate orderings for the constraint matcher.
VERSION_ORDERINGS: Final[Sequence[str]] = ("literal", "semantic")

#: Default candidate ordering (literal string comparison).
DEFAULT_VERSION_ORDERING: Final[str] = "literal"

# ---------------------------------------------------------------------------
# Working directory layout
# ---------------------------------------------------------------------------

#: Directory under the project root holding downloads, scratch and output.
WORK_DIRNAME: Final[str] = "stubs"

#: Suffix appended to a package name to form its scratch directory.
SCRATCH_SUFFIX: Final[str] = "_temp"

#: Output directory name for the ``typings`` layout.
TYPINGS_DIRNAME: Final[str] = "typings"

#: Supported output layouts: a shared ``typings`` folder, or a folder named
#: after the root package.
OUTPUT_LAYOUTS: Final[Sequence[str]] = ("typings", "package")

#: Default output layout.
DEFAULT_OUTPUT_LAYOUT: Final[str] = "typings"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed size (in bytes) of a METADATA file.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

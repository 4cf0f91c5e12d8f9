"""
Custom exception hierarchy for stubfetch.

This module defines structured exception types used across stubfetch.
All exceptions inherit from :class:`StubFetchError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

The resolver treats most of these as *branch* failures: the package that
raised is logged and skipped, while its siblings and ancestors carry on.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class StubFetchError(Exception):
    """Base exception for all stubfetch errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ConfigError(StubFetchError):
    """Raised when a configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path of the offending configuration file.
        option: Name of the invalid option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------


class NetworkError(StubFetchError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RegistryFetchError(NetworkError):
    """Raised when a package's release index cannot be fetched or parsed.

    Args:
        message: Error description.
        package_name: Name of the package involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class ArtifactDownloadError(NetworkError):
    """Raised when an artifact cannot be streamed to local storage.

    Args:
        message: Error description.
        filename: Artifact filename.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("filename",)

    def __init__(
        self,
        message: str,
        *,
        filename: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.filename = filename
        if filename is not None:
            self.details["filename"] = filename


# ---------------------------------------------------------------------------
# Release selection
# ---------------------------------------------------------------------------


class ResolutionError(StubFetchError):
    """Base class for release and artifact selection failures.

    Args:
        message: Error description.
        package_name: Package being resolved, when known.
        release: Release id involved, when known.
    """

    __slots__ = ("package_name", "release")

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        release: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package", package_name)
        _add_if(details, "release", release)

        super().__init__(message, details)

        self.package_name = package_name
        self.release = release


class NoReleaseFoundError(ResolutionError):
    """Raised when no release satisfies the constraint or release prefix."""


class NoArtifactFoundError(ResolutionError):
    """Raised when the selected release has no wheel artifact."""


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------


class FileOperationError(StubFetchError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/delete).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ExtractionError(FileOperationError):
    """Raised when a downloaded archive cannot be unpacked."""


class MetadataReadError(FileOperationError):
    """Raised when a wheel's METADATA file exists but cannot be read."""


class FilesystemMergeError(FileOperationError):
    """Raised when an extracted package cannot be copied into the output tree."""


class FilesystemCleanupError(FileOperationError):
    """Raised when a scratch directory cannot be removed."""

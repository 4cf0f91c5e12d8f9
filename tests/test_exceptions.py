from __future__ import annotations

import pytest

from stubfetch.exceptions import (
    ArtifactDownloadError,
    ConfigError,
    ExtractionError,
    FileOperationError,
    NetworkError,
    NoReleaseFoundError,
    RegistryFetchError,
    ResolutionError,
    StubFetchError,
)


@pytest.mark.unit
class TestStubFetchError:
    """Tests for the base exception."""

    def test_str_without_details(self) -> None:
        assert str(StubFetchError("plain")) == "plain"

    def test_str_with_details(self) -> None:
        error = StubFetchError("failed", {"package": "demo", "release": "1.0"})

        assert str(error) == "failed (package=demo, release=1.0)"

    def test_repr(self) -> None:
        assert repr(StubFetchError("x", {"a": 1})) == "StubFetchError(message='x', details={'a': 1})"

    def test_details_are_copied(self) -> None:
        source = {"a": 1}
        error = StubFetchError("x", source)
        error.details["b"] = 2

        assert source == {"a": 1}


@pytest.mark.unit
class TestHierarchy:
    """Subclass relationships the resolver relies on."""

    @pytest.mark.parametrize(
        "cls,base",
        [
            (RegistryFetchError, NetworkError),
            (ArtifactDownloadError, NetworkError),
            (NoReleaseFoundError, ResolutionError),
            (ExtractionError, FileOperationError),
            (ConfigError, StubFetchError),
        ],
    )
    def test_subclass(self, cls, base) -> None:
        assert issubclass(cls, base)
        assert issubclass(cls, StubFetchError)


@pytest.mark.unit
class TestDetails:
    """Structured metadata per exception type."""

    def test_network_error_truncates_body(self) -> None:
        error = NetworkError("bad", url="https://x", status_code=500, response_body="b" * 500)

        assert error.details["url"] == "https://x"
        assert error.details["status_code"] == 500
        assert error.details["response"].endswith("...")
        assert len(error.details["response"]) == 203
        assert error.response_body == "b" * 500

    def test_registry_fetch_error(self) -> None:
        error = RegistryFetchError("bad", package_name="demo", status_code=404)

        assert error.package_name == "demo"
        assert error.details == {"status_code": 404, "package": "demo"}

    def test_resolution_error_omits_none(self) -> None:
        error = NoReleaseFoundError("none", package_name="demo")

        assert error.details == {"package": "demo"}
        assert error.release is None

    def test_file_operation_error(self) -> None:
        cause = OSError("denied")
        error = ExtractionError("x", file_path="/w.whl", operation="extract", original_error=cause)

        assert error.details == {
            "path": "/w.whl",
            "operation": "extract",
            "original_error": "denied",
        }
        assert error.original_error is cause

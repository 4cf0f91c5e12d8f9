"""Unit tests for stubfetch.models.release."""

from __future__ import annotations

import pytest

from stubfetch.models.release import ArtifactDescriptor, ReleaseIndex


@pytest.mark.unit
class TestArtifactDescriptor:
    """Tests for :class:`ArtifactDescriptor`."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("demo-1.0-py3-none-any.whl", True),
            ("demo-1.0.tar.gz", False),
            ("demo-1.0.zip", False),
            ("demo-1.0.WHL", False),
        ],
    )
    def test_is_wheel(self, filename: str, expected: bool) -> None:
        assert ArtifactDescriptor(url="u", filename=filename).is_wheel is expected

    def test_from_json(self) -> None:
        artifact = ArtifactDescriptor.from_json(
            {"url": "https://files.test/a.whl", "filename": "a.whl", "size": 10}
        )

        assert artifact == ArtifactDescriptor("https://files.test/a.whl", "a.whl")

    def test_from_json_missing_fields(self) -> None:
        assert ArtifactDescriptor.from_json({}) == ArtifactDescriptor("", "")

    def test_frozen(self) -> None:
        artifact = ArtifactDescriptor("u", "f")
        with pytest.raises(AttributeError):
            artifact.url = "other"  # type: ignore[misc]


@pytest.mark.unit
class TestReleaseIndex:
    """Tests for :class:`ReleaseIndex`."""

    @pytest.fixture
    def index(self) -> ReleaseIndex:
        return ReleaseIndex.from_json(
            "demo",
            {
                "releases": {
                    "1.26.0": [
                        {"url": "https://files.test/demo-1.26.0.tar.gz", "filename": "demo-1.26.0.tar.gz"},
                        {"url": "https://files.test/demo-1.26.0-py3-none-any.whl", "filename": "demo-1.26.0-py3-none-any.whl"},
                    ],
                    "1.10.0": [],
                    "1.9.0": None,
                }
            },
        )

    def test_document_order_preserved(self, index: ReleaseIndex) -> None:
        assert index.release_ids() == ["1.26.0", "1.10.0", "1.9.0"]
        assert list(index) == ["1.26.0", "1.10.0", "1.9.0"]

    def test_contains_and_len(self, index: ReleaseIndex) -> None:
        assert "1.10.0" in index
        assert "2.0" not in index
        assert len(index) == 3

    def test_artifacts(self, index: ReleaseIndex) -> None:
        assert len(index.artifacts("1.26.0")) == 2
        assert index.artifacts("1.9.0") == []
        assert index.artifacts("unknown") == []

    def test_artifacts_returns_copy(self, index: ReleaseIndex) -> None:
        index.artifacts("1.26.0").clear()

        assert len(index.artifacts("1.26.0")) == 2

    def test_first_wheel(self, index: ReleaseIndex) -> None:
        wheel = index.first_wheel("1.26.0")

        assert wheel is not None
        assert wheel.filename == "demo-1.26.0-py3-none-any.whl"
        assert index.first_wheel("1.10.0") is None

    def test_non_mapping_entries_skipped(self) -> None:
        index = ReleaseIndex.from_json(
            "demo", {"releases": {"1.0": ["junk", {"url": "u", "filename": "f.whl"}]}}
        )

        assert index.artifacts("1.0") == [ArtifactDescriptor("u", "f.whl")]

    @pytest.mark.parametrize("data", [{}, {"releases": None}, {"releases": ["1.0"]}])
    def test_malformed_releases(self, data) -> None:
        index = ReleaseIndex.from_json("demo", data)

        assert index.name == "demo"
        assert len(index) == 0

    def test_release_ids_are_strings(self) -> None:
        index = ReleaseIndex.from_json("demo", {"releases": {1: []}})

        assert index.release_ids() == ["1"]

    @pytest.mark.parametrize("files", [5, "demo-1.0.whl", {"url": "u"}, None, True])
    def test_non_list_release_value_has_no_artifacts(self, files) -> None:
        index = ReleaseIndex.from_json(
            "demo", {"releases": {"1.0": files, "2.0": [{"url": "u", "filename": "f.whl"}]}}
        )

        assert index.release_ids() == ["1.0", "2.0"]
        assert index.artifacts("1.0") == []
        assert index.first_wheel("2.0") == ArtifactDescriptor("u", "f.whl")

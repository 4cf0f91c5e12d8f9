"""Shared fixtures for stubfetch tests.

Nothing here touches the network. :class:`FakePyPI` stands in for
:class:`~stubfetch.utils.http.HTTPClient`: it serves release indexes built
from the packages registered with :meth:`FakePyPI.add` and "downloads" by
copying wheels that were built locally with :func:`build_wheel`.
"""

from __future__ import annotations

import shutil
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytest

import stubfetch.utils.logger as logger_module
from stubfetch.exceptions import NetworkError

FILES_URL = "https://files.test/packages"


def dist_name(name: str) -> str:
    return name.replace("-", "_")


def build_wheel(
    destination: Path,
    name: str,
    version: str,
    *,
    requires: Iterable[str] = (),
    files: Optional[Mapping[str, str]] = None,
    metadata: bool = True,
) -> Path:
    """Write a minimal wheel to ``destination`` and return its path.

    Args:
        destination: Wheel file path.
        name: Distribution name.
        version: Release id, used for the dist-info directory name.
        requires: ``Requires-Dist`` values to declare.
        files: Extra archive members, path → text content. Defaults to a
            single ``<module>/__init__.pyi``.
        metadata: When False, the wheel has no dist-info directory.
    """
    module = dist_name(name)
    if files is None:
        files = {f"{module}/__init__.pyi": f"# {name} {version}\n"}

    destination.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as wheel:
        for member, content in files.items():
            wheel.writestr(member, content)
        if metadata:
            lines = [
                "Metadata-Version: 2.1",
                f"Name: {name}",
                f"Version: {version}",
            ]
            lines.extend(f"Requires-Dist: {req}" for req in requires)
            lines.append("")
            lines.append(f"{name} description")
            wheel.writestr(f"{module}-{version}.dist-info/METADATA", "\n".join(lines))
    return destination


def damage_first_member(wheel_path: Path) -> None:
    """Overwrite the compressed data of the first member with junk.

    The archive still opens and lists its members, but reading the first
    member fails inside the deflate decoder.
    """
    with zipfile.ZipFile(wheel_path) as wheel:
        info = wheel.infolist()[0]

    data = bytearray(wheel_path.read_bytes())
    name_len = int.from_bytes(data[info.header_offset + 26 : info.header_offset + 28], "little")
    extra_len = int.from_bytes(data[info.header_offset + 28 : info.header_offset + 30], "little")
    start = info.header_offset + 30 + name_len + extra_len
    # 0xff starts a deflate block with the reserved block type.
    data[start : start + info.compress_size] = b"\xff" * info.compress_size
    wheel_path.write_bytes(bytes(data))


class FakePyPI:
    """In-memory registry that quacks like :class:`HTTPClient`.

    Attributes:
        index_requests: Package names whose index was requested, in order.
        downloads: Artifact URLs downloaded, in order.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.releases: Dict[str, Dict[str, List[Dict[str, str]]]] = {}
        self.wheels: Dict[str, Path] = {}
        self.index_requests: List[str] = []
        self.downloads: List[str] = []

    async def __aenter__(self) -> "FakePyPI":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    def add(
        self,
        name: str,
        version: str,
        *,
        requires: Iterable[str] = (),
        files: Optional[Mapping[str, str]] = None,
        metadata: bool = True,
        corrupt: bool = False,
        damaged: bool = False,
        wheel: bool = True,
    ) -> "FakePyPI":
        """Register one release of ``name``.

        Args:
            corrupt: Serve bytes that are not a zip archive.
            damaged: Serve a valid zip whose first member has corrupt
                deflate data.
            wheel: When False, only an sdist is listed for the release.
        """
        entries = self.releases.setdefault(name, {}).setdefault(version, [])

        if not wheel:
            filename = f"{name}-{version}.tar.gz"
            entries.append({"filename": filename, "url": f"{FILES_URL}/{filename}"})
            return self

        filename = f"{dist_name(name)}-{version}-py3-none-any.whl"
        url = f"{FILES_URL}/{filename}"
        path = self.root / "wheels" / filename
        if corrupt:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"definitely not a zip archive")
        else:
            build_wheel(path, name, version, requires=requires, files=files, metadata=metadata)
            if damaged:
                damage_first_member(path)

        self.wheels[url] = path
        entries.append({"filename": filename, "url": url})
        return self

    def document(self, name: str) -> Dict[str, Any]:
        return {"info": {"name": name}, "releases": self.releases[name]}

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        name = url.rstrip("/").rsplit("/", 2)[-2]
        self.index_requests.append(name)
        if name not in self.releases:
            raise NetworkError(f"HTTP 404 error for {url}", url=url, status_code=404)
        return self.document(name)

    async def download(self, url: str, destination: Path, **kwargs: Any) -> Path:
        self.downloads.append(url)
        if url not in self.wheels:
            raise NetworkError(f"HTTP 404 error for {url}", url=url, status_code=404)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.wheels[url], destination)
        return destination


@pytest.fixture
def fake_pypi(tmp_path: Path) -> FakePyPI:
    """A fresh :class:`FakePyPI` serving wheels from ``tmp_path``."""
    return FakePyPI(tmp_path / "registry")


@pytest.fixture
def work_dirs(tmp_path: Path) -> Dict[str, Path]:
    """Scratch root and output directory, both created."""
    scratch = tmp_path / "stubs"
    output = scratch / "typings"
    output.mkdir(parents=True)
    return {"scratch": scratch, "output": output}


@pytest.fixture
def make_wheel(tmp_path: Path):
    """Factory building wheels under ``tmp_path/wheels``."""

    def _make(name: str, version: str, **kwargs: Any) -> Path:
        filename = f"{dist_name(name)}-{version}-py3-none-any.whl"
        return build_wheel(tmp_path / "wheels" / filename, name, version, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def reset_stubfetch_logger():
    """Undo handler and propagation changes made by ``setup_logging``."""
    root = logging.getLogger(logger_module.ROOT_LOGGER_NAME)
    yield
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    logger_module._logging_configured = False


@pytest.fixture
def damage_wheel():
    """Expose :func:`damage_first_member` to test modules."""
    return damage_first_member

"""Registry client for stubfetch.

Fetches a package's release index from a PyPI-compatible JSON API
(``<registry>/<package>/json``) and keeps a copy of the raw document in
the working directory. The copy is a record of what was fetched, not a
cache: every call goes to the network.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from stubfetch.models.release import ReleaseIndex
from stubfetch.utils.http import HTTPClient
from stubfetch.utils.logger import get_logger
from stubfetch.utils.filesystem import write_text_atomic
from stubfetch.exceptions import FileOperationError, NetworkError, RegistryFetchError
from stubfetch.constants import DEFAULT_REGISTRY_URL, RELEASE_INDEX_PATH

logger = get_logger("registry")

__all__ = ["RegistryClient"]


class RegistryClient:
    """Fetch release indexes through a shared :class:`HTTPClient`.

    Args:
        http_client: Open HTTP client.
        registry_url: Base URL of the JSON API, without trailing slash.
        documents_dir: Where raw JSON documents are written as
            ``<package>.json``. ``None`` disables persisting.

    Example::

        async with HTTPClient() as http:
            registry = RegistryClient(http, documents_dir=Path("stubs"))
            index = await registry.fetch_release_index("micropython-esp32-stubs")
    """

    def __init__(
        self,
        http_client: HTTPClient,
        *,
        registry_url: str = DEFAULT_REGISTRY_URL,
        documents_dir: Optional[Path] = None,
    ) -> None:
        self.http_client = http_client
        self.registry_url = registry_url.rstrip("/")
        self.documents_dir = documents_dir

    def index_url(self, name: str) -> str:
        """URL of the release index for ``name``."""
        return f"{self.registry_url}/{RELEASE_INDEX_PATH.format(package=name)}"

    def document_path(self, name: str) -> Optional[Path]:
        """Where the raw document for ``name`` is persisted, if anywhere."""
        if self.documents_dir is None:
            return None
        return self.documents_dir / f"{name}.json"

    async def fetch_release_index(self, name: str) -> ReleaseIndex:
        """Download, persist and parse the release index of ``name``.

        Raises:
            RegistryFetchError: The request failed, the body was not a JSON
                object, or the document could not be written.
        """
        url = self.index_url(name)

        try:
            data = await self.http_client.get_json(url)
        except NetworkError as exc:
            raise RegistryFetchError(
                f"Failed to fetch release index for {name}",
                package_name=name,
                url=url,
                status_code=exc.status_code,
            ) from exc

        document = self.document_path(name)
        if document is not None:
            try:
                write_text_atomic(document, json.dumps(data))
            except FileOperationError as exc:
                raise RegistryFetchError(
                    f"Failed to store release index for {name}: {exc.message}",
                    package_name=name,
                    url=url,
                ) from exc
            logger.debug("Release index for %s written to %s", name, document)

        index = ReleaseIndex.from_json(name, data)
        logger.debug("%s has %d release(s)", name, len(index))
        return index

"""
HTTP client utilities for stubfetch.

This module provides an asynchronous HTTP client used for both registry
JSON documents and artifact downloads. Downloads are streamed to a
temporary file and only renamed into place once every byte is flushed to
disk, so a path returned by :meth:`HTTPClient.download` always names a
complete file.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from pathlib import Path
from typing import Any, Dict, Optional, cast

from stubfetch.utils.logger import get_logger
from stubfetch.__version__ import __version__
from stubfetch.exceptions import NetworkError
from stubfetch.utils.filesystem import atomic_binary_writer
from stubfetch.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DOWNLOAD_CHUNK_SIZE,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with optional retry and backoff.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Retry attempts for timeouts, transport errors and 5xx
            responses. Defaults to ``0``: failures are not retried.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        transport: Optional httpx transport, mainly for tests
            (``httpx.MockTransport``).

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json("https://pypi.org/pypi/requests/json")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=self._transport is None,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _backoff(self, attempt: int) -> None:
        delay = (2**attempt) + random.uniform(0.0, 0.3)
        logger.debug("Retrying in %.2fs", delay)
        await asyncio.sleep(delay)

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request, retrying transient failures."""
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        last_exc: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.request(method, clean_url, **kwargs)
                response.raise_for_status()
                return response

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            except httpx.RequestError as exc:
                last_exc = exc
                logger.warning(
                    "Network error (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            except httpx.HTTPStatusError as exc:
                if exc.response.status_code < 500:
                    raise NetworkError(
                        f"HTTP {exc.response.status_code} error for {clean_url}",
                        url=clean_url,
                        status_code=exc.response.status_code,
                        response_body=exc.response.text,
                    ) from exc
                last_exc = exc
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    exc.response.status_code,
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            if attempt < self.max_retries:
                await self._backoff(attempt)

        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempt(s): {clean_url}",
            url=clean_url,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Fetch a URL and parse the response body as a JSON object."""
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)

    async def download(
        self,
        url: str,
        destination: Path,
        *,
        chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    ) -> Path:
        """Stream ``url`` into ``destination``.

        The body is written to a temporary file next to ``destination`` and
        renamed over it after a flush and fsync; on failure the temporary
        file is removed and ``destination`` is left untouched.

        Args:
            url: Artifact URL.
            destination: Target file path; parent directories are created.
            chunk_size: Size of the chunks read from the response stream.

        Returns:
            ``destination``, once it is complete on disk.

        Raises:
            NetworkError: Connection failure or non-2xx status.
            FileOperationError: The file could not be written.
        """
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        last_exc: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                async with self._client.stream("GET", clean_url) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        raise NetworkError(
                            f"HTTP {response.status_code} error for {clean_url}",
                            url=clean_url,
                            status_code=response.status_code,
                            response_body=response.text,
                        )

                    with atomic_binary_writer(destination) as fh:
                        async for chunk in response.aiter_bytes(chunk_size):
                            fh.write(chunk)

                logger.debug("Downloaded %s to %s", clean_url, destination)
                return destination

            except httpx.RequestError as exc:
                last_exc = exc
                logger.warning(
                    "Download failed (%d/%d): %s: %s",
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                    exc,
                )

            if attempt < self.max_retries:
                await self._backoff(attempt)

        raise NetworkError(
            f"Download failed after {self.max_retries + 1} attempt(s): {clean_url}",
            url=clean_url,
        ) from last_exc

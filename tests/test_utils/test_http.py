"""Unit tests for stubfetch.utils.http.

Requests are served by ``httpx.MockTransport``; nothing leaves the process.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from stubfetch import __version__
from stubfetch.exceptions import NetworkError, StubFetchError
from stubfetch.utils.http import HTTPClient

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, **kwargs) -> HTTPClient:
    return HTTPClient(transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization and configuration."""

    def test_default_values(self) -> None:
        client = HTTPClient()

        assert client.timeout == 30
        assert client.max_retries == 0
        assert client.verify_ssl is True
        assert client.user_agent == f"stubfetch/{__version__}"
        assert client._client is None

    def test_custom_values(self) -> None:
        client = HTTPClient(timeout=5, max_retries=2, verify_ssl=False, user_agent="ua/1")

        assert client.timeout == 5
        assert client.max_retries == 2
        assert client.verify_ssl is False
        assert client.user_agent == "ua/1"

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self) -> None:
        client = _client(lambda request: httpx.Response(200))

        async with client as opened:
            assert opened is client
            assert client._client is not None

        assert client._client is None

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        client = HTTPClient()

        await client.close()
        await client.close()

        assert client._client is None


@pytest.mark.unit
class TestGetJson:
    """Tests for :meth:`HTTPClient.get_json`."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        captured: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"releases": {}})

        async with _client(handler) as client:
            data = await client.get_json("https://registry.test/pypi/demo/json")

        assert data == {"releases": {}}
        assert captured[0].headers["User-Agent"].startswith("stubfetch/")

    @pytest.mark.asyncio
    async def test_url_is_cleaned(self) -> None:
        seen: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            await client.get_json(' "https://registry.test/x/json" ')

        assert seen == ["https://registry.test/x/json"]

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404, text="Not Found")

        async with _client(handler, max_retries=3) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_json("https://registry.test/missing/json")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "Not Found"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_without_retries(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        async with _client(handler) as client:
            with pytest.raises(NetworkError, match="after 1 attempt"):
                await client.get_json("https://registry.test/demo/json")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_retried(self) -> None:
        responses = [httpx.Response(500), httpx.Response(502), httpx.Response(200, json={"ok": True})]

        async with _client(lambda request: responses.pop(0), max_retries=2) as client:
            with patch.object(client, "_backoff", new=AsyncMock()) as backoff:
                data = await client.get_json("https://registry.test/demo/json")

        assert data == {"ok": True}
        assert backoff.await_count == 2

    @pytest.mark.asyncio
    async def test_connection_error_retried_then_raised(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler, max_retries=1) as client:
            with patch.object(client, "_backoff", new=AsyncMock()):
                with pytest.raises(NetworkError, match="after 2 attempt") as exc_info:
                    await client.get_json("https://registry.test/demo/json")

        assert len(calls) == 2
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error_cls",
        [
            httpx.RemoteProtocolError,
            httpx.UnsupportedProtocol,
            httpx.ProxyError,
            httpx.TooManyRedirects,
            httpx.DecodingError,
        ],
    )
    async def test_other_request_errors_become_network_error(self, error_cls) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise error_cls("peer closed connection", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError, match="after 1 attempt") as exc_info:
                await client.get_json("https://registry.test/demo/json")

        assert isinstance(exc_info.value.__cause__, error_cls)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await client.get_json("https://registry.test/demo/json")

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        async with _client(lambda request: httpx.Response(200, text="{nope")) as client:
            with pytest.raises(NetworkError, match="Invalid JSON"):
                await client.get_json("https://registry.test/demo/json")

    @pytest.mark.asyncio
    async def test_non_object_json(self) -> None:
        async with _client(lambda request: httpx.Response(200, json=[1, 2])) as client:
            with pytest.raises(NetworkError, match="Expected JSON object"):
                await client.get_json("https://registry.test/demo/json")


@pytest.mark.unit
class TestDownload:
    """Tests for :meth:`HTTPClient.download`."""

    @pytest.mark.asyncio
    async def test_streams_to_destination(self, tmp_path: Path) -> None:
        body = b"PK" + bytes(range(256)) * 10
        destination = tmp_path / "stubs" / "demo-1.0-py3-none-any.whl"

        async with _client(lambda request: httpx.Response(200, content=body)) as client:
            result = await client.download(
                "https://files.test/demo-1.0-py3-none-any.whl", destination, chunk_size=64
            )

        assert result == destination
        assert destination.read_bytes() == body

    @pytest.mark.asyncio
    async def test_http_error_leaves_nothing(self, tmp_path: Path) -> None:
        destination = tmp_path / "demo.whl"

        async with _client(lambda request: httpx.Response(404, text="gone")) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.download("https://files.test/demo.whl", destination)

        assert exc_info.value.status_code == 404
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_connection_error(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError, match="Download failed after 1 attempt"):
                await client.download("https://files.test/demo.whl", tmp_path / "demo.whl")

        assert not (tmp_path / "demo.whl").exists()

    @pytest.mark.asyncio
    async def test_retry_succeeds(self, tmp_path: Path) -> None:
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, content=b"wheel")

        async with _client(handler, max_retries=1) as client:
            with patch.object(client, "_backoff", new=AsyncMock()):
                await client.download("https://files.test/demo.whl", tmp_path / "demo.whl")

        assert (tmp_path / "demo.whl").read_bytes() == b"wheel"
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_remote_protocol_error(self, tmp_path: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("peer closed connection", request=request)

        async with _client(handler) as client:
            with pytest.raises(StubFetchError, match="Download failed after 1 attempt") as exc_info:
                await client.download("https://files.test/demo.whl", tmp_path / "demo.whl")

        assert isinstance(exc_info.value, NetworkError)
        assert not (tmp_path / "demo.whl").exists()

    @pytest.mark.asyncio
    async def test_connection_dropped_mid_stream(self, tmp_path: Path) -> None:
        class DroppedStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b"PK\x03\x04"
                raise httpx.RemoteProtocolError("peer closed connection")

        destination = tmp_path / "demo.whl"

        async with _client(lambda request: httpx.Response(200, stream=DroppedStream())) as client:
            with pytest.raises(NetworkError, match="Download failed"):
                await client.download("https://files.test/demo.whl", destination)

        assert list(tmp_path.iterdir()) == []

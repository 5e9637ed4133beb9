"""Tests for the catalog fetcher."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from aiohttp import test_utils, web

from extension_pages.catalog.fetcher import CatalogFetcher, parse_catalog
from extension_pages.errors import FetchError

REMOTE = "https://example.test/servers.json"


class TestParseCatalog:
    """Tests for parse_catalog."""

    def test_parses_array(self):
        """Test that an array body is returned as is."""
        assert parse_catalog('[{"name": "A"}]', "test") == [{"name": "A"}]

    def test_empty_array_is_valid(self):
        """Test that [] is an empty catalog, not an error."""
        assert parse_catalog("[]", "test") == []

    @pytest.mark.parametrize("body", ["", "   \n", "<html>oops</html>", '{"servers": []}', "42"])
    def test_rejects_bad_bodies(self, body):
        """Test that empty, non-JSON and non-array bodies fail."""
        with pytest.raises(FetchError):
            parse_catalog(body, "test")


class TestLocalSnapshot:
    """Tests for reading the pinned local snapshot."""

    @pytest.mark.asyncio
    async def test_prefers_local_file(self, tmp_path):
        """Test that an existing local file is used without network."""
        local = tmp_path / "servers.json"
        local.write_text(json.dumps([{"name": "Alpha"}]), encoding="utf-8")
        fetcher = CatalogFetcher(local_path=local, remote_url=REMOTE)

        with patch.object(fetcher, "_download", new=AsyncMock()) as download:
            servers = await fetcher.fetch()

        assert servers == [{"name": "Alpha"}]
        download.assert_not_called()
        assert fetcher.source == str(local)

    @pytest.mark.asyncio
    async def test_corrupt_local_file_fails(self, tmp_path):
        """Test that a broken local file does not fall through to the network."""
        local = tmp_path / "servers.json"
        local.write_text("not json", encoding="utf-8")
        fetcher = CatalogFetcher(local_path=local, remote_url=REMOTE)

        with patch.object(fetcher, "_download", new=AsyncMock()) as download:
            with pytest.raises(FetchError):
                await fetcher.fetch()

        download.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_local_file_uses_remote(self, tmp_path):
        """Test fallback to the remote catalog."""
        fetcher = CatalogFetcher(local_path=tmp_path / "missing.json", remote_url=REMOTE)

        with patch.object(fetcher, "_download", new=AsyncMock(return_value="[]")) as download:
            servers = await fetcher.fetch()

        assert servers == []
        download.assert_awaited_once_with(REMOTE)
        assert fetcher.source == REMOTE


class TestRemoteFetch:
    """Tests for the remote download and retry policy."""

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self):
        """Test that a transient error is retried once."""
        fetcher = CatalogFetcher(remote_url=REMOTE, attempts=2, backoff=0)
        download = AsyncMock(side_effect=[aiohttp.ClientError("reset"), '[{"name": "A"}]'])

        with patch.object(fetcher, "_download", new=download):
            servers = await fetcher.fetch()

        assert servers == [{"name": "A"}]
        assert download.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_attempts(self):
        """Test that exhausting attempts raises FetchError."""
        fetcher = CatalogFetcher(remote_url=REMOTE, attempts=2, backoff=0)
        download = AsyncMock(side_effect=aiohttp.ClientError("down"))

        with patch.object(fetcher, "_download", new=download):
            with pytest.raises(FetchError, match="after 2 attempt"):
                await fetcher.fetch()

        assert download.await_count == 2

    @pytest.mark.asyncio
    async def test_non_json_response_is_fetch_error(self):
        """Test that an HTML error page is not treated as an empty catalog."""
        fetcher = CatalogFetcher(remote_url=REMOTE, attempts=1, backoff=0)

        with patch.object(fetcher, "_download", new=AsyncMock(return_value="<html></html>")):
            with pytest.raises(FetchError):
                await fetcher.fetch()

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self):
        """Test that timeouts count as transient failures."""
        fetcher = CatalogFetcher(remote_url=REMOTE, attempts=2, backoff=0)
        download = AsyncMock(side_effect=[asyncio.TimeoutError(), "[]"])

        with patch.object(fetcher, "_download", new=download):
            assert await fetcher.fetch() == []

    def test_attempts_must_be_positive(self):
        """Test constructor validation."""
        with pytest.raises(ValueError):
            CatalogFetcher(attempts=0)


@asynccontextmanager
async def catalog_server(handler):
    """Serve ``handler`` at /servers.json on a local port."""
    app = web.Application()
    app.router.add_get("/servers.json", handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/servers.json"))
    finally:
        await server.close()


class TestDownload:
    """Tests for the aiohttp download against a local server."""

    @pytest.mark.asyncio
    async def test_success(self):
        """Test a normal JSON response."""
        async def handler(request):
            return web.json_response([{"name": "Alpha"}])

        async with catalog_server(handler) as url:
            servers = await CatalogFetcher(remote_url=url, attempts=1).fetch()

        assert servers == [{"name": "Alpha"}]

    @pytest.mark.asyncio
    async def test_server_error_is_retried_then_fails(self):
        """Test that a 500 is retried and then raised as FetchError."""
        hits = 0

        async def handler(request):
            nonlocal hits
            hits += 1
            return web.Response(status=500, text="boom")

        async with catalog_server(handler) as url:
            fetcher = CatalogFetcher(remote_url=url, attempts=2, backoff=0)
            with pytest.raises(FetchError, match="HTTP 500"):
                await fetcher.fetch()

        assert hits == 2

    @pytest.mark.asyncio
    async def test_invalid_utf8_body(self):
        """Test that an undecodable body is a FetchError."""
        async def handler(request):
            return web.Response(
                body=b"\xff\xfe[not utf8", content_type="text/plain", charset="utf-8"
            )

        async with catalog_server(handler) as url:
            with pytest.raises(FetchError, match="not valid text"):
                await CatalogFetcher(remote_url=url, attempts=1).fetch()

    @pytest.mark.asyncio
    async def test_invalid_utf8_error_page(self):
        """Test that an undecodable error body still reports the status."""
        async def handler(request):
            return web.Response(status=502, body=b"\xff\xfe", content_type="text/plain")

        async with catalog_server(handler) as url:
            with pytest.raises(FetchError, match="HTTP 502"):
                await CatalogFetcher(remote_url=url, attempts=1).fetch()

    @pytest.mark.asyncio
    async def test_empty_body(self):
        """Test that an empty 200 response is not an empty catalog."""
        async def handler(request):
            return web.Response(body=b"", content_type="application/json")

        async with catalog_server(handler) as url:
            with pytest.raises(FetchError, match="empty body"):
                await CatalogFetcher(remote_url=url, attempts=1).fetch()

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that the client timeout is applied to the request."""
        async def handler(request):
            await asyncio.sleep(0.5)
            return web.json_response([])

        async with catalog_server(handler) as url:
            fetcher = CatalogFetcher(remote_url=url, attempts=1, timeout=0.05)
            with pytest.raises(FetchError, match="after 1 attempt"):
                await fetcher.fetch()

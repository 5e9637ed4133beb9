"""
Catalog fetcher.

Reads the raw extensions catalog from the pinned local snapshot
(static/servers.json under the site root) when it exists, and otherwise
downloads it from:
https://raw.githubusercontent.com/goose-ai/goose-servers/main/servers.json
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import aiohttp

from ..errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/goose-ai/goose-servers/main/servers.json"
LOCAL_SNAPSHOT_PATH = Path("static") / "servers.json"
DEFAULT_ATTEMPTS = 2
DEFAULT_BACKOFF = 1.0  # Seconds between attempts
DEFAULT_TIMEOUT = 30.0


def parse_catalog(text: str, source: str) -> list[dict[str, Any]]:
    """Parse a catalog body into a list of raw descriptor objects.

    Args:
        text: The response body or file contents.
        source: Where the text came from, for error messages.

    Returns:
        The raw descriptors. An empty JSON array is a valid empty catalog.

    Raises:
        FetchError: If the body is empty, is not JSON, or is not a JSON array.
    """
    if not text.strip():
        raise FetchError(f"Catalog from {source} has an empty body")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FetchError(f"Catalog from {source} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise FetchError(
            f"Catalog from {source} must be a JSON array, got {type(data).__name__}"
        )
    return data


class CatalogFetcher:
    """
    Retrieves the raw catalog once per build.

    The remote download is retried a bounded number of times with a fixed
    backoff. Nothing is written to disk.
    """

    def __init__(
        self,
        local_path: Optional[Path] = None,
        remote_url: str = DEFAULT_CATALOG_URL,
        attempts: int = DEFAULT_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.local_path = local_path
        self.remote_url = remote_url
        self.attempts = attempts
        self.backoff = backoff
        self.timeout = timeout

    @property
    def source(self) -> str:
        """The location fetch() will read from."""
        if self.local_path is not None and self.local_path.exists():
            return str(self.local_path)
        return self.remote_url

    async def fetch(self) -> list[dict[str, Any]]:
        """Fetch the raw catalog, preferring the local snapshot."""
        if self.local_path is not None and self.local_path.exists():
            return await self._read_local(self.local_path)
        return await self._fetch_remote()

    async def _read_local(self, path: Path) -> list[dict[str, Any]]:
        logger.info(f"[CatalogFetcher] Reading local snapshot: {path}")
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Cannot read local catalog {path}: {e}") from e

        servers = parse_catalog(text, str(path))
        logger.info(f"[CatalogFetcher] Loaded {len(servers)} entries from {path}")
        return servers

    async def _fetch_remote(self) -> list[dict[str, Any]]:
        last_error: Optional[Exception] = None

        for attempt in range(1, self.attempts + 1):
            try:
                logger.info(
                    f"[CatalogFetcher] Fetching: {self.remote_url} "
                    f"(attempt {attempt}/{self.attempts})"
                )
                text = await self._download(self.remote_url)
                servers = parse_catalog(text, self.remote_url)
                logger.info(f"[CatalogFetcher] Got {len(servers)} entries")
                return servers
            except (FetchError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(f"[CatalogFetcher] Attempt {attempt} failed: {e}")
                if attempt < self.attempts:
                    await asyncio.sleep(self.backoff)

        raise FetchError(
            f"Failed to fetch catalog from {self.remote_url} "
            f"after {self.attempts} attempt(s): {last_error}"
        ) from last_error

    async def _download(self, url: str) -> str:
        """GET the catalog body as text."""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                body = await response.read()
                if response.status != 200:
                    error_text = body.decode("utf-8", errors="replace")
                    raise FetchError(f"HTTP {response.status}: {error_text[:200]}")
                try:
                    return body.decode(response.charset or "utf-8")
                except (UnicodeDecodeError, LookupError) as e:
                    raise FetchError(f"Catalog from {url} is not valid text: {e}") from e

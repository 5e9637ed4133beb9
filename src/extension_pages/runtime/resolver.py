"""Runtime resolution of detail pages.

Pages that render after the bundle loads fetch the catalog and look up the
extension named by the current location. Keys read from the URL go through
the same ``canonical_id`` rule the normalizer applies, so a route generated
at build time always resolves at runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union
from urllib.parse import parse_qs, unquote, urlsplit

from ..catalog.base import CatalogSnapshot, ExtensionDescriptor, canonical_id
from ..errors import ExtensionPagesError
from ..pages.routes import DETAIL_PATH

logger = logging.getLogger(__name__)

SnapshotLoader = Callable[[], Awaitable[CatalogSnapshot]]


class ResolutionState(str, Enum):
    """States of a single resolution attempt."""

    IDLE = "idle"
    LOADING = "loading"
    FOUND = "found"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class Found:
    descriptor: ExtensionDescriptor


@dataclass(frozen=True)
class NotFound:
    key: Optional[str]
    reason: str = "unknown-id"  # or "missing-id" when the URL carried no key


LookupResult = Union[Found, NotFound]


def key_from_location(location: str) -> Optional[str]:
    """Extract the extension key from a path or ``?id=`` query.

    Accepts ``/extensions/detail/<id>`` and any location with an ``id``
    query parameter. A path segment takes precedence over the query.
    Returns None when neither is present.
    """
    parts = urlsplit(location)

    path = parts.path.rstrip("/")
    prefix = DETAIL_PATH + "/"
    if path.startswith(prefix):
        segment = path[len(prefix):]
        if segment and "/" not in segment:
            return unquote(segment)

    query_ids = parse_qs(parts.query).get("id")
    if query_ids and query_ids[0]:
        return query_ids[0]
    return None


def lookup(snapshot: CatalogSnapshot, key: Optional[str]) -> LookupResult:
    """Find a descriptor by key. A miss is a NotFound result, never an error."""
    if not key:
        return NotFound(key=key, reason="missing-id")
    descriptor = snapshot.get(canonical_id(key))
    if descriptor is None:
        return NotFound(key=key)
    return Found(descriptor)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one navigation."""

    navigation: int
    state: ResolutionState
    key: Optional[str] = None
    descriptor: Optional[ExtensionDescriptor] = None
    error: Optional[str] = None
    superseded: bool = False

    def to_dict(self) -> dict:
        return {
            "navigation": self.navigation,
            "state": self.state.value,
            "key": self.key,
            "extension": self.descriptor.to_dict() if self.descriptor else None,
            "error": self.error,
            "superseded": self.superseded,
        }


class RuntimeResolver:
    """
    Resolves navigations against a freshly loaded snapshot.

    Every navigation gets a new token. A load that completes after a newer
    navigation started is discarded: its resolution is returned marked as
    superseded and ``current`` keeps the newer navigation's state.
    """

    def __init__(self, load: SnapshotLoader):
        self._load = load
        self._navigation = 0
        self.current = Resolution(navigation=0, state=ResolutionState.IDLE)

    async def navigate(self, location: str) -> Resolution:
        self._navigation += 1
        token = self._navigation
        key = key_from_location(location)
        self.current = Resolution(navigation=token, state=ResolutionState.LOADING, key=key)

        try:
            snapshot = await self._load()
        except ExtensionPagesError as e:
            logger.error(f"[RuntimeResolver] Failed to load extensions: {e}")
            result = Resolution(
                navigation=token,
                state=ResolutionState.FETCH_FAILED,
                key=key,
                error=f"Failed to load extension details: {e}",
            )
        except Exception as e:
            # Leave the live navigation in a terminal state before propagating
            logger.exception(f"[RuntimeResolver] Loader crashed: {e}")
            if token == self._navigation:
                self.current = Resolution(
                    navigation=token,
                    state=ResolutionState.FETCH_FAILED,
                    key=key,
                    error=f"Failed to load extension details: {e}",
                )
            raise
        else:
            match = lookup(snapshot, key)
            if isinstance(match, Found):
                result = Resolution(
                    navigation=token,
                    state=ResolutionState.FOUND,
                    key=key,
                    descriptor=match.descriptor,
                )
            else:
                message = (
                    "No extension ID provided"
                    if match.reason == "missing-id"
                    else "Extension not found"
                )
                result = Resolution(
                    navigation=token,
                    state=ResolutionState.NOT_FOUND,
                    key=key,
                    error=message,
                )

        if token != self._navigation:
            logger.debug(f"[RuntimeResolver] Discarding superseded navigation {token}")
            return replace(result, superseded=True)

        self.current = result
        return result

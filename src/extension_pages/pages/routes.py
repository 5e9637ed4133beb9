"""
Route generation.

Binds every descriptor in a snapshot to a detail route and the whole
snapshot to the listing route. Routes are only registered in memory; the
static exporter does the file I/O.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote

from ..catalog.base import CatalogSnapshot, ExtensionDescriptor
from ..errors import DuplicateRouteError, RouteGenerationError

logger = logging.getLogger(__name__)

LISTING_PATH = "/extensions"
DETAIL_PATH = "/extensions/detail"
DETAIL_COMPONENT = "extension-detail"
LISTING_COMPONENT = "extension-listing"


def detail_path(extension_id: str) -> str:
    """Path-segment form of a detail route."""
    return f"{DETAIL_PATH}/{quote(extension_id, safe='')}"


def detail_query_path(extension_id: str) -> str:
    """Query-parameter form of a detail route."""
    return f"{DETAIL_PATH}?id={quote(extension_id, safe='')}"


def listing_order(snapshot: CatalogSnapshot) -> list[ExtensionDescriptor]:
    """Most starred first, then by name."""
    return sorted(snapshot, key=lambda d: (-d.github_stars, d.name.lower(), d.id))


@dataclass(frozen=True)
class OutputArtifact:
    """The route binding and data payload generated for one descriptor."""
    extension_id: str
    route_path: str
    query_path: str
    data_name: str
    payload: dict[str, Any]

    @classmethod
    def for_descriptor(cls, descriptor: ExtensionDescriptor) -> "OutputArtifact":
        return cls(
            extension_id=descriptor.id,
            route_path=detail_path(descriptor.id),
            query_path=detail_query_path(descriptor.id),
            data_name=f"extension-{descriptor.id}.json",
            payload=descriptor.to_dict(),
        )


@dataclass(frozen=True)
class Route:
    """A binding from a URL path to the data a page renders."""
    path: str
    component: str
    data: Any
    exact: bool = True


@dataclass
class RouteTable:
    """The routing table for one build."""

    routes: dict[str, Route] = field(default_factory=dict)

    def add_route(self, route: Route) -> None:
        if route.path in self.routes:
            raise DuplicateRouteError(f"Route {route.path} is already registered")
        self.routes[route.path] = route

    def get(self, path: str) -> Optional[Route]:
        return self.routes.get(path)

    @property
    def detail_routes(self) -> list[Route]:
        return [r for r in self.routes.values() if r.component == DETAIL_COMPONENT]

    def __len__(self) -> int:
        return len(self.routes)

    def __contains__(self, path: str) -> bool:
        return path in self.routes


async def _register_detail(descriptor: ExtensionDescriptor, table: RouteTable) -> OutputArtifact:
    artifact = OutputArtifact.for_descriptor(descriptor)
    table.add_route(Route(
        path=artifact.route_path,
        component=DETAIL_COMPONENT,
        data=artifact.payload,
    ))
    return artifact


async def generate_routes(snapshot: CatalogSnapshot, table: RouteTable) -> list[OutputArtifact]:
    """
    Register one detail route per descriptor plus the listing route.

    Detail routes are registered concurrently and joined before the listing
    route is added. If any of them failed the whole set is rejected.

    Raises:
        RouteGenerationError: If any detail route could not be registered.
    """
    results = await asyncio.gather(
        *(_register_detail(d, table) for d in snapshot),
        return_exceptions=True,
    )

    artifacts: list[OutputArtifact] = []
    failures: dict[str, BaseException] = {}
    for descriptor, result in zip(snapshot, results):
        if isinstance(result, BaseException):
            logger.error(f"[RouteGenerator] {descriptor.id}: {result}")
            failures[descriptor.id] = result
        else:
            artifacts.append(result)

    if failures:
        raise RouteGenerationError(failures)

    table.add_route(Route(
        path=LISTING_PATH,
        component=LISTING_COMPONENT,
        data=[d.to_dict() for d in listing_order(snapshot)],
    ))

    logger.info(f"[RouteGenerator] Registered {len(artifacts)} detail routes and the listing")
    return artifacts

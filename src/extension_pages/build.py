"""
One site build: fetch, normalize, register routes, export.

The catalog is fetched exactly once and the resulting snapshot is threaded
through every later stage.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from .catalog.base import CatalogSnapshot
from .catalog.fetcher import CatalogFetcher
from .catalog.normalizer import normalize_catalog
from .config import BuildConfig
from .pages.exporter import export
from .pages.routes import OutputArtifact, RouteTable, generate_routes

logger = logging.getLogger(__name__)


async def load_snapshot(fetcher: CatalogFetcher) -> CatalogSnapshot:
    """Fetch the raw catalog and normalize it into a snapshot."""
    raws = await fetcher.fetch()
    return normalize_catalog(raws, source=fetcher.source)


@dataclass
class BuildResult:
    """Summary of a completed build."""
    snapshot: CatalogSnapshot
    routes: RouteTable
    artifacts: list[OutputArtifact] = field(default_factory=list)
    files_written: int = 0
    duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            "source": self.snapshot.source,
            "extensions": len(self.snapshot),
            "routes": len(self.routes),
            "filesWritten": self.files_written,
            "durationMs": int(self.duration * 1000),
        }


async def run_build(config: BuildConfig, snapshot: CatalogSnapshot | None = None) -> BuildResult:
    """Run the whole pipeline. Any stage error aborts the build."""
    started = time.time()

    if snapshot is None:
        snapshot = await load_snapshot(config.make_fetcher())

    routes = RouteTable()
    artifacts = await generate_routes(snapshot, routes)
    files_written = await export(snapshot, config.export_dir)

    result = BuildResult(
        snapshot=snapshot,
        routes=routes,
        artifacts=artifacts,
        files_written=files_written,
        duration=time.time() - started,
    )
    logger.info(
        f"[Build] {len(snapshot)} extensions, {len(routes)} routes, "
        f"{files_written} files from {snapshot.source or 'memory'}"
    )
    return result

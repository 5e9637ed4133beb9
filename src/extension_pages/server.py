"""Preview server for a built extensions site.

Serves the routing table produced by a build together with the exported
data files, resolving detail lookups with the same rule the client uses.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from . import __version__
from .actions import action_to_dict, primary_action
from .build import BuildResult
from .catalog.base import canonical_id
from .pages.exporter import export_path
from .pages.routes import LISTING_PATH
from .runtime.resolver import Found, lookup

logger = logging.getLogger(__name__)


def make_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def create_app(build: BuildResult, export_dir: Path) -> FastAPI:
    app = FastAPI(title="Extension Pages Preview", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    snapshot = build.snapshot
    logger.info(f"Serving {len(snapshot)} extensions, data files from {export_dir}")

    def _detail(key: Optional[str]):
        match = lookup(snapshot, key)
        if not isinstance(match, Found):
            if match.reason == "missing-id":
                return make_error_response(400, "missing_id", "No extension ID provided")
            return make_error_response(
                404, "not_found", "Extension not found", details={"id": key}
            )
        descriptor = match.descriptor
        return {
            "extension": descriptor.to_dict(),
            "action": action_to_dict(primary_action(descriptor)),
        }

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "extensions": len(snapshot), "source": snapshot.source}

    @app.get(LISTING_PATH)
    async def listing() -> Dict[str, Any]:
        route = build.routes.get(LISTING_PATH)
        extensions = route.data if route else []
        return {"extensions": extensions, "count": len(extensions)}

    @app.get(LISTING_PATH + "/detail")
    async def detail_by_query(extension_id: Optional[str] = Query(default=None, alias="id")):
        return _detail(extension_id)

    @app.get(LISTING_PATH + "/detail/{extension_id}")
    async def detail_by_path(extension_id: str):
        return _detail(extension_id)

    @app.get("/extensions-data/{filename}")
    async def exported_file(filename: str):
        stem = filename[:-len(".json")] if filename.endswith(".json") else ""
        if not stem or canonical_id(stem) != stem:
            return make_error_response(404, "not_found", f"No data file {filename}")
        path = export_path(export_dir, stem)
        if not path.is_file():
            return make_error_response(404, "not_found", f"No data file {filename}")
        return FileResponse(path, media_type="application/json")

    return app

"""Build-time page generation: route registration and static export."""

from .exporter import EXPORT_SUBDIR, export, serialize_descriptor
from .routes import LISTING_PATH, OutputArtifact, Route, RouteTable, generate_routes

__all__ = [
    "EXPORT_SUBDIR",
    "export",
    "serialize_descriptor",
    "LISTING_PATH",
    "OutputArtifact",
    "Route",
    "RouteTable",
    "generate_routes",
]

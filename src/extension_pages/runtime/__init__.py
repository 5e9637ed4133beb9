"""Client-side lookup of extensions after the catalog has been fetched."""

from .resolver import (
    Found,
    NotFound,
    Resolution,
    ResolutionState,
    RuntimeResolver,
    key_from_location,
    lookup,
)

__all__ = [
    "Found",
    "NotFound",
    "Resolution",
    "ResolutionState",
    "RuntimeResolver",
    "key_from_location",
    "lookup",
]

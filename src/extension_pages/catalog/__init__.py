"""
Catalog ingestion: fetching the raw extensions catalog and normalizing it
into an immutable snapshot.
"""

from .base import CatalogSnapshot, EnvironmentVariable, ExtensionDescriptor, canonical_id, derive_id
from .fetcher import CatalogFetcher, parse_catalog
from .normalizer import normalize, normalize_catalog

__all__ = [
    "CatalogSnapshot",
    "EnvironmentVariable",
    "ExtensionDescriptor",
    "canonical_id",
    "derive_id",
    "CatalogFetcher",
    "parse_catalog",
    "normalize",
    "normalize_catalog",
]

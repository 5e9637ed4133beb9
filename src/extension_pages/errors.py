"""Exceptions raised by the extension pages pipeline.

Every stage raises a subclass of ExtensionPagesError so the build entry point
can abort with one handler.
"""

from __future__ import annotations


class ExtensionPagesError(Exception):
    """Base exception for extension pages errors."""

    pass


class FetchError(ExtensionPagesError):
    """Raised when the catalog cannot be retrieved or is not a JSON array."""

    pass


class SchemaError(ExtensionPagesError):
    """Raised when a raw descriptor is missing required fields or has bad types."""

    pass


class DuplicateIdError(ExtensionPagesError):
    """Raised when two descriptors resolve to the same id."""

    pass


class DuplicateRouteError(DuplicateIdError):
    """Raised when a route path is registered twice in one routing table."""

    pass


class RouteGenerationError(ExtensionPagesError):
    """Raised when one or more per-descriptor routes failed to register."""

    def __init__(self, failures: dict[str, BaseException]):
        self.failures = failures
        ids = ", ".join(sorted(failures))
        super().__init__(f"Failed to register {len(failures)} route(s): {ids}")


class ExportError(ExtensionPagesError, OSError):
    """Raised when static export cannot write to the output directory."""

    pass

"""
Descriptor normalizer.

Validates raw catalog entries, fills optional fields and assigns each entry
its content-derived id. One bad or duplicate entry fails the whole catalog:
a silently smaller catalog would look like a successful build.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError

from ..errors import DuplicateIdError, SchemaError
from .base import CatalogSnapshot, EnvironmentVariable, ExtensionDescriptor, canonical_id, derive_id

logger = logging.getLogger(__name__)


class RawEnvironmentVariable(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: StrictStr = Field(min_length=1)
    description: Optional[StrictStr] = None
    required: Optional[StrictBool] = None


class RawDescriptor(BaseModel):
    """Shape of one entry as published in servers.json."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[StrictStr] = None
    name: StrictStr = Field(min_length=1)
    description: StrictStr
    link: StrictStr = Field(min_length=1)
    command: Optional[StrictStr] = None
    is_builtin: Optional[StrictBool] = None
    installation_notes: Optional[StrictStr] = None
    githubStars: Any = None
    environmentVariables: Optional[list[RawEnvironmentVariable]] = None


def coerce_stars(value: Any) -> int:
    """Coerce a star count to a non-negative int, defaulting to 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        stars = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(stars, 0)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or "<entry>"
        parts.append(f"{loc}: {item['msg']}")
    return "; ".join(parts)


def normalize(raw: Any) -> ExtensionDescriptor:
    """Validate one raw descriptor and return its normalized form.

    Raises:
        SchemaError: If required fields are missing or have the wrong type.
    """
    if not isinstance(raw, dict):
        raise SchemaError(f"Descriptor must be an object, got {type(raw).__name__}")

    try:
        entry = RawDescriptor.model_validate(raw)
    except ValidationError as e:
        raise SchemaError(_format_validation_error(e)) from e

    if entry.id is not None:
        extension_id = canonical_id(entry.id)
        if not extension_id:
            raise SchemaError(f"id {entry.id!r} has no URL-safe characters")
    else:
        extension_id = derive_id(entry.name, entry.link)

    env_vars = tuple(
        EnvironmentVariable(
            name=env.name,
            description=env.description or "",
            required=bool(env.required),
        )
        for env in entry.environmentVariables or []
    )

    return ExtensionDescriptor(
        id=extension_id,
        name=entry.name,
        description=entry.description,
        link=entry.link,
        command=entry.command,
        is_builtin=bool(entry.is_builtin),
        installation_notes=entry.installation_notes,
        environment_variables=env_vars,
        github_stars=coerce_stars(entry.githubStars),
    )


def normalize_catalog(raws: Iterable[Any], source: str = "") -> CatalogSnapshot:
    """Normalize a whole raw catalog into one immutable snapshot.

    Raises:
        SchemaError: On the first invalid entry, naming its position.
        DuplicateIdError: If two entries resolve to the same id.
    """
    descriptors: list[ExtensionDescriptor] = []
    seen: dict[str, int] = {}

    for index, raw in enumerate(raws):
        try:
            descriptor = normalize(raw)
        except SchemaError as e:
            raise SchemaError(f"Entry {index}: {e}") from e

        if descriptor.id in seen:
            raise DuplicateIdError(
                f"Entries {seen[descriptor.id]} and {index} both resolve to id "
                f"{descriptor.id!r}"
            )
        seen[descriptor.id] = index
        descriptors.append(descriptor)

    logger.info(f"[Normalizer] Normalized {len(descriptors)} descriptors")
    return CatalogSnapshot(descriptors=tuple(descriptors), source=source)

"""
Data model for the extensions catalog.

Descriptors are frozen once normalized: every stage after the normalizer
only reads them, and the same snapshot is shared by route generation,
static export and runtime lookup.
"""

from __future__ import annotations

import hashlib
import re
import time
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Optional

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")
HASH_ID_LENGTH = 12


def canonical_id(value: str) -> str:
    """Fold a string into the URL-safe id form used for routes and filenames.

    The same function is applied to explicit catalog ids, names without an
    id, and keys read back from a URL, so all three always agree.
    """
    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG_CHARS.sub("-", folded.lower()).strip("-")


def derive_id(name: str, link: str) -> str:
    """Derive an id from content for descriptors published without one."""
    slug = canonical_id(name)
    if slug:
        return slug
    # Names with no ASCII letters or digits fall back to a content hash
    key = f"{name}\n{link}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:HASH_ID_LENGTH]


@dataclass(frozen=True)
class EnvironmentVariable:
    """An environment variable an extension reads at startup."""
    name: str
    description: str = ""
    required: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


@dataclass(frozen=True)
class ExtensionDescriptor:
    """Normalized representation of one catalog entry."""

    id: str
    name: str
    description: str
    link: str

    # Installation
    command: Optional[str] = None
    is_builtin: bool = False
    installation_notes: Optional[str] = None
    environment_variables: tuple[EnvironmentVariable, ...] = ()

    # Display
    github_stars: int = 0

    def to_dict(self) -> dict:
        """Convert to the catalog's JSON field names."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "command": self.command,
            "is_builtin": self.is_builtin,
            "link": self.link,
            "githubStars": self.github_stars,
            "installation_notes": self.installation_notes,
            "environmentVariables": [e.to_dict() for e in self.environment_variables],
        }


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    One immutable view of the catalog.

    A build or a client navigation gets exactly one snapshot and passes it
    to every stage, so routes and exported files always describe the same
    data.
    """

    descriptors: tuple[ExtensionDescriptor, ...] = ()
    source: str = ""
    fetched_at: float = field(default_factory=time.time)
    _index: dict[str, ExtensionDescriptor] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "descriptors", tuple(self.descriptors))
        self._index.update((d.id, d) for d in self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self):
        return iter(self.descriptors)

    def get(self, extension_id: str) -> Optional[ExtensionDescriptor]:
        """Get a descriptor by its exact id."""
        return self._index.get(extension_id)

    @property
    def ids(self) -> list[str]:
        return [d.id for d in self.descriptors]

    def to_list(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self.descriptors]

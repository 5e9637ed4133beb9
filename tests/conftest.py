"""Pytest configuration for extension_pages tests."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from extension_pages.catalog.base import CatalogSnapshot
from extension_pages.catalog.normalizer import normalize_catalog


@pytest.fixture
def raw_catalog() -> List[Dict[str, Any]]:
    """Return the two-entry catalog without explicit ids."""
    return [
        {"name": "Alpha", "description": "A", "link": "https://x/a"},
        {"name": "Beta", "description": "B", "link": "https://x/b", "is_builtin": True},
    ]


@pytest.fixture
def full_entry() -> Dict[str, Any]:
    """Return a raw entry with every field set."""
    return {
        "id": "github",
        "name": "GitHub",
        "description": "GitHub repository access",
        "command": "npx -y @modelcontextprotocol/server-github",
        "is_builtin": False,
        "link": "https://github.com/modelcontextprotocol/servers",
        "githubStars": 1200,
        "installation_notes": "Requires a personal access token.",
        "environmentVariables": [
            {
                "name": "GITHUB_PERSONAL_ACCESS_TOKEN",
                "description": "Token with repo scope",
                "required": True,
            },
            {"name": "GITHUB_API_URL", "description": "Enterprise API URL", "required": False},
        ],
    }


@pytest.fixture
def snapshot(raw_catalog, full_entry) -> CatalogSnapshot:
    """Return a normalized three-entry snapshot."""
    return normalize_catalog(raw_catalog + [full_entry], source="test")

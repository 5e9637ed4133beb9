"""Build configuration.

Defaults come from the environment (a ``.env`` file in the working
directory is loaded first). Command line flags override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .catalog.fetcher import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF,
    DEFAULT_CATALOG_URL,
    DEFAULT_TIMEOUT,
    LOCAL_SNAPSHOT_PATH,
    CatalogFetcher,
)
from .pages.exporter import EXPORT_SUBDIR

load_dotenv()


DEFAULT_HOST = os.getenv("EXTENSION_PAGES_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("EXTENSION_PAGES_PORT", "3000"))


@dataclass
class BuildConfig:
    """Settings for one build or preview session."""

    site_dir: Path = Path(".")
    out_dir: Path = Path("build")
    catalog_url: str = DEFAULT_CATALOG_URL
    fetch_attempts: int = DEFAULT_ATTEMPTS
    fetch_backoff: float = DEFAULT_BACKOFF
    fetch_timeout: float = DEFAULT_TIMEOUT
    use_local_snapshot: bool = True

    @classmethod
    def from_env(cls) -> "BuildConfig":
        return cls(
            site_dir=Path(os.getenv("EXTENSION_PAGES_SITE_DIR", ".")),
            out_dir=Path(os.getenv("EXTENSION_PAGES_OUT_DIR", "build")),
            catalog_url=os.getenv("EXTENSION_PAGES_CATALOG_URL", DEFAULT_CATALOG_URL),
            fetch_attempts=int(os.getenv("EXTENSION_PAGES_FETCH_ATTEMPTS", str(DEFAULT_ATTEMPTS))),
            fetch_backoff=float(os.getenv("EXTENSION_PAGES_FETCH_BACKOFF", str(DEFAULT_BACKOFF))),
            fetch_timeout=float(os.getenv("EXTENSION_PAGES_FETCH_TIMEOUT", str(DEFAULT_TIMEOUT))),
        )

    @property
    def local_snapshot(self) -> Optional[Path]:
        if not self.use_local_snapshot:
            return None
        return self.site_dir / LOCAL_SNAPSHOT_PATH

    @property
    def export_dir(self) -> Path:
        return self.out_dir / EXPORT_SUBDIR

    def make_fetcher(self) -> CatalogFetcher:
        return CatalogFetcher(
            local_path=self.local_snapshot,
            remote_url=self.catalog_url,
            attempts=self.fetch_attempts,
            backoff=self.fetch_backoff,
            timeout=self.fetch_timeout,
        )

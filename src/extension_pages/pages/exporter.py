"""Static export of per-extension data files.

Each descriptor is written to ``<out_dir>/<id>.json`` so a static host can
serve detail data without a running server.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..catalog.base import CatalogSnapshot, ExtensionDescriptor
from ..errors import ExportError

logger = logging.getLogger(__name__)

EXPORT_SUBDIR = "extensions-data"


def serialize_descriptor(descriptor: ExtensionDescriptor) -> bytes:
    """Serialize with stable key order so unchanged input gives identical bytes."""
    payload: Dict[str, Any] = descriptor.to_dict()
    text = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return text.encode("utf-8")


def export_path(out_dir: Path, extension_id: str) -> Path:
    return out_dir / f"{extension_id}.json"


async def export(snapshot: CatalogSnapshot, out_dir: Path) -> int:
    """Write one JSON file per descriptor.

    Args:
        snapshot: The normalized catalog for this build.
        out_dir: Directory to write into. Created if missing.

    Returns:
        The number of files written.

    Raises:
        ExportError: If the directory or any file cannot be written.
    """
    try:
        await asyncio.to_thread(out_dir.mkdir, parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Cannot create output directory {out_dir}: {e}") from e

    def _write(descriptor: ExtensionDescriptor) -> None:
        export_path(out_dir, descriptor.id).write_bytes(serialize_descriptor(descriptor))

    results = await asyncio.gather(
        *(asyncio.to_thread(_write, d) for d in snapshot),
        return_exceptions=True,
    )

    for descriptor, result in zip(snapshot, results):
        if isinstance(result, BaseException):
            raise ExportError(
                f"Cannot write {export_path(out_dir, descriptor.id)}: {result}"
            ) from result

    logger.info(f"[Exporter] Wrote {len(results)} files to {out_dir}")
    return len(results)

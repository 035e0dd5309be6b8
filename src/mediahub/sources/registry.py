"""Read access and ``lastDetectedAt`` updates for the source associations file.

Attaching and detaching sources happens elsewhere; this module only touches
an associations file that already exists.
"""

from __future__ import annotations

import json
from pathlib import Path

from mediahub.core.logging import get_logger
from mediahub.library.atomic_copy import atomic_write_json
from mediahub.library.layout import associations_file_path

from .types import Source

_logger = get_logger(__name__)


def list_sources(library_root: Path) -> list[Source]:
    path = associations_file_path(library_root)
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    return [Source.from_dict(raw) for raw in data.get("sources", [])]


def update_last_detected_at(library_root: Path, source_id: str, timestamp: str) -> bool:
    """Stamp ``lastDetectedAt`` on a registered source.

    Returns False when there is no associations file or the source is not
    listed in it.
    """
    path = associations_file_path(library_root)
    if not path.exists():
        return False

    data = json.loads(path.read_text(encoding="utf-8"))
    sources = data.get("sources", [])
    for raw in sources:
        if raw.get("sourceId") == source_id:
            raw["lastDetectedAt"] = timestamp
            break
    else:
        _logger.debug(f"source {source_id!r} not listed in {path}")
        return False

    atomic_write_json(path, data)
    return True

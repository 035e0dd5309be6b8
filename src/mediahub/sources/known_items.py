"""Per-source known-items store.

Append-only, deduplicated by source path, persisted at
``.mediahub/sources/<sourceId>/known-items.json``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mediahub.core.errors import KnownItemsUpdateError
from mediahub.core.logging import get_logger
from mediahub.core.timestamps import now_timestamp
from mediahub.library.atomic_copy import atomic_write_json
from mediahub.library.layout import known_items_file_path

_logger = get_logger(__name__)

KNOWN_ITEMS_VERSION = "1.0"


@dataclass(frozen=True)
class KnownItem:
    path: str
    destination_path: str
    imported_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "destinationPath": self.destination_path,
            "importedAt": self.imported_at,
        }


def read_known_items(library_root: Path, source_id: str) -> list[KnownItem]:
    """Known items for a source; [] when nothing was recorded yet.

    Raises:
        KnownItemsUpdateError: the store exists but is unreadable or malformed.
    """
    path = known_items_file_path(library_root, source_id)
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise KnownItemsUpdateError(str(path), str(e)) from e

    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise KnownItemsUpdateError(str(path), "malformed known-items file")
    if data.get("sourceId") != source_id:
        raise KnownItemsUpdateError(
            str(path), f"source mismatch: expected {source_id}, found {data.get('sourceId')}"
        )

    items: list[KnownItem] = []
    for raw in data["items"]:
        try:
            items.append(
                KnownItem(
                    path=str(raw["path"]),
                    destination_path=str(raw["destinationPath"]),
                    imported_at=str(raw["importedAt"]),
                )
            )
        except (KeyError, TypeError) as e:
            raise KnownItemsUpdateError(str(path), f"malformed item: {e}") from e
    return items


def known_source_paths(library_root: Path, source_id: str) -> set[str]:
    return {item.path for item in read_known_items(library_root, source_id)}


def record_imported_items(
    library_root: Path,
    source_id: str,
    pairs: Iterable[tuple[str, str]],
    *,
    imported_at: str | None = None,
) -> int:
    """Append ``(source_path, destination_path)`` pairs not yet recorded.

    Returns the number of items added.

    Raises:
        KnownItemsUpdateError
    """
    path = known_items_file_path(library_root, source_id)
    existing = read_known_items(library_root, source_id)
    seen = {item.path for item in existing}
    ts = imported_at or now_timestamp()

    added: list[KnownItem] = []
    for source_path, destination_path in pairs:
        if source_path in seen:
            continue
        seen.add(source_path)
        added.append(KnownItem(path=source_path, destination_path=destination_path, imported_at=ts))

    if not added:
        return 0

    doc = {
        "version": KNOWN_ITEMS_VERSION,
        "sourceId": source_id,
        "items": [item.to_dict() for item in existing + added],
        "lastUpdated": ts,
    }
    try:
        atomic_write_json(path, doc)
    except OSError as e:
        raise KnownItemsUpdateError(str(path), str(e)) from e

    _logger.debug(f"known items source_id={source_id!r} added={len(added)}")
    return len(added)

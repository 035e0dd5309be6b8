"""On-disk layout of a MediaHub library.

All metadata lives under ``<root>/.mediahub``. Everything else under the root
is library content.
"""

from __future__ import annotations

import uuid
from pathlib import Path

METADATA_DIR = ".mediahub"
REGISTRY_DIR = "registry"
SOURCES_DIR = "sources"
INDEX_FILE = "index.json"
LOCK_FILE = ".lock"
KNOWN_ITEMS_FILE = "known-items.json"
ASSOCIATIONS_FILE = "associations.json"
DETECTIONS_DIR = "detections"
IMPORTS_DIR = "imports"

TEMP_MARKER = ".mediahub-tmp-"


def metadata_dir(library_root: Path) -> Path:
    return library_root / METADATA_DIR


def registry_dir(library_root: Path) -> Path:
    return metadata_dir(library_root) / REGISTRY_DIR


def index_file_path(library_root: Path) -> Path:
    return registry_dir(library_root) / INDEX_FILE


def lock_file_path(library_root: Path) -> Path:
    return registry_dir(library_root) / LOCK_FILE


def source_dir(library_root: Path, source_id: str) -> Path:
    return metadata_dir(library_root) / SOURCES_DIR / source_id


def associations_file_path(library_root: Path) -> Path:
    return metadata_dir(library_root) / SOURCES_DIR / ASSOCIATIONS_FILE


def known_items_file_path(library_root: Path, source_id: str) -> Path:
    return source_dir(library_root, source_id) / KNOWN_ITEMS_FILE


def detections_dir(library_root: Path, source_id: str) -> Path:
    return source_dir(library_root, source_id) / DETECTIONS_DIR


def imports_dir(library_root: Path, source_id: str) -> Path:
    return source_dir(library_root, source_id) / IMPORTS_DIR


def timestamp_file_name(timestamp: str) -> str:
    """File name for a per-run result: ISO timestamp with ':' replaced by '-'."""
    return timestamp.replace(":", "-") + ".json"


def temp_path_for(destination: Path) -> Path:
    """Unique hidden temp path beside ``destination``."""
    return destination.with_name(f".{destination.name}{TEMP_MARKER}{uuid.uuid4().hex}")


def is_temp_file(name: str) -> bool:
    return name.startswith(".") and TEMP_MARKER in name


def unique_result_path(directory: Path, timestamp: str) -> Path:
    """First free ``<timestamp>.json`` (then ``<timestamp>-1.json``...) in ``directory``.

    Result files are never overwritten.
    """
    base = timestamp_file_name(timestamp)
    candidate = directory / base
    n = 1
    while candidate.exists():
        candidate = directory / f"{base[: -len('.json')]}-{n}.json"
        n += 1
    return candidate

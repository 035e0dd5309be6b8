"""Baseline index persistence.

The index lives at ``<root>/.mediahub/registry/index.json``. Writes are
deterministic (sorted keys, entries sorted by path, ``hash`` omitted when
absent) and atomic (temp file beside the index, then rename).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mediahub.core.diagnostics import observe_operation
from mediahub.core.errors import (
    BaselineIndexError,
    IndexDecodingError,
    IndexFileNotFoundError,
    IndexWriteError,
    InvalidIndexJSONError,
    PathOutsideLibraryRootError,
    UnsupportedIndexVersionError,
)
from mediahub.core.logging import get_logger
from mediahub.library.atomic_copy import atomic_write_bytes
from mediahub.library.hashing import is_valid_hash
from mediahub.library.layout import index_file_path
from mediahub.library.paths import is_within_root

from .types import SUPPORTED_VERSIONS, BaselineIndex, IndexEntry

_logger = get_logger(__name__)


def serialize_index(index: BaselineIndex) -> bytes:
    return (
        json.dumps(index.to_dict(), ensure_ascii=True, indent=2, sort_keys=True) + "\n"
    ).encode("utf-8")


def write_index(index: BaselineIndex, path: Path, library_root: Path) -> None:
    """Persist ``index`` at ``path``.

    Raises:
        PathOutsideLibraryRootError: ``path`` is not under ``library_root``.
        IndexWriteError: the registry directory or the file could not be written.
    """
    if not is_within_root(path, library_root):
        raise PathOutsideLibraryRootError(str(path))

    with observe_operation(
        component="index",
        operation="index.write",
        base={"path": str(path), "entry_count": index.entry_count},
    ):
        try:
            atomic_write_bytes(path, serialize_index(index))
        except OSError as e:
            raise IndexWriteError(str(path), str(e)) from e


def _require(obj: dict[str, Any], key: str, kind: type, path: Path) -> Any:
    value = obj.get(key)
    if not isinstance(value, kind) or isinstance(value, bool):
        raise IndexDecodingError(str(path), f"field '{key}' missing or not {kind.__name__}")
    return value


def _decode_entry(raw: Any, path: Path) -> IndexEntry:
    if not isinstance(raw, dict):
        raise IndexDecodingError(str(path), "entry is not an object")
    size = _require(raw, "size", int, path)
    if size < 0:
        raise IndexDecodingError(str(path), "field 'size' is negative")
    h = raw.get("hash")
    if h is not None and (not isinstance(h, str) or not is_valid_hash(h)):
        raise IndexDecodingError(str(path), f"malformed hash for {raw.get('path')!r}")
    return IndexEntry(
        path=_require(raw, "path", str, path),
        size=size,
        mtime=_require(raw, "mtime", str, path),
        hash=h,
    )


def decode_index(data: Any, path: Path) -> BaselineIndex:
    if not isinstance(data, dict):
        raise IndexDecodingError(str(path), "top-level value is not an object")
    version = _require(data, "version", str, path)
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedIndexVersionError(version, SUPPORTED_VERSIONS)
    raw_entries = data.get("entries")
    if not isinstance(raw_entries, list):
        raise IndexDecodingError(str(path), "field 'entries' missing or not a list")

    entries = [_decode_entry(raw, path) for raw in raw_entries]
    if len({e.path for e in entries}) != len(entries):
        raise IndexDecodingError(str(path), "duplicate entry paths")

    return BaselineIndex(
        entries=tuple(entries),
        created=_require(data, "created", str, path),
        last_updated=_require(data, "lastUpdated", str, path),
    )


def load_index(path: Path) -> BaselineIndex:
    """Load and validate the index at ``path``.

    Entries come back sorted by path whatever the on-disk order.

    Raises:
        IndexFileNotFoundError
        InvalidIndexJSONError
        IndexDecodingError
        UnsupportedIndexVersionError
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise IndexFileNotFoundError(str(path)) from None
    except UnicodeDecodeError as e:
        raise InvalidIndexJSONError(str(path), str(e)) from e
    except OSError as e:
        raise IndexDecodingError(str(path), str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidIndexJSONError(str(path), str(e)) from e

    index = decode_index(data, path)
    _logger.debug(f"loaded index path={str(path)!r} entry_count={index.entry_count}")
    return index


# --- Load state -------------------------------------------------------------


@dataclass(frozen=True)
class IndexValid:
    index: BaselineIndex


@dataclass(frozen=True)
class IndexAbsent:
    pass


@dataclass(frozen=True)
class IndexInvalid:
    reason: str


IndexLoadState = IndexValid | IndexAbsent | IndexInvalid

REASON_CORRUPTED = "corrupted"
REASON_LOAD_FAILED = "load_failed"


def try_load_baseline_index(library_root: Path) -> IndexLoadState:
    """Load the library index without raising; never creates or modifies it."""
    path = index_file_path(library_root)
    if not path.exists():
        return IndexAbsent()
    try:
        return IndexValid(load_index(path))
    except IndexFileNotFoundError:
        return IndexAbsent()
    except UnsupportedIndexVersionError as e:
        return IndexInvalid(f"unsupported_version: {e.version}")
    except (InvalidIndexJSONError, IndexDecodingError):
        return IndexInvalid(REASON_CORRUPTED)
    except (BaselineIndexError, OSError) as e:
        _logger.debug(f"index load failed path={str(path)!r}: {e}")
        return IndexInvalid(REASON_LOAD_FAILED)

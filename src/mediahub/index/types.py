"""Baseline index data model and derived queries.

A ``BaselineIndex`` is immutable. Its entries are always sorted by path with
unique paths, and ``version`` / ``entry_count`` are derived from the entries,
never stored independently.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from mediahub.core.timestamps import now_timestamp

VERSION_WITHOUT_HASHES = "1.0"
VERSION_WITH_HASHES = "1.1"
SUPPORTED_VERSIONS = (VERSION_WITHOUT_HASHES, VERSION_WITH_HASHES)


@dataclass(frozen=True)
class IndexEntry:
    path: str
    size: int
    mtime: str
    hash: str | None = None

    def with_hash(self, value: str | None) -> IndexEntry:
        return replace(self, hash=value)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"path": self.path, "size": self.size, "mtime": self.mtime}
        if self.hash is not None:
            out["hash"] = self.hash
        return out


def _sorted_unique(entries: Iterable[IndexEntry]) -> tuple[IndexEntry, ...]:
    by_path: dict[str, IndexEntry] = {}
    for e in entries:
        by_path[e.path] = e
    return tuple(by_path[p] for p in sorted(by_path))


@dataclass(frozen=True)
class BaselineIndex:
    """Durable manifest of library content.

    Duplicate paths in ``entries`` collapse to the last occurrence.
    """

    entries: tuple[IndexEntry, ...] = ()
    created: str = field(default_factory=now_timestamp)
    last_updated: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", _sorted_unique(self.entries))
        if not self.last_updated:
            object.__setattr__(self, "last_updated", self.created)

    @property
    def version(self) -> str:
        if any(e.hash is not None for e in self.entries):
            return VERSION_WITH_HASHES
        return VERSION_WITHOUT_HASHES

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    def updating(self, new_entries: Iterable[IndexEntry]) -> BaselineIndex:
        """Merge ``new_entries`` by path (new wins); keeps ``created``."""
        merged = {e.path: e for e in self.entries}
        for e in new_entries:
            merged[e.path] = e
        return BaselineIndex(
            entries=tuple(merged.values()),
            created=self.created,
            last_updated=now_timestamp(),
        )

    def with_entries(self, entries: Iterable[IndexEntry]) -> BaselineIndex:
        """Replace all entries; keeps ``created``."""
        return BaselineIndex(
            entries=tuple(entries),
            created=self.created,
            last_updated=now_timestamp(),
        )

    def entry_for(self, path: str) -> IndexEntry | None:
        for e in self.entries:
            if e.path == path:
                return e
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "created": self.created,
            "lastUpdated": self.last_updated,
            "entryCount": self.entry_count,
            "entries": [e.to_dict() for e in self.entries],
        }

    # Derived queries

    def hash_to_any_path(self) -> dict[str, str]:
        return hash_to_any_path(self.entries)

    def hash_set(self) -> set[str]:
        return hash_set(self.entries)

    def hash_entry_count(self) -> int:
        return hash_entry_count(self.entries)

    def hash_coverage(self) -> float:
        return hash_coverage(self.entries)


def hash_to_any_path(entries: Iterable[IndexEntry]) -> dict[str, str]:
    """First path (in path order) per hash."""
    out: dict[str, str] = {}
    for e in sorted(entries, key=lambda x: x.path):
        if e.hash is not None and e.hash not in out:
            out[e.hash] = e.path
    return out


def hash_set(entries: Iterable[IndexEntry]) -> set[str]:
    return {e.hash for e in entries if e.hash is not None}


def hash_entry_count(entries: Iterable[IndexEntry]) -> int:
    return sum(1 for e in entries if e.hash is not None)


def hash_coverage(entries: Iterable[IndexEntry]) -> float:
    total = 0
    hashed = 0
    for e in entries:
        total += 1
        if e.hash is not None:
            hashed += 1
    if total == 0:
        return 0.0
    return hashed / total

"""Duplicate analysis over the baseline index. Pure read, no side effects."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from mediahub.core.errors import BaselineIndexInvalidError, BaselineIndexMissingError
from mediahub.index.store import IndexAbsent, IndexInvalid, try_load_baseline_index
from mediahub.index.types import IndexEntry
from mediahub.library.layout import index_file_path

from .types import DuplicateFile, DuplicateGroup, DuplicateSummary


def group_duplicates(entries: Iterable[IndexEntry]) -> list[DuplicateGroup]:
    """Groups for hashes shared by two or more entries, ordered by hash."""
    by_hash: dict[str, list[DuplicateFile]] = {}
    for e in entries:
        if e.hash is None:
            continue
        by_hash.setdefault(e.hash, []).append(
            DuplicateFile(path=e.path, size_bytes=e.size, timestamp=e.mtime)
        )
    return [
        DuplicateGroup(hash=h, files=tuple(files))
        for h, files in sorted(by_hash.items())
        if len(files) >= 2
    ]


def analyze_duplicates(library_root: Path) -> tuple[list[DuplicateGroup], DuplicateSummary]:
    """Duplicate groups and summary for the library index.

    Raises:
        BaselineIndexMissingError
        BaselineIndexInvalidError
    """
    state = try_load_baseline_index(library_root)
    if isinstance(state, IndexAbsent):
        raise BaselineIndexMissingError(str(index_file_path(library_root)))
    if isinstance(state, IndexInvalid):
        raise BaselineIndexInvalidError(state.reason)

    groups = group_duplicates(state.index.entries)
    return groups, DuplicateSummary.from_groups(groups)

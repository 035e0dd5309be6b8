"""Duplicate report types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DuplicateFile:
    path: str
    size_bytes: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "sizeBytes": self.size_bytes, "timestamp": self.timestamp}


@dataclass(frozen=True)
class DuplicateGroup:
    """Files sharing one content hash, sorted by path."""

    hash: str
    files: tuple[DuplicateFile, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(sorted(self.files, key=lambda f: f.path)))

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_size_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def potential_savings_bytes(self) -> int:
        """Group total minus the size of the path-first file (the one kept)."""
        if not self.files:
            return 0
        return self.total_size_bytes - self.files[0].size_bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "fileCount": self.file_count,
            "totalSizeBytes": self.total_size_bytes,
            "files": [f.to_dict() for f in self.files],
        }


@dataclass(frozen=True)
class DuplicateSummary:
    duplicate_groups: int
    total_duplicate_files: int
    total_duplicate_size_bytes: int
    potential_savings_bytes: int

    @classmethod
    def from_groups(cls, groups: Iterable[DuplicateGroup]) -> DuplicateSummary:
        groups = list(groups)
        return cls(
            duplicate_groups=len(groups),
            total_duplicate_files=sum(g.file_count for g in groups),
            total_duplicate_size_bytes=sum(g.total_size_bytes for g in groups),
            potential_savings_bytes=sum(g.potential_savings_bytes for g in groups),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "duplicateGroups": self.duplicate_groups,
            "totalDuplicateFiles": self.total_duplicate_files,
            "totalDuplicateSizeBytes": self.total_duplicate_size_bytes,
            "potentialSavingsBytes": self.potential_savings_bytes,
        }

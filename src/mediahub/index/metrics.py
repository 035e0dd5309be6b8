"""Scale metrics and statistics derived from a baseline index (read-only)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mediahub.sources.formats import MediaType, classify_extension, extension_of

from .store import IndexValid, try_load_baseline_index
from .types import BaselineIndex

UNKNOWN_YEAR = "unknown"


@dataclass(frozen=True)
class ScaleMetrics:
    file_count: int
    total_size_bytes: int
    hash_coverage_percent: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileCount": self.file_count,
            "totalSizeBytes": self.total_size_bytes,
            "hashCoveragePercent": self.hash_coverage_percent,
        }


def compute_scale_metrics(index: BaselineIndex) -> ScaleMetrics:
    """``hash_coverage_percent`` is None for an empty index."""
    file_count = index.entry_count
    total = sum(e.size for e in index.entries)
    percent = index.hash_coverage() * 100.0 if file_count > 0 else None
    return ScaleMetrics(file_count=file_count, total_size_bytes=total, hash_coverage_percent=percent)


def compute_scale_metrics_for(library_root: Path) -> ScaleMetrics | None:
    state = try_load_baseline_index(library_root)
    if isinstance(state, IndexValid):
        return compute_scale_metrics(state.index)
    return None


@dataclass(frozen=True)
class LibraryStatistics:
    total_items: int
    by_year: dict[str, int]
    by_media_type: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "byYear": dict(sorted(self.by_year.items())),
            "byMediaType": dict(sorted(self.by_media_type.items())),
        }


def compute_library_statistics(index: BaselineIndex) -> LibraryStatistics:
    """Count entries by year bucket (first path segment) and by media type.

    Non-4-digit first segments land in ``unknown``. Unrecognized extensions
    count toward the total only.
    """
    by_year: dict[str, int] = {}
    by_type = {"images": 0, "videos": 0}

    for e in index.entries:
        first = e.path.split("/", 1)[0]
        year = first if len(first) == 4 and first.isdigit() else UNKNOWN_YEAR
        by_year[year] = by_year.get(year, 0) + 1

        kind = classify_extension(extension_of(e.path))
        if kind is MediaType.IMAGE:
            by_type["images"] += 1
        elif kind is MediaType.VIDEO:
            by_type["videos"] += 1

    return LibraryStatistics(
        total_items=index.entry_count, by_year=by_year, by_media_type=by_type
    )

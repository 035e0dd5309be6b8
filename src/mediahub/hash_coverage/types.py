"""Hash coverage maintenance result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mediahub.index.types import IndexEntry


@dataclass(frozen=True)
class HashCoverageStatistics:
    total_entries: int
    entries_with_hash: int
    entries_missing_hash: int
    candidate_count: int
    missing_files_count: int
    hash_coverage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEntries": self.total_entries,
            "entriesWithHash": self.entries_with_hash,
            "entriesMissingHash": self.entries_missing_hash,
            "candidateCount": self.candidate_count,
            "missingFilesCount": self.missing_files_count,
            "hashCoverage": self.hash_coverage,
        }


@dataclass(frozen=True)
class HashCoverageCandidates:
    statistics: HashCoverageStatistics
    candidates: tuple[IndexEntry, ...]


@dataclass(frozen=True)
class HashComputationResult:
    statistics: HashCoverageStatistics
    computed_hashes: dict[str, str]
    hashes_computed: int
    hash_failures: int
    failures: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexUpdateResult:
    statistics_before: HashCoverageStatistics
    statistics_after: HashCoverageStatistics
    entries_updated: int
    index_updated: bool

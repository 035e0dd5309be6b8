"""Detection result model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from mediahub.core.timestamps import now_timestamp
from mediahub.sources.types import CandidateMediaItem

DETECTION_RESULT_VERSION = "1.0"


class CandidateStatus(StrEnum):
    NEW = "new"
    KNOWN = "known"


class ExclusionReason(StrEnum):
    ALREADY_KNOWN = "already_known"


@dataclass(frozen=True)
class CandidateItemResult:
    item: CandidateMediaItem
    status: CandidateStatus
    exclusion_reason: ExclusionReason | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"item": self.item.to_dict(), "status": self.status.value}
        if self.exclusion_reason is not None:
            out["exclusionReason"] = self.exclusion_reason.value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CandidateItemResult:
        reason = data.get("exclusionReason")
        return cls(
            item=CandidateMediaItem.from_dict(data["item"]),
            status=CandidateStatus(data["status"]),
            exclusion_reason=ExclusionReason(reason) if reason else None,
        )


@dataclass(frozen=True)
class DetectionSummary:
    total_scanned: int
    new_items: int
    known_items: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalScanned": self.total_scanned,
            "newItems": self.new_items,
            "knownItems": self.known_items,
        }

    @classmethod
    def from_candidates(cls, candidates: list[CandidateItemResult]) -> DetectionSummary:
        new = sum(1 for c in candidates if c.status is CandidateStatus.NEW)
        known = sum(1 for c in candidates if c.status is CandidateStatus.KNOWN)
        return cls(total_scanned=len(candidates), new_items=new, known_items=known)


@dataclass(frozen=True)
class IndexMetadata:
    version: str
    entry_count: int
    last_updated: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "entryCount": self.entry_count,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexMetadata:
        return cls(
            version=str(data["version"]),
            entry_count=int(data["entryCount"]),
            last_updated=str(data["lastUpdated"]),
        )


@dataclass(frozen=True)
class DetectionResult:
    source_id: str
    library_id: str
    candidates: tuple[CandidateItemResult, ...]
    summary: DetectionSummary
    detected_at: str = field(default_factory=now_timestamp)
    version: str = DETECTION_RESULT_VERSION
    index_used: bool = False
    index_fallback_reason: str | None = None
    index_metadata: IndexMetadata | None = None

    def is_valid(self) -> bool:
        return (
            bool(self.source_id)
            and bool(self.detected_at)
            and self.summary == DetectionSummary.from_candidates(list(self.candidates))
        )

    def new_candidates(self) -> list[CandidateMediaItem]:
        return [c.item for c in self.candidates if c.status is CandidateStatus.NEW]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "version": self.version,
            "sourceId": self.source_id,
            "libraryId": self.library_id,
            "detectedAt": self.detected_at,
            "candidates": [c.to_dict() for c in self.candidates],
            "summary": self.summary.to_dict(),
            "indexUsed": self.index_used,
        }
        if self.index_fallback_reason is not None:
            out["indexFallbackReason"] = self.index_fallback_reason
        if self.index_metadata is not None:
            out["indexMetadata"] = self.index_metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DetectionResult:
        summary = data["summary"]
        meta = data.get("indexMetadata")
        return cls(
            version=str(data.get("version", DETECTION_RESULT_VERSION)),
            source_id=str(data["sourceId"]),
            library_id=str(data["libraryId"]),
            detected_at=str(data["detectedAt"]),
            candidates=tuple(CandidateItemResult.from_dict(c) for c in data["candidates"]),
            summary=DetectionSummary(
                total_scanned=int(summary["totalScanned"]),
                new_items=int(summary["newItems"]),
                known_items=int(summary["knownItems"]),
            ),
            index_used=bool(data.get("indexUsed", False)),
            index_fallback_reason=data.get("indexFallbackReason"),
            index_metadata=IndexMetadata.from_dict(meta) if meta else None,
        )


@dataclass(frozen=True)
class DetectionComparison:
    """Difference between two detection runs (``b`` relative to ``a``)."""

    total_scanned_delta: int
    new_items_delta: int
    known_items_delta: int
    added_paths: tuple[str, ...]
    removed_paths: tuple[str, ...]

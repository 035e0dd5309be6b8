"""Import result model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from mediahub.core.config import ConfigResolver
from mediahub.core.timestamps import now_timestamp
from mediahub.library.collisions import CollisionPolicy

IMPORT_RESULT_VERSION = "1.0"

INDEX_SKIP_MISSING = "index_missing"
INDEX_SKIP_DRY_RUN = "dry_run"


class ImportItemStatus(StrEnum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportOptions:
    collision_policy: CollisionPolicy = CollisionPolicy.RENAME

    def to_dict(self) -> dict[str, Any]:
        return {"collisionPolicy": self.collision_policy.value}

    @classmethod
    def from_config(cls, resolver: ConfigResolver) -> ImportOptions:
        return cls(collision_policy=CollisionPolicy(resolver.resolve_collision_policy()))


@dataclass(frozen=True)
class ImportItemResult:
    source_path: str
    status: ImportItemStatus
    destination_path: str | None = None
    reason: str | None = None
    timestamp_used: str | None = None
    timestamp_source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"sourcePath": self.source_path, "status": self.status.value}
        for key, value in (
            ("destinationPath", self.destination_path),
            ("reason", self.reason),
            ("timestampUsed", self.timestamp_used),
            ("timestampSource", self.timestamp_source),
        ):
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportItemResult:
        return cls(
            source_path=str(data["sourcePath"]),
            status=ImportItemStatus(data["status"]),
            destination_path=data.get("destinationPath"),
            reason=data.get("reason"),
            timestamp_used=data.get("timestampUsed"),
            timestamp_source=data.get("timestampSource"),
        )


@dataclass(frozen=True)
class ImportSummary:
    total: int
    imported: int
    skipped: int
    failed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "imported": self.imported,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    @classmethod
    def from_items(cls, items: list[ImportItemResult] | tuple[ImportItemResult, ...]) -> ImportSummary:
        def count(status: ImportItemStatus) -> int:
            return sum(1 for i in items if i.status is status)

        return cls(
            total=len(items),
            imported=count(ImportItemStatus.IMPORTED),
            skipped=count(ImportItemStatus.SKIPPED),
            failed=count(ImportItemStatus.FAILED),
        )


@dataclass(frozen=True)
class IndexUpdateMetadata:
    version: str
    entry_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "entryCount": self.entry_count}


@dataclass(frozen=True)
class ImportResult:
    source_id: str
    library_id: str
    options: ImportOptions
    items: tuple[ImportItemResult, ...]
    summary: ImportSummary
    dry_run: bool = False
    imported_at: str = field(default_factory=now_timestamp)
    version: str = IMPORT_RESULT_VERSION
    index_update_attempted: bool = False
    index_updated: bool = False
    index_update_skipped_reason: str | None = None
    index_metadata: IndexUpdateMetadata | None = None

    def is_valid(self) -> bool:
        return bool(self.source_id) and self.summary == ImportSummary.from_items(self.items)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "version": self.version,
            "sourceId": self.source_id,
            "libraryId": self.library_id,
            "importedAt": self.imported_at,
            "dryRun": self.dry_run,
            "options": self.options.to_dict(),
            "items": [i.to_dict() for i in self.items],
            "summary": self.summary.to_dict(),
            "indexUpdateAttempted": self.index_update_attempted,
            "indexUpdated": self.index_updated,
        }
        if self.index_update_skipped_reason is not None:
            out["indexUpdateSkippedReason"] = self.index_update_skipped_reason
        if self.index_metadata is not None:
            out["indexMetadata"] = self.index_metadata.to_dict()
        return out

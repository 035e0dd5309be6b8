"""Source and candidate models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from mediahub.core.timestamps import now_timestamp


class SourceType(StrEnum):
    FOLDER = "folder"


class SourceMediaTypes(StrEnum):
    IMAGES = "images"
    VIDEOS = "videos"
    BOTH = "both"


@dataclass(frozen=True)
class Source:
    """A folder attached to a library as an import origin."""

    source_id: str
    path: str
    type: SourceType = SourceType.FOLDER
    attached_at: str = ""
    last_detected_at: str | None = None
    media_types: SourceMediaTypes | None = None

    def __post_init__(self) -> None:
        if not self.attached_at:
            object.__setattr__(self, "attached_at", now_timestamp())

    @property
    def effective_media_types(self) -> SourceMediaTypes:
        return self.media_types or SourceMediaTypes.BOTH

    def with_last_detected_at(self, timestamp: str) -> Source:
        return replace(self, last_detected_at=timestamp)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "sourceId": self.source_id,
            "type": self.type.value,
            "path": self.path,
            "attachedAt": self.attached_at,
        }
        if self.last_detected_at is not None:
            out["lastDetectedAt"] = self.last_detected_at
        if self.media_types is not None:
            out["mediaTypes"] = self.media_types.value
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Source:
        media = data.get("mediaTypes")
        return cls(
            source_id=str(data["sourceId"]),
            type=SourceType(data.get("type", "folder")),
            path=str(data["path"]),
            attached_at=str(data.get("attachedAt") or ""),
            last_detected_at=data.get("lastDetectedAt"),
            media_types=SourceMediaTypes(media) if media else None,
        )


@dataclass(frozen=True)
class CandidateMediaItem:
    path: str
    size: int
    modification_date: str
    file_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "size": self.size,
            "modificationDate": self.modification_date,
            "fileName": self.file_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CandidateMediaItem:
        return cls(
            path=str(data["path"]),
            size=int(data["size"]),
            modification_date=str(data["modificationDate"]),
            file_name=str(data["fileName"]),
        )

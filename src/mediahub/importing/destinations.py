"""Year/month destination mapping for imported files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from mediahub.sources.types import CandidateMediaItem

PLACEHOLDER_NAME = "unnamed"

_UNSAFE_CHARS = re.compile(r"[/\\\x00-\x1f\x7f]")


@dataclass(frozen=True)
class DestinationMapping:
    year_month_path: str
    relative_path: str
    destination: Path


def generate_year_month_path(date: datetime) -> str:
    """``YYYY/MM`` in UTC."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=UTC)
    utc = date.astimezone(UTC)
    return f"{utc.year:04d}/{utc.month:02d}"


def sanitize_file_name(name: str) -> str:
    sanitized = _UNSAFE_CHARS.sub("_", name)
    if sanitized in ("", ".", ".."):
        return PLACEHOLDER_NAME
    return sanitized


def map_destination(
    candidate: CandidateMediaItem, timestamp: datetime, library_root: Path
) -> DestinationMapping:
    ym = generate_year_month_path(timestamp)
    rel = f"{ym}/{sanitize_file_name(candidate.file_name)}"
    return DestinationMapping(
        year_month_path=ym,
        relative_path=rel,
        destination=library_root.joinpath(*rel.split("/")),
    )

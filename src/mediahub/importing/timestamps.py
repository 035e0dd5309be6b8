"""Timestamp extraction: EXIF capture date first, filesystem mtime as fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

import exifread

from mediahub.core.logging import get_logger
from mediahub.library.file_ops import DefaultFileOperations, FileOperations
from mediahub.sources.formats import is_image_extension

_logger = get_logger(__name__)

# exifread logs "File format not recognized" for every non-EXIF file.
logging.getLogger("exifread").setLevel(logging.ERROR)

EXIF_DATE_TAGS = ("EXIF DateTimeOriginal", "EXIF DateTimeDigitized", "Image DateTime")

_MIN_DATE = datetime(1900, 1, 1, tzinfo=UTC)
_MAX_DATE = datetime(2100, 12, 31, 23, 59, 59, tzinfo=UTC)


class TimestampSource(StrEnum):
    EXIF = "exif"
    FILESYSTEM = "filesystem"


@dataclass(frozen=True)
class TimestampResult:
    date: datetime
    source: TimestampSource


def parse_exif_datetime(value: object) -> datetime | None:
    """Parse ``YYYY:MM:DD HH:MM:SS`` as UTC; None when malformed or out of range."""
    text = str(value).strip().rstrip("\x00")
    try:
        dt = datetime.strptime(text, "%Y:%m:%d %H:%M:%S").replace(tzinfo=UTC)
    except ValueError:
        return None
    if not (_MIN_DATE <= dt <= _MAX_DATE):
        return None
    return dt


def read_exif_timestamp(path: Path) -> datetime | None:
    if not is_image_extension(path.suffix):
        return None
    try:
        with open(path, "rb") as f:
            tags = exifread.process_file(f, details=False)
    except Exception as e:
        _logger.debug(f"EXIF read failed for {path}: {type(e).__name__}: {e}")
        return None
    if not tags:
        return None
    for tag in EXIF_DATE_TAGS:
        if tag in tags:
            dt = parse_exif_datetime(tags[tag])
            if dt is not None:
                return dt
    return None


def extract_timestamp(path: Path, *, file_ops: FileOperations | None = None) -> TimestampResult:
    """Capture timestamp for ``path``; deterministic for a fixed file.

    The mtime fallback is read through ``file_ops``.

    Raises:
        OSError: the file cannot be stat'ed.
    """
    dt = read_exif_timestamp(path)
    if dt is not None:
        return TimestampResult(date=dt, source=TimestampSource.EXIF)
    mtime = (file_ops or DefaultFileOperations()).stat(path).mtime
    return TimestampResult(
        date=datetime.fromtimestamp(mtime, UTC), source=TimestampSource.FILESYSTEM
    )

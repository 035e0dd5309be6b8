"""Tests for capture timestamps and year/month destination mapping."""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from mediahub.importing import (
    TimestampSource,
    extract_timestamp,
    generate_year_month_path,
    map_destination,
    sanitize_file_name,
)
from mediahub.importing.timestamps import parse_exif_datetime
from mediahub.library.file_ops import DefaultFileOperations, FileStat
from mediahub.sources.types import CandidateMediaItem


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2023:05:15 12:30:00", datetime(2023, 5, 15, 12, 30, tzinfo=UTC)),
        ("2023:05:15 12:30:00\x00", datetime(2023, 5, 15, 12, 30, tzinfo=UTC)),
        ("1899:12:31 23:59:59", None),
        ("2101:01:01 00:00:00", None),
        ("0000:00:00 00:00:00", None),
        ("not a date", None),
    ],
)
def test_parse_exif_datetime(raw: str, expected: datetime | None) -> None:
    assert parse_exif_datetime(raw) == expected


def test_filesystem_fallback(tmp_path: Path) -> None:
    path = tmp_path / "clip.mov"
    path.write_bytes(b"not a real movie")
    os.utime(path, (1684152000.0, 1684152000.0))

    ts = extract_timestamp(path)

    assert ts.source is TimestampSource.FILESYSTEM
    assert ts.date == datetime(2023, 5, 15, 12, 0, tzinfo=UTC)
    assert extract_timestamp(path) == ts


def test_image_without_exif_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 not much of a jpeg")

    assert extract_timestamp(path).source is TimestampSource.FILESYSTEM


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        extract_timestamp(tmp_path / "gone.mov")


class FixedMtime(DefaultFileOperations):
    def stat(self, path: Path) -> FileStat:
        return FileStat(size=1, mtime=1577880000.0, is_dir=False, is_file=True)


def test_mtime_comes_from_file_ops(tmp_path: Path) -> None:
    path = tmp_path / "clip.mov"
    path.write_bytes(b"movie")

    ts = extract_timestamp(path, file_ops=FixedMtime())

    assert ts.source is TimestampSource.FILESYSTEM
    assert ts.date == datetime(2020, 1, 1, 12, 0, tzinfo=UTC)


class TestYearMonth:
    def test_utc(self) -> None:
        assert generate_year_month_path(datetime(2024, 1, 9, tzinfo=UTC)) == "2024/01"

    def test_converted_to_utc(self) -> None:
        local = datetime(2024, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))
        assert generate_year_month_path(local) == "2023/12"

    def test_naive_treated_as_utc(self) -> None:
        assert generate_year_month_path(datetime(2024, 12, 31, 23, 59)) == "2024/12"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("IMG_0001.JPG", "IMG_0001.JPG"),
        ("a/b.jpg", "a_b.jpg"),
        ("tab\tname.jpg", "tab_name.jpg"),
        ("", "unnamed"),
        ("..", "unnamed"),
    ],
)
def test_sanitize_file_name(name: str, expected: str) -> None:
    assert sanitize_file_name(name) == expected


def test_map_destination(tmp_path: Path) -> None:
    item = CandidateMediaItem(
        path="/src/DCIM/IMG_0001.JPG",
        size=10,
        modification_date="2023-05-15T12:00:00Z",
        file_name="IMG_0001.JPG",
    )

    mapping = map_destination(item, datetime(2023, 5, 15, tzinfo=UTC), tmp_path)

    assert mapping.year_month_path == "2023/05"
    assert mapping.relative_path == "2023/05/IMG_0001.JPG"
    assert mapping.destination == tmp_path / "2023" / "05" / "IMG_0001.JPG"

"""Tests for the atomic file copier and atomic writes."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediahub.core.errors import CopyIOError, SizeMismatchError, SourceMissingError
from mediahub.library.atomic_copy import atomic_write_bytes, copy_atomically
from mediahub.library.file_ops import DefaultFileOperations
from mediahub.library.layout import is_temp_file


class TruncatingFileOperations(DefaultFileOperations):
    """Copies only half of the source."""

    def copy(self, source: Path, destination: Path) -> None:
        data = source.read_bytes()
        destination.write_bytes(data[: len(data) // 2])


class FailingMoveFileOperations(DefaultFileOperations):
    def move(self, source: Path, destination: Path) -> None:
        raise OSError("disk on fire")


class FailingCopyFileOperations(DefaultFileOperations):
    """Writes a partial temp file, then fails."""

    def copy(self, source: Path, destination: Path) -> None:
        destination.write_bytes(b"partial")
        raise OSError("no space left on device")


def _temp_files(directory: Path) -> list[str]:
    if not directory.exists():
        return []
    return [p.name for p in directory.iterdir() if is_temp_file(p.name)]


def test_copy_creates_parents_and_preserves_content(tmp_path: Path) -> None:
    src = tmp_path / "src.jpg"
    src.write_bytes(b"pixels")
    dst = tmp_path / "lib" / "2024" / "01" / "src.jpg"

    result = copy_atomically(src, dst)

    assert result.destination == dst
    assert result.size == 6
    assert dst.read_bytes() == b"pixels"
    assert _temp_files(dst.parent) == []


def test_source_missing(tmp_path: Path) -> None:
    with pytest.raises(SourceMissingError) as exc_info:
        copy_atomically(tmp_path / "nope.jpg", tmp_path / "out" / "nope.jpg")
    assert exc_info.value.kind == "source_missing"


def test_size_mismatch_removes_temp(tmp_path: Path) -> None:
    src = tmp_path / "src.jpg"
    src.write_bytes(b"0123456789")
    dst = tmp_path / "out" / "src.jpg"

    with pytest.raises(SizeMismatchError) as exc_info:
        copy_atomically(src, dst, file_ops=TruncatingFileOperations())

    assert exc_info.value.expected == 10
    assert exc_info.value.actual == 5
    assert exc_info.value.kind == "size_mismatch"
    assert not dst.exists()
    assert _temp_files(dst.parent) == []


def test_rename_failure_removes_temp(tmp_path: Path) -> None:
    src = tmp_path / "src.jpg"
    src.write_bytes(b"data")
    dst = tmp_path / "out" / "src.jpg"

    with pytest.raises(CopyIOError) as exc_info:
        copy_atomically(src, dst, file_ops=FailingMoveFileOperations())

    assert exc_info.value.kind == "io_error"
    assert "disk on fire" in exc_info.value.reason
    assert not dst.exists()
    assert _temp_files(dst.parent) == []


def test_copy_failure_removes_partial_temp(tmp_path: Path) -> None:
    src = tmp_path / "src.jpg"
    src.write_bytes(b"data")
    dst = tmp_path / "out" / "src.jpg"

    with pytest.raises(CopyIOError):
        copy_atomically(src, dst, file_ops=FailingCopyFileOperations())

    assert list(dst.parent.iterdir()) == []


def test_copy_never_replaces_existing_destination(tmp_path: Path) -> None:
    src = tmp_path / "src.jpg"
    src.write_bytes(b"new")
    dst = tmp_path / "dst.jpg"
    dst.write_bytes(b"old")

    with pytest.raises(CopyIOError):
        copy_atomically(src, dst)

    assert dst.read_bytes() == b"old"
    assert _temp_files(tmp_path) == []


def test_atomic_write_bytes_replaces(tmp_path: Path) -> None:
    target = tmp_path / "reg" / "index.json"
    atomic_write_bytes(target, b"one")
    atomic_write_bytes(target, b"two")

    assert target.read_bytes() == b"two"
    assert _temp_files(target.parent) == []

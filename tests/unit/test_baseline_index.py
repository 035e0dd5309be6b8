"""Tests for the baseline index model, queries and persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mediahub.core.errors import (
    IndexDecodingError,
    IndexFileNotFoundError,
    InvalidIndexJSONError,
    PathOutsideLibraryRootError,
    UnsupportedIndexVersionError,
)
from mediahub.index.store import (
    IndexAbsent,
    IndexInvalid,
    IndexValid,
    load_index,
    try_load_baseline_index,
    write_index,
)
from mediahub.index.types import BaselineIndex, IndexEntry
from mediahub.library.layout import index_file_path, is_temp_file

H1 = "sha256:" + "1" * 64
H2 = "sha256:" + "2" * 64


def _entry(path: str, size: int = 10, h: str | None = None) -> IndexEntry:
    return IndexEntry(path=path, size=size, mtime="2024-01-01T00:00:00Z", hash=h)


class TestModel:
    def test_version_follows_hash_presence(self) -> None:
        plain = BaselineIndex(entries=(_entry("a.jpg"), _entry("b.jpg")))
        assert plain.version == "1.0"

        hashed = plain.updating([_entry("b.jpg", h=H1)])
        assert hashed.version == "1.1"

    def test_updating_without_hashes_does_not_downgrade(self) -> None:
        idx = BaselineIndex(entries=(_entry("a.jpg", h=H1),))
        assert idx.updating([_entry("z.jpg")]).version == "1.1"

    def test_entries_sorted_and_unique(self) -> None:
        idx = BaselineIndex(entries=(_entry("c.jpg"), _entry("a.jpg"), _entry("a.jpg", size=99)))
        assert [e.path for e in idx.entries] == ["a.jpg", "c.jpg"]
        assert idx.entry_count == 2
        assert idx.entry_for("a.jpg").size == 99

    def test_updating_merges_and_keeps_created(self) -> None:
        idx = BaselineIndex(entries=(_entry("b.jpg"),), created="2020-01-01T00:00:00Z")
        updated = idx.updating([_entry("a.jpg"), _entry("b.jpg", size=5)])

        assert [e.path for e in updated.entries] == ["a.jpg", "b.jpg"]
        assert updated.entry_for("b.jpg").size == 5
        assert updated.created == "2020-01-01T00:00:00Z"
        assert idx.entry_count == 1

    def test_hash_queries(self) -> None:
        idx = BaselineIndex(
            entries=(
                _entry("b.jpg", h=H1),
                _entry("a.jpg", h=H1),
                _entry("c.jpg", h=H2),
                _entry("d.jpg"),
            )
        )
        assert idx.hash_to_any_path() == {H1: "a.jpg", H2: "c.jpg"}
        assert idx.hash_set() == {H1, H2}
        assert idx.hash_entry_count() == 3
        assert idx.hash_coverage() == 0.75

    def test_empty_index_coverage_is_zero(self) -> None:
        assert BaselineIndex().hash_coverage() == 0.0

    def test_entry_dict_omits_missing_hash(self) -> None:
        assert "hash" not in _entry("a.jpg").to_dict()
        assert _entry("a.jpg", h=H1).to_dict()["hash"] == H1


class TestPersistence:
    def test_round_trip_sorts_and_leaves_no_temp_files(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        idx = BaselineIndex(entries=(_entry("z.jpg", h=H2), _entry("a.jpg")))

        write_index(idx, path, library_root)
        write_index(idx, path, library_root)
        loaded = load_index(path)

        assert loaded.entries == idx.entries
        assert loaded.version == "1.1"
        assert loaded.created == idx.created
        assert [p.name for p in path.parent.iterdir() if is_temp_file(p.name)] == []

    def test_v10_output_has_no_hash_key(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        write_index(BaselineIndex(entries=(_entry("a.jpg"),)), path, library_root)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["version"] == "1.0"
        assert raw["entryCount"] == 1
        assert "hash" not in raw["entries"][0]
        assert set(raw) == {"version", "created", "lastUpdated", "entryCount", "entries"}

    def test_write_is_deterministic(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        idx = BaselineIndex(
            entries=(_entry("b.jpg"), _entry("a.jpg")),
            created="2024-01-01T00:00:00Z",
            last_updated="2024-01-02T00:00:00Z",
        )
        write_index(idx, path, library_root)
        first = path.read_bytes()
        write_index(idx, path, library_root)
        assert path.read_bytes() == first

    def test_writer_creates_registry_dir(self, tmp_path: Path) -> None:
        root = tmp_path / "fresh"
        root.mkdir()
        write_index(BaselineIndex(), index_file_path(root), root)
        assert index_file_path(root).exists()

    def test_reader_sorts_unsorted_file(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        path.write_text(
            json.dumps(
                {
                    "version": "1.0",
                    "created": "2024-01-01T00:00:00Z",
                    "lastUpdated": "2024-01-01T00:00:00Z",
                    "entryCount": 2,
                    "entries": [
                        {"path": "b.jpg", "size": 1, "mtime": "2024-01-01T00:00:00Z"},
                        {"path": "a.jpg", "size": 2, "mtime": "2024-01-01T00:00:00Z"},
                    ],
                }
            ),
            encoding="utf-8",
        )
        assert [e.path for e in load_index(path).entries] == ["a.jpg", "b.jpg"]

    def test_write_outside_root_rejected(self, library_root: Path, tmp_path: Path) -> None:
        with pytest.raises(PathOutsideLibraryRootError):
            write_index(BaselineIndex(), tmp_path / "elsewhere" / "index.json", library_root)

    def test_load_missing(self, library_root: Path) -> None:
        with pytest.raises(IndexFileNotFoundError):
            load_index(index_file_path(library_root))

    def test_load_invalid_json(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidIndexJSONError):
            load_index(path)

    def test_load_bad_structure(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        path.write_text(json.dumps({"version": "1.0", "entries": "nope"}), encoding="utf-8")
        with pytest.raises(IndexDecodingError):
            load_index(path)

    def test_load_unsupported_version(self, library_root: Path) -> None:
        path = index_file_path(library_root)
        path.write_text(json.dumps({"version": "9.9", "entries": []}), encoding="utf-8")
        with pytest.raises(UnsupportedIndexVersionError) as exc_info:
            load_index(path)
        assert exc_info.value.version == "9.9"
        assert "9.9" in str(exc_info.value)


class TestLoadState:
    def test_absent(self, library_root: Path) -> None:
        assert try_load_baseline_index(library_root) == IndexAbsent()

    def test_valid(self, library_root: Path) -> None:
        write_index(BaselineIndex(entries=(_entry("a.jpg"),)), index_file_path(library_root), library_root)
        state = try_load_baseline_index(library_root)
        assert isinstance(state, IndexValid)
        assert state.index.entry_count == 1

    def test_corrupted(self, library_root: Path) -> None:
        index_file_path(library_root).write_text("garbage", encoding="utf-8")
        assert try_load_baseline_index(library_root) == IndexInvalid("corrupted")

    def test_unsupported_version(self, library_root: Path) -> None:
        index_file_path(library_root).write_text(
            json.dumps({"version": "2.0", "entries": []}), encoding="utf-8"
        )
        assert try_load_baseline_index(library_root) == IndexInvalid("unsupported_version: 2.0")

    def test_never_creates_index(self, library_root: Path) -> None:
        try_load_baseline_index(library_root)
        assert not index_file_path(library_root).exists()

"""Tests for hash coverage maintenance."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediahub.core.config import ConfigResolver
from mediahub.core.errors import (
    IndexInvalidError,
    IndexNotFoundError,
    LibraryNotFoundError,
    OperationCancelledError,
)
from mediahub.core.progress import CancellationToken, ProgressUpdate
from mediahub.hash_coverage import (
    apply_computed_hashes_and_write_index,
    compute_missing_hashes,
    select_candidates,
)
from mediahub.index.store import load_index, write_index
from mediahub.index.types import BaselineIndex, IndexEntry
from mediahub.library.hashing import compute_content_hash
from mediahub.library.layout import index_file_path

EXISTING_HASH = "sha256:" + "ab" * 32


def _entry(path: str, hash: str | None = None) -> IndexEntry:
    return IndexEntry(path=path, size=4, mtime="2023-05-15T12:00:00Z", hash=hash)


@pytest.fixture
def indexed_library(library_root: Path) -> Path:
    for rel in ("2023/05/c.jpg", "2023/05/a.jpg", "2023/06/b.jpg", "2023/07/hashed.jpg"):
        f = library_root / rel
        f.parent.mkdir(parents=True, exist_ok=True)
        f.write_bytes(rel.encode("utf-8"))
    index = BaselineIndex(
        entries=(
            _entry("2023/05/c.jpg"),
            _entry("2023/05/a.jpg"),
            _entry("2023/06/b.jpg"),
            _entry("2023/07/hashed.jpg", EXISTING_HASH),
            _entry("2023/08/gone.jpg"),
        ),
        created="2024-01-01T00:00:00Z",
    )
    write_index(index, index_file_path(library_root), library_root)
    return library_root


class TestSelectCandidates:
    def test_sorted_existing_files_only(self, indexed_library: Path) -> None:
        selection = select_candidates(indexed_library)

        assert [e.path for e in selection.candidates] == [
            "2023/05/a.jpg",
            "2023/05/c.jpg",
            "2023/06/b.jpg",
        ]
        stats = selection.statistics
        assert stats.total_entries == 5
        assert stats.entries_with_hash == 1
        assert stats.entries_missing_hash == 4
        assert stats.missing_files_count == 1
        assert stats.candidate_count == 3

    def test_limit(self, indexed_library: Path) -> None:
        selection = select_candidates(indexed_library, limit=2)

        assert [e.path for e in selection.candidates] == ["2023/05/a.jpg", "2023/05/c.jpg"]
        assert selection.statistics.candidate_count == 2

    def test_missing_library(self, tmp_path: Path) -> None:
        with pytest.raises(LibraryNotFoundError):
            select_candidates(tmp_path / "nowhere")

    def test_missing_index(self, library_root: Path) -> None:
        with pytest.raises(IndexNotFoundError):
            select_candidates(library_root)

    def test_invalid_index(self, library_root: Path) -> None:
        index_file_path(library_root).write_text('{"version": "9.9"}', encoding="utf-8")
        with pytest.raises(IndexInvalidError, match="unsupported version: 9.9"):
            select_candidates(library_root)


class TestCompute:
    def test_computes_without_writing(self, indexed_library: Path) -> None:
        before = index_file_path(indexed_library).read_bytes()
        updates: list[ProgressUpdate] = []

        result = compute_missing_hashes(indexed_library, progress=updates.append, progress_interval=0)

        assert index_file_path(indexed_library).read_bytes() == before
        assert result.hashes_computed == 3
        assert result.hash_failures == 0
        assert result.computed_hashes["2023/05/a.jpg"] == compute_content_hash(
            indexed_library / "2023/05/a.jpg", indexed_library
        )
        assert updates[-1] == ProgressUpdate(stage="complete", current=3, total=3)
        assert [u.current for u in updates if u.stage == "computing"] == [1, 2, 3]

    def test_failures_are_counted(self, indexed_library: Path) -> None:
        target = indexed_library / "2023/06/b.jpg"
        target.unlink()
        target.mkdir()

        updates: list[ProgressUpdate] = []

        result = compute_missing_hashes(indexed_library, progress=updates.append)

        assert result.hashes_computed == 2
        assert result.hash_failures == 1
        assert updates[-1] == ProgressUpdate(stage="complete", current=3, total=3)
        assert "not a regular file" in result.failures["2023/06/b.jpg"]
        assert "2023/06/b.jpg" not in result.computed_hashes

    def test_settings_from_config(self, indexed_library: Path, tmp_path: Path) -> None:
        config = ConfigResolver(
            cli_args={"maintenance": {"progress_interval": 0}, "hashing": {"chunk_size": 3}},
            user_config_path=tmp_path / "missing-user.yaml",
            system_config_path=tmp_path / "missing-system.yaml",
        )
        updates: list[ProgressUpdate] = []

        result = compute_missing_hashes(indexed_library, progress=updates.append, config=config)

        assert [u.current for u in updates if u.stage == "computing"] == [1, 2, 3]
        assert result.computed_hashes["2023/05/a.jpg"] == compute_content_hash(
            indexed_library / "2023/05/a.jpg", indexed_library
        )

    def test_cancellation_after_current_file(self, indexed_library: Path) -> None:
        token = CancellationToken()
        seen: list[ProgressUpdate] = []

        def on_progress(update: ProgressUpdate) -> None:
            seen.append(update)
            token.cancel()

        with pytest.raises(OperationCancelledError):
            compute_missing_hashes(
                indexed_library, progress=on_progress, progress_interval=0, cancel=token
            )
        assert [u.current for u in seen] == [1]


class TestApply:
    def test_applies_and_round_trips(self, indexed_library: Path) -> None:
        computed = compute_missing_hashes(indexed_library).computed_hashes

        result = apply_computed_hashes_and_write_index(indexed_library, computed)

        assert result.index_updated is True
        assert result.entries_updated == 3
        assert result.statistics_before.entries_with_hash == 1
        assert result.statistics_after.entries_with_hash == 4

        index = load_index(index_file_path(indexed_library))
        assert index.version == "1.1"
        assert index.entry_for("2023/05/a.jpg").hash == computed["2023/05/a.jpg"]
        assert index.entry_for("2023/08/gone.jpg").hash is None
        assert index.created == "2024-01-01T00:00:00Z"

    def test_never_overwrites_existing_hash(self, indexed_library: Path) -> None:
        other = "sha256:" + "cd" * 32
        before = index_file_path(indexed_library).read_bytes()

        result = apply_computed_hashes_and_write_index(
            indexed_library, {"2023/07/hashed.jpg": other}
        )

        assert result.index_updated is False
        assert result.entries_updated == 0
        assert index_file_path(indexed_library).read_bytes() == before

    def test_ignores_malformed_and_unknown(self, indexed_library: Path) -> None:
        result = apply_computed_hashes_and_write_index(
            indexed_library,
            {"2023/05/a.jpg": "md5:nope", "2099/01/unknown.jpg": "sha256:" + "00" * 32},
        )

        assert result.index_updated is False

    def test_second_pass_has_nothing_to_do(self, indexed_library: Path) -> None:
        computed = compute_missing_hashes(indexed_library).computed_hashes
        apply_computed_hashes_and_write_index(indexed_library, computed)

        assert select_candidates(indexed_library).candidates == ()
        again = compute_missing_hashes(indexed_library)
        assert again.hashes_computed == 0

    def test_missing_index(self, library_root: Path) -> None:
        with pytest.raises(IndexNotFoundError):
            apply_computed_hashes_and_write_index(library_root, {})

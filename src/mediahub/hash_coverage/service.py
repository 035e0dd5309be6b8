"""Incremental hash coverage maintenance.

Backfills ``hash`` on index entries that lack one. Selection and computation
are read-only; only ``apply_computed_hashes_and_write_index`` writes, and it
never replaces a hash that is already present.
"""

from __future__ import annotations

from pathlib import Path

from mediahub.core.config import ConfigResolver
from mediahub.core.diagnostics import observe_operation
from mediahub.core.errors import (
    BaselineIndexError,
    ContentHashError,
    IndexDecodingError,
    IndexFileNotFoundError,
    IndexInvalidError,
    IndexLoadError,
    IndexNotFoundError,
    InvalidIndexJSONError,
    LibraryNotFoundError,
    UnsupportedIndexVersionError,
)
from mediahub.core.lock import hold_lock
from mediahub.core.logging import get_logger
from mediahub.core.progress import (
    CancellationToken,
    ProgressCallback,
    ProgressThrottle,
    ProgressUpdate,
    check_cancelled,
)
from mediahub.index.store import load_index, write_index
from mediahub.index.types import BaselineIndex
from mediahub.library.hashing import DEFAULT_CHUNK_SIZE, compute_content_hash, is_valid_hash
from mediahub.library.layout import index_file_path, lock_file_path
from mediahub.library.paths import resolve_relative

from .types import (
    HashComputationResult,
    HashCoverageCandidates,
    HashCoverageStatistics,
    IndexUpdateResult,
)

_logger = get_logger(__name__)


def _load_library_index(library_root: Path) -> BaselineIndex:
    if not library_root.exists():
        raise LibraryNotFoundError(str(library_root))
    path = index_file_path(library_root)
    if not path.exists():
        raise IndexNotFoundError(str(path))
    try:
        return load_index(path)
    except IndexFileNotFoundError:
        raise IndexNotFoundError(str(path)) from None
    except UnsupportedIndexVersionError as e:
        raise IndexInvalidError(f"unsupported version: {e.version}") from e
    except (InvalidIndexJSONError, IndexDecodingError) as e:
        raise IndexInvalidError("corrupted or invalid JSON") from e
    except BaselineIndexError as e:
        raise IndexLoadError(e.message) from e


def _statistics(
    index: BaselineIndex, *, candidate_count: int, missing_files_count: int
) -> HashCoverageStatistics:
    with_hash = index.hash_entry_count()
    return HashCoverageStatistics(
        total_entries=index.entry_count,
        entries_with_hash=with_hash,
        entries_missing_hash=index.entry_count - with_hash,
        candidate_count=candidate_count,
        missing_files_count=missing_files_count,
        hash_coverage=index.hash_coverage(),
    )


def select_candidates(library_root: Path, limit: int | None = None) -> HashCoverageCandidates:
    """Index entries without a hash whose file still exists, in path order.

    ``limit`` (when > 0) keeps the first N after sorting.

    Raises:
        LibraryNotFoundError
        IndexNotFoundError
        IndexInvalidError
        IndexLoadError
    """
    index = _load_library_index(library_root)

    candidates = []
    missing = 0
    for entry in index.entries:
        if entry.hash is not None:
            continue
        if resolve_relative(library_root, entry.path).exists():
            candidates.append(entry)
        else:
            missing += 1

    candidates.sort(key=lambda e: e.path)
    if limit is not None and limit > 0:
        candidates = candidates[:limit]

    return HashCoverageCandidates(
        statistics=_statistics(index, candidate_count=len(candidates), missing_files_count=missing),
        candidates=tuple(candidates),
    )


def compute_missing_hashes(
    library_root: Path,
    limit: int | None = None,
    *,
    progress: ProgressCallback | None = None,
    progress_interval: float | None = None,
    cancel: CancellationToken | None = None,
    chunk_size: int | None = None,
    config: ConfigResolver | None = None,
) -> HashComputationResult:
    """Hash every candidate; failures are counted, never raised. Writes nothing.

    ``progress_interval`` and ``chunk_size`` fall back to ``config`` when given.

    Raises:
        OperationCancelledError: checked after each file.
        ConfigError
    """
    if progress_interval is None:
        progress_interval = config.resolve_progress_interval() if config is not None else 1.0
    if chunk_size is None:
        chunk_size = config.resolve_chunk_size() if config is not None else DEFAULT_CHUNK_SIZE
    with observe_operation(
        component="hash_coverage",
        operation="hash_coverage.compute",
        base={"path": str(library_root), "limit": limit},
    ) as summary:
        selection = select_candidates(library_root, limit)
        throttle = ProgressThrottle(progress, interval=progress_interval)
        total = len(selection.candidates)

        computed: dict[str, str] = {}
        failures: dict[str, str] = {}
        for i, entry in enumerate(selection.candidates, start=1):
            try:
                computed[entry.path] = compute_content_hash(
                    resolve_relative(library_root, entry.path),
                    library_root,
                    chunk_size=chunk_size,
                )
            except ContentHashError as e:
                failures[entry.path] = e.message
                _logger.warning(f"hash failed path={entry.path!r}: {e.message}")

            throttle.update(ProgressUpdate(stage="computing", current=i, total=total))
            check_cancelled(cancel)

        throttle.final(ProgressUpdate(stage="complete", current=total, total=total))

        summary.update({"hashes_computed": len(computed), "hash_failures": len(failures)})
        return HashComputationResult(
            statistics=selection.statistics,
            computed_hashes=computed,
            hashes_computed=len(computed),
            hash_failures=len(failures),
            failures=failures,
        )


def apply_computed_hashes_and_write_index(
    library_root: Path, computed_hashes: dict[str, str]
) -> IndexUpdateResult:
    """Merge ``computed_hashes`` (path -> hash) into entries that have no hash.

    The index is rewritten only when at least one entry changed.

    Raises:
        LibraryNotFoundError
        IndexNotFoundError
        IndexInvalidError
        IndexLoadError
        LibraryLockedError
        IndexWriteError
    """
    with observe_operation(
        component="hash_coverage",
        operation="hash_coverage.apply",
        base={"path": str(library_root)},
    ) as summary:
        if not library_root.exists():
            raise LibraryNotFoundError(str(library_root))
        with hold_lock(lock_file_path(library_root)):
            index = _load_library_index(library_root)
            before = _statistics(index, candidate_count=0, missing_files_count=0)

            updated_entries = []
            changed = 0
            for entry in index.entries:
                new_hash = computed_hashes.get(entry.path)
                if new_hash is not None and not is_valid_hash(new_hash):
                    _logger.warning(f"ignoring malformed hash for {entry.path!r}")
                    new_hash = None
                if entry.hash is None and new_hash is not None:
                    updated_entries.append(entry.with_hash(new_hash))
                    changed += 1
                else:
                    updated_entries.append(entry)

            if changed == 0:
                summary.update({"entries_updated": 0, "index_updated": False})
                return IndexUpdateResult(
                    statistics_before=before,
                    statistics_after=before,
                    entries_updated=0,
                    index_updated=False,
                )

            new_index = index.with_entries(updated_entries)
            write_index(new_index, index_file_path(library_root), library_root)
            after = _statistics(new_index, candidate_count=0, missing_files_count=0)

        summary.update({"entries_updated": changed, "index_updated": True})
        return IndexUpdateResult(
            statistics_before=before,
            statistics_after=after,
            entries_updated=changed,
            index_updated=True,
        )

"""Import executor.

Places selected detection candidates into the library under ``YYYY/MM/``.
Dry-run and real runs share every decision; the ``dry_run`` flag only gates
the side effects (copy, known-items update, index write, result file).
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from mediahub.core.config import ConfigResolver
from mediahub.core.diagnostics import observe_operation
from mediahub.core.errors import (
    AtomicCopyError,
    BaselineIndexError,
    ContentHashError,
    InvalidDetectionResultError,
    MediaHubError,
    NoItemsSelectedError,
    OperationCancelledError,
)
from mediahub.core.lock import hold_lock
from mediahub.core.logging import get_logger
from mediahub.core.progress import CancellationToken
from mediahub.core.timestamps import format_timestamp, now_timestamp, timestamp_from_epoch
from mediahub.detection.types import DetectionResult
from mediahub.index.store import IndexValid, try_load_baseline_index, write_index
from mediahub.index.types import BaselineIndex, IndexEntry
from mediahub.library.atomic_copy import copy_atomically
from mediahub.library.collisions import (
    Fail,
    Proceed,
    Skip,
    detect_collision,
    resolve_collision,
)
from mediahub.library.file_ops import DefaultFileOperations, FileOperations
from mediahub.library.hashing import DEFAULT_CHUNK_SIZE, compute_content_hash
from mediahub.library.layout import index_file_path, lock_file_path
from mediahub.sources.known_items import record_imported_items
from mediahub.sources.types import CandidateMediaItem

from .destinations import map_destination
from .storage import write_import_result
from .timestamps import extract_timestamp
from .types import (
    INDEX_SKIP_DRY_RUN,
    INDEX_SKIP_MISSING,
    ImportItemResult,
    ImportItemStatus,
    ImportOptions,
    ImportResult,
    ImportSummary,
    IndexUpdateMetadata,
)

_logger = get_logger(__name__)

CANCELLED_REASON = "Import cancelled"

ConfirmCallback = Callable[[Sequence[CandidateMediaItem]], bool]


@dataclass
class _Placed:
    source_path: str
    destination: Path
    relative_path: str


def _validate_selection(
    detection_result: DetectionResult, selected: Sequence[CandidateMediaItem]
) -> list[CandidateMediaItem]:
    if not detection_result.is_valid():
        raise InvalidDetectionResultError("summary does not match candidates")
    if not selected:
        raise NoItemsSelectedError()
    known_paths = {c.item.path for c in detection_result.candidates}
    for item in selected:
        if item.path not in known_paths:
            raise InvalidDetectionResultError(f"selected item is not a candidate: {item.path}")
    return sorted(selected, key=lambda i: i.path)


@contextlib.contextmanager
def _writer_lock(library_root: Path, dry_run: bool) -> Iterator[None]:
    if dry_run:
        yield
        return
    with hold_lock(lock_file_path(library_root)):
        yield


def _process_item(
    item: CandidateMediaItem,
    library_root: Path,
    options: ImportOptions,
    claimed: set[Path],
    ops: FileOperations,
    dry_run: bool,
) -> tuple[ImportItemResult, _Placed | None]:
    try:
        ts = extract_timestamp(Path(item.path), file_ops=ops)
    except OSError as e:
        return (
            ImportItemResult(
                source_path=item.path,
                status=ImportItemStatus.FAILED,
                reason=f"Timestamp extraction failed: {e}",
            ),
            None,
        )

    stamp = {"timestamp_used": format_timestamp(ts.date), "timestamp_source": ts.source.value}
    mapping = map_destination(item, ts.date, library_root)

    detection = detect_collision(mapping.destination, claimed=claimed, file_ops=ops)
    resolution = resolve_collision(
        detection, options.collision_policy, mapping.destination, claimed=claimed, file_ops=ops
    )

    if isinstance(resolution, Skip):
        return (
            ImportItemResult(
                source_path=item.path,
                status=ImportItemStatus.SKIPPED,
                destination_path=mapping.relative_path,
                reason=resolution.reason,
                **stamp,
            ),
            None,
        )
    if isinstance(resolution, Fail):
        return (
            ImportItemResult(
                source_path=item.path,
                status=ImportItemStatus.FAILED,
                destination_path=mapping.relative_path,
                reason=f"Collision error: {resolution.error.message}",
                **stamp,
            ),
            None,
        )

    assert isinstance(resolution, Proceed)
    destination = resolution.destination
    claimed.add(destination)
    relative = f"{mapping.year_month_path}/{destination.name}"

    if not dry_run:
        try:
            copy_atomically(Path(item.path), destination, file_ops=ops)
        except AtomicCopyError as e:
            _logger.warning(f"import failed source={item.path!r}: {e.message}")
            return (
                ImportItemResult(
                    source_path=item.path,
                    status=ImportItemStatus.FAILED,
                    destination_path=relative,
                    reason=f"File copy failed: {e.message}",
                    **stamp,
                ),
                None,
            )

    _logger.verbose(f"imported {item.path} -> {relative}" + (" (dry run)" if dry_run else ""))
    return (
        ImportItemResult(
            source_path=item.path,
            status=ImportItemStatus.IMPORTED,
            destination_path=relative,
            **stamp,
        ),
        _Placed(source_path=item.path, destination=destination, relative_path=relative),
    )


def _index_entry_for(
    placed: _Placed, library_root: Path, ops: FileOperations, chunk_size: int
) -> IndexEntry | None:
    try:
        st = ops.stat(placed.destination)
    except OSError as e:
        _logger.warning(f"cannot stat imported file {placed.relative_path!r}: {e}")
        return None
    try:
        digest: str | None = compute_content_hash(
            placed.destination, library_root, chunk_size=chunk_size
        )
    except ContentHashError as e:
        _logger.warning(f"hash failed for imported file {placed.relative_path!r}: {e.message}")
        digest = None
    return IndexEntry(
        path=placed.relative_path,
        size=st.size,
        mtime=timestamp_from_epoch(st.mtime),
        hash=digest,
    )


def execute_import(
    detection_result: DetectionResult,
    selected_items: Sequence[CandidateMediaItem],
    library_root: Path,
    library_id: str,
    *,
    options: ImportOptions | None = None,
    dry_run: bool = False,
    file_ops: FileOperations | None = None,
    cancel: CancellationToken | None = None,
    confirm: ConfirmCallback | None = None,
    assume_yes: bool = False,
    chunk_size: int | None = None,
    config: ConfigResolver | None = None,
) -> ImportResult:
    """Import ``selected_items`` into the library.

    Per-item failures are recorded in the result and never abort the batch.
    Cancellation marks the remaining items skipped and still completes the
    bookkeeping for items already placed. A real run may be gated by
    ``confirm`` unless ``assume_yes`` is set. With ``config``, the collision
    policy and hash chunk size fall back to the resolved settings when not
    passed explicitly.

    Raises:
        InvalidDetectionResultError
        NoItemsSelectedError
        OperationCancelledError: ``confirm`` declined the run.
        LibraryLockedError
        KnownItemsUpdateError
        ImportStorageError
        ConfigError
    """
    opts = options or (ImportOptions.from_config(config) if config is not None else ImportOptions())
    if chunk_size is None:
        chunk_size = config.resolve_chunk_size() if config is not None else DEFAULT_CHUNK_SIZE
    ops = file_ops or DefaultFileOperations()
    items = _validate_selection(detection_result, selected_items)

    if not dry_run and not assume_yes and confirm is not None and not confirm(items):
        raise OperationCancelledError()

    with (
        observe_operation(
            component="import",
            operation="import.run",
            base={"source_id": detection_result.source_id, "dry_run": dry_run},
        ) as summary,
        _writer_lock(library_root, dry_run),
    ):
        imported_at = now_timestamp()
        index_state = try_load_baseline_index(library_root)
        base_index: BaselineIndex | None = (
            index_state.index if isinstance(index_state, IndexValid) else None
        )

        results: list[ImportItemResult] = []
        placed: list[_Placed] = []
        claimed: set[Path] = set()
        for item in items:
            if cancel is not None and cancel.is_cancelled():
                results.append(
                    ImportItemResult(
                        source_path=item.path,
                        status=ImportItemStatus.SKIPPED,
                        reason=CANCELLED_REASON,
                    )
                )
                continue
            try:
                result, done = _process_item(item, library_root, opts, claimed, ops, dry_run)
            except MediaHubError as e:
                _logger.warning(f"import failed source={item.path!r}: {e.message}")
                result, done = (
                    ImportItemResult(
                        source_path=item.path,
                        status=ImportItemStatus.FAILED,
                        reason=f"Import failed: {e.message}",
                    ),
                    None,
                )
            results.append(result)
            if done is not None:
                placed.append(done)

        index_update_attempted = False
        index_updated = False
        skipped_reason: str | None = None
        index_metadata: IndexUpdateMetadata | None = None

        if base_index is None:
            skipped_reason = INDEX_SKIP_MISSING
        elif dry_run:
            skipped_reason = INDEX_SKIP_DRY_RUN

        if not dry_run:
            if placed:
                record_imported_items(
                    library_root,
                    detection_result.source_id,
                    [(p.source_path, p.relative_path) for p in placed],
                    imported_at=imported_at,
                )
            if base_index is not None and placed:
                index_update_attempted = True
                staged = [
                    entry
                    for p in placed
                    if (entry := _index_entry_for(p, library_root, ops, chunk_size)) is not None
                ]
                updated = base_index.updating(staged)
                try:
                    write_index(updated, index_file_path(library_root), library_root)
                except BaselineIndexError as e:
                    _logger.warning(f"index update failed: {e}")
                else:
                    index_updated = True
                    index_metadata = IndexUpdateMetadata(
                        version=updated.version, entry_count=updated.entry_count
                    )

        import_result = ImportResult(
            source_id=detection_result.source_id,
            library_id=library_id,
            options=opts,
            items=tuple(results),
            summary=ImportSummary.from_items(results),
            dry_run=dry_run,
            imported_at=imported_at,
            index_update_attempted=index_update_attempted,
            index_updated=index_updated,
            index_update_skipped_reason=skipped_reason,
            index_metadata=index_metadata,
        )
        if not dry_run:
            write_import_result(import_result, library_root)

        summary.update(
            {
                "total": import_result.summary.total,
                "imported": import_result.summary.imported,
                "skipped": import_result.summary.skipped,
                "failed": import_result.summary.failed,
                "index_updated": index_updated,
            }
        )
        return import_result

"""Detection orchestrator: scan a source and classify candidates as new or known.

Detection never writes to the source. Its only writes are the detection
result file and the source's ``lastDetectedAt`` in the associations file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from mediahub.core.diagnostics import observe_operation
from mediahub.core.errors import DetectionStorageError, KnownItemsUpdateError
from mediahub.core.logging import get_logger
from mediahub.core.progress import CancellationToken, check_cancelled
from mediahub.core.timestamps import now_timestamp
from mediahub.index.store import IndexInvalid, IndexValid, try_load_baseline_index
from mediahub.sources.known_items import known_source_paths
from mediahub.sources.registry import update_last_detected_at
from mediahub.sources.scanning import scan_library_contents, scan_source
from mediahub.sources.types import CandidateMediaItem, Source

from .storage import write_detection_result
from .types import (
    CandidateItemResult,
    CandidateStatus,
    DetectionResult,
    DetectionSummary,
    ExclusionReason,
    IndexMetadata,
)

_logger = get_logger(__name__)

FALLBACK_INDEX_MISSING = "index_missing"


@dataclass(frozen=True)
class DetectionRun:
    result: DetectionResult
    source: Source
    result_path: Path


def _is_known(item: CandidateMediaItem, known: set[str]) -> bool:
    if item.path in known:
        return True
    return os.path.realpath(item.path) in known


def classify_candidates(
    items: list[CandidateMediaItem],
    known: set[str],
    *,
    cancel: CancellationToken | None = None,
) -> list[CandidateItemResult]:
    out: list[CandidateItemResult] = []
    for item in sorted(items, key=lambda i: i.path):
        check_cancelled(cancel)
        if _is_known(item, known):
            out.append(
                CandidateItemResult(
                    item=item,
                    status=CandidateStatus.KNOWN,
                    exclusion_reason=ExclusionReason.ALREADY_KNOWN,
                )
            )
        else:
            out.append(CandidateItemResult(item=item, status=CandidateStatus.NEW))
    return out


def execute_detection(
    source: Source,
    library_root: Path,
    library_id: str,
    *,
    cancel: CancellationToken | None = None,
) -> DetectionRun:
    """Run detection for ``source`` against the library at ``library_root``.

    Raises:
        SourceInaccessibleError
        DetectionStorageError
        OperationCancelledError
    """
    with observe_operation(
        component="detection",
        operation="detection.run",
        base={"source_id": source.source_id, "path": source.path},
    ) as summary:
        items = scan_source(source, cancel=cancel)

        index_state = try_load_baseline_index(library_root)
        index_metadata: IndexMetadata | None = None
        fallback_reason: str | None = None
        if isinstance(index_state, IndexValid):
            idx = index_state.index
            index_metadata = IndexMetadata(
                version=idx.version, entry_count=idx.entry_count, last_updated=idx.last_updated
            )
        elif isinstance(index_state, IndexInvalid):
            fallback_reason = index_state.reason
        else:
            fallback_reason = FALLBACK_INDEX_MISSING

        known = scan_library_contents(library_root, cancel=cancel)
        try:
            known |= known_source_paths(library_root, source.source_id)
        except KnownItemsUpdateError as e:
            _logger.warning(f"known items unavailable, treating as empty: {e}")

        candidates = classify_candidates(items, known, cancel=cancel)
        result = DetectionResult(
            source_id=source.source_id,
            library_id=library_id,
            candidates=tuple(candidates),
            summary=DetectionSummary.from_candidates(candidates),
            detected_at=now_timestamp(),
            index_used=index_metadata is not None,
            index_fallback_reason=fallback_reason,
            index_metadata=index_metadata,
        )
        path = write_detection_result(result, library_root)

        try:
            update_last_detected_at(library_root, source.source_id, result.detected_at)
        except (OSError, ValueError) as e:
            raise DetectionStorageError(str(library_root), f"source update failed: {e}") from e

        summary.update(
            {
                "total": result.summary.total_scanned,
                "new_items": result.summary.new_items,
                "known_items": result.summary.known_items,
            }
        )
        return DetectionRun(
            result=result,
            source=source.with_last_detected_at(result.detected_at),
            result_path=path,
        )

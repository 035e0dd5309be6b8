"""Detection result persistence.

One JSON file per run under ``.mediahub/sources/<sourceId>/detections/``.
Files are written once and never modified.
"""

from __future__ import annotations

import json
from pathlib import Path

from mediahub.core.errors import DetectionStorageError
from mediahub.core.logging import get_logger
from mediahub.core.timestamps import parse_timestamp
from mediahub.library.atomic_copy import atomic_write_json
from mediahub.library.layout import detections_dir, unique_result_path

from .types import DetectionComparison, DetectionResult

_logger = get_logger(__name__)


def write_detection_result(result: DetectionResult, library_root: Path) -> Path:
    """Persist ``result``; returns the file written.

    Raises:
        DetectionStorageError: the result is inconsistent or could not be written.
    """
    directory = detections_dir(library_root, result.source_id)
    if not result.is_valid():
        raise DetectionStorageError(str(directory), "detection result is inconsistent")
    path = unique_result_path(directory, result.detected_at)
    try:
        atomic_write_json(path, result.to_dict())
    except OSError as e:
        raise DetectionStorageError(str(path), str(e)) from e
    return path


def read_detection_result(path: Path) -> DetectionResult:
    """Raises DetectionStorageError for unreadable, malformed or inconsistent files."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        result = DetectionResult.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise DetectionStorageError(str(path), f"{type(e).__name__}: {e}") from e
    if not result.is_valid():
        raise DetectionStorageError(str(path), "detection result is inconsistent")
    return result


def retrieve_all(library_root: Path, source_id: str) -> list[DetectionResult]:
    """All readable results for a source, newest first. Unreadable files are skipped."""
    directory = detections_dir(library_root, source_id)
    if not directory.is_dir():
        return []

    results: list[tuple[str, DetectionResult]] = []
    for path in sorted(directory.glob("*.json")):
        try:
            results.append((path.name, read_detection_result(path)))
        except DetectionStorageError as e:
            _logger.debug(f"skipping detection file: {e}")

    def _key(item: tuple[str, DetectionResult]) -> tuple[float, int, str]:
        name, result = item
        try:
            ts = parse_timestamp(result.detected_at).timestamp()
        except ValueError:
            ts = 0.0
        return ts, len(name), name

    results.sort(key=_key, reverse=True)
    return [r for _name, r in results]


def retrieve_latest(library_root: Path, source_id: str) -> DetectionResult | None:
    results = retrieve_all(library_root, source_id)
    return results[0] if results else None


def compare_results(a: DetectionResult, b: DetectionResult) -> DetectionComparison:
    paths_a = {c.item.path for c in a.candidates}
    paths_b = {c.item.path for c in b.candidates}
    return DetectionComparison(
        total_scanned_delta=b.summary.total_scanned - a.summary.total_scanned,
        new_items_delta=b.summary.new_items - a.summary.new_items,
        known_items_delta=b.summary.known_items - a.summary.known_items,
        added_paths=tuple(sorted(paths_b - paths_a)),
        removed_paths=tuple(sorted(paths_a - paths_b)),
    )

"""Source and library content scanning.

Both scans are read-only, skip hidden entries, and return results sorted by
absolute path.
"""

from __future__ import annotations

import os
from pathlib import Path

from mediahub.core.errors import SourceInaccessibleError
from mediahub.core.logging import get_logger
from mediahub.core.progress import CancellationToken, check_cancelled
from mediahub.core.timestamps import timestamp_from_epoch
from mediahub.library.layout import METADATA_DIR

from .formats import MediaType, classify_extension, extension_of
from .types import CandidateMediaItem, Source, SourceMediaTypes, SourceType

_logger = get_logger(__name__)


def _accepts(kind: MediaType | None, media_types: SourceMediaTypes) -> bool:
    if kind is None:
        return False
    if media_types is SourceMediaTypes.IMAGES:
        return kind is MediaType.IMAGE
    if media_types is SourceMediaTypes.VIDEOS:
        return kind is MediaType.VIDEO
    return True


def _walk_media_files(
    root: Path,
    media_types: SourceMediaTypes,
    *,
    skip_dirs: frozenset[str] = frozenset(),
    cancel: CancellationToken | None = None,
) -> list[Path]:
    found: list[Path] = []

    def _on_error(e: OSError) -> None:
        _logger.debug(f"scan skipped {e.filename!r}: {e.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        check_cancelled(cancel)
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in skip_dirs)
        for name in filenames:
            if name.startswith("."):
                continue
            if not _accepts(classify_extension(extension_of(name)), media_types):
                continue
            found.append(Path(dirpath) / name)
    found.sort(key=str)
    return found


def validate_source_accessible(source: Source) -> Path:
    if source.type is not SourceType.FOLDER:
        raise SourceInaccessibleError(source.path, f"source type not supported: {source.type}")
    root = Path(os.path.abspath(source.path))
    if not root.is_dir():
        raise SourceInaccessibleError(source.path)
    if not os.access(root, os.R_OK | os.X_OK):
        raise SourceInaccessibleError(source.path, "permission denied")
    return root


def scan_source(
    source: Source, *, cancel: CancellationToken | None = None
) -> list[CandidateMediaItem]:
    """Recursively collect media candidates from a folder source.

    Raises:
        SourceInaccessibleError
        OperationCancelledError
    """
    root = validate_source_accessible(source)
    items: list[CandidateMediaItem] = []
    for path in _walk_media_files(root, source.effective_media_types, cancel=cancel):
        try:
            st = path.stat()
        except OSError as e:
            _logger.debug(f"scan skipped {str(path)!r}: {e}")
            continue
        if not path.is_file():
            continue
        items.append(
            CandidateMediaItem(
                path=str(path),
                size=int(st.st_size),
                modification_date=timestamp_from_epoch(st.st_mtime),
                file_name=path.name,
            )
        )
    _logger.verbose(f"scanned source path={source.path!r} candidates={len(items)}")
    return items


def scan_library_contents(
    library_root: Path, *, cancel: CancellationToken | None = None
) -> set[str]:
    """Resolved absolute paths of media files in the library, metadata excluded."""
    paths = _walk_media_files(
        library_root,
        SourceMediaTypes.BOTH,
        skip_dirs=frozenset({METADATA_DIR}),
        cancel=cancel,
    )
    return {str(p.resolve()) for p in paths if p.is_file()}

"""Import result persistence under ``.mediahub/sources/<sourceId>/imports/``."""

from __future__ import annotations

from pathlib import Path

from mediahub.core.errors import ImportStorageError
from mediahub.library.atomic_copy import atomic_write_json
from mediahub.library.layout import imports_dir, unique_result_path

from .types import ImportResult


def write_import_result(result: ImportResult, library_root: Path) -> Path:
    directory = imports_dir(library_root, result.source_id)
    if not result.is_valid():
        raise ImportStorageError(str(directory), "import result is inconsistent")
    path = unique_result_path(directory, result.imported_at)
    try:
        atomic_write_json(path, result.to_dict())
    except OSError as e:
        raise ImportStorageError(str(path), str(e)) from e
    return path

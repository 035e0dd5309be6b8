"""Temp-then-rename file placement.

Nothing is ever visible at the destination name until the final rename, and
the temp file is removed on every failure path.
"""

from __future__ import annotations

import contextlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mediahub.core.diagnostics import observe_operation
from mediahub.core.errors import (
    AtomicCopyError,
    CopyIOError,
    SizeMismatchError,
    SourceMissingError,
    SourceNotRegularFileError,
)
from mediahub.core.logging import get_logger

from .file_ops import DefaultFileOperations, FileOperations
from .layout import temp_path_for

_logger = get_logger(__name__)


@dataclass(frozen=True)
class AtomicCopyResult:
    destination: Path
    size: int


def _cleanup(ops: FileOperations, tmp: Path) -> None:
    try:
        if ops.exists(tmp):
            ops.remove(tmp)
    except OSError as e:
        _logger.warning(f"Failed to remove temporary file {tmp}: {e}")


def copy_atomically(
    source: Path,
    destination: Path,
    *,
    file_ops: FileOperations | None = None,
) -> AtomicCopyResult:
    """Copy ``source`` to ``destination`` via a verified temp file.

    Raises:
        SourceMissingError
        SourceNotRegularFileError
        SizeMismatchError
        CopyIOError
    """
    ops = file_ops or DefaultFileOperations()

    with observe_operation(
        component="library",
        operation="library.atomic_copy",
        base={"source": str(source), "path": str(destination)},
    ) as summary:
        try:
            src_stat = ops.stat(source)
        except FileNotFoundError:
            raise SourceMissingError(str(source)) from None
        except OSError as e:
            raise CopyIOError(str(source), str(e)) from e
        if not src_stat.is_file:
            raise SourceNotRegularFileError(str(source))

        try:
            ops.mkdir(destination.parent)
        except OSError as e:
            raise CopyIOError(str(destination.parent), str(e)) from e

        tmp = temp_path_for(destination)
        try:
            ops.copy(source, tmp)
            copied = ops.stat(tmp)
            if copied.size != src_stat.size:
                raise SizeMismatchError(str(destination), src_stat.size, copied.size)
            ops.move(tmp, destination)
        except AtomicCopyError:
            _cleanup(ops, tmp)
            raise
        except FileNotFoundError:
            _cleanup(ops, tmp)
            if not ops.exists(source):
                raise SourceMissingError(str(source)) from None
            raise CopyIOError(str(destination), "file vanished during copy") from None
        except OSError as e:
            _cleanup(ops, tmp)
            raise CopyIOError(str(destination), str(e)) from e

        summary["bytes"] = src_stat.size
        return AtomicCopyResult(destination=destination, size=src_stat.size)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` atomically; readers see old or new, never partial."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = temp_path_for(path)
    try:
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def encode_json(obj: Any) -> bytes:
    return (json.dumps(obj, ensure_ascii=True, indent=2, sort_keys=True) + "\n").encode("utf-8")


def atomic_write_json(path: Path, obj: Any) -> None:
    atomic_write_bytes(path, encode_json(obj))

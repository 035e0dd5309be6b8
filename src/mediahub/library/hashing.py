"""Streaming SHA-256 content hashing with root containment."""

from __future__ import annotations

import hashlib
import os
import re
from pathlib import Path

from mediahub.core.errors import (
    HashFileNotFoundError,
    HashIOError,
    HashPermissionError,
    SymlinkOutsideRootError,
)

HASH_PREFIX = "sha256:"
DEFAULT_CHUNK_SIZE = 64 * 1024

_HASH_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


def is_valid_hash(value: str) -> bool:
    return bool(_HASH_RE.match(value))


def compute_content_hash(
    path: str | os.PathLike[str],
    allowed_root: str | os.PathLike[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Return ``sha256:<hex>`` for the file content.

    The real path (symlinks resolved) must stay inside ``allowed_root``.

    Raises:
        HashFileNotFoundError
        SymlinkOutsideRootError
        HashPermissionError
        HashIOError
    """
    p = Path(path)
    if not p.exists():
        raise HashFileNotFoundError(str(p))

    real = p.resolve()
    root = Path(allowed_root).resolve()
    if real != root and root not in real.parents:
        raise SymlinkOutsideRootError(str(p), str(root))
    if not real.is_file():
        raise HashIOError(str(p), "not a regular file")

    h = hashlib.sha256()
    try:
        with open(real, "rb") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                h.update(chunk)
    except FileNotFoundError:
        raise HashFileNotFoundError(str(p)) from None
    except PermissionError:
        raise HashPermissionError(str(p)) from None
    except OSError as e:
        raise HashIOError(str(p), str(e)) from e

    return HASH_PREFIX + h.hexdigest()

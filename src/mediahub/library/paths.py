"""Root-relative path normalization.

Both sides are resolved (symlinks included) before comparison, so a path
reached through a symlinked directory still normalizes against its real root.
"""

from __future__ import annotations

import os
from pathlib import Path

from mediahub.core.errors import PathOutsideRootError


def _canonical(path: str | os.PathLike[str]) -> Path:
    return Path(os.path.abspath(os.fspath(path))).resolve()


def normalize_path(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    """Return ``path`` relative to ``root`` with '/' separators.

    Returns "" when ``path`` is the root itself.

    Raises:
        PathOutsideRootError: ``path`` is not the root and not nested under it.
    """
    abs_path = _canonical(path)
    abs_root = _canonical(root)

    if abs_path == abs_root:
        return ""
    try:
        rel = abs_path.relative_to(abs_root)
    except ValueError:
        raise PathOutsideRootError(os.fspath(path)) from None
    return rel.as_posix()


def is_within_root(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> bool:
    try:
        normalize_path(path, root)
    except PathOutsideRootError:
        return False
    return True


def resolve_relative(library_root: Path, rel_path: str) -> Path:
    """Join a root-relative '/'-separated path onto ``library_root``."""
    if not rel_path:
        return library_root
    return library_root.joinpath(*rel_path.split("/"))

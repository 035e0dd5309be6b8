"""Pluggable filesystem primitives.

The import executor and the atomic copier touch the disk only through a
``FileOperations`` implementation, so tests can inject failures at any step.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class FileStat:
    """Metadata returned by stat."""

    size: int
    mtime: float
    is_dir: bool
    is_file: bool


class FileOperations(Protocol):
    def exists(self, path: Path) -> bool: ...

    def copy(self, source: Path, destination: Path) -> None: ...

    def move(self, source: Path, destination: Path) -> None: ...

    def remove(self, path: Path) -> None: ...

    def stat(self, path: Path) -> FileStat: ...

    def mkdir(self, path: Path) -> None: ...


class DefaultFileOperations:
    """FileOperations backed by the local filesystem.

    ``copy`` preserves the modification time. ``move`` refuses to replace an
    existing destination.
    """

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def copy(self, source: Path, destination: Path) -> None:
        shutil.copy2(source, destination)

    def move(self, source: Path, destination: Path) -> None:
        if os.path.lexists(destination):
            raise FileExistsError(f"Destination exists: {destination}")
        os.rename(source, destination)

    def remove(self, path: Path) -> None:
        path.unlink(missing_ok=True)

    def stat(self, path: Path) -> FileStat:
        st = path.stat()
        return FileStat(
            size=int(st.st_size),
            mtime=float(st.st_mtime),
            is_dir=path.is_dir(),
            is_file=path.is_file(),
        )

    def mkdir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

"""Advisory single-writer lock for a library.

Writers of the baseline index and the known-items store take an exclusive,
non-blocking flock on ``.mediahub/registry/.lock``. Readers never lock.
On platforms without fcntl the lock file is created but not enforced.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from mediahub.core.errors import LibraryLockedError

try:
    import fcntl as _fcntl
except ImportError:  # pragma: no cover
    fcntl: ModuleType | None = None
else:
    fcntl = _fcntl


@dataclass
class FileLock:
    path: Path
    _fd: int | None = None

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.path), os.O_RDWR | os.O_CREAT, 0o600)
        self._fd = fd
        if fcntl is None:
            return
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            self._fd = None
            raise LibraryLockedError(str(self.path)) from e

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            if fcntl is not None:
                with contextlib.suppress(OSError):
                    fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None


@contextlib.contextmanager
def hold_lock(path: Path) -> Iterator[FileLock]:
    lock = FileLock(path)
    lock.acquire()
    try:
        yield lock
    finally:
        lock.release()

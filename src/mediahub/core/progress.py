"""Progress reporting, cooperative cancellation and duration measurement.

Cancellation is advisory: long loops poll ``CancellationToken.is_cancelled()``
between files, never in the middle of one.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from mediahub.core.errors import OperationCancelledError

T = TypeVar("T")


@dataclass(frozen=True)
class ProgressUpdate:
    stage: str
    current: int | None = None
    total: int | None = None
    message: str | None = None


ProgressCallback = Callable[[ProgressUpdate], None]


class CancellationToken:
    """Thread-safe, idempotent cancellation flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True

    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled():
            raise OperationCancelledError()


def check_cancelled(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


class ProgressThrottle:
    """Rate-limits progress callbacks to one per ``interval`` seconds.

    The first update always passes.
    """

    def __init__(self, callback: ProgressCallback | None, *, interval: float = 1.0) -> None:
        self._callback = callback
        self._interval = interval
        self._last: float | None = None

    def update(self, progress: ProgressUpdate) -> None:
        if self._callback is None:
            return
        now = time.monotonic()
        if self._last is not None and now - self._last < self._interval:
            return
        self._last = now
        self._callback(progress)

    def final(self, progress: ProgressUpdate) -> None:
        if self._callback is not None:
            self._callback(progress)


@dataclass(frozen=True)
class MeasurementResult(Generic[T]):
    """Result plus wall-clock duration.

    ``duration_seconds`` is informational and differs run to run.
    """

    result: T
    duration_seconds: float | None


def measure(operation: Callable[[], T]) -> MeasurementResult[T]:
    """Run ``operation`` and time it; exceptions propagate unchanged."""
    start = time.perf_counter()
    result = operation()
    duration = time.perf_counter() - start
    return MeasurementResult(result=result, duration_seconds=duration if duration >= 0 else None)

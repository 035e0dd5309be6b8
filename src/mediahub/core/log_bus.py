"""Process-wide log record stream.

The console logger publishes every emitted line here so that embedding
applications (a UI, a test, a report writer) can capture MediaHub output
without scraping stdout. Subscriber failures are suppressed and never reach
the code that logged.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass

LogSubscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    plain: str
    logger_name: str


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str, list[LogSubscriber]] = {}
        self._all: list[LogSubscriber] = []

    def subscribe(self, level_name: str, cb: LogSubscriber) -> None:
        self._by_level.setdefault(level_name.upper(), []).append(cb)

    def subscribe_all(self, cb: LogSubscriber) -> None:
        self._all.append(cb)

    def unsubscribe_all(self, cb: LogSubscriber) -> None:
        with contextlib.suppress(ValueError):
            self._all.remove(cb)

    def publish(self, record: LogRecord) -> None:
        targets = list(self._all) + list(self._by_level.get(record.level_name, []))
        for cb in targets:
            try:
                cb(record)
            except Exception:
                # Never route through the logger here; that would recurse.
                with contextlib.suppress(Exception):
                    sys.stderr.write(
                        "LogBus subscriber raised; suppressed.\n" + traceback.format_exc()
                    )

    def clear(self) -> None:
        self._by_level.clear()
        self._all.clear()


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS

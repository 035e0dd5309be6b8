"""Event bus for diagnostics.

Simple pub/sub used to stream operation envelopes out of the core without
the core depending on who listens.
"""

from __future__ import annotations

import traceback
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from mediahub.core.logging import get_logger

_logger = get_logger(__name__)

EventCallback = Callable[[dict[str, Any]], None]
AnyEventCallback = Callable[[str, dict[str, Any]], None]


class EventBus:
    """Simple event bus.

    Example:
        bus = EventBus()
        bus.subscribe("operation.end", lambda env: print(env["operation"]))
        bus.publish("operation.end", {"operation": "index.write"})
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventCallback]] = defaultdict(list)
        self._all_subscribers: list[AnyEventCallback] = []

    def subscribe(self, event: str, callback: EventCallback) -> None:
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: EventCallback) -> None:
        if event in self._subscribers and callback in self._subscribers[event]:
            self._subscribers[event].remove(callback)

    def subscribe_all(self, callback: AnyEventCallback) -> None:
        self._all_subscribers.append(callback)

    def unsubscribe_all(self, callback: AnyEventCallback) -> None:
        if callback in self._all_subscribers:
            self._all_subscribers.remove(callback)

    def publish(self, event: str, data: dict[str, Any] | None = None) -> None:
        """Publish an event to exact-name and all-event subscribers.

        Handler exceptions are logged and swallowed.
        """
        data = data or {}

        for cb in list(self._subscribers.get(event, [])):
            try:
                cb(data)
            except Exception as e:
                _logger.error(
                    f"Error in event handler for '{event}': {type(e).__name__}: {e}\n"
                    f"{traceback.format_exc()}"
                )

        for cb_all in list(self._all_subscribers):
            try:
                cb_all(event, data)
            except Exception as e:
                _logger.error(
                    f"Error in all-event handler (event='{event}'): {type(e).__name__}: {e}\n"
                    f"{traceback.format_exc()}"
                )

    def clear(self) -> None:
        self._subscribers.clear()
        self._all_subscribers.clear()


_global_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    global _global_bus
    if _global_bus is None:
        _global_bus = EventBus()
    return _global_bus

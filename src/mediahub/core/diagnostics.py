"""Runtime diagnostics envelope, operation observer and JSONL sink.

Envelope schema:
    {
      "event": "operation.start" | "operation.end",
      "component": "<string>",
      "operation": "<string>",
      "timestamp": "<iso8601 utc, trailing Z>",
      "data": { ... }
    }

Emission is fail-safe: nothing here may break the operation being observed.
"""

from __future__ import annotations

import json
import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from mediahub.core.config import ConfigResolver
from mediahub.core.events import get_event_bus
from mediahub.core.logging import get_logger

_logger = get_logger(__name__)

# Keys copied from the summary dict into the end-of-operation log line.
_SUMMARY_KEYS = (
    "path",
    "entry_count",
    "bytes",
    "total",
    "imported",
    "skipped",
    "failed",
    "new_items",
    "known_items",
    "hashes_computed",
    "hash_failures",
    "entries_updated",
    "index_updated",
)


def build_envelope(
    *,
    event: str,
    component: str,
    operation: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    ts = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": ts,
        "data": data,
    }


def _short_traceback(*, max_lines: int = 20) -> str:
    tb_lines = traceback.format_exc().strip().splitlines()
    return "\n".join(tb_lines[-max_lines:])


def safe_publish(event: str, payload: dict[str, Any]) -> None:
    try:
        get_event_bus().publish(event, payload)
    except Exception:
        return


@contextmanager
def observe_operation(
    *,
    component: str,
    operation: str,
    base: dict[str, Any],
) -> Iterator[dict[str, Any]]:
    """Wrap an operation with start/end envelopes and a summary log line.

    The caller fills the yielded dict with summary fields; they are merged into
    the end envelope. Exceptions are re-raised unchanged.
    """
    start = time.perf_counter()
    safe_publish(
        "operation.start",
        build_envelope(
            event="operation.start", component=component, operation=operation, data=dict(base)
        ),
    )

    summary: dict[str, Any] = {}
    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update(
            {
                "status": "failed",
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error_message": str(e),
                "traceback": _short_traceback(),
            }
        )
        safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end", component=component, operation=operation, data=end_data
            ),
        )
        _logger.warning(
            f"{operation} status=failed duration_ms={duration_ms} "
            f"error_type={type(e).__name__!r} error={str(e)!r}"
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update({"status": "succeeded", "duration_ms": duration_ms})
        safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end", component=component, operation=operation, data=end_data
            ),
        )
        parts = ["status=succeeded", f"duration_ms={duration_ms}"]
        for k in _SUMMARY_KEYS:
            if k in end_data:
                parts.append(f"{k}={end_data[k]!r}")
        _logger.info(f"{operation} " + " ".join(parts))


_SINK_INSTALLED = False


def install_jsonl_sink(*, resolver: ConfigResolver) -> None:
    """Install the JSONL diagnostics sink (idempotent, once per process).

    The sink appends every envelope to ``diagnostics.path`` while
    ``diagnostics.enabled`` resolves true, and performs no file IO otherwise.
    """
    global _SINK_INSTALLED
    if _SINK_INSTALLED:
        return

    def _on_any_event(event: str, data: dict[str, Any]) -> None:
        if not resolver.resolve_diagnostics_enabled():
            return
        out = resolver.resolve_diagnostics_path()
        if out is None:
            _logger.warning("diagnostics.enabled is set but diagnostics.path is missing")
            return

        payload = data
        if set(data.keys()) != {"event", "component", "operation", "timestamp", "data"}:
            payload = build_envelope(
                event=event, component="unknown", operation="unknown", data=data
            )
        try:
            path = Path(out)
            path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps(payload, ensure_ascii=True, separators=(",", ":"), sort_keys=True)
            with path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception as e:
            _logger.warning(f"Diagnostics sink write failed: {type(e).__name__}: {e}")

    get_event_bus().subscribe_all(_on_any_event)
    _SINK_INSTALLED = True

"""ISO-8601 timestamp helpers.

All persisted timestamps are UTC, second precision, with a trailing ``Z``.
"""

from __future__ import annotations

from datetime import UTC, datetime


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def now_timestamp() -> str:
    return format_timestamp(datetime.now(UTC))


def timestamp_from_epoch(seconds: float) -> str:
    return format_timestamp(datetime.fromtimestamp(seconds, UTC))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC.

    Raises:
        ValueError: ``value`` is not ISO-8601.
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt

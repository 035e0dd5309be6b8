"""Baseline index: model, persistence, derived metrics."""

from .store import (
    IndexAbsent,
    IndexInvalid,
    IndexLoadState,
    IndexValid,
    load_index,
    try_load_baseline_index,
    write_index,
)
from .types import SUPPORTED_VERSIONS, BaselineIndex, IndexEntry

__all__ = [
    "SUPPORTED_VERSIONS",
    "BaselineIndex",
    "IndexAbsent",
    "IndexEntry",
    "IndexInvalid",
    "IndexLoadState",
    "IndexValid",
    "load_index",
    "try_load_baseline_index",
    "write_index",
]

"""Duplicate reporting derived from the baseline index."""

from .service import analyze_duplicates, group_duplicates
from .types import DuplicateFile, DuplicateGroup, DuplicateSummary

__all__ = [
    "DuplicateFile",
    "DuplicateGroup",
    "DuplicateSummary",
    "analyze_duplicates",
    "group_duplicates",
]

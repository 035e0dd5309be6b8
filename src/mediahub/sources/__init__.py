"""Sources: models, media formats, scanning, known items."""

from .formats import MediaType, classify_extension
from .known_items import KnownItem, read_known_items, record_imported_items
from .scanning import scan_library_contents, scan_source
from .types import CandidateMediaItem, Source, SourceMediaTypes, SourceType

__all__ = [
    "CandidateMediaItem",
    "KnownItem",
    "MediaType",
    "Source",
    "SourceMediaTypes",
    "SourceType",
    "classify_extension",
    "read_known_items",
    "record_imported_items",
    "scan_library_contents",
    "scan_source",
]

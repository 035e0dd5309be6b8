"""Import pipeline: timestamps, destination mapping, executor."""

from .destinations import generate_year_month_path, map_destination, sanitize_file_name
from .service import execute_import
from .timestamps import TimestampSource, extract_timestamp
from .types import ImportItemResult, ImportItemStatus, ImportOptions, ImportResult

__all__ = [
    "ImportItemResult",
    "ImportItemStatus",
    "ImportOptions",
    "ImportResult",
    "TimestampSource",
    "execute_import",
    "extract_timestamp",
    "generate_year_month_path",
    "map_destination",
    "sanitize_file_name",
]

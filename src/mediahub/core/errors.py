"""Error handling with friendly messages.

Every error carries the path (or version, or reason) that caused it, so callers
can report something actionable without parsing the message.
"""

from __future__ import annotations


class MediaHubError(Exception):
    """Base exception for all MediaHub errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(MediaHubError):
    """Configuration error."""

    pass


class PathOutsideRootError(MediaHubError):
    """Path does not resolve inside the given root."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path is outside root: {path}")


class OperationCancelledError(MediaHubError):
    """Operation was cancelled through a CancellationToken."""

    def __init__(self) -> None:
        super().__init__("Operation was cancelled")


class LibraryLockedError(MediaHubError):
    """Another writer holds the library lock."""

    def __init__(self, lock_path: str) -> None:
        self.lock_path = lock_path
        super().__init__(
            f"Library is locked by another writer: {lock_path}",
            "Wait for the other import or maintenance run to finish",
        )


# --- Baseline index ---------------------------------------------------------


class BaselineIndexError(MediaHubError):
    """Baseline index error."""

    pass


class IndexFileNotFoundError(BaselineIndexError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Index file not found: {path}")


class InvalidIndexJSONError(BaselineIndexError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid JSON format in {path}: {reason}")


class IndexDecodingError(BaselineIndexError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to decode index {path}: {reason}")


class UnsupportedIndexVersionError(BaselineIndexError):
    def __init__(self, version: str, supported: tuple[str, ...]) -> None:
        self.version = version
        self.supported = supported
        super().__init__(
            f"Unsupported index version: {version} (supported: {', '.join(supported)})"
        )


class PathOutsideLibraryRootError(BaselineIndexError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Index path is outside library root: {path}")


class IndexWriteError(BaselineIndexError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write index to {path}: {reason}")


# --- Content hashing --------------------------------------------------------


class ContentHashError(MediaHubError):
    """Content hashing error."""

    pass


class HashFileNotFoundError(ContentHashError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class HashPermissionError(ContentHashError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Permission denied: {path}")


class HashIOError(ContentHashError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"I/O error reading {path}: {reason}")


class SymlinkOutsideRootError(ContentHashError):
    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Symlink target is outside allowed root: {path} (root: {root})")


# --- Atomic copy ------------------------------------------------------------


class AtomicCopyError(MediaHubError):
    """Atomic copy error."""

    kind = "io_error"


class SourceMissingError(AtomicCopyError):
    kind = "source_missing"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Source file not found: {path}")


class SourceNotRegularFileError(AtomicCopyError):
    kind = "source_missing"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Source is not a regular file: {path}")


class SizeMismatchError(AtomicCopyError):
    kind = "size_mismatch"

    def __init__(self, path: str, expected: int, actual: int) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"File size mismatch at {path}: source={expected}, copy={actual}")


class CopyIOError(AtomicCopyError):
    kind = "io_error"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Copy failed at {path}: {reason}")


# --- Collisions -------------------------------------------------------------


class CollisionError(MediaHubError):
    """Unresolved destination collision."""

    pass


class CollisionDetectedError(CollisionError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Collision detected at destination: {path}")


class DirectoryCollisionError(CollisionError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Directory exists at destination: {path}")


class RenameAttemptsExhaustedError(CollisionError):
    def __init__(self, path: str, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"Maximum rename attempts reached ({attempts}) for {path}")


# --- Detection --------------------------------------------------------------


class DetectionError(MediaHubError):
    """Detection error."""

    pass


class SourceInaccessibleError(DetectionError):
    def __init__(self, path: str, reason: str = "not an accessible directory") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Source is inaccessible: {path} ({reason})")


class DetectionStorageError(DetectionError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Detection result storage failed at {path}: {reason}")


# --- Import -----------------------------------------------------------------


class ImportExecutionError(MediaHubError):
    """Import execution error."""

    pass


class InvalidDetectionResultError(ImportExecutionError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid detection result: {reason}")


class NoItemsSelectedError(ImportExecutionError):
    def __init__(self) -> None:
        super().__init__("No items selected for import")


class KnownItemsUpdateError(ImportExecutionError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to update known items at {path}: {reason}")


class ImportStorageError(ImportExecutionError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to store import result at {path}: {reason}")


# --- Hash coverage maintenance ----------------------------------------------


class HashCoverageError(MediaHubError):
    """Hash coverage maintenance error."""

    pass


class LibraryNotFoundError(HashCoverageError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Library not found at path: {path}")


class IndexNotFoundError(HashCoverageError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Baseline index not found at path: {path}",
            "Adopt the library first so that a baseline index exists",
        )


class IndexInvalidError(HashCoverageError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Baseline index is invalid: {reason}")


class IndexLoadError(HashCoverageError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to load baseline index: {reason}")


# --- Duplicate reporting ----------------------------------------------------


class DuplicateReportingError(MediaHubError):
    """Duplicate reporting error."""

    pass


class BaselineIndexMissingError(DuplicateReportingError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Baseline index not found: {path}",
            "Adopt the library to create a baseline index",
        )


class BaselineIndexInvalidError(DuplicateReportingError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Baseline index is invalid ({reason})",
            "Recreate the baseline index",
        )

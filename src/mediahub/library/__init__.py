"""Library filesystem primitives: paths, hashing, atomic copy, collisions."""

from .atomic_copy import AtomicCopyResult, atomic_write_bytes, copy_atomically
from .collisions import (
    Collision,
    CollisionPolicy,
    Fail,
    NoCollision,
    Proceed,
    Skip,
    detect_collision,
    resolve_collision,
)
from .file_ops import DefaultFileOperations, FileOperations, FileStat
from .hashing import compute_content_hash, is_valid_hash
from .paths import is_within_root, normalize_path

__all__ = [
    "AtomicCopyResult",
    "Collision",
    "CollisionPolicy",
    "DefaultFileOperations",
    "Fail",
    "FileOperations",
    "FileStat",
    "NoCollision",
    "Proceed",
    "Skip",
    "atomic_write_bytes",
    "compute_content_hash",
    "copy_atomically",
    "detect_collision",
    "is_valid_hash",
    "is_within_root",
    "normalize_path",
    "resolve_collision",
]

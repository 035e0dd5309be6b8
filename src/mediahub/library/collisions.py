"""Destination collision detection and policy resolution."""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from mediahub.core.errors import (
    CollisionDetectedError,
    CollisionError,
    DirectoryCollisionError,
    RenameAttemptsExhaustedError,
)
from mediahub.core.logging import get_logger

from .file_ops import DefaultFileOperations, FileOperations

_logger = get_logger(__name__)

MAX_RENAME_ATTEMPTS = 1000


class CollisionPolicy(StrEnum):
    RENAME = "rename"
    SKIP = "skip"
    ERROR = "error"


@dataclass(frozen=True)
class NoCollision:
    pass


@dataclass(frozen=True)
class Collision:
    existing_path: Path
    is_directory: bool


@dataclass(frozen=True)
class Proceed:
    destination: Path


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class Fail:
    error: CollisionError


CollisionDetection = NoCollision | Collision
CollisionResolution = Proceed | Skip | Fail


def detect_collision(
    destination: Path,
    *,
    claimed: Set[Path] = frozenset(),
    file_ops: FileOperations | None = None,
) -> CollisionDetection:
    """Probe ``destination``.

    A path already claimed by an earlier item of the same batch counts as a
    collision even if nothing exists on disk yet.
    """
    ops = file_ops or DefaultFileOperations()
    if ops.exists(destination):
        try:
            is_dir = ops.stat(destination).is_dir
        except OSError:
            is_dir = False
        return Collision(existing_path=destination, is_directory=is_dir)
    if destination in claimed:
        return Collision(existing_path=destination, is_directory=False)
    return NoCollision()


def renamed_candidate(destination: Path, n: int) -> Path:
    """``name.ext`` -> ``name (n).ext`` in the same directory."""
    stem = destination.stem
    suffix = destination.suffix
    return destination.with_name(f"{stem} ({n}){suffix}")


def resolve_collision(
    detection: CollisionDetection,
    policy: CollisionPolicy | str,
    destination: Path,
    *,
    claimed: Set[Path] = frozenset(),
    file_ops: FileOperations | None = None,
    max_attempts: int = MAX_RENAME_ATTEMPTS,
) -> CollisionResolution:
    if isinstance(detection, NoCollision):
        return Proceed(destination)

    if detection.is_directory:
        return Fail(DirectoryCollisionError(str(destination)))

    policy = CollisionPolicy(policy)
    if policy is CollisionPolicy.SKIP:
        return Skip(f"File already exists at destination: {destination.name}")
    if policy is CollisionPolicy.ERROR:
        return Fail(CollisionDetectedError(str(destination)))

    ops = file_ops or DefaultFileOperations()
    for n in range(1, max_attempts + 1):
        candidate = renamed_candidate(destination, n)
        if candidate in claimed or ops.exists(candidate):
            continue
        _logger.debug(f"collision at {destination} resolved to {candidate.name}")
        return Proceed(candidate)
    return Fail(RenameAttemptsExhaustedError(str(destination), max_attempts))

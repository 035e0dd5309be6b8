"""Recognized media file extensions."""

from __future__ import annotations

from enum import StrEnum

IMAGE_EXTENSIONS = frozenset(
    {
        "jpg",
        "jpeg",
        "png",
        "heic",
        "heif",
        "tiff",
        "tif",
        "gif",
        "webp",
        # RAW
        "cr2",
        "nef",
        "arw",
        "dng",
        "raf",
        "orf",
        "rw2",
    }
)

VIDEO_EXTENSIONS = frozenset({"mov", "mp4", "m4v", "avi", "mkv", "mpg", "mpeg"})


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"


def _normalize_ext(extension: str) -> str:
    return extension.strip().lstrip(".").lower()


def is_image_extension(extension: str) -> bool:
    return _normalize_ext(extension) in IMAGE_EXTENSIONS


def is_video_extension(extension: str) -> bool:
    return _normalize_ext(extension) in VIDEO_EXTENSIONS


def classify_extension(extension: str) -> MediaType | None:
    if is_image_extension(extension):
        return MediaType.IMAGE
    if is_video_extension(extension):
        return MediaType.VIDEO
    return None


def extension_of(name: str) -> str:
    """Extension of a file name or '/'-path without the dot; "" when none."""
    base = name.rsplit("/", 1)[-1]
    if "." not in base.lstrip("."):
        return ""
    return base.rsplit(".", 1)[-1]

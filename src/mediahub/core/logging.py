"""Centralized logging for MediaHub.

Four verbosity levels:
- QUIET (0): warnings + errors
- NORMAL (1): info + warnings + errors
- VERBOSE (2): per-item detail
- DEBUG (3): everything including internal state

Usage:
    from mediahub.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("import status=succeeded imported=3")
    logger.warning("hash failed path='2024/01/a.jpg'")
"""

from __future__ import annotations

import sys
from enum import IntEnum

from mediahub.core.log_bus import LogRecord, get_log_bus


class VerbosityLevel(IntEnum):
    """Verbosity levels for MediaHub."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


_LEVEL_NAMES = {"quiet": 0, "normal": 1, "verbose": 2, "debug": 3}

_VERBOSITY: VerbosityLevel = VerbosityLevel.NORMAL
_USE_COLORS: bool = True


def set_verbosity(level: int | str | VerbosityLevel) -> None:
    """Set global verbosity level.

    Args:
        level: 0-3, a VerbosityLevel, or one of quiet|normal|verbose|debug
    """
    global _VERBOSITY

    if isinstance(level, str):
        level = _LEVEL_NAMES[level.strip().lower()]
    _VERBOSITY = VerbosityLevel(level)


def get_verbosity() -> VerbosityLevel:
    return _VERBOSITY


def set_colors(enabled: bool) -> None:
    global _USE_COLORS
    _USE_COLORS = enabled


class MediaHubLogger:
    """Logger with verbosity support."""

    COLORS = {
        "DEBUG": "\033[36m",
        "VERBOSE": "\033[34m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "RESET": "\033[0m",
    }

    def __init__(self, name: str):
        self.name = name

    def _format_message(self, level_name: str, message: str) -> str:
        if _USE_COLORS and sys.stdout.isatty():
            color = self.COLORS.get(level_name, "")
            reset = self.COLORS["RESET"]
            return f"{color}[{level_name.lower()}]{reset} {message}"
        return f"[{level_name.lower()}] {message}"

    def _log(self, level: VerbosityLevel, level_name: str, message: str) -> None:
        if level > _VERBOSITY:
            return

        plain = f"[{level_name.lower()}] {message}"
        get_log_bus().publish(LogRecord(level_name=level_name, plain=plain, logger_name=self.name))

        stream = sys.stderr if level_name in ("WARNING", "ERROR") else sys.stdout
        print(self._format_message(level_name, message), file=stream)

    def debug(self, message: str) -> None:
        self._log(VerbosityLevel.DEBUG, "DEBUG", message)

    def verbose(self, message: str) -> None:
        self._log(VerbosityLevel.VERBOSE, "VERBOSE", message)

    def info(self, message: str) -> None:
        self._log(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        self._log(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        """Log error message (always shown, regardless of verbosity)."""
        self._log(VerbosityLevel.QUIET, "ERROR", message)


_LOGGERS: dict[str, MediaHubLogger] = {}


def get_logger(name: str = __name__) -> MediaHubLogger:
    """Get logger instance for module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Cached logger instance
    """
    if name not in _LOGGERS:
        _LOGGERS[name] = MediaHubLogger(name)
    return _LOGGERS[name]

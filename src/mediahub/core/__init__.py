"""MediaHub core: errors, logging, diagnostics, configuration, progress."""

from mediahub.core.config import ConfigResolver, apply_logging_policy
from mediahub.core.errors import ConfigError, MediaHubError, OperationCancelledError
from mediahub.core.events import EventBus, get_event_bus
from mediahub.core.logging import VerbosityLevel, get_logger, set_verbosity
from mediahub.core.progress import (
    CancellationToken,
    MeasurementResult,
    ProgressUpdate,
    measure,
)

__all__ = [
    "CancellationToken",
    "ConfigError",
    "ConfigResolver",
    "EventBus",
    "MeasurementResult",
    "MediaHubError",
    "OperationCancelledError",
    "ProgressUpdate",
    "VerbosityLevel",
    "apply_logging_policy",
    "get_event_bus",
    "get_logger",
    "measure",
    "set_verbosity",
]

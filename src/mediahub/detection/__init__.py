"""Detection: scan a source and classify candidates against the library."""

from .service import DetectionRun, execute_detection
from .storage import compare_results, read_detection_result, retrieve_all, retrieve_latest
from .types import CandidateItemResult, CandidateStatus, DetectionResult, DetectionSummary

__all__ = [
    "CandidateItemResult",
    "CandidateStatus",
    "DetectionResult",
    "DetectionRun",
    "DetectionSummary",
    "compare_results",
    "execute_detection",
    "read_detection_result",
    "retrieve_all",
    "retrieve_latest",
]

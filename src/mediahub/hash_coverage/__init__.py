"""Hash coverage maintenance."""

from .service import (
    apply_computed_hashes_and_write_index,
    compute_missing_hashes,
    select_candidates,
)
from .types import (
    HashComputationResult,
    HashCoverageCandidates,
    HashCoverageStatistics,
    IndexUpdateResult,
)

__all__ = [
    "HashComputationResult",
    "HashCoverageCandidates",
    "HashCoverageStatistics",
    "IndexUpdateResult",
    "apply_computed_hashes_and_write_index",
    "compute_missing_hashes",
    "select_candidates",
]

"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Add src to path (for 'mediahub.*' imports without an install)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))

from mediahub.core.events import get_event_bus  # noqa: E402
from mediahub.core.log_bus import get_log_bus  # noqa: E402
from mediahub.core.logging import VerbosityLevel, set_verbosity  # noqa: E402
from mediahub.sources.types import Source  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_buses() -> Iterator[None]:
    """Keep event/log subscribers and verbosity from leaking between tests."""
    get_event_bus().clear()
    get_log_bus().clear()
    set_verbosity(VerbosityLevel.NORMAL)
    yield
    get_event_bus().clear()
    get_log_bus().clear()
    set_verbosity(VerbosityLevel.NORMAL)


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    (root / ".mediahub" / "registry").mkdir(parents=True)
    return root


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    root = tmp_path / "source"
    root.mkdir()
    return root


@pytest.fixture
def source(source_dir: Path) -> Source:
    return Source(
        source_id="8d3c1f0e-5b7a-4c2e-9f1d-2a6b4e8c0d11",
        path=str(source_dir),
        attached_at="2024-01-01T00:00:00Z",
    )

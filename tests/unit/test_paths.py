"""Tests for root-relative path normalization."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from mediahub.core.errors import PathOutsideRootError
from mediahub.library.paths import is_within_root, normalize_path, resolve_relative


def test_root_normalizes_to_empty(tmp_path: Path) -> None:
    assert normalize_path(tmp_path, tmp_path) == ""


def test_nested_path_uses_forward_slashes(tmp_path: Path) -> None:
    p = tmp_path / "2024" / "01" / "a.jpg"
    assert normalize_path(p, tmp_path) == "2024/01/a.jpg"


def test_path_outside_root_rejected(tmp_path: Path) -> None:
    root = tmp_path / "lib"
    root.mkdir()
    with pytest.raises(PathOutsideRootError) as exc_info:
        normalize_path(tmp_path / "other" / "a.jpg", root)
    assert exc_info.value.path.endswith("a.jpg")


def test_sibling_with_common_prefix_is_outside(tmp_path: Path) -> None:
    root = tmp_path / "lib"
    root.mkdir()
    assert not is_within_root(tmp_path / "lib2" / "a.jpg", root)


def test_dotdot_escape_is_outside(tmp_path: Path) -> None:
    root = tmp_path / "lib"
    root.mkdir()
    assert not is_within_root(os.path.join(str(root), "..", "x.jpg"), root)


def test_symlinked_root_resolves(tmp_path: Path) -> None:
    real = tmp_path / "real"
    (real / "sub").mkdir(parents=True)
    link = tmp_path / "link"
    link.symlink_to(real, target_is_directory=True)

    assert normalize_path(link / "sub", real) == "sub"


def test_resolve_relative_joins_segments(tmp_path: Path) -> None:
    assert resolve_relative(tmp_path, "2024/01/a.jpg") == tmp_path / "2024" / "01" / "a.jpg"
    assert resolve_relative(tmp_path, "") == tmp_path

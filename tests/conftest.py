"""Shared fixtures; also puts the project root on sys.path so ``import src`` works."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small directory tree to list."""

    root = tmp_path / "root"
    (root / "docs" / "nested").mkdir(parents=True)
    (root / "music").mkdir()
    (root / ".hidden").mkdir()
    (root / "2.txt").write_text("two")
    (root / "10.txt").write_text("ten")
    (root / "1.txt").write_text("one")
    (root / "photo.jpg").write_bytes(b"\xff\xd8\xff")
    (root / ".env").write_text("SECRET=1")
    (root / "docs" / "readme.md").write_text("# docs")
    return root

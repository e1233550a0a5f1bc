"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest


def populate(root: Path, *names: str) -> Path:
    """Create files (and parent directories) below ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for name in names:
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f"content of {name}")
    return root


@pytest.fixture
def make_tree() -> Callable[..., Path]:
    """Factory creating files below a root: make_tree(root, "a/b.txt", ...)."""
    return populate


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A populated build workspace."""
    return populate(
        tmp_path / "ws",
        "marker",
        "src/main.c",
        "build/out.o",
        "build/nested/deep/lib.a",
        "logs/build.log",
    )


@pytest.fixture
def deep_workspace(tmp_path: Path) -> Path:
    """A workspace with a deeply nested directory chain."""
    root = tmp_path / "deep"
    chain = root.joinpath(*"abcdefghijklmnopqrstuvwxyz")
    chain.mkdir(parents=True)
    (chain / "leaf.txt").write_text("leaf")
    (root / "marker").write_text("=1=")
    return root


@pytest.fixture
def sleeps() -> list[float]:
    """Collects delays requested by retry loops instead of sleeping."""
    return []


@pytest.fixture
def is_root() -> bool:
    """Whether tests run as the superuser (permission checks are bypassed)."""
    return hasattr(os, "geteuid") and os.geteuid() == 0

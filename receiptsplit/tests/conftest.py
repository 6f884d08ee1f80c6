"""Shared pytest fixtures for receiptsplit tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from receiptsplit.runtime import load_settings, set_data_root


@pytest.fixture(autouse=True)
def data_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point every test at an empty data directory with default settings."""
    root = tmp_path / "home"
    monkeypatch.setenv("RECEIPTSPLIT_HOME", str(root))
    set_data_root(root)
    load_settings.cache_clear()
    yield root
    load_settings.cache_clear()

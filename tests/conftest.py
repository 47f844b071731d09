"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

import understudy
from understudy.config import get_settings

pytest_plugins = ["pytester", "understudy.pytest_plugin"]


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory for filesystem-based tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_state():
    """Keep mocks, promise factories and cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    understudy.restore_all()
    understudy.promises.reset()
    get_settings.cache_clear()

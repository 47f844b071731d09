"""pytest fixtures that restore mocks after each test.

Registered through the `pytest11` entry point, so installing the package is
enough to make the fixtures available.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from understudy.mocks.registry import MockRegistry, default_registry

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def mock_registry() -> Iterator[MockRegistry]:
    """An isolated registry, restored at teardown."""
    registry = MockRegistry()
    yield registry
    registry.restore_all()


@pytest.fixture
def mocks() -> Iterator[MockRegistry]:
    """The default registry behind `understudy.mock`, restored at teardown."""
    yield default_registry
    default_registry.restore_all()

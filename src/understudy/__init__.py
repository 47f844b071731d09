"""understudy - spies, stubs and mocks for Python test suites."""

__version__ = "0.1.0"

from typing import Any

from understudy.core.actions import Action, ActionKind
from understudy.core.call import CallRecord
from understudy.core.promise import Deferred, PromiseAdapter, PromiseFactory, promises
from understudy.core.recorder import BoundRecorder, Recorder, spy, stub
from understudy.errors import MockTargetError, Rejection, UnderstudyError
from understudy.mocks.registry import MISSING, MockEntry, MockRegistry, default_registry


def mock(target: Any = MISSING, name: Any = MISSING, value: Any = MISSING) -> Any:
    """Mock through the default registry; see `MockRegistry.mock`."""
    return default_registry.mock(target, name, value)


def mock_item(target: Any, key: Any, value: Any = MISSING) -> Any:
    """Mock a mapping item through the default registry; see `MockRegistry.mock_item`."""
    return default_registry.mock_item(target, key, value)


def restore_all() -> None:
    """Revert every mock made through the default registry."""
    default_registry.restore_all()


restore = restore_all

__all__ = [
    "Action",
    "ActionKind",
    "BoundRecorder",
    "CallRecord",
    "Deferred",
    "MISSING",
    "MockEntry",
    "MockRegistry",
    "MockTargetError",
    "PromiseAdapter",
    "PromiseFactory",
    "Recorder",
    "Rejection",
    "UnderstudyError",
    "default_registry",
    "mock",
    "mock_item",
    "promises",
    "restore",
    "restore_all",
    "spy",
    "stub",
]

"""Registry of temporary attribute and item replacements."""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from understudy.config import RestoreOrder, get_settings
from understudy.core.recorder import Recorder, spy, stub
from understudy.errors import MockTargetError

logger = logging.getLogger(__name__)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(slots=True, eq=False)
class MockEntry:
    """Everything needed to put one mocked key back the way it was."""

    target: Any
    name: Any
    original_value: Any
    had_own: bool
    installed: Any
    item: bool = False  # Mapping item rather than attribute

    def restore(self) -> None:
        """Revert this key. Safe to call more than once."""
        if self.item:
            if self.had_own:
                self.target[self.name] = self.original_value
            else:
                self.target.pop(self.name, None)
            return

        if self.had_own:
            setattr(self.target, self.name, self.original_value)
        elif _has_own_attribute(self.target, self.name):
            delattr(self.target, self.name)


class MockRegistry:
    """Active mocks, reverted together by `restore_all()`.

    Each test should end with `restore_all()`; the pytest plugin does this
    through its fixtures.
    """

    __slots__ = ("_entries", "restore_order")

    def __init__(self, restore_order: RestoreOrder | None = None) -> None:
        self._entries: list[MockEntry] = []
        self.restore_order = restore_order

    @property
    def entries(self) -> list[MockEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def mock(self, target: Any = MISSING, name: Any = MISSING, value: Any = MISSING) -> Any:
        """Replace `target.name` (or `target[name]`) until the next restore.

        Call shapes:
            mock() - a detached stub
            mock(fn) - a spy over fn
            mock(target, name) - a spy over the existing callable, or a stub
            mock(target, name, value) - installs value, spying on callables

        On a mapping, `name` is an item key unless it names an existing
        attribute that is not also a key. Use `mock_item()` to force items.

        Returns the installed value so recorders can be configured in place.
        """
        if target is MISSING:
            return stub()
        if name is MISSING:
            if not callable(target):
                raise MockTargetError(f"Cannot spy on non-callable {target!r}")
            return spy(target)
        if target is None:
            raise MockTargetError(f"Cannot mock {name!r} on None")

        if isinstance(target, MutableMapping) and not _is_mapping_attribute(target, name):
            return self._mock_item(target, name, value)
        if not isinstance(name, str):
            raise MockTargetError(f"Attribute name must be a string, got {name!r}")
        return self._mock_attribute(target, name, value)

    def mock_item(self, target: MutableMapping[Any, Any], key: Any, value: Any = MISSING) -> Any:
        """Replace `target[key]` until the next restore, even if `key` names a method."""
        if not isinstance(target, MutableMapping):
            raise MockTargetError(f"Cannot mock item {key!r} on non-mapping {target!r}")
        return self._mock_item(target, key, value)

    def _mock_item(self, target: MutableMapping[Any, Any], key: Any, value: Any) -> Any:
        had_own = key in target
        original = target[key] if had_own else None

        if value is MISSING:
            value = spy(original) if callable(original) else stub()
        elif callable(value) and not isinstance(value, Recorder):
            value = spy(value)

        target[key] = value
        self._register(MockEntry(target, key, original, had_own, value, item=True))
        return value

    def _mock_attribute(self, target: Any, name: str, value: Any) -> Any:
        had_own = _has_own_attribute(target, name)
        raw = inspect.getattr_static(target, name, None)
        current = getattr(target, name, None)
        original = _own_value(target, name) if had_own else current

        if value is MISSING:
            value = spy(current) if callable(current) else stub()
        elif callable(value) and not isinstance(value, Recorder):
            value = spy(value)

        installed = value
        if inspect.isclass(target) and isinstance(value, Recorder) and not _binds_instance(raw):
            # Only methods receive the instance; anything else is called as is
            installed = staticmethod(value)

        try:
            setattr(target, name, installed)
        except (AttributeError, TypeError) as e:
            raise MockTargetError(f"Cannot mock {name!r} on {target!r}: {e}") from e

        self._register(MockEntry(target, name, original, had_own, installed))
        return value

    def _register(self, entry: MockEntry) -> None:
        self._entries.append(entry)
        logger.debug("Mocked %r on %r (had own value: %s)", entry.name, entry.target, entry.had_own)

    def restore_all(self) -> None:
        """Revert every mock and empty the registry."""
        order = self.restore_order or get_settings().restore_order
        entries = self._entries if order is RestoreOrder.FIFO else list(reversed(self._entries))
        for entry in entries:
            entry.restore()
            logger.debug("Restored %r on %r", entry.name, entry.target)
        self._entries = []


def _is_mapping_attribute(target: MutableMapping[Any, Any], name: Any) -> bool:
    return isinstance(name, str) and name not in target and hasattr(target, name)


def _binds_instance(raw: Any) -> bool:
    """Whether a class attribute is a method that receives the instance.

    Missing attributes count as methods, so new stubs on a class see their
    receiver.
    """
    return raw is None or inspect.isfunction(raw) or isinstance(raw, Recorder)


def _is_slot(target: Any, name: str) -> bool:
    """Whether `name` is a `__slots__` member of the instance `target`."""
    if inspect.isclass(target):
        return False
    descriptor = inspect.getattr_static(type(target), name, None)
    return isinstance(descriptor, types.MemberDescriptorType)


def _has_own_attribute(target: Any, name: str) -> bool:
    """Whether `name` lives on `target` itself rather than its class."""
    # Slots (inherited ones included) win over the instance __dict__
    if _is_slot(target, name):
        return hasattr(target, name)
    try:
        return name in vars(target)
    except TypeError:
        return False


def _own_value(target: Any, name: str) -> Any:
    """Raw value stored on `target` itself, descriptors included."""
    if _is_slot(target, name):
        return getattr(target, name)
    return vars(target)[name]


default_registry = MockRegistry()

"""Temporary replacement of attributes and mapping items."""

from understudy.mocks.registry import MISSING, MockEntry, MockRegistry, default_registry

__all__ = [
    "MISSING",
    "MockEntry",
    "MockRegistry",
    "default_registry",
]

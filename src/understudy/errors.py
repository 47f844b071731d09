"""Exceptions raised by understudy itself."""

from typing import Any


class UnderstudyError(Exception):
    """Base class for errors raised by the toolkit."""


class MockTargetError(UnderstudyError, TypeError):
    """Raised when a mock is requested on something that cannot be mocked."""


class Rejection(UnderstudyError):
    """Raised when awaiting a promise rejected with a non-exception reason."""

    def __init__(self, reason: Any) -> None:
        super().__init__(reason)
        self.reason = reason

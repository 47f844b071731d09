"""Configured stub behaviors and the queue that replays them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class ActionKind(StrEnum):
    """What an action does when it fires."""

    INVOKE_CALLBACK = "invoke_callback"
    RETURN_VALUE = "return_value"
    THROW_ERROR = "throw_error"


@dataclass(slots=True)
class Action:
    """One configured behavior in a stub's playback queue."""

    kind: ActionKind
    value: Any = None
    produce: Callable[[], Any] | None = None  # Fresh return value per dispatch
    error: BaseException | None = None
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    callback_index: int | None = None  # None targets the last positional argument
    receiver: Any = None
    has_receiver: bool = False

    @classmethod
    def callback(cls, args: tuple[Any, ...], kwargs: dict[str, Any], index: int | None = None) -> Action:
        return cls(ActionKind.INVOKE_CALLBACK, args=args, kwargs=kwargs, callback_index=index)

    @classmethod
    def returning(cls, value: Any = None, produce: Callable[[], Any] | None = None) -> Action:
        return cls(ActionKind.RETURN_VALUE, value=value, produce=produce)

    @classmethod
    def throwing(cls, error: BaseException) -> Action:
        return cls(ActionKind.THROW_ERROR, error=error)

    def bind_receiver(self, receiver: Any) -> None:
        self.receiver = receiver
        self.has_receiver = True


class ActionQueue:
    """Ordered actions plus the selection policy that replays them.

    In loop mode actions are picked by call index and cycle forever. With
    loop mode off each call consumes the front action; once the queue runs
    dry calls produce None.
    """

    __slots__ = ("actions", "loop_mode")

    def __init__(self, loop_mode: bool = True) -> None:
        self.actions: list[Action] = []
        self.loop_mode = loop_mode

    def append(self, action: Action) -> Action:
        self.actions.append(action)
        return action

    @property
    def last(self) -> Action | None:
        """Most recently appended action still queued."""
        return self.actions[-1] if self.actions else None

    def last_callback(self) -> Action | None:
        """Most recently appended callback action still queued."""
        for action in reversed(self.actions):
            if action.kind is ActionKind.INVOKE_CALLBACK:
                return action
        return None

    def select(self, call_count: int) -> Action | None:
        """Pick the action for the call numbered `call_count` (1-based)."""
        if not self.actions:
            return None
        if self.loop_mode:
            return self.actions[(call_count - 1) % len(self.actions)]
        action = self.actions.pop(0)
        if not self.actions:
            logger.debug("Action queue exhausted; further calls produce None")
        return action

    def dispatch(self, action: Action | None, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Produce the effect of `action` for a call made with `args`."""
        if action is None:
            return None

        # Errors take priority over values
        if action.error is not None:
            raise action.error
        if action.kind is ActionKind.THROW_ERROR:
            logger.debug("Throwing action has no error configured; producing None")
            return None

        if action.kind is ActionKind.RETURN_VALUE:
            if action.produce is not None:
                return action.produce()
            return action.value

        callback = _callback_target(action, args)
        if callback is None:
            return None
        if action.has_receiver:
            return callback(action.receiver, *action.args, **action.kwargs)
        return callback(*action.args, **action.kwargs)


def _callback_target(action: Action, args: tuple[Any, ...]) -> Callable[..., Any] | None:
    index = -1 if action.callback_index is None else action.callback_index
    try:
        target = args[index]
    except IndexError:
        logger.debug("No argument at position %s to call back; producing None", index)
        return None
    if not callable(target):
        logger.debug("Argument at position %s is not callable; producing None", index)
        return None
    return target

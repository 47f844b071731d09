"""Recording wrappers (spies and stubs) and their chainable configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from understudy.config import get_settings
from understudy.core.actions import Action, ActionQueue
from understudy.core.call import CallRecord, next_sequence_number
from understudy.core.promise import promises as default_promises

if TYPE_CHECKING:
    from collections.abc import Callable

    from understudy.core.promise import PromiseAdapter

logger = logging.getLogger(__name__)


def _noop(*args: Any, **kwargs: Any) -> None:
    return None


class Recorder:
    """A callable that records every call and can replay configured behavior.

    Without configuration a recorder calls through to `wrapped` (a spy).
    Each `configure_*` method queues an action and returns the recorder so
    calls can be chained; while the queue holds actions they decide what a
    call does instead of `wrapped` (a stub).

    Example:
        fetch = stub().configure_return("a").configure_throw(TimeoutError())
        fetch()  # "a"
        fetch()  # raises TimeoutError
        fetch.call_count  # 2
    """

    def __init__(
        self,
        wrapped: Callable[..., Any] | None = None,
        *,
        loop_mode: bool | None = None,
        promises: PromiseAdapter | None = None,
    ) -> None:
        self.wrapped: Callable[..., Any] = wrapped if wrapped is not None else _noop
        self.context: Any = None
        self.has_context = False
        self.queue = ActionQueue(get_settings().loop_mode if loop_mode is None else loop_mode)
        self._promises = promises or default_promises
        self.calls: list[CallRecord] = []
        self.first_call: CallRecord | None = None
        self.last_call = CallRecord.placeholder()

    # --- Recorded state ---

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def actions(self) -> list[Action]:
        return self.queue.actions

    @property
    def loop_mode(self) -> bool:
        return self.queue.loop_mode

    @loop_mode.setter
    def loop_mode(self, value: bool) -> None:
        self.queue.loop_mode = value

    def reset(self) -> Recorder:
        """Forget recorded calls; configured behavior is kept."""
        self.calls = []
        self.first_call = None
        self.last_call = CallRecord.placeholder()
        return self

    # --- Invocation ---

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.invoke(args, kwargs)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return BoundRecorder(self, instance)

    def call_with(self, receiver: Any, *args: Any, **kwargs: Any) -> Any:
        """Call the recorder as if it had been reached through `receiver`."""
        return self.invoke(args, kwargs, receiver)

    def invoke(self, args: tuple[Any, ...], kwargs: dict[str, Any], receiver: Any = None) -> Any:
        """Record a call, run its effect and record the outcome.

        Exceptions are recorded on the call and re-raised unchanged.
        """
        call = CallRecord(
            sequence_number=next_sequence_number(),
            args=tuple(args),
            kwargs=dict(kwargs),
            receiver=receiver,
        )
        self.calls.append(call)
        if self.first_call is None:
            self.first_call = call
        self.last_call = call

        try:
            call.returned = self._run(call)
        except BaseException as e:
            call.threw = e
            raise
        return call.returned

    def _run(self, call: CallRecord) -> Any:
        # A non-empty queue always wins, even over configure_call()
        if self.queue.actions or self._is_routed():
            return self._dispatch(*call.args, **call.kwargs)

        if self.has_context:
            return self.wrapped(self.context, *call.args, **call.kwargs)
        if call.receiver is not None:
            return self.wrapped(call.receiver, *call.args, **call.kwargs)
        return self.wrapped(*call.args, **call.kwargs)

    def _dispatch(self, *args: Any, **kwargs: Any) -> Any:
        action = self.queue.select(self.call_count)
        return self.queue.dispatch(action, args, kwargs)

    def _is_routed(self) -> bool:
        return self.wrapped == self._dispatch

    # --- Behavior configuration ---

    def _queue_action(self, action: Action) -> Recorder:
        if not self._is_routed():
            self.wrapped = self._dispatch
        self.queue.append(action)
        return self

    def configure_callback(self, *args: Any, **kwargs: Any) -> Recorder:
        """Call the last positional argument with `args` and `kwargs`."""
        return self._queue_action(Action.callback(args, kwargs))

    def configure_callback_at_index(self, index: int, *args: Any, **kwargs: Any) -> Recorder:
        """Call the positional argument at `index` with `args` and `kwargs`."""
        return self._queue_action(Action.callback(args, kwargs, index=index))

    def configure_return(self, value: Any) -> Recorder:
        return self._queue_action(Action.returning(value))

    def configure_throw(self, error: BaseException) -> Recorder:
        return self._queue_action(Action.throwing(error))

    def configure_resolve(self, value: Any) -> Recorder:
        """Return a fresh promise fulfilled with `value` on each call."""
        adapter = self._promises
        return self._queue_action(Action.returning(produce=lambda: adapter.resolve(value)))

    def configure_reject(self, reason: Any) -> Recorder:
        """Return a fresh promise rejected with `reason` on each call."""
        adapter = self._promises
        return self._queue_action(Action.returning(produce=lambda: adapter.reject(reason)))

    def configure_context(self, receiver: Any) -> Recorder:
        """Fix the receiver of the last queued action.

        With nothing queued, fixes the receiver `wrapped` is called with.
        """
        action = self.queue.last
        if action is None:
            self.context = receiver
            self.has_context = True
        else:
            action.bind_receiver(receiver)
        return self

    def configure_args(self, *args: Any, **kwargs: Any) -> Recorder:
        """Override the arguments of the last queued callback action."""
        action = self.queue.last_callback()
        if action is None:
            logger.debug("configure_args() with no callback action queued; ignoring")
            return self
        action.args = args
        action.kwargs = kwargs
        return self

    def configure_call(self, fn: Callable[..., Any]) -> Recorder:
        """Call `fn` with the real arguments whenever the queue is empty."""
        self.wrapped = fn
        return self

    def __repr__(self) -> str:
        name = getattr(self.wrapped, "__qualname__", None)
        if self._is_routed() or self.wrapped is _noop:
            name = "stub"
        return f"<Recorder {name} calls={self.call_count}>"


class BoundRecorder:
    """A recorder reached through an instance; calls carry it as receiver."""

    __slots__ = ("_recorder", "_receiver")

    def __init__(self, recorder: Recorder, receiver: Any) -> None:
        self._recorder = recorder
        self._receiver = receiver

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._recorder.invoke(args, kwargs, self._receiver)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._recorder, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in BoundRecorder.__slots__:
            object.__setattr__(self, name, value)
        else:
            setattr(self._recorder, name, value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BoundRecorder):
            return self._recorder is other._recorder and self._receiver is other._receiver
        return self._recorder is other

    def __hash__(self) -> int:
        return hash((id(self._recorder), id(self._receiver)))

    def __repr__(self) -> str:
        return f"<bound {self._recorder!r} of {self._receiver!r}>"


def spy(fn: Callable[..., Any] | None = None) -> Recorder:
    """Record calls to `fn` while keeping its behavior."""
    return Recorder(fn)


def stub() -> Recorder:
    """Recorder with no wrapped behavior, meant to be configured."""
    return Recorder()

"""Promise adapter for stubs that resolve or reject.

Stubs never build promises themselves. They ask the process-wide
`PromiseAdapter` for a settled promise on every call, so swapping the
registered factory changes what every resolving/rejecting stub returns.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from understudy.errors import Rejection

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

logger = logging.getLogger(__name__)


class PromiseFactory(Protocol):
    """Builds settled promise-like objects exposing a two-callback `then`."""

    def resolve(self, value: Any) -> Any: ...

    def reject(self, reason: Any) -> Any: ...


class Deferred:
    """Minimal promise bound to the asyncio loop.

    Stubs hand out already-settled Deferreds. `then` never runs a callback
    synchronously: it schedules exactly one of them on the running loop and
    returns a new Deferred settled with that callback's result, so calls can
    be chained. A callback that raises rejects the returned Deferred, and a
    missing callback passes the outcome along. Awaiting a settled Deferred
    yields one loop turn before producing the value or raising the rejection.
    """

    __slots__ = ("_settled", "_fulfilled", "_value", "_handlers")

    def __init__(self, value: Any = None, *, fulfilled: bool = True, settled: bool = True) -> None:
        self._settled = settled
        self._fulfilled = fulfilled
        self._value = value
        self._handlers: list[tuple[Callable[[Any], Any] | None, Callable[[Any], Any] | None, Deferred]] = []

    @classmethod
    def resolved(cls, value: Any) -> Deferred:
        return cls(value, fulfilled=True)

    @classmethod
    def rejected(cls, reason: Any) -> Deferred:
        return cls(reason, fulfilled=False)

    @classmethod
    def pending(cls) -> Deferred:
        return cls(settled=False)

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def fulfilled(self) -> bool:
        return self._settled and self._fulfilled

    @property
    def value(self) -> Any:
        return self._value

    def then(
        self,
        on_fulfilled: Callable[[Any], Any] | None = None,
        on_rejected: Callable[[Any], Any] | None = None,
    ) -> Deferred:
        """Schedule the matching callback on a later turn of the running loop."""
        loop = asyncio.get_running_loop()
        handler = (on_fulfilled, on_rejected, Deferred.pending())
        if self._settled:
            loop.call_soon(self._run_handler, handler)
        else:
            self._handlers.append(handler)
        return handler[2]

    def settle(self, value: Any, *, fulfilled: bool = True) -> None:
        """Fulfil or reject a pending Deferred. Later calls are ignored."""
        if self._settled:
            return
        self._settled = True
        self._fulfilled = fulfilled
        self._value = value
        handlers, self._handlers = self._handlers, []
        if handlers:
            loop = asyncio.get_running_loop()
            for handler in handlers:
                loop.call_soon(self._run_handler, handler)

    def _run_handler(self, handler: tuple[Any, Any, Deferred]) -> None:
        on_fulfilled, on_rejected, chained = handler
        callback = on_fulfilled if self._fulfilled else on_rejected
        if callback is None:
            chained.settle(self._value, fulfilled=self._fulfilled)
            return
        try:
            result = callback(self._value)
        except Exception as e:
            logger.debug("Promise callback raised %r; rejecting the chained promise", e)
            chained.settle(e, fulfilled=False)
            return
        if isinstance(result, Deferred):
            result.then(chained.settle, lambda reason: chained.settle(reason, fulfilled=False))
        else:
            chained.settle(result)

    def __await__(self) -> Generator[Any, None, Any]:
        if self._settled:
            yield from asyncio.sleep(0).__await__()
        else:
            done = asyncio.get_running_loop().create_future()

            def wake(_: Any) -> None:
                if not done.done():
                    done.set_result(None)

            self.then(wake, wake)
            yield from done.__await__()
        if self._fulfilled:
            return self._value
        if isinstance(self._value, BaseException):
            raise self._value
        raise Rejection(self._value)

    def __repr__(self) -> str:
        if not self._settled:
            return "<Deferred pending>"
        state = "fulfilled" if self._fulfilled else "rejected"
        return f"<Deferred {state} {self._value!r}>"


class DeferredFactory:
    """Default factory producing `Deferred` promises."""

    def resolve(self, value: Any) -> Deferred:
        return Deferred.resolved(value)

    def reject(self, reason: Any) -> Deferred:
        return Deferred.rejected(reason)


class PromiseAdapter:
    """Holds the promise factory used by resolving and rejecting stubs."""

    __slots__ = ("factory",)

    def __init__(self, factory: PromiseFactory | None = None) -> None:
        self.factory: PromiseFactory = factory or DeferredFactory()

    def register(self, factory: PromiseFactory) -> None:
        """Use `factory` for every promise built from now on."""
        logger.debug("Registered promise factory %r", factory)
        self.factory = factory

    def reset(self) -> None:
        """Go back to the default `Deferred` factory."""
        self.factory = DeferredFactory()

    def resolve(self, value: Any) -> Any:
        return self.factory.resolve(value)

    def reject(self, reason: Any) -> Any:
        return self.factory.reject(reason)


promises = PromiseAdapter()

"""Behavior tests for resolving and rejecting stubs."""

from __future__ import annotations

import asyncio

import pytest

import understudy
from understudy import Deferred, Rejection, stub


async def settle() -> None:
    """Give scheduled promise callbacks a turn of the loop."""
    await asyncio.sleep(0)
    await asyncio.sleep(0)


class PlainPromise:
    """Promise-like object produced by a custom factory."""

    def __init__(self, resolve_value=None, reject_value=None):
        self.resolve_value = resolve_value
        self.reject_value = reject_value

    def then(self, on_fulfilled, on_rejected):
        loop = asyncio.get_running_loop()
        if self.resolve_value is not None:
            loop.call_soon(on_fulfilled, self.resolve_value)
        elif self.reject_value is not None:
            loop.call_soon(on_rejected, self.reject_value)


class PlainPromiseFactory:
    def resolve(self, value):
        return PlainPromise(resolve_value=value)

    def reject(self, reason):
        return PlainPromise(reject_value=reason)


@pytest.fixture(params=["default", "custom"])
def promise_factory(request):
    if request.param == "custom":
        understudy.mock(understudy.promises, "factory", PlainPromiseFactory())
    return request.param


@pytest.fixture
def fulfilled():
    return stub().configure_return(True)


@pytest.fixture
def rejected():
    return stub().configure_return(True)


@pytest.mark.asyncio
async def test_resolving_stub_settles_on_a_later_turn(promise_factory, fulfilled, rejected):
    recorder = stub().configure_resolve("example")

    promise = recorder()
    promise.then(fulfilled, rejected)

    assert promise is not None
    assert fulfilled.call_count == 0
    await settle()
    assert fulfilled.call_count == 1
    assert fulfilled.last_call.arg == "example"
    assert rejected.call_count == 0


@pytest.mark.asyncio
async def test_resolving_stub_loops_over_values(promise_factory, fulfilled, rejected):
    recorder = stub().configure_resolve("a").configure_resolve("b")

    promises = [recorder(), recorder(), recorder()]
    for promise in promises:
        promise.then(fulfilled, rejected)
    await settle()

    assert [call.arg for call in fulfilled.calls] == ["a", "b", "a"]
    assert rejected.call_count == 0


@pytest.mark.asyncio
async def test_rejecting_stub_settles_to_rejection(promise_factory, fulfilled, rejected):
    recorder = stub().configure_reject("example")

    recorder().then(fulfilled, rejected)
    assert rejected.call_count == 0
    await settle()

    assert fulfilled.call_count == 0
    assert rejected.call_count == 1
    assert rejected.last_call.arg == "example"


@pytest.mark.asyncio
async def test_rejecting_stub_loops_over_reasons(promise_factory, fulfilled, rejected):
    recorder = stub().configure_reject("a").configure_reject("b")

    for _ in range(3):
        recorder().then(fulfilled, rejected)
    await settle()

    assert fulfilled.call_count == 0
    assert [call.arg for call in rejected.calls] == ["a", "b", "a"]


@pytest.mark.asyncio
async def test_each_call_gets_a_fresh_promise():
    recorder = stub().configure_resolve("same")

    first = recorder()
    second = recorder()

    assert first is not second
    assert recorder.calls[0].returned is first


@pytest.mark.asyncio
async def test_deferred_can_be_awaited():
    recorder = stub().configure_resolve({"id": 1}).configure_reject(ValueError("nope"))

    assert await recorder() == {"id": 1}
    with pytest.raises(ValueError, match="nope"):
        await recorder()


@pytest.mark.asyncio
async def test_awaiting_non_exception_rejection_raises_rejection():
    with pytest.raises(Rejection) as excinfo:
        await Deferred.rejected("reason")

    assert excinfo.value.reason == "reason"


@pytest.mark.asyncio
async def test_then_without_matching_callback_does_nothing(fulfilled):
    Deferred.rejected("reason").then(fulfilled)
    await settle()

    assert fulfilled.call_count == 0


@pytest.mark.asyncio
async def test_then_returns_chainable_deferred():
    seen = []

    chained = Deferred.resolved(2).then(lambda value: value * 10)
    chained.then(seen.append)
    await settle()

    assert seen == [20]
    assert await chained == 20


@pytest.mark.asyncio
async def test_raising_callback_rejects_chained_deferred():
    error = ValueError("bad")

    def fail(_):
        raise error

    chained = Deferred.resolved(1).then(fail)

    with pytest.raises(ValueError) as excinfo:
        await chained
    assert excinfo.value is error


@pytest.mark.asyncio
async def test_missing_callback_passes_rejection_along(fulfilled, rejected):
    Deferred.rejected("reason").then(fulfilled).then(None, rejected)
    await settle()
    await settle()

    assert fulfilled.call_count == 0
    assert rejected.last_call.arg == "reason"


@pytest.mark.asyncio
async def test_callback_returning_deferred_is_flattened():
    chained = Deferred.resolved("a").then(lambda value: Deferred.resolved(value + "b"))

    assert await chained == "ab"


@pytest.mark.asyncio
async def test_pending_deferred_settles_later():
    pending = Deferred.pending()
    asyncio.get_running_loop().call_soon(pending.settle, "done")

    assert pending.settled is False
    assert await pending == "done"
    assert pending.fulfilled is True

    pending.settle("ignored")
    assert pending.value == "done"


def test_registered_factory_is_used_until_reset():
    factory = PlainPromiseFactory()
    understudy.promises.register(factory)

    assert isinstance(stub().configure_resolve(1)(), PlainPromise)

    understudy.promises.reset()

    assert isinstance(stub().configure_resolve(1)(), Deferred)

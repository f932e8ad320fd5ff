"""
Tests for the one-shot and continuous source adapters.

Adapters are exercised with a list sink, without a Subscription.
"""

import asyncio
import concurrent.futures

import pytest

from conftest import settle
from pyasyncstate.core import OperationFailure
from pyasyncstate.executor import (
    ContinuousAdapter,
    OneShotAdapter,
    OperationKind,
    SourceAdapter,
    infer_kind,
)
from pyasyncstate.models import AwaitingNext, Failed, Started, Succeeded

# =============================================================================
# Kind inference
# =============================================================================


async def _coroutine_factory():
    return 1


async def _generator_factory():
    yield 1


class _StreamFactory:
    async def __call__(self):
        yield 1


def test_infer_kind():
    assert infer_kind(_coroutine_factory) is OperationKind.ONE_SHOT
    assert infer_kind(lambda: asyncio.sleep(0)) is OperationKind.ONE_SHOT
    assert infer_kind(_generator_factory) is OperationKind.CONTINUOUS
    assert infer_kind(_StreamFactory()) is OperationKind.CONTINUOUS


def test_source_adapter_requires_launch():
    with pytest.raises(TypeError):
        SourceAdapter(_coroutine_factory, [].append)


# =============================================================================
# OneShotAdapter
# =============================================================================


@pytest.mark.asyncio
async def test_one_shot_success():
    events = []
    adapter = OneShotAdapter(_coroutine_factory, events.append)

    assert adapter.start() is True
    assert events == [Started(fresh_cycle=False)]

    await settle()
    assert events == [Started(), Succeeded(1)]
    assert not adapter.is_running
    assert adapter.invocations == 1


@pytest.mark.asyncio
async def test_one_shot_failure():
    events = []
    cause = ValueError("bad response")

    async def failing():
        raise cause

    adapter = OneShotAdapter(failing, events.append)
    adapter.start(fresh_cycle=True)
    await settle()

    assert events[0] == Started(fresh_cycle=True)
    assert isinstance(events[1], Failed)
    assert events[1].cause is cause


@pytest.mark.asyncio
async def test_one_shot_start_while_running_is_noop():
    events = []
    calls = []
    release = asyncio.Event()

    async def slow():
        calls.append(1)
        await release.wait()
        return "done"

    adapter = OneShotAdapter(slow, events.append)
    adapter.start()
    await settle()

    assert adapter.is_running
    assert adapter.start() is False
    assert adapter.invocations == 1

    release.set()
    await settle()
    assert calls == [1]
    assert events == [Started(), Succeeded("done")]


@pytest.mark.asyncio
async def test_one_shot_cancel_discards_result_and_releases_resources():
    events = []
    released = []

    async def slow():
        try:
            await asyncio.sleep(10)
            return "late"
        finally:
            released.append(True)

    adapter = OneShotAdapter(slow, events.append)
    adapter.start()
    await settle()
    adapter.cancel()
    await settle()

    assert events == [Started()]
    assert released == [True]
    assert not adapter.is_running


@pytest.mark.asyncio
async def test_one_shot_factory_exception_becomes_failure():
    events = []

    def broken_factory():
        raise ConnectionError("no route")

    adapter = OneShotAdapter(broken_factory, events.append)
    adapter.start()

    assert isinstance(events[1], Failed)
    assert isinstance(events[1].cause, ConnectionError)
    assert not adapter.is_running


@pytest.mark.asyncio
async def test_one_shot_rejects_non_awaitable():
    events = []
    adapter = OneShotAdapter(lambda: 42, events.append)
    adapter.start()

    assert isinstance(events[1].cause, OperationFailure)


@pytest.mark.asyncio
async def test_one_shot_thread_future_marshalled_to_loop():
    events = []
    loop_thread = []

    def record(event):
        loop_thread.append(asyncio.get_running_loop())
        events.append(event)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        adapter = OneShotAdapter(lambda: pool.submit(sum, [1, 2, 3]), record)
        adapter.start()

        for _ in range(100):
            if len(events) == 2:
                break
            await asyncio.sleep(0.01)

    assert events == [Started(), Succeeded(6)]
    assert loop_thread[-1] is asyncio.get_running_loop()


# =============================================================================
# ContinuousAdapter
# =============================================================================


@pytest.mark.asyncio
async def test_continuous_items_then_failure():
    events = []
    cause = RuntimeError("feed dropped")

    async def feed():
        yield "v1"
        yield "v2"
        raise cause

    adapter = ContinuousAdapter(feed, events.append)
    adapter.start()
    await settle()

    assert events[:3] == [Started(), Succeeded("v1"), Succeeded("v2")]
    assert isinstance(events[3], Failed)
    assert events[3].cause is cause
    assert adapter.items_received == 2
    assert not adapter.is_running


@pytest.mark.asyncio
async def test_continuous_completion_leaves_last_state():
    events = []

    async def feed():
        yield 1
        yield 2

    adapter = ContinuousAdapter(feed, events.append)
    adapter.start()
    await settle()

    assert events == [Started(), Succeeded(1), Succeeded(2)]
    assert not adapter.is_running


@pytest.mark.asyncio
async def test_continuous_loading_between_items():
    events = []

    async def feed():
        yield 1
        yield 2

    adapter = ContinuousAdapter(feed, events.append, loading_between_items=True)
    adapter.start()
    await settle()

    assert events == [
        Started(),
        Succeeded(1),
        AwaitingNext(),
        Succeeded(2),
        AwaitingNext(),
        Succeeded(2),
    ]


@pytest.mark.asyncio
async def test_continuous_cancel_closes_generator():
    events = []
    closed = []
    gate = asyncio.Event()

    async def feed():
        try:
            yield "first"
            await gate.wait()
            yield "never delivered"
        finally:
            closed.append(True)

    adapter = ContinuousAdapter(feed, events.append)
    adapter.start()
    await settle()
    adapter.cancel()
    gate.set()
    await settle()

    assert events == [Started(), Succeeded("first")]
    assert closed == [True]


@pytest.mark.asyncio
async def test_continuous_rejects_non_iterable():
    events = []

    async def not_a_stream():
        return 1

    adapter = ContinuousAdapter(not_a_stream, events.append)
    adapter.start()

    assert isinstance(events[1].cause, OperationFailure)
    await settle()

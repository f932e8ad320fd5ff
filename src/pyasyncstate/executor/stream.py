"""Async iterator binding over the observer capability.

StateStream is an Observer that queues every state it receives and yields
them to an `async for` loop. It ends when the dispatcher closes (the
subscription was cancelled) or when the consumer stops iterating.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pyasyncstate.core import ObserverHandle
from pyasyncstate.models import StateModel

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class StateStream(Generic[T]):
    """Observer yielding states as an async iterator.

    With the default maxsize of 0 the buffer is unbounded: a stream that
    is never read keeps every state a continuous source publishes until
    it is closed. Pass a positive maxsize to keep only the most recent
    states; the oldest queued state is dropped when the buffer is full.

    Usage:
        async with subscription.states() as stream:
            async for state in stream:
                print(state)
                if state.status.is_settled:
                    break
    """

    def __init__(self, initial: StateModel[T], maxsize: int = 0):
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._queue.put_nowait(initial)
        self._closed = False
        self._dropped = 0
        self._detach: Callable[[ObserverHandle], Any] | None = None
        self.handle: ObserverHandle | None = None

    @property
    def dropped(self) -> int:
        """Number of states discarded because the buffer was full."""
        return self._dropped

    def on_detach(self, detach: Callable[[ObserverHandle], Any]) -> None:
        """Register how to detach this stream when iteration stops early."""
        self._detach = detach

    def receive(self, state: StateModel[T]) -> None:
        if not self._closed:
            self._put(state)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._put(_CLOSED)

    def _put(self, item: Any) -> None:
        if self._queue.full():
            oldest = self._queue.get_nowait()
            self._dropped += 1
            logger.debug(f"stream buffer full, dropped {oldest}")
        self._queue.put_nowait(item)

    def __aiter__(self) -> StateStream[T]:
        return self

    async def __anext__(self) -> StateModel[T]:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> StateStream[T]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop receiving states and detach from the dispatcher."""
        self.close()
        if self._detach is not None and self.handle is not None:
            self._detach(self.handle)
            self._detach = None

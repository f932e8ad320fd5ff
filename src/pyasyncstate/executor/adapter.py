"""
Source adapters bridging operations into state transition events.

Design Pattern: Adapter Pattern
OneShotAdapter and ContinuousAdapter adapt two kinds of asynchronous
producer to one contract: start(), cancel(), and a sink receiving
transition events.

- OneShotAdapter: the operation is an awaitable (coroutine, task, future,
  or concurrent.futures.Future) producing exactly one result or failure.
- ContinuousAdapter: the operation is an async iterable producing zero or
  more items and at most one terminal failure.

Each start() bumps a generation counter. Results carrying an older
generation are discarded, so cancel() (or a restart) guarantees that an
in-flight invocation has no visible effect once it is superseded.
Cancellation is cooperative: the invocation task is cancelled, letting
the operation run its cleanup, but its eventual result is dropped either way.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Awaitable, Callable
from enum import Enum
from typing import Any

from pyasyncstate.core import OperationFailure
from pyasyncstate.models import AwaitingNext, Failed, Started, StateEvent, Succeeded

logger = logging.getLogger(__name__)

__all__ = [
    "OperationKind",
    "OperationFactory",
    "EventSink",
    "SourceAdapter",
    "OneShotAdapter",
    "ContinuousAdapter",
    "infer_kind",
]

OperationFactory = Callable[[], Any]
"""Zero-argument producer of a fresh operation, invoked once per attempt."""

EventSink = Callable[[StateEvent], Any]


class OperationKind(Enum):
    """Kind of producer an operation factory returns."""

    ONE_SHOT = "ONE_SHOT"
    CONTINUOUS = "CONTINUOUS"

    def __str__(self) -> str:
        return self.value


def infer_kind(factory: OperationFactory) -> OperationKind:
    """Guess the operation kind from the factory itself.

    Async generator functions are continuous; anything else is one-shot.
    Pass the kind explicitly for factories returning other async iterables.
    """
    if inspect.isasyncgenfunction(factory):
        return OperationKind.CONTINUOUS
    call = getattr(factory, "__call__", None)
    if call is not None and inspect.isasyncgenfunction(call):
        return OperationKind.CONTINUOUS
    return OperationKind.ONE_SHOT


class SourceAdapter(ABC):
    """Common lifecycle for both adapter variants.

    Template Method: start() emits Started, invokes the factory and hands
    the operation to _launch(), which subclasses implement.
    """

    kind: OperationKind
    restartable: bool = False
    """Whether a manual retry may restart a live invocation."""

    def __init__(self, factory: OperationFactory, sink: EventSink, name: str = ""):
        """Initialize adapter.

        Args:
            factory: Zero-argument operation factory
            sink: Receives the transition events of the current invocation
            name: Subscription name for log messages
        """
        self._factory = factory
        self._sink = sink
        self._name = name
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._invocations = 0
        self._discarded = 0

    @property
    def is_running(self) -> bool:
        """True while an invocation is in flight."""
        return self._task is not None and not self._task.done()

    @property
    def invocations(self) -> int:
        """Number of times the operation factory has been invoked."""
        return self._invocations

    @property
    def discarded(self) -> int:
        """Number of results dropped because their invocation was superseded."""
        return self._discarded

    def start(self, fresh_cycle: bool = False) -> bool:
        """Invoke the operation.

        Emits Started synchronously, then invokes the factory and launches
        the invocation on the running event loop.

        Args:
            fresh_cycle: Begin a new retry cycle (attempt resets to 1)

        Returns:
            False if an invocation is already in flight (no-op), True otherwise
        """
        if self.is_running:
            logger.debug(f"{self._name}: start ignored, invocation already in flight")
            return False

        loop = asyncio.get_running_loop()

        self._generation += 1
        generation = self._generation
        self._sink(Started(fresh_cycle=fresh_cycle))
        if not self._is_current(generation):
            # Cancelled by an observer of the loading state
            return True

        self._invocations += 1
        try:
            operation = self._factory()
        except Exception as e:
            logger.debug(f"{self._name}: operation factory raised {e!r}")
            self._deliver(generation, Failed(e))
            return True

        task = self._launch(loop, operation, generation)
        if task is not None:
            self._task = task
        return True

    def cancel(self) -> None:
        """Supersede the current invocation.

        Any result it produces later is discarded. The invocation task is
        cancelled so the operation can release its resources.
        """
        self._generation += 1
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"{self._name}: in-flight invocation cancelled")

    @abstractmethod
    def _launch(
        self, loop: asyncio.AbstractEventLoop, operation: Any, generation: int
    ) -> asyncio.Task | None:
        """Run operation for generation.

        Returns the task consuming the operation, or None if it failed
        synchronously (a Failed event has then been delivered).
        """

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _deliver(self, generation: int, event: StateEvent) -> bool:
        """Forward event to the sink unless its invocation was superseded."""
        if not self._is_current(generation):
            self._discarded += 1
            logger.debug(f"{self._name}: discarded {type(event).__name__} from stale invocation")
            return False
        self._sink(event)
        return True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(running={self.is_running}, "
            f"invocations={self._invocations})"
        )


class OneShotAdapter(SourceAdapter):
    """Adapter for operations producing exactly one result or failure.

    Usage:
        adapter = OneShotAdapter(lambda: fetch_user(42), sink)
        adapter.start()      # emits Started, then Succeeded or Failed later
        adapter.start()      # no-op while the first invocation is in flight
    """

    kind = OperationKind.ONE_SHOT
    restartable = False

    def _launch(
        self, loop: asyncio.AbstractEventLoop, operation: Any, generation: int
    ) -> asyncio.Task | None:
        if isinstance(operation, concurrent.futures.Future):
            # Completion of a worker-thread future is marshalled onto the loop
            awaitable: Awaitable[Any] = asyncio.wrap_future(operation, loop=loop)
        elif inspect.isawaitable(operation):
            awaitable = operation
        else:
            error = OperationFailure(
                f"one-shot operation factory returned {type(operation).__name__}, "
                "expected an awaitable"
            )
            self._deliver(generation, Failed(error))
            return None

        return loop.create_task(self._run(awaitable, generation))

    async def _run(self, awaitable: Awaitable[Any], generation: int) -> None:
        try:
            result = await awaitable
        except asyncio.CancelledError:
            # Cooperative cancellation, never an error state
            raise
        except Exception as e:
            self._deliver(generation, Failed(e))
            return

        self._deliver(generation, Succeeded(result))


class ContinuousAdapter(SourceAdapter):
    """Adapter for operations producing a sequence of items.

    Each item emits Succeeded; a failure of the sequence emits Failed and
    ends that sequence instance. Normal completion of the sequence leaves
    the last state in place.

    With loading_between_items enabled, AwaitingNext follows every item so
    observers see success → loading → success while the next item is
    awaited.

    Usage:
        adapter = ContinuousAdapter(lambda: price_feed("ACME"), sink)
        adapter.start()
    """

    kind = OperationKind.CONTINUOUS
    restartable = True

    def __init__(
        self,
        factory: OperationFactory,
        sink: EventSink,
        name: str = "",
        loading_between_items: bool = False,
    ):
        super().__init__(factory, sink, name)
        self.loading_between_items = loading_between_items
        self._items_received = 0

    @property
    def items_received(self) -> int:
        """Items delivered by the current (or last) sequence instance."""
        return self._items_received

    def _launch(
        self, loop: asyncio.AbstractEventLoop, operation: Any, generation: int
    ) -> asyncio.Task | None:
        self._items_received = 0

        if not isinstance(operation, AsyncIterable):
            if inspect.iscoroutine(operation):
                operation.close()
            error = OperationFailure(
                f"continuous operation factory returned {type(operation).__name__}, "
                "expected an async iterable"
            )
            self._deliver(generation, Failed(error))
            return None

        return loop.create_task(self._consume(operation, generation))

    async def _consume(self, source: AsyncIterable[Any], generation: int) -> None:
        iterator = aiter(source)
        last_item: Any = None
        try:
            async for item in iterator:
                if not self._is_current(generation):
                    self._discarded += 1
                    return
                self._items_received += 1
                last_item = item
                self._deliver(generation, Succeeded(item))
                if self.loading_between_items:
                    self._deliver(generation, AwaitingNext())
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._deliver(generation, Failed(e))
            return
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.debug(
            f"{self._name}: sequence completed after {self._items_received} items"
        )
        if self.loading_between_items and self._items_received:
            # Sequence ended while awaiting a next item; settle on the last one
            self._deliver(generation, Succeeded(last_item))

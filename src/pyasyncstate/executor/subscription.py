"""Subscription: the live binding of one operation to its observers.

A Subscription owns exactly one source adapter, one retry supervisor and
one dispatcher. It applies every event reported by the adapter to the
current state through next_state(), publishes the result, and hands
failures to the supervisor.

Features:
- Explicit construction (create) with explicit dependencies, no globals
- Builder methods for configuration before start()
- Automatic retry with bounded exponential backoff
- Manual retry starting a fresh cycle
- Deterministic cancellation: timer, invocation and deferred calls
- Re-entrant start()/retry() from observers deferred to the next loop turn
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import UUID

from uuid_extensions import uuid7

from pyasyncstate.core import (
    Observer,
    ObserverCallback,
    ObserverHandle,
    SubscriptionCancelledError,
    SubscriptionError,
    next_state,
)
from pyasyncstate.executor.adapter import (
    ContinuousAdapter,
    OneShotAdapter,
    OperationFactory,
    OperationKind,
    SourceAdapter,
    infer_kind,
)
from pyasyncstate.executor.dispatcher import Dispatcher
from pyasyncstate.executor.stream import StateStream
from pyasyncstate.executor.supervisor import RetrySupervisor
from pyasyncstate.executor.timer import RetryTimer
from pyasyncstate.models import (
    Failed,
    RetryPolicy,
    StateEvent,
    StateModel,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContinuousErrorPolicy(Enum):
    """What a failure of a continuous source does to the subscription."""

    RETRY = "RETRY"
    """Resubscribe under the retry policy's backoff."""

    TERMINATE = "TERMINATE"
    """The first failure is terminal until a manual retry()."""

    def __str__(self) -> str:
        return self.value


class Subscription(Generic[T]):
    """Wraps an async operation into loading/success/error state.

    Usage:
        subscription = create(lambda: fetch_user(42), RetryPolicy.STANDARD)
        handle = subscription.subscribe(lambda state: render(state))
        subscription.start()

        # ... later ...
        subscription.retry()      # manual retry after a terminal error
        subscription.cancel()     # stops everything, no further notifications

    All methods must be called from the event loop thread. start() and
    retry() additionally require a running loop.
    """

    def __init__(
        self,
        operation_factory: OperationFactory,
        retry_policy: RetryPolicy = RetryPolicy.STANDARD,
        *,
        kind: OperationKind | None = None,
        name: str | None = None,
    ):
        """Initialize subscription in the Idle state.

        Nothing runs until start() is called.

        Args:
            operation_factory: Zero-argument producer of a fresh operation,
                invoked once per attempt
            retry_policy: Automatic retry policy
            kind: One-shot or continuous; inferred from the factory if None
            name: Name used in log messages (defaults to the subscription id)
        """
        if not callable(operation_factory):
            raise TypeError(f"operation_factory must be callable, got {operation_factory!r}")

        self._id: UUID = uuid7()
        self._name = name or f"subscription-{self._id}"
        self._kind = kind if kind is not None else infer_kind(operation_factory)
        self._continuous_error_policy = ContinuousErrorPolicy.RETRY

        self._dispatcher = Dispatcher(name=self._name)
        self._supervisor = RetrySupervisor(retry_policy, name=self._name)
        self._adapter = self._build_adapter(operation_factory)

        self._started = False
        self._cancelled = False
        self._deferred: set[asyncio.Handle] = set()

    def _build_adapter(self, factory: OperationFactory) -> SourceAdapter:
        if self._kind is OperationKind.CONTINUOUS:
            return ContinuousAdapter(factory, self._apply, name=self._name)
        return OneShotAdapter(factory, self._apply, name=self._name)

    # =========================================================================
    # Builder methods (configuration before start)
    # =========================================================================

    def with_timer(self, timer: RetryTimer) -> Subscription[T]:
        """Use timer for retry scheduling instead of the event loop."""
        self._require_unstarted("with_timer")
        self._supervisor.use_timer(timer)
        return self

    def with_continuous_error_policy(self, policy: ContinuousErrorPolicy) -> Subscription[T]:
        """Choose whether a failed continuous source is resubscribed."""
        self._require_unstarted("with_continuous_error_policy")
        self._continuous_error_policy = policy
        return self

    def with_loading_between_items(self, enabled: bool = True) -> Subscription[T]:
        """Publish loading while a continuous source awaits its next item."""
        self._require_unstarted("with_loading_between_items")
        if not isinstance(self._adapter, ContinuousAdapter):
            raise SubscriptionError("loading between items requires a continuous operation")
        self._adapter.loading_between_items = enabled
        return self

    def _require_unstarted(self, method: str) -> None:
        if self._started:
            raise SubscriptionError(f"{method}() must be called before start()")
        if self._cancelled:
            raise SubscriptionCancelledError(f"{self._name} is cancelled")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> OperationKind:
        return self._kind

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._supervisor.policy

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def retry_pending(self) -> bool:
        """True while an automatic retry is scheduled."""
        return self._supervisor.pending

    @property
    def next_retry_delay(self) -> float | None:
        """Backoff delay of the scheduled automatic retry, None if none is pending."""
        return self._supervisor.pending_delay

    @property
    def invocations(self) -> int:
        """Number of times the operation factory has been invoked."""
        return self._adapter.invocations

    def current_state(self) -> StateModel[T]:
        """Synchronous snapshot of the latest state."""
        return self._dispatcher.current

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, observer: Observer | ObserverCallback) -> ObserverHandle:
        """Attach an observer receiving every distinct state from now on.

        Raises:
            SubscriptionCancelledError: If the subscription is cancelled
        """
        if self._cancelled:
            raise SubscriptionCancelledError(f"{self._name} is cancelled")
        return self._dispatcher.subscribe(observer)

    def unsubscribe(self, handle: ObserverHandle) -> bool:
        """Detach an observer. Returns False if it was not attached."""
        return self._dispatcher.unsubscribe(handle)

    def states(self, maxsize: int = 0) -> StateStream[T]:
        """Async iterator over distinct states, starting with the current one.

        maxsize bounds the buffer of unread states (0 is unbounded); when
        full, the oldest unread state is dropped.

        Usage:
            async for state in subscription.states():
                if state.status is Status.SUCCESS:
                    break
        """
        if self._cancelled:
            raise SubscriptionCancelledError(f"{self._name} is cancelled")
        stream: StateStream[T] = StateStream(self._dispatcher.current, maxsize=maxsize)
        stream.handle = self._dispatcher.subscribe(stream)
        stream.on_detach(self._dispatcher.unsubscribe)
        return stream

    async def wait_for(
        self,
        predicate: Callable[[StateModel[T]], bool],
        timeout: float | None = None,
    ) -> StateModel[T]:
        """Wait until a state satisfying predicate is published.

        The current state is checked first.

        Raises:
            SubscriptionCancelledError: If the subscription is cancelled first
            TimeoutError: If timeout elapses first
        """
        current = self._dispatcher.current
        if predicate(current):
            return current
        if self._cancelled:
            raise SubscriptionCancelledError(f"{self._name} is cancelled")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[StateModel[T]] = loop.create_future()

        class _Waiter:
            def receive(self, state: StateModel[T]) -> None:
                if not future.done() and predicate(state):
                    future.set_result(state)

            def close(self) -> None:
                if not future.done():
                    future.set_exception(SubscriptionCancelledError("subscription cancelled"))

        handle = self._dispatcher.subscribe(_Waiter())
        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            self._dispatcher.unsubscribe(handle)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Invoke the operation if it is not already active.

        No-op while an invocation is in flight or an automatic retry is
        pending. From a settled state (success, or terminal error) it
        invokes the operation again as a fresh cycle.

        Raises:
            SubscriptionCancelledError: If the subscription is cancelled
        """
        self._invoke(manual=False)

    def retry(self) -> None:
        """Manually re-invoke the operation, starting a fresh retry cycle.

        Cancels any pending automatic retry. Attempt resets to 1. No-op for
        a one-shot operation that is still loading; a live continuous
        source is restarted.

        Raises:
            SubscriptionCancelledError: If the subscription is cancelled
        """
        self._invoke(manual=True)

    def cancel(self) -> None:
        """Cancel the subscription.

        Cancels the pending retry timer and deferred calls synchronously,
        supersedes the in-flight invocation and detaches all observers.
        No notification is published. Idempotent.
        """
        if self._cancelled:
            return
        self._cancelled = True

        self._supervisor.cancel()
        for handle in self._deferred:
            handle.cancel()
        self._deferred.clear()
        self._adapter.cancel()
        self._dispatcher.close()

        logger.info(f"{self._name}: cancelled in state {self._dispatcher.current}")

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    # =========================================================================
    # Internals
    # =========================================================================

    def _invoke(self, manual: bool) -> None:
        if self._cancelled:
            raise SubscriptionCancelledError(f"{self._name} is cancelled")

        if self._dispatcher.is_publishing:
            # Do not mutate the state currently being published
            loop = asyncio.get_running_loop()
            handle: asyncio.Handle | None = None

            def run_deferred() -> None:
                self._deferred.discard(handle)
                if not self._cancelled:
                    self._invoke(manual)

            handle = loop.call_soon(run_deferred)
            self._deferred.add(handle)
            logger.debug(f"{self._name}: re-entrant {'retry' if manual else 'start'} deferred")
            return

        if self._adapter.is_running:
            if not (manual and self._adapter.restartable):
                logger.debug(f"{self._name}: invocation in flight, ignoring")
                return
            self._adapter.cancel()
        elif self._supervisor.pending and not manual:
            logger.debug(f"{self._name}: automatic retry pending, ignoring start")
            return

        self._supervisor.cancel()
        self._started = True
        self._adapter.start(fresh_cycle=True)

    def _apply(self, event: StateEvent) -> StateModel[T] | None:
        """Sink for adapter events: transition, publish, supervise."""
        if self._cancelled:
            logger.debug(f"{self._name}: discarded {type(event).__name__} after cancel")
            return None

        state = next_state(self._dispatcher.current, event)

        # Decide on a retry first so observers of the error see retry_pending
        if isinstance(event, Failed):
            self._supervise(state, event.cause)

        self._dispatcher.publish(state)
        return state

    def _supervise(self, state: StateModel[T], cause: BaseException) -> None:
        if isinstance(self._adapter, ContinuousAdapter):
            if self._continuous_error_policy is ContinuousErrorPolicy.TERMINATE:
                logger.info(f"{self._name}: continuous source failed, terminal by policy")
                return
            if self._adapter.items_received:
                # The failed sequence was healthy before; back off from scratch
                self._supervisor.on_failure(1, cause, lambda: self._auto_retry(fresh_cycle=True))
                return

        self._supervisor.on_failure(
            state.attempt, cause, lambda: self._auto_retry(fresh_cycle=False)
        )

    def _auto_retry(self, fresh_cycle: bool) -> None:
        if self._cancelled:
            return
        self._adapter.start(fresh_cycle=fresh_cycle)

    def __repr__(self) -> str:
        return (
            f"Subscription(name={self._name!r}, kind={self._kind}, "
            f"state={self._dispatcher.current}, cancelled={self._cancelled})"
        )


def create(
    operation_factory: OperationFactory,
    retry_policy: RetryPolicy = RetryPolicy.STANDARD,
    *,
    kind: OperationKind | None = None,
    name: str | None = None,
) -> Subscription[Any]:
    """Create a subscription for an operation factory.

    Args:
        operation_factory: Zero-argument producer of a fresh operation
            (coroutine function, function returning a future, or async
            generator function), invoked once per attempt
        retry_policy: Automatic retry policy
        kind: One-shot or continuous; inferred if None
        name: Name used in log messages

    Example:
        ```python
        async def fetch_user():
            return await api.get("/users/42")

        subscription = create(fetch_user, RetryPolicy.with_max_attempts(3))
        subscription.subscribe(print)
        subscription.start()
        ```
    """
    return Subscription(operation_factory, retry_policy, kind=kind, name=name)

"""
pyasyncstate: Async operation state for Python

Wraps a one-shot or continuous async operation into a normalized
loading/success/error state, with automatic bounded-backoff retries and
change-driven observer notification.

Design Pattern: Façade Pattern
This module provides a simplified interface to the framework, hiding the
adapters, supervisor and dispatcher behind create() and Subscription.

Example:
    ```python
    import asyncio
    from pyasyncstate import RetryPolicy, Success, Error, create

    async def fetch_quote():
        return await quote_service.latest("ACME")

    async def main():
        async with create(fetch_quote, RetryPolicy.STANDARD) as subscription:
            subscription.subscribe(print)
            subscription.start()

            state = await subscription.wait_for(
                lambda s: isinstance(s, Success)
                or (isinstance(s, Error) and not subscription.retry_pending)
            )

    asyncio.run(main())
    ```
"""

# Models - dependency-free value types
from pyasyncstate.models import (
    IDLE,
    AwaitingNext,
    Error,
    ErrorRecord,
    Failed,
    Idle,
    Loading,
    RetryableError,
    RetryPolicy,
    Started,
    StateEvent,
    StateModel,
    Status,
    Succeeded,
    Success,
)

# Core - pure functions, observer capability, errors
from pyasyncstate.core import (
    InvalidTransitionError,
    Observer,
    ObserverHandle,
    OperationFailure,
    StateNotReadyError,
    SubscriptionCancelledError,
    SubscriptionError,
    is_error,
    is_idle,
    is_loading,
    is_success,
    next_state,
    unwrap,
    value_or_none,
    when,
)

# Execution - subscriptions and their collaborators
from pyasyncstate.executor import (
    ContinuousAdapter,
    ContinuousErrorPolicy,
    Dispatcher,
    LoopTimer,
    OneShotAdapter,
    OperationKind,
    RetrySupervisor,
    RetryTimer,
    StateStream,
    Subscription,
    create,
)

__version__ = "0.1.0"

__all__ = [
    # State values
    "Status",
    "StateModel",
    "Idle",
    "Loading",
    "Success",
    "Error",
    "ErrorRecord",
    "IDLE",
    # Transitions
    "StateEvent",
    "Started",
    "Succeeded",
    "Failed",
    "AwaitingNext",
    "next_state",
    # Reading state
    "is_idle",
    "is_loading",
    "is_success",
    "is_error",
    "when",
    "value_or_none",
    "unwrap",
    # Retry
    "RetryPolicy",
    "RetryableError",
    "RetrySupervisor",
    "RetryTimer",
    "LoopTimer",
    # Observers
    "Observer",
    "ObserverHandle",
    "Dispatcher",
    "StateStream",
    # Subscriptions
    "Subscription",
    "OperationKind",
    "ContinuousErrorPolicy",
    "OneShotAdapter",
    "ContinuousAdapter",
    "create",
    # Errors
    "SubscriptionError",
    "SubscriptionCancelledError",
    "StateNotReadyError",
    "InvalidTransitionError",
    "OperationFailure",
    # Metadata
    "__version__",
]

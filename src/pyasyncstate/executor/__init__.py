"""
Executor module - Runtime engine for async operation state.

This module contains the stateful components:
- adapter: OneShotAdapter / ContinuousAdapter bridging operations to events
- timer: Cancellable retry timers (LoopTimer)
- supervisor: RetrySupervisor with bounded exponential backoff
- dispatcher: Change-driven observer dispatch
- subscription: Subscription tying it all together, and create()
- stream: StateStream async iterator binding
"""

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
from pyasyncstate.executor.subscription import ContinuousErrorPolicy, Subscription, create
from pyasyncstate.executor.supervisor import RetrySupervisor
from pyasyncstate.executor.timer import LoopTimer, RetryTimer, TimerError, TimerHandle

__all__ = [
    # Adapters
    "SourceAdapter",
    "OneShotAdapter",
    "ContinuousAdapter",
    "OperationKind",
    "OperationFactory",
    "infer_kind",
    # Timers
    "RetryTimer",
    "TimerHandle",
    "LoopTimer",
    "TimerError",
    # Supervision and dispatch
    "RetrySupervisor",
    "Dispatcher",
    "StateStream",
    # Subscription
    "Subscription",
    "ContinuousErrorPolicy",
    "create",
]

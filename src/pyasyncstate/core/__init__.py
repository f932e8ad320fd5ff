"""
Core logic for pyasyncstate.

This module contains the side-effect-free parts of the framework:
- next_state: Pure transition function over StateModel values
- Observer / ObserverHandle: The single observer capability
- when / unwrap / value_or_none / is_*: Reading state values
- Exception hierarchy
"""

from pyasyncstate.core.errors import (
    InvalidTransitionError,
    OperationFailure,
    StateNotReadyError,
    SubscriptionCancelledError,
    SubscriptionError,
)
from pyasyncstate.core.helpers import (
    is_error,
    is_idle,
    is_loading,
    is_success,
    unwrap,
    value_or_none,
    when,
)
from pyasyncstate.core.observer import Observer, ObserverCallback, ObserverHandle, as_callback
from pyasyncstate.core.transition import next_state

__all__ = [
    "next_state",
    "Observer",
    "ObserverCallback",
    "ObserverHandle",
    "as_callback",
    "is_idle",
    "is_loading",
    "is_success",
    "is_error",
    "when",
    "value_or_none",
    "unwrap",
    "SubscriptionError",
    "SubscriptionCancelledError",
    "StateNotReadyError",
    "InvalidTransitionError",
    "OperationFailure",
]

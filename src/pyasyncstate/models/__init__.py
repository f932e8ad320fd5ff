"""Core data models for async operation state.

Defines the StateModel union, transition events, and retry behavior.

Design: Dependency-Free Models
These types have no dependencies on core or executor modules to
prevent circular imports and enable clean layering.
"""

from pyasyncstate.models.events import AwaitingNext, Failed, Started, StateEvent, Succeeded
from pyasyncstate.models.retry import RetryableError, RetryPolicy, is_retryable
from pyasyncstate.models.state import (
    IDLE,
    Error,
    ErrorRecord,
    Idle,
    Loading,
    StateModel,
    Success,
)
from pyasyncstate.models.status import Status

__all__ = [
    "Status",
    "StateModel",
    "Idle",
    "Loading",
    "Success",
    "Error",
    "ErrorRecord",
    "IDLE",
    "StateEvent",
    "Started",
    "Succeeded",
    "Failed",
    "AwaitingNext",
    "RetryPolicy",
    "RetryableError",
    "is_retryable",
]

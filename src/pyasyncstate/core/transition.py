"""
Pure state transition function.

next_state() is the complete state table of an operation. It has no side
effects and needs neither an adapter nor a supervisor, so the table can
be tested in isolation:

    ┌─────────┬──────────────┬────────────────┬──────────────┬──────────────┐
    │ current │ Started      │ Succeeded      │ Failed       │ AwaitingNext │
    ├─────────┼──────────────┼────────────────┼──────────────┼──────────────┤
    │ Idle    │ Loading(1)   │ invalid        │ invalid      │ invalid      │
    │ Loading │ unchanged(†) │ Success(n)     │ Error(n)     │ invalid      │
    │ Success │ Loading(*)   │ Success(n)     │ Error(n)     │ Loading(n)   │
    │ Error   │ Loading(*)   │ invalid        │ invalid      │ invalid      │
    └─────────┴──────────────┴────────────────┴──────────────┴──────────────┘

    (*) attempt 1 on a fresh cycle, otherwise current attempt + 1
    (†) a fresh cycle while Loading(n > 1) resets to Loading(1)
"""

from __future__ import annotations

from typing import Any

from pyasyncstate.core.errors import InvalidTransitionError
from pyasyncstate.models import (
    AwaitingNext,
    Error,
    ErrorRecord,
    Failed,
    Idle,
    Loading,
    Started,
    StateEvent,
    StateModel,
    Succeeded,
    Success,
)

__all__ = ["next_state"]


def next_state(current: StateModel[Any], event: StateEvent) -> StateModel[Any]:
    """
    Compute the state that follows current when event occurs.

    Args:
        current: The state before the event
        event: What happened to the operation

    Returns:
        The next state. Started while Loading returns current itself,
        so a duplicate start is a no-op, unless a fresh cycle restarts
        a later attempt.

    Raises:
        InvalidTransitionError: If the event is not valid in current

    Example:
        ```python
        state = next_state(IDLE, Started())          # Loading(attempt=1)
        state = next_state(state, Succeeded(42))     # Success(data=42, attempt=1)
        ```
    """
    match current, event:
        case Loading(attempt=attempt), Started(fresh_cycle=True) if attempt > 1:
            return Loading(attempt=1)

        case Loading(), Started():
            return current

        case Idle(), Started():
            return Loading(attempt=1)

        case (Success() | Error()), Started(fresh_cycle=fresh):
            return Loading(attempt=1 if fresh else current.attempt + 1)

        case (Loading() | Success()), Succeeded(data=data):
            return Success(data=data, attempt=current.attempt)

        case (Loading() | Success()), Failed(cause=cause):
            record = ErrorRecord.from_exception(cause, attempt=current.attempt)
            return Error(error_info=record, attempt=current.attempt)

        case Success(), AwaitingNext():
            return Loading(attempt=current.attempt)

    raise InvalidTransitionError(current, event)

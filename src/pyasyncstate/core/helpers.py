"""
Helpers for reading StateModel values.

Type guards narrow the StateModel union; when() folds all four variants
into one value; unwrap() and value_or_none() extract the data.

Example:
    ```python
    label = when(
        state,
        idle=lambda: "Not started",
        loading=lambda attempt: f"Loading (attempt {attempt})",
        success=lambda data: f"Got {data}",
        error=lambda record: f"Failed: {record.message}",
    )
    ```
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeGuard, TypeVar

from pyasyncstate.core.errors import OperationFailure, StateNotReadyError
from pyasyncstate.models import Error, ErrorRecord, Idle, Loading, StateModel, Success

__all__ = [
    "is_idle",
    "is_loading",
    "is_success",
    "is_error",
    "when",
    "value_or_none",
    "unwrap",
]

T = TypeVar("T")
R = TypeVar("R")


def is_idle(state: StateModel[Any]) -> TypeGuard[Idle]:
    return isinstance(state, Idle)


def is_loading(state: StateModel[Any]) -> TypeGuard[Loading]:
    return isinstance(state, Loading)


def is_success(state: StateModel[T]) -> TypeGuard[Success[T]]:
    return isinstance(state, Success)


def is_error(state: StateModel[Any]) -> TypeGuard[Error]:
    return isinstance(state, Error)


def when(
    state: StateModel[T],
    *,
    idle: Callable[[], R],
    loading: Callable[[int], R],
    success: Callable[[T], R],
    error: Callable[[ErrorRecord], R],
) -> R:
    """
    Fold a state into a single value, one handler per variant.

    Args:
        state: State to fold
        idle: Called with no arguments for Idle
        loading: Called with the attempt number for Loading
        success: Called with the data for Success
        error: Called with the ErrorRecord for Error

    Returns:
        Whatever the selected handler returns
    """
    match state:
        case Idle():
            return idle()
        case Loading(attempt=attempt):
            return loading(attempt)
        case Success(data=data):
            return success(data)
        case Error(error_info=record):
            return error(record)
    raise TypeError(f"not a StateModel: {state!r}")


def value_or_none(state: StateModel[T]) -> T | None:
    """Return the data of a Success state, None for every other state."""
    if isinstance(state, Success):
        return state.data
    return None


def unwrap(state: StateModel[T]) -> T:
    """
    Return the data of a Success state.

    Raises:
        OperationFailure: If state is an Error (chained from the cause)
        StateNotReadyError: If state is Idle or Loading
    """
    if isinstance(state, Success):
        return state.data
    if isinstance(state, Error):
        record = state.error_info
        raise OperationFailure(record.message, record=record) from record.cause
    raise StateNotReadyError(f"no value available in {state}")

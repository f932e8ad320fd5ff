"""
StateModel variants for async operation state.

This module defines the StateModel tagged union. Each variant is a frozen
dataclass that carries only its own payload, so an Idle state can never
hold data and a Success state can never hold an error.

**Design Pattern**: State Machine using Union types

Every variant still exposes the same four read-only attributes
(status, data, error_info, attempt) so a rendering layer can read them
uniformly without isinstance checks.

Example:
    ```python
    state = subscription.current_state()

    match state:
        case Success(data=value):
            render(value)
        case Error(error_info=record):
            show_retry_button(record.message, record.attempt)
        case Loading():
            show_spinner()
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Generic, TypeVar

from pyasyncstate.models.status import Status

__all__ = [
    "ErrorRecord",
    "Idle",
    "Loading",
    "Success",
    "Error",
    "StateModel",
    "IDLE",
]

T = TypeVar("T")


def _require_attempt(variant: str, attempt: int) -> None:
    if attempt < 1:
        raise ValueError(f"{variant} requires attempt >= 1, got {attempt}")


@dataclass(frozen=True)
class ErrorRecord:
    """
    Failure reported by a wrapped operation.

    Attributes:
        cause: The exception raised by the operation
        message: Human-readable message for the rendering layer
        attempt: Attempt number at which the failure occurred

    Equality compares the cause by identity (Python exceptions do not
    define structural equality), so the same failure republished twice
    is suppressed by the Dispatcher while two distinct failures are not.
    """

    cause: BaseException = field(repr=False)
    message: str
    attempt: int

    @classmethod
    def from_exception(cls, cause: BaseException, attempt: int) -> ErrorRecord:
        """Build a record, deriving the message from the exception."""
        message = str(cause) or type(cause).__name__
        return cls(cause=cause, message=message, attempt=attempt)

    def __str__(self) -> str:
        return f"{type(self.cause).__name__}: {self.message} (attempt {self.attempt})"


@dataclass(frozen=True)
class Idle:
    """Operation has not been started yet."""

    status: ClassVar[Status] = Status.IDLE

    @property
    def attempt(self) -> int:
        return 0

    @property
    def data(self) -> None:
        return None

    @property
    def error_info(self) -> None:
        return None

    def __str__(self) -> str:
        return "Idle()"


@dataclass(frozen=True)
class Loading:
    """
    Operation invocation in flight.

    Attributes:
        attempt: Invocation count within the current retry cycle (1-indexed)
    """

    attempt: int
    status: ClassVar[Status] = Status.LOADING

    def __post_init__(self) -> None:
        _require_attempt("Loading", self.attempt)

    @property
    def data(self) -> None:
        return None

    @property
    def error_info(self) -> None:
        return None

    def __str__(self) -> str:
        return f"Loading(attempt={self.attempt})"


@dataclass(frozen=True)
class Success(Generic[T]):
    """
    Operation produced a value.

    For continuous sources, successive items produce successive Success
    states with the same attempt number.

    Attributes:
        data: The value produced by the operation
        attempt: Attempt number that produced the value
    """

    data: T
    attempt: int
    status: ClassVar[Status] = Status.SUCCESS

    def __post_init__(self) -> None:
        _require_attempt("Success", self.attempt)

    @property
    def error_info(self) -> None:
        return None

    def __str__(self) -> str:
        return f"Success(data={self.data!r}, attempt={self.attempt})"


@dataclass(frozen=True)
class Error:
    """
    Operation failed.

    Whether another attempt follows is decided by the RetrySupervisor, not
    by the state value: an Error is published for every failed attempt,
    and the last one of a cycle stays in place until a manual retry.

    Attributes:
        error_info: The failure record
        attempt: Attempt number that failed
    """

    error_info: ErrorRecord
    attempt: int
    status: ClassVar[Status] = Status.ERROR

    def __post_init__(self) -> None:
        _require_attempt("Error", self.attempt)

    @property
    def data(self) -> None:
        return None

    def __str__(self) -> str:
        return f"Error({self.error_info})"


# StateModel is the union of the four variants.
#
# Pattern matching:
#     match state:
#         case Success(data=value): ...
#         case Error(error_info=record): ...
#
StateModel = Idle | Loading | Success[T] | Error

IDLE = Idle()
"""Shared initial state; Idle carries no payload so one instance suffices."""

"""Exception types raised by pyasyncstate.

Operation failures never escape a Subscription: they are converted into
Error states. The exceptions here report misuse of the API, or are raised
on request when a caller unwraps an Error state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pyasyncstate.models import ErrorRecord


class SubscriptionError(Exception):
    """
    Subscription operation failed.

    Raised for API misuse, such as configuring a subscription after it
    has been started.
    """

    pass


class SubscriptionCancelledError(SubscriptionError):
    """The subscription was cancelled and accepts no further operations."""

    pass


class StateNotReadyError(SubscriptionError):
    """A value was requested from a state that is neither success nor error."""

    pass


class InvalidTransitionError(ValueError):
    """
    The event cannot be applied to the current state.

    Attributes:
        state: The state the event was applied to
        event: The rejected event
    """

    def __init__(self, state: object, event: object):
        super().__init__(f"cannot apply {event!r} to {state}")
        self.state = state
        self.event = event


class OperationFailure(Exception):
    """
    The wrapped operation reported a failure.

    Raised by unwrap() on an Error state, chained from the original cause.
    Also used as the cause recorded when an operation factory returns an
    object that is neither awaitable nor an async iterable.

    Attributes:
        record: The failure record, if raised from an Error state
    """

    def __init__(self, message: str, record: ErrorRecord | None = None):
        super().__init__(message)
        self.record = record

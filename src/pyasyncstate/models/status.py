"""Status enumeration for async operation state tracking.

Defines the four observable statuses of a wrapped operation.
"""

from enum import Enum


class Status(Enum):
    """Status of an async operation as seen by observers.

    Lifecycle:
        IDLE → LOADING → SUCCESS/ERROR → LOADING → ...

    Design: No CANCELLED Status
        Cancellation belongs to the Subscription, not to the state value.
        A cancelled subscription simply stops publishing; the last state
        remains readable through current_state().
    """

    IDLE = "IDLE"
    """Operation has not been started."""

    LOADING = "LOADING"
    """Operation invocation is in flight."""

    SUCCESS = "SUCCESS"
    """Operation produced a value."""

    ERROR = "ERROR"
    """Operation failed."""

    @property
    def is_settled(self) -> bool:
        """Check if this status carries a result (value or failure)."""
        return self in (Status.SUCCESS, Status.ERROR)

    def __str__(self) -> str:
        return self.value

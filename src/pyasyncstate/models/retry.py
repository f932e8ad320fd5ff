"""
Retry policy configuration for automatic re-invocation.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates backoff behavior, allowing different retry
strategies without modifying the RetrySupervisor.

Design Rationale:
- Simple retry: RetryPolicy.with_max_attempts(3) with standard backoff
- Named presets: NONE, STANDARD, AGGRESSIVE
- Advanced control: custom RetryPolicy for full control
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for automatic retry behavior.

    Controls how many times an operation is invoked per retry cycle and
    the backoff between attempts.

    Examples:
        # Simple: just specify max attempts (uses standard delays)
        policy = RetryPolicy.with_max_attempts(3)

        # Named policy: predefined sensible defaults
        policy = RetryPolicy.STANDARD

        # Custom policy: full control
        policy = RetryPolicy(
            max_attempts=5,
            base_delay=0.5,
            multiplier=2.0,
            max_delay=30.0,
        )

    Raises:
        ValueError: If a field violates its constraint
    """

    max_attempts: int
    """Maximum number of invocations per cycle (including the first try).

    For example, max_attempts = 3 means:
    - Attempt 1: immediate (first try)
    - Attempt 2: after base_delay
    - Attempt 3: after base_delay * multiplier
    """

    base_delay: float
    """Delay before the first automatic retry, in seconds. Must be > 0."""

    multiplier: float = 2.0
    """Exponential backoff multiplier. Must be >= 1.

    Each retry delay is calculated as:
    min(base_delay * multiplier^(attempt-1), max_delay)
    """

    max_delay: float = 60.0
    """Cap on the delay between retries, in seconds. Must be >= base_delay."""

    # =========================================================================
    # Predefined Policies
    # =========================================================================

    if TYPE_CHECKING:
        NONE: RetryPolicy
        STANDARD: RetryPolicy
        AGGRESSIVE: RetryPolicy
    else:
        # Set after class definition
        NONE = cast("RetryPolicy", None)
        STANDARD = cast("RetryPolicy", None)
        AGGRESSIVE = cast("RetryPolicy", None)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be >= 1, got {self.multiplier}")
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )

    @classmethod
    def with_max_attempts(cls, max_attempts: int) -> RetryPolicy:
        """
        Create a policy with custom max_attempts (uses standard delays).

        Args:
            max_attempts: Maximum number of attempts

        Returns:
            RetryPolicy with standard delays
        """
        return cls(
            max_attempts=max_attempts,
            base_delay=1.0,
            multiplier=2.0,
            max_delay=30.0,
        )

    def delay_for_attempt(self, attempt: int) -> float | None:
        """
        Calculate the delay before re-invoking after a failed attempt.

        Args:
            attempt: The attempt number that just failed (1-indexed)

        Returns:
            Delay in seconds before the next attempt, or None if the cycle
            is exhausted.

        Example:
            policy = RetryPolicy.STANDARD
            policy.delay_for_attempt(1)  # 1.0
            policy.delay_for_attempt(2)  # 2.0
            policy.delay_for_attempt(3)  # None (max attempts)
        """
        if attempt >= self.max_attempts:
            return None

        # attempt=1 (first retry): multiplier^0 → base_delay
        # attempt=2 (second retry): multiplier^1 → base_delay * multiplier
        exponent = max(attempt - 1, 0)
        delay = self.base_delay * self.multiplier**exponent

        return min(delay, self.max_delay)

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, "
            f"base_delay={self.base_delay}, "
            f"multiplier={self.multiplier}, "
            f"max_delay={self.max_delay})"
        )


RetryPolicy.NONE = RetryPolicy(max_attempts=1, base_delay=1.0, multiplier=1.0, max_delay=1.0)

RetryPolicy.STANDARD = RetryPolicy(
    max_attempts=3,
    base_delay=1.0,  # 1 second
    multiplier=2.0,
    max_delay=30.0,  # 30 seconds
)

RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_attempts=10,
    base_delay=0.1,  # 100 milliseconds
    multiplier=1.5,
    max_delay=10.0,  # 10 seconds
)


# =============================================================================
# RetryableError - Fine-grained error retry control
# =============================================================================


class RetryableError(Exception):
    """
    Base class for errors that can specify whether they should be retried.

    Operations raise a subclass to mark some failures permanent, so the
    supervisor publishes a terminal error instead of scheduling a retry.

    Example:
        class PaymentError(RetryableError):
            def __init__(self, message: str, is_retryable: bool = True):
                super().__init__(message)
                self._retryable = is_retryable

            def is_retryable(self) -> bool:
                return self._retryable

        # Transient error - should retry
        raise PaymentError("Network timeout", is_retryable=True)

        # Permanent error - should NOT retry
        raise PaymentError("Insufficient funds", is_retryable=False)
    """

    def is_retryable(self) -> bool:
        """
        Returns True if this error is transient and the operation should be retried.

        Returns:
            True if retryable, False if permanent
        """
        return True


def is_retryable(error: BaseException) -> bool:
    """Check whether an operation failure may be retried automatically.

    Errors that are not RetryableError subclasses are always retryable.
    """
    if isinstance(error, RetryableError):
        return error.is_retryable()
    return True

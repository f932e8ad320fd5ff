"""Retry supervision with bounded exponential backoff.

The RetrySupervisor decides whether a failed attempt is re-invoked
automatically and owns the single outstanding retry timer of a
subscription.

Features:
- Backoff from RetryPolicy.delay_for_attempt()
- At most one pending timer; scheduling cancels the previous one first
- Non-retryable errors (RetryableError.is_retryable() is False) stop the cycle
- Synchronous cancellation without firing
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyasyncstate.executor.timer import LoopTimer, RetryTimer, TimerHandle
from pyasyncstate.models import RetryPolicy, is_retryable

logger = logging.getLogger(__name__)


class RetrySupervisor:
    """Schedules automatic re-invocations after failures.

    Usage:
        supervisor = RetrySupervisor(RetryPolicy.STANDARD)
        delay = supervisor.on_failure(attempt=1, error=exc, retry=restart)
        if delay is None:
            ...  # cycle exhausted, error is terminal

        supervisor.cancel()
    """

    def __init__(self, policy: RetryPolicy, timer: RetryTimer | None = None, name: str = ""):
        """Initialize supervisor.

        Args:
            policy: Backoff policy
            timer: Timer used for scheduling (defaults to LoopTimer)
            name: Subscription name for log messages
        """
        self._policy = policy
        self._timer: RetryTimer = timer if timer is not None else LoopTimer()
        self._name = name
        self._handle: TimerHandle | None = None
        self._pending_delay: float | None = None

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    @property
    def pending(self) -> bool:
        """True while a retry timer is outstanding."""
        return self._handle is not None

    @property
    def pending_delay(self) -> float | None:
        """Delay of the outstanding retry timer, None if nothing is pending."""
        return self._pending_delay

    def use_timer(self, timer: RetryTimer) -> None:
        """Replace the timer. Only valid while nothing is pending."""
        if self._handle is not None:
            raise RuntimeError("cannot replace timer while a retry is pending")
        self._timer = timer

    def on_failure(
        self, attempt: int, error: BaseException, retry: Callable[[], None]
    ) -> float | None:
        """Handle a failed attempt.

        Args:
            attempt: The attempt number that failed (1-indexed)
            error: The failure cause
            retry: Called when the backoff delay elapses

        Returns:
            The scheduled delay in seconds, or None if no retry was scheduled
            (cycle exhausted or error not retryable).
        """
        if not is_retryable(error):
            logger.info(f"{self._name}: non-retryable failure at attempt {attempt}: {error}")
            return None

        delay = self._policy.delay_for_attempt(attempt)
        if delay is None:
            logger.info(
                f"{self._name}: retries exhausted after {attempt} of "
                f"{self._policy.max_attempts} attempts"
            )
            return None

        self.schedule(delay, retry)
        logger.info(f"{self._name}: attempt {attempt} failed, retrying in {delay:.3f}s")
        return delay

    def schedule(self, delay: float, retry: Callable[[], None]) -> None:
        """Schedule retry after delay, cancelling any pending timer first."""
        self.cancel()

        def fire() -> None:
            # Clear before invoking so the retry may schedule again
            if self._handle is not handle:
                return
            self._handle = None
            self._pending_delay = None
            retry()

        handle = self._timer.schedule(delay, fire)
        self._handle = handle
        self._pending_delay = delay

    def cancel(self) -> bool:
        """Cancel the pending timer, if any, without firing it.

        Returns:
            True if a pending timer was cancelled
        """
        handle = self._handle
        if handle is None:
            return False

        self._handle = None
        self._pending_delay = None
        handle.cancel()
        logger.debug(f"{self._name}: pending retry cancelled")
        return True

    def __repr__(self) -> str:
        return f"RetrySupervisor(policy={self._policy!r}, pending={self.pending})"

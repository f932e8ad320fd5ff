"""
Cancellable retry timers.

A retry timer is an owned resource: the RetrySupervisor holds the only
handle and cancels it synchronously when the subscription is cancelled
or a manual retry supersedes the pending one.

LoopTimer schedules on the running asyncio event loop with call_later(),
so callbacks always run on the loop thread that owns the subscription.
Tests substitute a timer that fires on demand.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol

__all__ = ["TimerHandle", "RetryTimer", "LoopTimer", "TimerError"]


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class RetryTimer(Protocol):
    """Schedules a callback after a delay.

    Implementations must invoke the callback on the event loop thread
    and must not invoke it after its handle was cancelled.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopTimer:
    """RetryTimer backed by the running asyncio event loop.

    Usage:
        timer = LoopTimer()
        handle = timer.schedule(2.0, lambda: print("fired"))
        handle.cancel()
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Schedule callback after delay seconds.

        Raises:
            TimerError: If no event loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise TimerError("retry timers require a running event loop") from e

        return loop.call_later(delay, callback)

    def __repr__(self) -> str:
        return "LoopTimer()"


class TimerError(Exception):
    """
    Timer operation failed.

    Custom exception with context, not generic Exception.
    """

    pass

"""Tests for RetrySupervisor scheduling and cancellation."""

import asyncio

import pytest

from pyasyncstate.executor import LoopTimer, RetrySupervisor, TimerError
from pyasyncstate.models import RetryableError, RetryPolicy

POLICY = RetryPolicy(max_attempts=3, base_delay=1.0, multiplier=2.0, max_delay=10.0)


class PermanentError(RetryableError):
    def is_retryable(self) -> bool:
        return False


def test_schedules_backoff_delay(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)
    fired = []

    delay = supervisor.on_failure(1, RuntimeError("x"), lambda: fired.append(1))

    assert delay == 1.0
    assert supervisor.pending
    assert supervisor.pending_delay == 1.0
    assert manual_timer.delays == [1.0]

    manual_timer.fire_next()
    assert fired == [1]
    assert not supervisor.pending
    assert supervisor.pending_delay is None


def test_second_attempt_doubles_delay(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)
    assert supervisor.on_failure(2, RuntimeError("x"), lambda: None) == 2.0


def test_exhausted_cycle_schedules_nothing(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)

    assert supervisor.on_failure(3, RuntimeError("x"), lambda: None) is None
    assert not supervisor.pending
    assert manual_timer.scheduled == []


def test_non_retryable_error_schedules_nothing(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)

    assert supervisor.on_failure(1, PermanentError("bad input"), lambda: None) is None
    assert manual_timer.scheduled == []


def test_only_one_timer_outstanding(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)
    fired = []

    supervisor.on_failure(1, RuntimeError("x"), lambda: fired.append("first"))
    supervisor.on_failure(2, RuntimeError("x"), lambda: fired.append("second"))

    first, second = manual_timer.scheduled
    assert first.cancelled()
    assert not second.cancelled()
    assert len(manual_timer.pending) == 1

    manual_timer.fire_next()
    assert fired == ["second"]


def test_cancel_prevents_firing(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)
    fired = []
    supervisor.on_failure(1, RuntimeError("x"), lambda: fired.append(1))

    assert supervisor.cancel() is True
    assert not supervisor.pending
    assert manual_timer.scheduled[0].cancelled()

    # A cancelled handle that fires anyway is ignored
    manual_timer.scheduled[0].callback()
    assert fired == []


def test_cancel_without_pending_timer(manual_timer):
    assert RetrySupervisor(POLICY, manual_timer).cancel() is False


def test_use_timer_rejected_while_pending(manual_timer):
    supervisor = RetrySupervisor(POLICY, manual_timer)
    supervisor.on_failure(1, RuntimeError("x"), lambda: None)

    with pytest.raises(RuntimeError):
        supervisor.use_timer(LoopTimer())


def test_loop_timer_requires_running_loop():
    with pytest.raises(TimerError):
        LoopTimer().schedule(1.0, lambda: None)


@pytest.mark.asyncio
async def test_loop_timer_fires_on_event_loop():
    policy = RetryPolicy(max_attempts=2, base_delay=0.01, multiplier=1.0, max_delay=0.01)
    supervisor = RetrySupervisor(policy)
    fired = asyncio.Event()

    supervisor.on_failure(1, RuntimeError("x"), fired.set)

    await asyncio.wait_for(fired.wait(), timeout=1.0)
    assert not supervisor.pending


@pytest.mark.asyncio
async def test_loop_timer_cancelled_synchronously():
    policy = RetryPolicy(max_attempts=2, base_delay=0.01, multiplier=1.0, max_delay=0.01)
    supervisor = RetrySupervisor(policy)
    fired = []

    supervisor.on_failure(1, RuntimeError("x"), lambda: fired.append(1))
    supervisor.cancel()

    await asyncio.sleep(0.05)
    assert fired == []

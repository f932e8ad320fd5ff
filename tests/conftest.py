"""
Pytest configuration and fixtures for pyasyncstate tests.

Provides a manual retry timer, a recording observer, and hypothesis
strategies for StateModel values and events.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest
from hypothesis import strategies as st

from pyasyncstate.models import (
    IDLE,
    AwaitingNext,
    Error,
    ErrorRecord,
    Failed,
    Loading,
    Started,
    Succeeded,
    Success,
)


async def settle(turns: int = 10) -> None:
    """Let pending tasks and call_soon callbacks run."""
    for _ in range(turns):
        await asyncio.sleep(0)


# Manual timer: records requested delays and fires on demand


@dataclass
class ManualHandle:
    delay: float
    callback: Callable[[], None]
    fired: bool = False
    _cancelled: bool = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class ManualTimer:
    """RetryTimer that never fires by itself."""

    scheduled: list[ManualHandle] = field(default_factory=list)

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, callback)
        self.scheduled.append(handle)
        return handle

    @property
    def delays(self) -> list[float]:
        return [h.delay for h in self.scheduled]

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.scheduled if not h.cancelled() and not h.fired]

    def fire_next(self) -> float:
        """Fire the oldest pending timer and return its delay."""
        pending = self.pending
        assert pending, "no pending timer to fire"
        handle = pending[0]
        handle.fired = True
        handle.callback()
        return handle.delay


class Recorder:
    """Observer collecting every state it receives."""

    def __init__(self):
        self.states = []

    def receive(self, state) -> None:
        self.states.append(state)

    @property
    def statuses(self) -> list[str]:
        return [str(s.status) for s in self.states]

    @property
    def attempts(self) -> list[int]:
        return [s.attempt for s in self.states]


@pytest.fixture
def manual_timer() -> ManualTimer:
    """Manual retry timer fixture."""
    return ManualTimer()


@pytest.fixture
def recorder() -> Recorder:
    """Recording observer fixture."""
    return Recorder()


# Hypothesis strategies for property-based testing


@st.composite
def state_strategy(draw):
    """Strategy for generating valid StateModel values."""
    attempt = draw(st.integers(min_value=1, max_value=20))
    kind = draw(st.sampled_from(["idle", "loading", "success", "error"]))

    if kind == "idle":
        return IDLE
    if kind == "loading":
        return Loading(attempt=attempt)
    if kind == "success":
        return Success(data=draw(st.integers() | st.text(max_size=10)), attempt=attempt)

    cause = RuntimeError(draw(st.text(max_size=20)))
    return Error(error_info=ErrorRecord.from_exception(cause, attempt), attempt=attempt)


event_strategy = st.one_of(
    st.builds(Started, fresh_cycle=st.booleans()),
    st.builds(Succeeded, data=st.integers()),
    st.builds(lambda msg: Failed(ValueError(msg)), st.text(max_size=10)),
    st.just(AwaitingNext()),
)


# Register strategies for easy import
pytest.state_strategy = state_strategy
pytest.event_strategy = event_strategy

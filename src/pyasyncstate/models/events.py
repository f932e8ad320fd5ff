"""Transition events consumed by the state transition function.

Source adapters never build StateModel values themselves. They report
what happened to the operation as one of these events and the pure
next_state() function maps (current state, event) to the next state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = ["Started", "Succeeded", "Failed", "AwaitingNext", "StateEvent"]


@dataclass(frozen=True)
class Started:
    """An invocation of the operation began.

    Attributes:
        fresh_cycle: Start a new retry cycle (attempt resets to 1) instead
            of counting this invocation as the next attempt of the current one.
    """

    fresh_cycle: bool = False


@dataclass(frozen=True)
class Succeeded:
    """The operation produced a value (one-shot result or stream item)."""

    data: Any


@dataclass(frozen=True)
class Failed:
    """The operation reported a failure."""

    cause: BaseException = field(compare=False)


@dataclass(frozen=True)
class AwaitingNext:
    """A continuous source delivered an item and is waiting for the next one."""


StateEvent = Started | Succeeded | Failed | AwaitingNext

"""Observer capability for receiving state changes.

The core exposes exactly one way to consume state: an observer receiving
each distinct StateModel. Higher-level bindings (reactive stores, change
notifiers, async iterators) are built on top of this capability.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from uuid_extensions import uuid7

from pyasyncstate.models import StateModel

__all__ = ["Observer", "ObserverCallback", "ObserverHandle", "as_callback"]


@runtime_checkable
class Observer(Protocol):
    """Object receiving state changes.

    Plain callables taking a single StateModel are accepted wherever an
    Observer is, so simple consumers need not define a class.
    """

    def receive(self, state: StateModel[Any]) -> None: ...


ObserverCallback = Callable[[StateModel[Any]], None]


@dataclass(frozen=True)
class ObserverHandle:
    """Token returned by subscribe(), used to detach the observer again."""

    id: UUID = field(default_factory=uuid7)

    def __str__(self) -> str:
        return f"observer-{self.id}"


def as_callback(observer: Observer | ObserverCallback) -> ObserverCallback:
    """Normalize an Observer object or plain callable into a callback.

    Raises:
        TypeError: If observer is neither
    """
    if isinstance(observer, Observer):
        return observer.receive
    if callable(observer):
        return observer
    raise TypeError(f"observer must be callable or define receive(), got {observer!r}")

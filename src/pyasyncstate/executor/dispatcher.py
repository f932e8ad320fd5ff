"""Change-driven observer dispatch.

The Dispatcher holds the latest StateModel and notifies attached
observers only when a published state differs structurally from the
previous one.

Delivery rules:
- Every observer attached when a state is published receives that state,
  in attach order
- An observer detached during delivery receives nothing further
- An observer that raises is logged; delivery to the others continues
- After close(), nothing is delivered
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pyasyncstate.core import ObserverCallback, ObserverHandle, as_callback
from pyasyncstate.core.observer import Observer
from pyasyncstate.models import IDLE, StateModel

logger = logging.getLogger(__name__)


class Dispatcher:
    """Holds the current state and fans it out to observers.

    Usage:
        dispatcher = Dispatcher()
        handle = dispatcher.subscribe(lambda state: print(state))
        dispatcher.publish(Loading(attempt=1))   # prints
        dispatcher.publish(Loading(attempt=1))   # suppressed, unchanged
        dispatcher.unsubscribe(handle)
    """

    def __init__(self, initial: StateModel[Any] = IDLE, name: str = ""):
        self._current: StateModel[Any] = initial
        self._name = name
        self._observers: dict[ObserverHandle, ObserverCallback] = {}
        self._closers: dict[ObserverHandle, Callable[[], None]] = {}
        self._publishing = False
        self._closed = False

    @property
    def current(self) -> StateModel[Any]:
        return self._current

    @property
    def is_publishing(self) -> bool:
        """True while observers are being notified."""
        return self._publishing

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        """Returns the number of attached observers."""
        return len(self._observers)

    def subscribe(self, observer: Observer | ObserverCallback) -> ObserverHandle:
        """Attach an observer.

        The observer is not called with the current state; read it with
        `current` if needed.

        Returns:
            Handle for unsubscribe()
        """
        callback = as_callback(observer)
        handle = ObserverHandle()
        self._observers[handle] = callback

        close = getattr(observer, "close", None)
        if callable(close):
            self._closers[handle] = close

        logger.debug(f"{self._name}: attached {handle}")
        return handle

    def unsubscribe(self, handle: ObserverHandle) -> bool:
        """Detach an observer.

        Returns:
            True if the handle was attached
        """
        self._closers.pop(handle, None)
        if self._observers.pop(handle, None) is None:
            return False

        logger.debug(f"{self._name}: detached {handle}")
        return True

    def publish(self, state: StateModel[Any]) -> bool:
        """Replace the current state and notify observers if it changed.

        Returns:
            True if observers were notified, False if the state was
            unchanged or the dispatcher is closed
        """
        if self._closed:
            return False
        if state == self._current:
            logger.debug(f"{self._name}: suppressed unchanged {state}")
            return False

        self._current = state
        logger.debug(f"{self._name}: -> {state}")

        self._publishing = True
        try:
            for handle, callback in list(self._observers.items()):
                if self._closed:
                    break
                if handle not in self._observers:
                    continue
                try:
                    callback(state)
                except Exception as e:
                    logger.error(f"{self._name}: observer {handle} failed on {state}: {e}")
        finally:
            self._publishing = False

        return True

    def close(self) -> None:
        """Stop delivery and detach all observers.

        Observers defining close() are told that no more states follow.
        """
        if self._closed:
            return
        self._closed = True

        closers = list(self._closers.values())
        self._observers.clear()
        self._closers.clear()

        for close in closers:
            try:
                close()
            except Exception as e:
                logger.error(f"{self._name}: observer close failed: {e}")

    def __repr__(self) -> str:
        return f"Dispatcher(current={self._current}, observers={len(self._observers)})"

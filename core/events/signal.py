from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Signal(Generic[T]):
    """
    One named schedule event (``lot_started``, ``lot_rescheduled``, ...).

    Services emit after their commit succeeds, so a subscriber never sees a
    lot id whose change was rolled back. Subscribers run synchronously in
    connection order; ``emit`` reports how many of them received the payload.
    """

    def __init__(self, name: str = "signal") -> None:
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._lock: RLock = RLock()

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @contextmanager
    def subscribed(self, callback: Callable[[T], None]) -> Iterator["Signal[T]"]:
        """Connect ``callback`` for the duration of a ``with`` block."""
        self.connect(callback)
        try:
            yield self
        finally:
            self.disconnect(callback)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def emit(self, payload: T) -> int:
        with self._lock:
            subscribers = list(self._subscribers)
        delivered = 0
        dropped: list[Callable[[T], None]] = []
        for callback in subscribers:
            try:
                callback(payload)
            except ReferenceError:
                # dashboard or composer held through a weakref proxy went away
                dropped.append(callback)
                continue
            delivered += 1
        if dropped:
            with self._lock:
                for callback in dropped:
                    if callback in self._subscribers:
                        self._subscribers.remove(callback)
            logger.debug("Dropped %d dead subscriber(s) from %s.", len(dropped), self.name)
        return delivered

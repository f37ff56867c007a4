"""Single-slot, overwrite-on-put handoff between threads."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class LatestSlot(Generic[T]):
    """Holds at most one value; a new put replaces whatever is waiting.

    One producer thread puts, one consumer takes. Nothing queues up behind a
    slow consumer: it only ever sees the newest value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None
        self._dropped = 0
        self._published = 0

    def put(self, value: T) -> None:
        """Store a value, discarding one that was never taken."""
        with self._lock:
            if self._value is not None:
                self._dropped += 1
            self._value = value
            self._published += 1

    def take(self) -> T | None:
        """Return the newest value and empty the slot, or None if empty."""
        with self._lock:
            value, self._value = self._value, None
            return value

    def counters(self) -> tuple[int, int]:
        """Return ``(published, dropped)`` as one consistent snapshot.

        ``dropped`` counts values overwritten before anyone took them.
        """
        with self._lock:
            return self._published, self._dropped

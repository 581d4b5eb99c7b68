"""Fake time provider for deterministic lease and heartbeat tests."""

from __future__ import annotations

import threading


class FakeTimeProvider:
    """Manually advanced clock implementing TimeProvider.

    Thread-safe so a store shared by several simulated nodes can read it
    while a test advances it.
    """

    def __init__(self, start: float = 1_000.0) -> None:
        self._now = start
        self._lock = threading.Lock()

    def get_time_seconds(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> None:
        """Move the clock forward.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError("cannot move time backwards")
        with self._lock:
            self._now += seconds

    def set(self, now: float) -> None:
        with self._lock:
            if now < self._now:
                raise ValueError("cannot move time backwards")
            self._now = now

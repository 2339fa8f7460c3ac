from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class FrameTimer:
    """Turns clock readings into per-frame deltas.

    The delta is raw wall-clock time; clamping for integration is left to the
    consumer so elapsed-time bookkeeping can still see the full stall.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._last_s = clock.now()

    def rebase(self) -> None:
        self._last_s = self._clock.now()

    def lap(self) -> float:
        now = self._clock.now()
        dt = now - self._last_s
        self._last_s = now
        return max(0.0, dt)

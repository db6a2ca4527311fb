"""
Logical clock sources.

The governance engine measures time in integer ticks, analogous to block
heights. The engine reads the clock exactly once per operation.
"""

import time
from typing import Protocol, runtime_checkable

from core.config import settings


@runtime_checkable
class Clock(Protocol):
    """Source of monotonically non-decreasing ticks."""

    def now(self) -> int: ...


class BlockHeightClock:
    """
    Derive ticks from wall-clock time.

    tick = (unix_time - genesis) // tick_seconds, so with the default
    600-second tick a 1008-tick voting period lasts one week.
    """

    def __init__(self, tick_seconds: int | None = None, genesis: int | None = None):
        self.tick_seconds = tick_seconds or settings.TICK_SECONDS
        self.genesis = settings.GENESIS_TIMESTAMP if genesis is None else genesis
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        self._last = 0

    def now(self) -> int:
        tick = max(0, (int(time.time()) - self.genesis) // self.tick_seconds)
        # Wall clocks can step backwards; ticks must not.
        self._last = max(self._last, tick)
        return self._last


class ManualClock:
    """Clock driven by the caller. Used in tests and by embedders with their own chain height."""

    def __init__(self, start: int = 0):
        self._tick = start

    def now(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        if ticks < 0:
            raise ValueError("clock cannot move backwards")
        self._tick += ticks
        return self._tick

    def set(self, tick: int) -> int:
        if tick < self._tick:
            raise ValueError("clock cannot move backwards")
        self._tick = tick
        return self._tick

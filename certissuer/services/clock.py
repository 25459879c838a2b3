"""Clock/height sources.

Lifecycle code only ever sees an integer "now".  Units are whatever the
source counts (seconds for SystemClock, ticks for ManualClock);
CLOCK_UNITS_PER_DAY converts validity days into those units.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int:
        """Current monotonically non-decreasing height."""
        ...


class SystemClock:
    """Unix seconds, clamped so a wall-clock step back never goes backwards."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        current = int(time.time())
        if current < self._last:
            current = self._last
        self._last = current
        return current


class ManualClock:
    """Height counter advanced explicitly.  Used by tests and replays."""

    def __init__(self, start: int = 0) -> None:
        self._height = start

    def now(self) -> int:
        return self._height

    def advance(self, units: int) -> int:
        if units < 0:
            raise ValueError("clock cannot move backwards")
        self._height += units
        return self._height

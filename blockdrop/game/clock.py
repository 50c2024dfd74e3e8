"""
Fixed-cycle clock that turns wall-clock time into discrete logic cycles.

The game logic runs at `cycles_per_second` (which rises as the game speeds
up) while the render loop runs at its own fixed frame rate. The frame loop
calls update() once per frame and then asks has_elapsed_cycle() whether a
logic step is due.
"""

from __future__ import annotations

import math
import time
from typing import Callable


class Clock:
    """Accumulates elapsed time and hands it out as whole logic cycles.

    While paused, time keeps passing but is discarded, so resuming after a
    long pause does not release a burst of queued cycles.
    """

    def __init__(
        self,
        cycles_per_second: float,
        time_source: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Create a running clock.

        Args:
            cycles_per_second: Logic rate; must be a positive finite number.
            time_source: Monotonic clock returning seconds (injectable for tests).
        """
        self._time_source = time_source
        self._paused = False
        self.set_cycles_per_second(cycles_per_second)
        self.reset()

    @property
    def cycles_per_second(self) -> float:
        """Current logic rate."""
        return self._cycles_per_second

    def set_cycles_per_second(self, cycles_per_second: float) -> None:
        """Change the logic rate.

        Raises:
            ValueError: If the rate is zero, negative or not finite.
        """
        rate = float(cycles_per_second)
        if not math.isfinite(rate) or rate <= 0.0:
            raise ValueError(f"cycles_per_second must be a positive number, got {cycles_per_second!r}")
        self._cycles_per_second = rate
        self._seconds_per_cycle = 1.0 / rate

    def reset(self) -> None:
        """Drop pending cycles and any partial cycle, and restart timing from now."""
        self._elapsed_cycles = 0
        self._excess = 0.0
        self._last_update = self._time_source()

    def set_paused(self, paused: bool) -> None:
        """Pause or resume; time passed while paused never counts."""
        self._paused = paused

    def is_paused(self) -> bool:
        """Return True while the clock is paused."""
        return self._paused

    def update(self) -> None:
        """Account for the time passed since the previous update."""
        now = self._time_source()
        delta = (now - self._last_update) + self._excess

        if not self._paused:
            self._elapsed_cycles += int(math.floor(delta / self._seconds_per_cycle))
            self._excess = delta % self._seconds_per_cycle

        self._last_update = now

    def has_elapsed_cycle(self) -> bool:
        """Consume one elapsed cycle if there is one.

        Returns:
            True if a cycle was pending (and is now consumed), False otherwise.
        """
        if self._elapsed_cycles > 0:
            self._elapsed_cycles -= 1
            return True
        return False

    def peek_elapsed_cycle(self) -> bool:
        """Return whether a cycle is pending without consuming it."""
        return self._elapsed_cycles > 0

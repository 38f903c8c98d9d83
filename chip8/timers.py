"""60 Hz timer cadence for the CHIP-8 emulator."""

from typing import Callable
from .constants import TIMER_HZ


class TimerClock:
    """Converts elapsed host time into whole timer ticks.

    The host calls advance() with wall-clock deltas; each whole
    1/rate_hz period invokes on_tick once and the remainder is
    carried into the next call.
    """

    def __init__(self, on_tick: Callable[[], None], rate_hz: int = TIMER_HZ):
        if rate_hz <= 0:
            raise ValueError("rate_hz must be positive")
        self.on_tick = on_tick
        self.rate_hz = rate_hz
        self.period = 1.0 / rate_hz
        self._elapsed = 0.0

    def advance(self, seconds: float) -> int:
        """Account for elapsed time and fire due ticks.

        Returns:
            Number of ticks fired
        """
        if seconds < 0:
            raise ValueError("Elapsed time cannot be negative")
        self._elapsed += seconds
        ticks = int(self._elapsed * self.rate_hz + 1e-9)
        self._elapsed = max(0.0, self._elapsed - ticks * self.period)
        for _ in range(ticks):
            self.on_tick()
        return ticks

    def reset(self) -> None:
        self._elapsed = 0.0


def ticks_for_cycles(cycles: int, cycles_per_second: int, rate_hz: int = TIMER_HZ) -> int:
    """Whole timer ticks due after a number of instruction cycles."""
    if cycles_per_second <= 0:
        raise ValueError("cycles_per_second must be positive")
    return (cycles * rate_hz) // cycles_per_second

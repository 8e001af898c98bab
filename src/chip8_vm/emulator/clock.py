"""
Rate Accumulator
================

Converts a monotonically increasing timestamp into a count of whole ticks.

The CHIP-8 has two notions of time: the 60 Hz countdown timers and the
instruction clock (a few hundred instructions per second). Hosts call the
emulator at whatever cadence their event loop allows, so each clock keeps
a reference time and hands out whole ticks as time passes:

    ticks = floor((now - reference) / interval)
    reference += ticks * interval

The reference advances by whole intervals only, never to `now`, so the
fractional remainder carries over to the next call. Splitting one span of
time into many calls yields the same total as a single call.

Copyright (c) 2026 chip8-vm Contributors
"""

import math

from ..errors import ClockError


class RateAccumulator:
    """
    Whole-tick counter over a caller-supplied time base.

    The accumulator is unit-agnostic: `start_time`, `interval` and the
    timestamps passed to consume() only need to share a unit. The rest of
    the package uses seconds, matching time.monotonic().

    Attributes:
        interval: Duration of one tick
        reference_time: Time up to which ticks have been handed out

    Example:
        >>> clock = RateAccumulator(10.0, 5.0)
        >>> clock.consume(16.0)
        1
        >>> clock.consume(21.0)   # 1.0 carried over from the first call
        2
    """

    def __init__(self, start_time: float, interval: float):
        """
        Initialize the accumulator.

        Args:
            start_time: Initial reference time
            interval: Duration of one tick, must be positive

        Raises:
            ValueError: If interval is not positive
        """
        self._check_interval(interval)
        self._reference_time = start_time
        self._interval = interval

    @classmethod
    def from_rate(cls, start_time: float, ticks_per_second: float) -> "RateAccumulator":
        """Create an accumulator ticking `ticks_per_second` times per second."""
        if ticks_per_second <= 0:
            raise ValueError(f"tick rate must be positive, got {ticks_per_second}")
        return cls(start_time, 1.0 / ticks_per_second)

    @property
    def interval(self) -> float:
        """Duration of one tick."""
        return self._interval

    @property
    def reference_time(self) -> float:
        """Time up to which ticks have been consumed."""
        return self._reference_time

    def consume(self, now: float) -> int:
        """
        Return the whole ticks elapsed since the reference time.

        The reference time advances by exactly the returned number of
        intervals; any fractional interval stays pending.

        Args:
            now: Current timestamp, not earlier than the reference time

        Returns:
            Number of whole ticks elapsed

        Raises:
            ClockError: If `now` is earlier than the reference time
        """
        if now < self._reference_time:
            raise ClockError(now, self._reference_time)

        ticks = math.floor((now - self._reference_time) / self._interval)
        self._reference_time += ticks * self._interval
        return ticks

    def set_interval(self, interval: float) -> None:
        """
        Change the tick interval.

        The reference time is left alone, so time already elapsed towards
        the next tick is re-denominated in the new interval rather than
        lost or counted twice.
        """
        self._check_interval(interval)
        self._interval = interval

    def set_rate(self, ticks_per_second: float) -> None:
        """Change the interval to 1 / ticks_per_second."""
        if ticks_per_second <= 0:
            raise ValueError(f"tick rate must be positive, got {ticks_per_second}")
        self.set_interval(1.0 / ticks_per_second)

    @staticmethod
    def _check_interval(interval: float) -> None:
        if not interval > 0:
            raise ValueError(f"interval must be positive, got {interval}")

    def __repr__(self) -> str:
        return (
            f"RateAccumulator(reference_time={self._reference_time!r}, "
            f"interval={self._interval!r})"
        )

"""
Countdown Timers
================

The CHIP-8 has two 8-bit countdown registers, the delay timer (DT) and the
sound timer (ST). Both decrement at 60 Hz until they reach zero. Programs
read DT to pace themselves; a non-zero ST means the buzzer is sounding.
Only the numeric value of ST is modeled here.

Copyright (c) 2026 chip8-vm Contributors
"""

from .clock import RateAccumulator

# Timer decrement rate (Hz)
TIMER_FREQUENCY = 60


class CountdownTimer:
    """
    An 8-bit value counting down at 60 Hz, floored at zero.

    Writes through the `value` property bypass timing entirely; step()
    is the only thing that makes the value count down.

    Example:
        >>> timer = CountdownTimer(0.0)
        >>> timer.value = 5
        >>> timer.step(2.5 / 60)
        >>> timer.value
        3
    """

    def __init__(self, start_time: float):
        self._value = 0
        self._clock = RateAccumulator(start_time, 1.0 / TIMER_FREQUENCY)

    @property
    def value(self) -> int:
        """Current 8-bit timer value."""
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        self._value = value & 0xFF

    @property
    def is_active(self) -> bool:
        """True while the timer is non-zero."""
        return self._value > 0

    def step(self, now: float) -> None:
        """Subtract the 60 Hz periods elapsed up to `now`, saturating at 0."""
        ticks = self._clock.consume(now)
        self._value = max(0, self._value - ticks)

    def __repr__(self) -> str:
        return f"CountdownTimer(value={self._value})"

"""
CHIP-8 Emulator - Main Orchestrator
===================================

This module provides the `Emulator` class, the public face of the
interpreter. It owns one CPU (which owns memory, display, keypad and
timers) and the instruction clock, and drives them from caller-supplied
timestamps.

The Emulator:
- Builds the machine from an EmulatorConfig
- Loads program images at $200
- Advances timers and executes the right number of instructions per step()
- Forwards key events to the keypad, resolving wait-for-key
- Exposes the framebuffer for rendering

There is no internal clock. Hosts pass the current time (seconds, e.g.
time.monotonic()) into the constructor, reset() and step():

    >>> import time
    >>> emu = Emulator(time.monotonic())
    >>> emu.load_rom("PONG")
    >>> while running:
    ...     emu.step(time.monotonic())
    ...     if emu.take_dirty():
    ...         render(emu)

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..errors import ProgramSizeError
from .clock import RateAccumulator
from .cpu import Chip8CPU, ShiftSource
from .display import Framebuffer
from .keypad import Keypad
from .memory import MEMORY_SIZE, PROGRAM_START
from .timer import CountdownTimer

logger = logging.getLogger(__name__)

# Default instruction clock rate (instructions per second)
DEFAULT_INSTRUCTION_RATE = 600.0

# Largest program image that fits above PROGRAM_START
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for emulator initialization.

    Attributes:
        instruction_rate: Instructions executed per second of host time.
                          Default is 600.
        shift_source: Operand register for 8xy6/8xyE. Default is
                      ShiftSource.VY (COSMAC VIP behaviour).
        load_font: Preload the hexadecimal font at $050. Default True.
        seed: Seed for the RND instruction. None draws from OS entropy.

    Example:
        >>> config = EmulatorConfig(instruction_rate=1000)
        >>> config = EmulatorConfig(shift_source=ShiftSource.VX, seed=42)
    """
    instruction_rate: float = DEFAULT_INSTRUCTION_RATE
    shift_source: ShiftSource = ShiftSource.VY
    load_font: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        if self.instruction_rate <= 0:
            raise ValueError(
                f"instruction rate must be positive, got {self.instruction_rate}"
            )

    @classmethod
    def from_env(cls) -> "EmulatorConfig":
        """
        Create EmulatorConfig from environment variables.

        Environment variables (all optional):
            CHIP8_INSTRUCTION_RATE: Instructions per second (number)
            CHIP8_SHIFT_SOURCE: "vy" or "vx"
            CHIP8_SEED: Random seed (integer)

        Invalid values are ignored and the default is kept.

        Returns:
            EmulatorConfig with values from environment variables
        """
        kwargs = {}

        if rate := os.environ.get("CHIP8_INSTRUCTION_RATE"):
            try:
                value = float(rate)
                if value > 0:
                    kwargs["instruction_rate"] = value
            except ValueError:
                logger.debug(f"Ignoring invalid CHIP8_INSTRUCTION_RATE={rate!r}")

        if shift := os.environ.get("CHIP8_SHIFT_SOURCE"):
            try:
                kwargs["shift_source"] = ShiftSource(shift.lower())
            except ValueError:
                logger.debug(f"Ignoring invalid CHIP8_SHIFT_SOURCE={shift!r}")

        if seed := os.environ.get("CHIP8_SEED"):
            try:
                kwargs["seed"] = int(seed, 0)
            except ValueError:
                logger.debug(f"Ignoring invalid CHIP8_SEED={seed!r}")

        return cls(**kwargs)


class Emulator:
    """
    CHIP-8 interpreter driven by caller-supplied time.

    Each step(now) call:
    1. Advances the delay and sound timers to `now`
    2. Asks the instruction clock how many instructions are due
    3. Executes that many, re-checking the wait-for-key state before each

    Ticks that fall due while the CPU waits for a key are dropped, and the
    first step after the wait resolves re-synchronises the clock so the
    wait does not turn into a burst of catch-up instructions.

    Attributes:
        config: The EmulatorConfig used to initialize this instance
        cpu: The Chip8CPU (accessible for low-level control)

    Example:
        >>> emu = Emulator(0.0)
        >>> emu.load_program(bytes([0x60, 0x0A, 0x12, 0x02]))
        >>> executed = emu.step(0.5)
        >>> emu.cpu.v[0]
        10
    """

    def __init__(self, now: float, config: Optional[EmulatorConfig] = None):
        """
        Initialize the emulator.

        Args:
            now: Initial timestamp (seconds) for the timers and clock
            config: EmulatorConfig. If None, defaults are used.
        """
        self.config = config or EmulatorConfig()
        self._instruction_rate = self.config.instruction_rate
        self.cpu, self._clock = self._build(now)
        self._resync_clock = False

    def _build(self, now: float):
        cpu = Chip8CPU(
            now,
            shift_source=self.config.shift_source,
            load_font=self.config.load_font,
            seed=self.config.seed,
        )
        clock = RateAccumulator.from_rate(now, self._instruction_rate)
        return cpu, clock

    # =========================================================================
    # Component Access
    # =========================================================================

    @property
    def display(self) -> Framebuffer:
        """The framebuffer."""
        return self.cpu.display

    @property
    def keypad(self) -> Keypad:
        """The keypad."""
        return self.cpu.keypad

    @property
    def delay_timer(self) -> CountdownTimer:
        """The delay timer (DT)."""
        return self.cpu.delay_timer

    @property
    def sound_timer(self) -> CountdownTimer:
        """The sound timer (ST)."""
        return self.cpu.sound_timer

    @property
    def is_waiting_for_key(self) -> bool:
        """True while execution is suspended on Fx0A."""
        return self.cpu.is_waiting_for_key

    @property
    def instruction_rate(self) -> float:
        """Current instruction clock rate (instructions per second)."""
        return self._instruction_rate

    @property
    def total_instructions(self) -> int:
        """Instructions executed since construction or the last reset."""
        return self.cpu.instructions_executed

    # =========================================================================
    # Program Loading
    # =========================================================================

    def load_program(self, data: bytes) -> None:
        """
        Copy a program image into memory at $200.

        Args:
            data: Program bytes

        Raises:
            ProgramSizeError: If the image is larger than the 3584 bytes
                available above $200. Memory is left untouched.
        """
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramSizeError(len(data), MAX_PROGRAM_SIZE)
        self.cpu.memory.write_block(PROGRAM_START, data)
        logger.debug(f"Loaded {len(data)} byte program at ${PROGRAM_START:03X}")

    def load_rom(self, path: Union[str, Path]) -> None:
        """
        Load a program image from a file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ProgramSizeError: If the image doesn't fit in memory
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"ROM file not found: {path}")
        self.load_program(path.read_bytes())

    # =========================================================================
    # Execution Control
    # =========================================================================

    def reset(self, now: float) -> None:
        """
        Replace the whole machine with a freshly initialized one.

        Memory (including any loaded program), registers, stack, display,
        keypad, both timers and the instruction clock are all rebuilt with
        `now` as their time base. The configured and any later
        set_instruction_rate() rate is kept.
        """
        cpu, clock = self._build(now)
        self.cpu, self._clock, self._resync_clock = cpu, clock, False
        logger.debug(f"Reset at t={now}")

    def step(self, now: float) -> int:
        """
        Advance the machine to time `now`.

        Args:
            now: Current timestamp (seconds), never earlier than the
                 timestamp of the previous call

        Returns:
            Number of instructions executed

        Raises:
            ClockError: If `now` moved backwards
            MachineFault: If an instruction faulted
        """
        cpu = self.cpu
        cpu.step_timers(now)

        if self._resync_clock:
            self._clock.consume(now)
            self._resync_clock = False

        ticks = self._clock.consume(now)
        executed = 0
        for _ in range(ticks):
            if cpu.is_waiting_for_key:
                break
            cpu.execute_next()
            executed += 1
        return executed

    def set_instruction_rate(self, ticks_per_second: float) -> None:
        """
        Change the instruction clock rate without touching machine state.

        Time already elapsed towards the next instruction is kept.

        Raises:
            ValueError: If the rate is not positive
        """
        self._clock.set_rate(ticks_per_second)
        self._instruction_rate = ticks_per_second
        logger.debug(f"Instruction rate set to {ticks_per_second} Hz")

    # =========================================================================
    # Keyboard Input
    # =========================================================================

    def press(self, key: int) -> None:
        """
        Key down event for keypad key `key` (0x0-0xF).

        If the CPU is waiting on Fx0A, the key is delivered to the waiting
        register and execution resumes on the next step().
        """
        if self.cpu.key_down(key):
            self._resync_clock = True

    def release(self, key: int) -> None:
        """Key up event for keypad key `key` (0x0-0xF)."""
        self.cpu.key_up(key)

    # =========================================================================
    # Display Output
    # =========================================================================

    @property
    def framebuffer_width(self) -> int:
        """Display width in pixels."""
        return self.cpu.display.width

    @property
    def framebuffer_height(self) -> int:
        """Display height in pixels."""
        return self.cpu.display.height

    def pixel(self, x: int, y: int) -> bool:
        """Return True if the pixel at (x, y) is lit."""
        return self.cpu.display.get_pixel(x, y)

    def take_dirty(self) -> bool:
        """Return True once after every change to the display."""
        return self.cpu.display.take_dirty()

    @property
    def display_text(self) -> str:
        """The display rendered as text ('#' lit, '.' unlit)."""
        return self.cpu.display.get_text()

    def render_display(self, scale: int = 8) -> bytes:
        """
        Render the display to a PNG image.

        Args:
            scale: Pixel scaling factor (default 8)

        Returns:
            PNG image data as bytes
        """
        return self.cpu.display.render_image(scale=scale)

"""
CHIP-8 Emulator
===============

An interpreter for the classic CHIP-8 virtual machine.

This package provides:

- **Chip8CPU**: Registers, call stack and the full classic instruction set
- **Memory**: 4KB address space with the built-in hexadecimal font
- **Framebuffer**: 64x32 monochrome display with XOR sprite drawing
- **Keypad**: 16-key hexadecimal keypad plus a QWERTY host key map
- **CountdownTimer**: 60 Hz delay and sound timers
- **RateAccumulator**: Time-to-tick conversion shared by timers and the
  instruction clock

Quick Start
-----------

Basic usage::

    >>> import time
    >>> from chip8_vm.emulator import Emulator, EmulatorConfig
    >>> emu = Emulator(time.monotonic(), EmulatorConfig(instruction_rate=700))
    >>> emu.load_rom("roms/PONG")
    >>> emu.step(time.monotonic())
    >>> emu.press(0x1)
    >>> print(emu.display_text)

Deterministic runs for testing::

    >>> emu = Emulator(0.0, EmulatorConfig(seed=1234))
    >>> emu.load_program(rom_bytes)
    >>> for frame in range(1, 61):
    ...     emu.step(frame / 60)

Implementation Notes
--------------------

The emulator never reads a clock. Every timestamp is an argument, so runs
are reproducible and hosts can drive it from any event loop.

Only the classic instruction set is implemented. The one ambiguous pair,
SHR/SHL, is selected with ShiftSource at construction time.

Module Structure
----------------

- ``emulator``: Emulator and EmulatorConfig (tick driver)
- ``cpu``: Chip8CPU, CPUState and ShiftSource
- ``opcodes``: Instruction decoding (Op, Instruction, decode)
- ``memory``: Memory and the font table
- ``display``: Framebuffer
- ``keypad``: Keypad and QWERTY_KEYMAP
- ``timer``: CountdownTimer
- ``clock``: RateAccumulator

Copyright (c) 2026 chip8-vm Contributors
"""

from .clock import RateAccumulator
from .timer import CountdownTimer, TIMER_FREQUENCY
from .display import Framebuffer, DISPLAY_WIDTH, DISPLAY_HEIGHT
from .keypad import Keypad, NUM_KEYS, QWERTY_KEYMAP, key_for_name
from .memory import (
    Memory,
    MEMORY_SIZE,
    PROGRAM_START,
    FONT_START,
    FONT_GLYPH_SIZE,
    FONT_SET,
)
from .opcodes import Op, Instruction, decode, nibbles
from .cpu import Chip8CPU, CPUState, ShiftSource, NUM_REGISTERS, STACK_DEPTH, VF
from .emulator import (
    Emulator,
    EmulatorConfig,
    DEFAULT_INSTRUCTION_RATE,
    MAX_PROGRAM_SIZE,
)

__all__ = [
    # Main emulator
    "Emulator",
    "EmulatorConfig",
    "DEFAULT_INSTRUCTION_RATE",
    "MAX_PROGRAM_SIZE",
    # CPU
    "Chip8CPU",
    "CPUState",
    "ShiftSource",
    "NUM_REGISTERS",
    "STACK_DEPTH",
    "VF",
    # Decoder
    "Op",
    "Instruction",
    "decode",
    "nibbles",
    # Memory
    "Memory",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_START",
    "FONT_GLYPH_SIZE",
    "FONT_SET",
    # Display
    "Framebuffer",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    # Keypad
    "Keypad",
    "NUM_KEYS",
    "QWERTY_KEYMAP",
    "key_for_name",
    # Timing
    "CountdownTimer",
    "TIMER_FREQUENCY",
    "RateAccumulator",
]

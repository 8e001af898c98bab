"""
chip8-vm - A CHIP-8 Virtual Machine Interpreter
===============================================

This package interprets programs written for the CHIP-8, the small 8-bit
virtual machine of the late 1970s: 4KB of memory, sixteen 8-bit registers,
a 64x32 monochrome display, a 16-key hexadecimal keypad and two 60 Hz
countdown timers.

Main Components
---------------
- **emulator**: The interpreter
    Machine state, instruction decoding and execution, display, keypad,
    timers and the time-driven Emulator façade

- **disassembler**: CHIP-8 disassembler
    Turns program images into readable listings

- **cli**: Command-line tools (c8run, c8disasm)

Quick Start
-----------
Run a program, driving time from the host clock:
    >>> import time
    >>> from chip8_vm import Emulator
    >>> emu = Emulator(time.monotonic())
    >>> emu.load_rom("PONG")
    >>> emu.step(time.monotonic())
    >>> if emu.take_dirty():
    ...     print(emu.display_text)

Disassemble a program:
    >>> from chip8_vm import Chip8Disassembler
    >>> print(Chip8Disassembler().disassemble_to_text(rom_bytes))

Or use the command-line tools:
    $ c8run PONG --duration 5
    $ c8disasm PONG

Reference Documentation
-----------------------
- Cowgod's CHIP-8 Technical Reference
- The COSMAC VIP manual (original interpreter behaviour)

Version History
---------------
1.0.0 - Initial release with interpreter, disassembler and CLI tools
"""

__version__ = "1.0.0"
__author__ = "chip8-vm Contributors"

# =============================================================================
# Public API Exports
# =============================================================================
# These are the main classes and functions that users of the library will use.
# We import them here so they can be accessed directly from chip8_vm.
# =============================================================================

from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    Chip8CPU,
    ShiftSource,
    Framebuffer,
    Keypad,
    Memory,
    CountdownTimer,
    RateAccumulator,
    Op,
    Instruction,
    decode,
    QWERTY_KEYMAP,
    key_for_name,
)
from chip8_vm.disassembler import Chip8Disassembler, DisassembledInstruction
from chip8_vm.errors import (
    Chip8Error,
    MachineFault,
    StackUnderflowError,
    StackOverflowError,
    MemoryAccessError,
    ClockError,
    KeyRangeError,
    PixelRangeError,
    ProgramLoadError,
    ProgramSizeError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Emulator
    "Emulator",
    "EmulatorConfig",
    "Chip8CPU",
    "ShiftSource",
    "Framebuffer",
    "Keypad",
    "Memory",
    "CountdownTimer",
    "RateAccumulator",
    "Op",
    "Instruction",
    "decode",
    "QWERTY_KEYMAP",
    "key_for_name",
    # Disassembler
    "Chip8Disassembler",
    "DisassembledInstruction",
    # Exception hierarchy
    "Chip8Error",
    "MachineFault",
    "StackUnderflowError",
    "StackOverflowError",
    "MemoryAccessError",
    "ClockError",
    "KeyRangeError",
    "PixelRangeError",
    "ProgramLoadError",
    "ProgramSizeError",
]

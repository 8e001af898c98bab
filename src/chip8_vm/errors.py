"""
CHIP-8 VM Error Hierarchy
=========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Chip8Error, allowing callers to catch every
interpreter-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Chip8Error (base)
├── MachineFault (fatal precondition violations)
│   ├── StackUnderflowError - RET with an empty call stack
│   ├── StackOverflowError - CALL with a full (16-entry) call stack
│   ├── MemoryAccessError - address outside $000-$FFF
│   ├── ClockError - timestamp earlier than the clock's reference time
│   ├── KeyRangeError - key code outside 0x0-0xF
│   └── PixelRangeError - framebuffer coordinate out of bounds
└── ProgramLoadError (host-side program loading)
    └── ProgramSizeError - program does not fit above $200

Faults versus diagnostics
-------------------------
A MachineFault means the program image is corrupt or the host broke a
precondition. The interpreter never tries to recover from one; the
current operation is abandoned and the exception propagates.

Unrecognised instruction words are NOT exceptions. They are logged and
skipped by the CPU (see cpu.py).

Error messages follow this format when the faulting instruction is known:
    $0204: stack underflow on return
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Chip8Error(Exception):
    """
    Base exception for all CHIP-8 VM errors.

    Example:
        try:
            emu.step(now)
        except Chip8Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Machine Faults
# =============================================================================

class MachineFault(Chip8Error):
    """
    Base exception for fatal interpreter faults.

    Attributes:
        message: The fault description
        pc: Address of the instruction that faulted (optional). Faults
            raised outside instruction execution (host calls) leave it None.
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        self.message = message
        self.pc = pc
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.pc is None:
            return self.message
        return f"${self.pc:04X}: {self.message}"

    def at(self, pc: int) -> "MachineFault":
        """Attach the faulting instruction address and return self."""
        self.pc = pc
        self.args = (self._format_message(),)
        return self


class StackUnderflowError(MachineFault):
    """
    Return executed with an empty call stack.

    This always indicates a malformed program: every 00EE must be matched
    by an earlier 2nnn.
    """

    def __init__(self, pc: Optional[int] = None):
        super().__init__("stack underflow on return", pc=pc)


class StackOverflowError(MachineFault):
    """Subroutine call made with all 16 stack entries in use."""

    def __init__(self, depth: int, pc: Optional[int] = None):
        self.depth = depth
        super().__init__(f"stack overflow (depth {depth})", pc=pc)


class MemoryAccessError(MachineFault):
    """
    Memory access outside the 4KB address space.

    Raised for any read or write whose address falls outside $000-$FFF,
    including sprite reads and register block copies that run off the end.
    """

    def __init__(self, address: int, pc: Optional[int] = None):
        self.address = address
        super().__init__(
            f"memory access out of range: ${address:04X}", pc=pc
        )


class ClockError(MachineFault):
    """A timestamp moved backwards relative to a clock's reference time."""

    def __init__(self, now: float, reference: float):
        self.now = now
        self.reference = reference
        super().__init__(
            f"time moved backwards: {now!r} < reference {reference!r}"
        )


class KeyRangeError(MachineFault):
    """Key code outside the 16-key keypad (0x0-0xF)."""

    def __init__(self, key: int, pc: Optional[int] = None):
        self.key = key
        super().__init__(f"{key:#x} is not a key on the keypad", pc=pc)


class PixelRangeError(MachineFault):
    """Framebuffer coordinate outside the display."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        super().__init__(
            f"pixel ({x}, {y}) is out of bounds of display size {width}x{height}"
        )


# =============================================================================
# Program Loading Exceptions
# =============================================================================

class ProgramLoadError(Chip8Error):
    """Base exception for program loading errors."""
    pass


class ProgramSizeError(ProgramLoadError):
    """
    Program image does not fit in memory.

    Programs are copied to $200, leaving 3584 bytes for the image.
    """

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(
            f"program is {size} bytes, but only {capacity} bytes fit above $200"
        )

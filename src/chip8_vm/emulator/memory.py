"""
Memory Subsystem for CHIP-8 Emulator
====================================

Memory Map:
    $000-$04F  Reserved (interpreter area on the original hardware)
    $050-$09F  Hexadecimal font, 16 glyphs x 5 bytes
    $0A0-$1FF  Reserved
    $200-$FFF  Program and data

Every access is bounds checked. Addresses outside $000-$FFF raise
MemoryAccessError instead of wrapping, since a program reaching there is
corrupt.

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import Iterable

from ..errors import MemoryAccessError

# Address space
MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200

# Font table location and glyph size
FONT_START = 0x050
FONT_GLYPH_SIZE = 5

# Hexadecimal digit sprites 0-F, 4 pixels wide (high nibble), 5 rows tall
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class Memory:
    """
    4KB byte-addressable memory.

    Attributes:
        size: Number of addressable bytes (4096)

    Example:
        >>> mem = Memory()
        >>> mem.write(0x300, 0x42)
        >>> mem.read(0x300)
        66
        >>> mem.read(0x1000)
        Traceback (most recent call last):
        ...
        chip8_vm.errors.MemoryAccessError: memory access out of range: $1000
    """

    size = MEMORY_SIZE

    def __init__(self, load_font: bool = True):
        """
        Initialize zeroed memory.

        Args:
            load_font: Copy the hexadecimal font to FONT_START
        """
        self._data = bytearray(MEMORY_SIZE)
        if load_font:
            self.write_block(FONT_START, FONT_SET)

    def read(self, address: int) -> int:
        """Read one byte."""
        self._check(address)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        """Write one byte (value masked to 8 bits)."""
        self._check(address)
        self._data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (high byte at `address`)."""
        return (self.read(address) << 8) | self.read(address + 1)

    def read_block(self, address: int, length: int) -> bytes:
        """
        Read `length` bytes starting at `address`.

        Raises:
            MemoryAccessError: If any byte of the block is out of range
        """
        if length <= 0:
            return b""
        self._check(address)
        self._check(address + length - 1)
        return bytes(self._data[address:address + length])

    def write_block(self, address: int, data: Iterable[int]) -> None:
        """
        Write a sequence of bytes starting at `address`.

        The whole range is checked before any byte is written.
        """
        data = bytes(data)
        if not data:
            return
        self._check(address)
        self._check(address + len(data) - 1)
        self._data[address:address + len(data)] = data

    def dump(self) -> bytes:
        """Return a copy of the whole address space."""
        return bytes(self._data)

    @staticmethod
    def _check(address: int) -> None:
        if not 0 <= address < MEMORY_SIZE:
            raise MemoryAccessError(address)

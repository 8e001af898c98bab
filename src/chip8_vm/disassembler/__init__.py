"""
CHIP-8 Disassembler Module
==========================

This module provides disassembly of CHIP-8 program images, built on the
same decoder the interpreter uses.

Usage:
    from chip8_vm.disassembler import Chip8Disassembler

    disasm = Chip8Disassembler()
    instructions = disasm.disassemble(rom_bytes, start_address=0x200)

Copyright (c) 2026 chip8-vm Contributors
"""

from .chip8 import Chip8Disassembler, DisassembledInstruction

__all__ = [
    "Chip8Disassembler",
    "DisassembledInstruction",
]

"""
CHIP-8 Disassembler
===================

Disassembles CHIP-8 program images into readable assembly listings.

The disassembler uses the same decoder as the CPU (emulator.opcodes), so a
listing shows exactly how the interpreter will see each word. Mnemonics
follow the widely used Cowgod syntax:

    $0200: 60 0A  LD V0, $0A
    $0202: A0 05  LD I, $005
    $0204: D0 13  DRW V0, V1, 3

CHIP-8 programs freely mix code and sprite data, and nothing in the image
marks which is which. Data words are therefore disassembled like code;
words that decode to nothing are shown as `DW`.

Usage:
    disasm = Chip8Disassembler()
    for instr in disasm.disassemble(rom_bytes):
        print(instr)

Copyright (c) 2026 chip8-vm Contributors
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..emulator.memory import PROGRAM_START
from ..emulator.opcodes import Instruction, Op, decode


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled CHIP-8 word.

    Attributes:
        address: Memory address of the word
        word: The instruction word (or the lone byte for a trailing DB)
        mnemonic: The instruction mnemonic (e.g., "LD", "DRW")
        operand_str: Formatted operands for display
        raw_bytes: The bytes making up this entry (2, or 1 for DB)
        instruction: The decoded instruction (None for a trailing DB)
        comment: Optional comment (symbol names, invalid words)
    """
    address: int
    word: int
    mnemonic: str
    operand_str: str
    raw_bytes: bytes
    instruction: Optional[Instruction] = None
    comment: str = ""

    @property
    def size(self) -> int:
        """Number of bytes covered by this entry."""
        return len(self.raw_bytes)

    def __str__(self) -> str:
        """Format as assembly line: ADDRESS: BYTES  MNEMONIC OPERANDS"""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)

        if self.operand_str:
            asm = f"{self.mnemonic} {self.operand_str}"
        else:
            asm = self.mnemonic

        if self.comment:
            return f"${self.address:04X}: {hex_bytes}  {asm:<18} ; {self.comment}"
        return f"${self.address:04X}: {hex_bytes}  {asm}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"${self.address:04X}",
            "address_int": self.address,
            "word": f"${self.word:04X}",
            "mnemonic": self.mnemonic,
            "op": self.instruction.op.name if self.instruction else None,
            "operand": self.operand_str,
            "size": self.size,
            "bytes": [f"${b:02X}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# Operand Formatting Table
# =============================================================================
# Op -> (mnemonic, operand formatter)

def _vx(i: Instruction) -> str:
    return f"V{i.x:X}"


def _vx_vy(i: Instruction) -> str:
    return f"V{i.x:X}, V{i.y:X}"


def _vx_kk(i: Instruction) -> str:
    return f"V{i.x:X}, ${i.kk:02X}"


def _addr(i: Instruction) -> str:
    return f"${i.nnn:03X}"


def _none(i: Instruction) -> str:
    return ""


_FORMATS: Dict[Op, Tuple[str, Callable[[Instruction], str]]] = {
    Op.CLS: ("CLS", _none),
    Op.RET: ("RET", _none),
    Op.SYS: ("SYS", _addr),
    Op.JP: ("JP", _addr),
    Op.CALL: ("CALL", _addr),
    Op.SE_VX_KK: ("SE", _vx_kk),
    Op.SNE_VX_KK: ("SNE", _vx_kk),
    Op.SE_VX_VY: ("SE", _vx_vy),
    Op.LD_VX_KK: ("LD", _vx_kk),
    Op.ADD_VX_KK: ("ADD", _vx_kk),
    Op.LD_VX_VY: ("LD", _vx_vy),
    Op.OR: ("OR", _vx_vy),
    Op.AND: ("AND", _vx_vy),
    Op.XOR: ("XOR", _vx_vy),
    Op.ADD_VX_VY: ("ADD", _vx_vy),
    Op.SUB: ("SUB", _vx_vy),
    Op.SHR: ("SHR", _vx_vy),
    Op.SUBN: ("SUBN", _vx_vy),
    Op.SHL: ("SHL", _vx_vy),
    Op.SNE_VX_VY: ("SNE", _vx_vy),
    Op.LD_I: ("LD", lambda i: f"I, ${i.nnn:03X}"),
    Op.JP_V0: ("JP", lambda i: f"V0, ${i.nnn:03X}"),
    Op.RND: ("RND", _vx_kk),
    Op.DRW: ("DRW", lambda i: f"V{i.x:X}, V{i.y:X}, {i.n}"),
    Op.SKP: ("SKP", _vx),
    Op.SKNP: ("SKNP", _vx),
    Op.LD_VX_DT: ("LD", lambda i: f"V{i.x:X}, DT"),
    Op.LD_VX_K: ("LD", lambda i: f"V{i.x:X}, K"),
    Op.LD_DT_VX: ("LD", lambda i: f"DT, V{i.x:X}"),
    Op.LD_ST_VX: ("LD", lambda i: f"ST, V{i.x:X}"),
    Op.ADD_I_VX: ("ADD", lambda i: f"I, V{i.x:X}"),
    Op.LD_F_VX: ("LD", lambda i: f"F, V{i.x:X}"),
    Op.LD_B_VX: ("LD", lambda i: f"B, V{i.x:X}"),
    Op.LD_I_VX: ("LD", lambda i: f"[I], V{i.x:X}"),
    Op.LD_VX_I: ("LD", lambda i: f"V{i.x:X}, [I]"),
    Op.INVALID: ("DW", lambda i: f"${i.word:04X}"),
}

# Ops whose nnn field is a code or data address worth annotating
_ADDRESS_OPS = frozenset({Op.SYS, Op.JP, Op.CALL, Op.LD_I, Op.JP_V0})


# =============================================================================
# CHIP-8 Disassembler
# =============================================================================

class Chip8Disassembler:
    """
    Disassembler for CHIP-8 program images.

    Attributes:
        _symbol_table: Optional address -> name map used to annotate
                       jump, call and index-load targets
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to symbol names.
        """
        self._symbol_table = dict(symbol_table or {})

    def disassemble_one(
        self,
        data: bytes,
        address: int = PROGRAM_START,
        offset: int = 0,
    ) -> DisassembledInstruction:
        """
        Disassemble the word at `offset` in `data`.

        Args:
            data: Program bytes
            address: Memory address corresponding to data[offset]
            offset: Index into data of the word's high byte

        Returns:
            DisassembledInstruction. A single trailing byte becomes `DB`.

        Raises:
            IndexError: If offset is outside data
        """
        if not 0 <= offset < len(data):
            raise IndexError(f"offset {offset} outside data of length {len(data)}")

        if offset + 1 >= len(data):
            byte = data[offset]
            return DisassembledInstruction(
                address=address,
                word=byte,
                mnemonic="DB",
                operand_str=f"${byte:02X}",
                raw_bytes=bytes([byte]),
            )

        word = (data[offset] << 8) | data[offset + 1]
        ins = decode(word)
        mnemonic, formatter = _FORMATS[ins.op]

        comment = ""
        if ins.op is Op.INVALID:
            comment = "invalid instruction"
        elif ins.op in _ADDRESS_OPS and ins.nnn in self._symbol_table:
            comment = self._symbol_table[ins.nnn]

        return DisassembledInstruction(
            address=address,
            word=word,
            mnemonic=mnemonic,
            operand_str=formatter(ins),
            raw_bytes=bytes(data[offset:offset + 2]),
            instruction=ins,
            comment=comment,
        )

    def disassemble(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a program image word by word.

        Args:
            data: Program bytes
            start_address: Address of data[0] (default $200)
            count: Maximum number of entries (None = all)

        Returns:
            List of DisassembledInstruction
        """
        result = []
        offset = 0
        while offset < len(data):
            if count is not None and len(result) >= count:
                break
            instr = self.disassemble_one(data, start_address + offset, offset)
            result.append(instr)
            offset += instr.size
        return result

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: int = PROGRAM_START,
        count: Optional[int] = None,
    ) -> str:
        """Disassemble and return a newline-separated listing."""
        return "\n".join(
            str(instr) for instr in self.disassemble(data, start_address, count)
        )

    def add_symbol(self, address: int, name: str) -> None:
        """Add a symbol used to annotate references to `address`."""
        self._symbol_table[address] = name

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        """Add several symbols at once."""
        self._symbol_table.update(symbols)

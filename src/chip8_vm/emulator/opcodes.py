"""
CHIP-8 Instruction Decoder
==========================

Every CHIP-8 instruction is one 16-bit big-endian word. The word splits
into four nibbles, most significant first:

    +------+------+------+------+
    |  F   |  X   |  Y   |  N   |     F = family (top nibble)
    +------+------+------+------+
           |     KK      |            KK  = low byte
           |      NNN           |     NNN = low 12 bits (address)

The family nibble selects the instruction group. Families 5, 8, 9, E and
F need a second look at N or KK; a selector that matches nothing decodes
to Op.INVALID.

decode() turns a word into an `Instruction` carrying its Op and every
field, so the CPU can dispatch with a single match statement and the
disassembler can print the same decoding.

Copyright (c) 2026 chip8-vm Contributors
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, Tuple


class Op(Enum):
    """Decoded instruction kinds of the classic CHIP-8 instruction set."""
    CLS = "00E0"
    RET = "00EE"
    SYS = "0nnn"
    JP = "1nnn"
    CALL = "2nnn"
    SE_VX_KK = "3xkk"
    SNE_VX_KK = "4xkk"
    SE_VX_VY = "5xy0"
    LD_VX_KK = "6xkk"
    ADD_VX_KK = "7xkk"
    LD_VX_VY = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_VX_VY = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_VX_VY = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxkk"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I_VX = "Fx1E"
    LD_F_VX = "Fx29"
    LD_B_VX = "Fx33"
    LD_I_VX = "Fx55"
    LD_VX_I = "Fx65"
    INVALID = "????"

    @property
    def pattern(self) -> str:
        """Opcode pattern in the usual xnnn notation."""
        return self.value


# =============================================================================
# SECONDARY DISPATCH TABLES
# =============================================================================

# Family 8: selected by the low nibble
_ALU_OPS: Dict[int, Op] = {
    0x0: Op.LD_VX_VY,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD_VX_VY,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

# Family E: selected by the low byte
_KEY_OPS: Dict[int, Op] = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

# Family F: selected by the low byte
_MISC_OPS: Dict[int, Op] = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_I_VX,
    0x65: Op.LD_VX_I,
}

# Families whose op is fixed by the top nibble alone
_FAMILY_OPS: Dict[int, Op] = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_KK,
    0x4: Op.SNE_VX_KK,
    0x6: Op.LD_VX_KK,
    0x7: Op.ADD_VX_KK,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}


# =============================================================================
# DECODED INSTRUCTION
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """
    A decoded instruction word.

    All fields are extracted for every word; which ones are meaningful
    depends on `op`.

    Attributes:
        op: Decoded instruction kind
        word: The raw 16-bit instruction word
        x: Second nibble (register selector)
        y: Third nibble (register selector)
        n: Fourth nibble (sprite height / ALU selector)
        kk: Low byte (immediate)
        nnn: Low 12 bits (address)
    """
    op: Op
    word: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int

    @property
    def is_valid(self) -> bool:
        """False for words that match no instruction."""
        return self.op is not Op.INVALID

    @property
    def nibbles(self) -> Tuple[int, int, int, int]:
        """The four nibbles of the word, most significant first."""
        return nibbles(self.word)

    def __str__(self) -> str:
        return f"{self.word:04X} {self.op.name}"


def nibbles(word: int) -> Tuple[int, int, int, int]:
    """Split a 16-bit word into four nibbles, most significant first."""
    return (
        (word >> 12) & 0xF,
        (word >> 8) & 0xF,
        (word >> 4) & 0xF,
        word & 0xF,
    )


def _decode_op(family: int, nnn: int, n: int, kk: int) -> Op:
    """Select the Op for a word from its family and selector fields."""
    match family:
        case 0x0:
            if nnn == 0x0E0:
                return Op.CLS
            if nnn == 0x0EE:
                return Op.RET
            return Op.SYS
        case 0x5:
            return Op.SE_VX_VY if n == 0 else Op.INVALID
        case 0x8:
            return _ALU_OPS.get(n, Op.INVALID)
        case 0x9:
            return Op.SNE_VX_VY if n == 0 else Op.INVALID
        case 0xE:
            return _KEY_OPS.get(kk, Op.INVALID)
        case 0xF:
            return _MISC_OPS.get(kk, Op.INVALID)
        case _:
            return _FAMILY_OPS[family]


@lru_cache(maxsize=None)
def decode(word: int) -> Instruction:
    """
    Decode a 16-bit instruction word.

    Instructions are immutable, so decodings are cached; a running
    program only ever touches a few hundred distinct words.

    Args:
        word: Instruction word (only the low 16 bits are used)

    Returns:
        Instruction with op set to Op.INVALID if the word is unrecognised

    Example:
        >>> decode(0xD013)
        Instruction(op=<Op.DRW: 'Dxyn'>, word=53267, x=0, y=1, n=3, kk=19, nnn=19)
    """
    word &= 0xFFFF
    family, x, y, n = nibbles(word)
    kk = word & 0xFF
    nnn = word & 0xFFF
    return Instruction(
        op=_decode_op(family, nnn, n, kk),
        word=word,
        x=x,
        y=y,
        n=n,
        kk=kk,
        nnn=nnn,
    )

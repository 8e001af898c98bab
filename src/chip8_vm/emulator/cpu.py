"""
CHIP-8 CPU
==========

Machine state and instruction semantics of the CHIP-8 virtual machine.

Registers:
- V0-VF: 8-bit general purpose; VF doubles as the carry/borrow/collision flag
- I: 16-bit index register, addresses sprite and data blocks
- PC: 16-bit program counter, starts at $200, advances by 2 per fetch
- Stack: up to 16 return addresses

The CPU owns the rest of the machine: memory, framebuffer, keypad and the
delay and sound timers. It has exactly one suspension point, the
wait-for-key instruction (Fx0A). While a key is awaited the CPU reports
`is_waiting_for_key` and the driver stops executing instructions until
key_down() delivers a key.

Instruction execution is split into fetch (read the word at PC, PC += 2),
decode (opcodes.decode) and execute (one match over the decoded Op).
Unrecognised words are logged and skipped.

Shift quirk
-----------
8xy6 (SHR) and 8xyE (SHL) differ between interpreters. The original COSMAC
VIP interpreter shifts Vy and stores the result in Vx; CHIP-48 and later
shift Vx in place and ignore y. ShiftSource selects which one to emulate;
the default is ShiftSource.VY.

Copyright (c) 2026 chip8-vm Contributors
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..errors import MachineFault, StackOverflowError, StackUnderflowError
from .display import Framebuffer
from .keypad import Keypad
from .memory import FONT_GLYPH_SIZE, FONT_START, Memory, PROGRAM_START
from .opcodes import Instruction, Op, decode
from .timer import CountdownTimer

logger = logging.getLogger(__name__)

# Register file and call stack sizes
NUM_REGISTERS = 16
STACK_DEPTH = 16

# Flag register index
VF = 0xF


class ShiftSource(Enum):
    """Which register 8xy6/8xyE read their operand from."""
    VY = "vy"  # COSMAC VIP: Vx <- Vy shifted
    VX = "vx"  # CHIP-48/SUPER-CHIP: Vx <- Vx shifted


@dataclass
class CPUState:
    """
    Register-level CPU state.

    Attributes:
        v: General purpose registers V0-VF (8-bit each)
        i: Index register (16-bit)
        pc: Program counter (16-bit)
        stack: Return addresses, most recent last
        waiting_register: Register awaiting a key press (Fx0A), or None
    """
    v: bytearray = field(default_factory=lambda: bytearray(NUM_REGISTERS))
    i: int = 0
    pc: int = PROGRAM_START
    stack: List[int] = field(default_factory=list)
    waiting_register: Optional[int] = None


class Chip8CPU:
    """
    CHIP-8 machine state plus the instruction dispatcher.

    Instrumentation hooks:
    - on_instruction(pc, word): called before each instruction executes
    - on_invalid_instruction(pc, word): called after an unrecognised word
      has been logged

    Example:
        >>> cpu = Chip8CPU(0.0)
        >>> cpu.memory.write_block(0x200, bytes([0x60, 0x2A]))  # LD V0, $2A
        >>> cpu.execute_next().op
        <Op.LD_VX_KK: '6xkk'>
        >>> cpu.v[0]
        42
    """

    def __init__(
        self,
        start_time: float,
        shift_source: ShiftSource = ShiftSource.VY,
        load_font: bool = True,
        seed: Optional[int] = None,
    ):
        """
        Initialize a powered-on machine.

        Args:
            start_time: Time base for both timers
            shift_source: Operand register for SHR/SHL
            load_font: Preload the hexadecimal font at FONT_START
            seed: Seed for the RND instruction's generator (None = random)
        """
        self.state = CPUState()
        self.memory = Memory(load_font=load_font)
        self.display = Framebuffer()
        self.keypad = Keypad()
        self.delay_timer = CountdownTimer(start_time)
        self.sound_timer = CountdownTimer(start_time)
        self.shift_source = shift_source
        self._rng = random.Random(seed)

        # Instrumentation hooks
        self.on_instruction: Optional[Callable[[int, int], None]] = None
        self.on_invalid_instruction: Optional[Callable[[int, int], None]] = None

        self.instructions_executed = 0

    # ========================================
    # Register Properties
    # ========================================

    @property
    def v(self) -> bytearray:
        """General purpose registers V0-VF."""
        return self.state.v

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self.state.i

    @i.setter
    def i(self, value: int) -> None:
        self.state.i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self.state.pc

    @pc.setter
    def pc(self, value: int) -> None:
        self.state.pc = value & 0xFFFF

    @property
    def stack(self) -> Tuple[int, ...]:
        """Snapshot of the call stack, oldest entry first."""
        return tuple(self.state.stack)

    @property
    def is_waiting_for_key(self) -> bool:
        """True while Fx0A is blocked waiting for a key press."""
        return self.state.waiting_register is not None

    @property
    def waiting_register(self) -> Optional[int]:
        """Register that will receive the next key press, if waiting."""
        return self.state.waiting_register

    # ========================================
    # Stack Operations
    # ========================================

    def _push(self, address: int) -> None:
        if len(self.state.stack) >= STACK_DEPTH:
            raise StackOverflowError(len(self.state.stack))
        self.state.stack.append(address)

    def _pop(self) -> int:
        if not self.state.stack:
            raise StackUnderflowError()
        return self.state.stack.pop()

    # ========================================
    # Timers and Input
    # ========================================

    def step_timers(self, now: float) -> None:
        """Advance the delay and sound timers to `now`."""
        self.delay_timer.step(now)
        self.sound_timer.step(now)

    def key_down(self, key: int) -> bool:
        """
        Handle a key press event.

        If the CPU is waiting for a key, the key is stored in the awaited
        register and the CPU returns to running.

        Returns:
            True if this press resolved a pending wait-for-key
        """
        self.keypad.press(key)
        register = self.state.waiting_register
        if register is None:
            return False

        self.v[register] = key
        self.state.waiting_register = None
        logger.debug(f"Key {key:X} resolved wait for V{register:X}")
        return True

    def key_up(self, key: int) -> None:
        """Handle a key release event."""
        self.keypad.release(key)

    # ========================================
    # Main Execution
    # ========================================

    def execute_next(self) -> Instruction:
        """
        Fetch, decode and execute one instruction.

        Returns:
            The decoded instruction that was executed

        Raises:
            MachineFault: On a fatal fault. The fault carries the address
                of the instruction that caused it.
        """
        pc = self.pc
        try:
            word = self.memory.read_word(pc)
            self.pc = pc + 2

            if self.on_instruction:
                self.on_instruction(pc, word)

            instruction = decode(word)
            self.execute(instruction, pc)
        except MachineFault as fault:
            if fault.pc is None:
                fault.at(pc)
            raise

        self.instructions_executed += 1
        return instruction

    def execute(self, ins: Instruction, address: Optional[int] = None) -> None:
        """
        Apply a decoded instruction to the machine state.

        PC must already point past the instruction.

        Args:
            ins: Decoded instruction
            address: Where the instruction was fetched from (for diagnostics)
        """
        v = self.v
        x, y = ins.x, ins.y

        match ins.op:
            # ============================================
            # Flow Control
            # ============================================
            case Op.CLS:
                self.display.clear()
            case Op.RET:
                self.pc = self._pop()
            case Op.SYS | Op.CALL:
                self._push(self.pc)
                self.pc = ins.nnn
            case Op.JP:
                self.pc = ins.nnn
            case Op.JP_V0:
                self.pc = ins.nnn + v[0]

            # ============================================
            # Conditional Skips
            # ============================================
            case Op.SE_VX_KK:
                self._skip_if(v[x] == ins.kk)
            case Op.SNE_VX_KK:
                self._skip_if(v[x] != ins.kk)
            case Op.SE_VX_VY:
                self._skip_if(v[x] == v[y])
            case Op.SNE_VX_VY:
                self._skip_if(v[x] != v[y])
            case Op.SKP:
                self._skip_if(self.keypad.is_down(v[x]))
            case Op.SKNP:
                self._skip_if(not self.keypad.is_down(v[x]))

            # ============================================
            # Register Loads and Arithmetic
            # ============================================
            case Op.LD_VX_KK:
                v[x] = ins.kk
            case Op.ADD_VX_KK:
                v[x] = (v[x] + ins.kk) & 0xFF
            case Op.LD_VX_VY:
                v[x] = v[y]
            case Op.OR:
                v[x] = v[x] | v[y]
            case Op.AND:
                v[x] = v[x] & v[y]
            case Op.XOR:
                v[x] = v[x] ^ v[y]
            case Op.ADD_VX_VY:
                total = v[x] + v[y]
                v[x] = total & 0xFF
                v[VF] = 1 if total > 0xFF else 0
            case Op.SUB:
                no_borrow = v[x] >= v[y]
                v[x] = (v[x] - v[y]) & 0xFF
                v[VF] = 1 if no_borrow else 0
            case Op.SUBN:
                no_borrow = v[y] >= v[x]
                v[x] = (v[y] - v[x]) & 0xFF
                v[VF] = 1 if no_borrow else 0
            # Shifts set VF before Vx: with x = F the shifted value wins
            case Op.SHR:
                source = v[self._shift_register(ins)]
                v[VF] = source & 0x01
                v[x] = source >> 1
            case Op.SHL:
                source = v[self._shift_register(ins)]
                v[VF] = (source >> 7) & 0x01
                v[x] = (source << 1) & 0xFF
            case Op.RND:
                v[x] = self._rng.getrandbits(8) & ins.kk

            # ============================================
            # Index Register and Memory
            # ============================================
            case Op.LD_I:
                self.i = ins.nnn
            case Op.ADD_I_VX:
                self.i = self.i + v[x]
            case Op.LD_F_VX:
                self.i = FONT_START + (v[x] & 0xF) * FONT_GLYPH_SIZE
            case Op.LD_B_VX:
                value = v[x]
                self.memory.write_block(
                    self.i, (value // 100, (value // 10) % 10, value % 10)
                )
            case Op.LD_I_VX:
                self.memory.write_block(self.i, v[:x + 1])
            case Op.LD_VX_I:
                v[:x + 1] = self.memory.read_block(self.i, x + 1)

            # ============================================
            # Graphics
            # ============================================
            case Op.DRW:
                self._draw_sprite(v[x], v[y], ins.n)

            # ============================================
            # Timers and Input
            # ============================================
            case Op.LD_VX_DT:
                v[x] = self.delay_timer.value
            case Op.LD_DT_VX:
                self.delay_timer.value = v[x]
            case Op.LD_ST_VX:
                self.sound_timer.value = v[x]
            case Op.LD_VX_K:
                self._wait_for_key(x)

            case Op.INVALID:
                self._invalid_instruction(ins, address)

    # ========================================
    # Instruction Helpers
    # ========================================

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = self.pc + 2

    def _shift_register(self, ins: Instruction) -> int:
        return ins.y if self.shift_source is ShiftSource.VY else ins.x

    def _draw_sprite(self, vx: int, vy: int, height: int) -> None:
        """
        XOR an 8-pixel wide, `height` row sprite from memory[I] onto the
        display at (vx, vy). Every coordinate wraps around the screen
        edges. VF is set to 1 if any lit pixel was turned off.
        """
        width = self.display.width
        screen_height = self.display.height
        x0 = vx % width
        y0 = vy % screen_height

        sprite = self.memory.read_block(self.i, height)
        collision = False

        for dy, row in enumerate(sprite):
            py = (y0 + dy) % screen_height
            for dx in range(8):
                if row & (0x80 >> dx):
                    if self.display.toggle((x0 + dx) % width, py):
                        collision = True

        self.v[VF] = 1 if collision else 0

    def _wait_for_key(self, register: int) -> None:
        key = self.keypad.resolve_wait()
        if key is not None:
            self.v[register] = key
            return

        self.state.waiting_register = register
        logger.debug(f"Waiting for key press into V{register:X}")

    def _invalid_instruction(self, ins: Instruction, address: Optional[int]) -> None:
        where = f"${address:04X}" if address is not None else "unknown address"
        logger.warning(f"Invalid instruction {ins.word:04X} at {where}")
        if self.on_invalid_instruction:
            self.on_invalid_instruction(
                address if address is not None else self.pc - 2, ins.word
            )

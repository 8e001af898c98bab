#!/usr/bin/env python3
"""
CHIP-8 Emulator Demo
====================

This script demonstrates how to use the chip8_vm emulator to:
1. Create an emulator with a custom configuration
2. Load a program
3. Drive it from a simulated clock
4. Answer a wait-for-key instruction
5. Disassemble what ran

Usage:
    source .venv/bin/activate
    python examples/chip8_demo.py

Copyright (c) 2026 chip8-vm Contributors
"""

from chip8_vm.disassembler import Chip8Disassembler
from chip8_vm.emulator import Emulator, EmulatorConfig

# Draw the hex digit held in V0, wait for a key, draw that key beside it,
# then spin forever.
PROGRAM = bytes([
    0x60, 0x0C,  # LD V0, $0C
    0x61, 0x02,  # LD V1, $02
    0x62, 0x02,  # LD V2, $02
    0xF0, 0x29,  # LD F, V0
    0xD1, 0x25,  # DRW V1, V2, 5
    0xF3, 0x0A,  # LD V3, K
    0x61, 0x08,  # LD V1, $08
    0xF3, 0x29,  # LD F, V3
    0xD1, 0x25,  # DRW V1, V2, 5
    0x12, 0x12,  # JP $212
])

FRAME_RATE = 60


def main():
    # ==========================================================================
    # 1. Create an emulator instance
    # ==========================================================================
    # All timestamps are seconds on a clock the host owns. Here the clock
    # is simulated so the demo is instant and repeatable.

    print("Creating CHIP-8 emulator...")
    emu = Emulator(0.0, EmulatorConfig(instruction_rate=700, seed=1))
    print(f"  Instruction rate: {emu.instruction_rate:.0f} Hz")
    print(f"  Display: {emu.framebuffer_width}x{emu.framebuffer_height}")

    # ==========================================================================
    # 2. Load a program
    # ==========================================================================
    emu.load_program(PROGRAM)

    # ==========================================================================
    # 3. Run half a second, one frame at a time
    # ==========================================================================
    frame = 0
    for frame in range(1, FRAME_RATE // 2 + 1):
        emu.step(frame / FRAME_RATE)
    print(f"\nAfter 0.5s: {emu.total_instructions} instructions")
    print(f"  Waiting for key: {emu.is_waiting_for_key}")

    # ==========================================================================
    # 4. Press a key
    # ==========================================================================
    # Keypad key 0xA is "z" on the QWERTY layout.
    emu.press(0xA)
    for frame in range(frame + 1, frame + FRAME_RATE // 2 + 1):
        emu.step(frame / FRAME_RATE)
    emu.release(0xA)

    print(f"\nAfter key press: V3 = {emu.cpu.v[3]:X}")
    print(emu.display.get_text(on="#", off=" "))

    # ==========================================================================
    # 5. Disassemble the program
    # ==========================================================================
    print("\nProgram listing:")
    disasm = Chip8Disassembler({0x212: "spin"})
    print(disasm.disassemble_to_text(PROGRAM))


if __name__ == "__main__":
    main()

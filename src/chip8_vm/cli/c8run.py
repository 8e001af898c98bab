"""
c8run - Headless CHIP-8 Runner
==============================

Runs a CHIP-8 program on a simulated clock and prints the final screen.

The runner never sleeps: it advances simulated time one display frame at
a time, so a ten second run finishes as fast as the interpreter allows and
always produces the same result for the same ROM, options and seed.

Usage Examples
--------------
Run PONG for two simulated seconds:
    $ c8run PONG

Run faster with a fixed seed, holding the "1" and "q" host keys:
    $ c8run BRIX --rate 1000 --seed 7 --hold 1 --hold q

Trace every instruction:
    $ c8run TEST.ch8 --duration 0.1 --trace

Save the final screen as an image:
    $ c8run PONG --screenshot pong.png --scale 10

Environment variables CHIP8_INSTRUCTION_RATE, CHIP8_SHIFT_SOURCE and
CHIP8_SEED provide defaults; command-line options override them.

Copyright (c) 2026 chip8-vm Contributors
"""

import dataclasses
import logging
import math
from pathlib import Path
from typing import Optional, Tuple

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import handle_cli_exception
from chip8_vm.disassembler import Chip8Disassembler
from chip8_vm.emulator import Emulator, EmulatorConfig, ShiftSource, key_for_name

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def build_config(
    rate: Optional[float],
    shift_source: Optional[str],
    seed: Optional[int],
) -> EmulatorConfig:
    """Environment-derived configuration with command-line overrides applied."""
    config = EmulatorConfig.from_env()
    overrides = {}
    if rate is not None:
        overrides["instruction_rate"] = rate
    if shift_source is not None:
        overrides["shift_source"] = ShiftSource(shift_source.lower())
    if seed is not None:
        overrides["seed"] = seed
    return dataclasses.replace(config, **overrides)


def parse_hold_keys(names: Tuple[str, ...]) -> list[int]:
    """
    Translate host key names to keypad codes.

    Raises:
        click.BadParameter: If a name is not on the QWERTY key map
    """
    keys = []
    for name in names:
        key = key_for_name(name)
        if key is None:
            raise click.BadParameter(f"'{name}' is not a mapped host key")
        keys.append(key)
    return keys


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-d", "--duration",
    type=click.FloatRange(min=0.0),
    default=2.0,
    show_default=True,
    help="Simulated seconds to run",
)
@click.option(
    "-r", "--rate",
    type=click.FloatRange(min=0.0, min_open=True),
    default=None,
    help="Instructions per second (default: 600)",
)
@click.option(
    "--shift-source",
    type=click.Choice(["vy", "vx"], case_sensitive=False),
    default=None,
    help="Operand register for SHR/SHL: vy (COSMAC VIP, default) or vx (CHIP-48)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the RND instruction",
)
@click.option(
    "--frame-rate",
    type=click.FloatRange(min=0.0, min_open=True),
    default=60.0,
    show_default=True,
    help="Simulated host frames per second (step() calls)",
)
@click.option(
    "-k", "--hold",
    multiple=True,
    help="Host key to hold down for the whole run, e.g. 'q' (can be repeated)",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Print every executed instruction",
)
@click.option(
    "--on", "on_char",
    default="#",
    show_default=True,
    help="Character for lit pixels",
)
@click.option(
    "--off", "off_char",
    default=".",
    show_default=True,
    help="Character for unlit pixels",
)
@click.option(
    "--screenshot",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also save the final screen as a PNG image (requires Pillow)",
)
@click.option(
    "--scale",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Image pixels per CHIP-8 pixel for --screenshot",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8run")
def main(
    rom: Path,
    duration: float,
    rate: Optional[float],
    shift_source: Optional[str],
    seed: Optional[int],
    frame_rate: float,
    hold: Tuple[str, ...],
    trace: bool,
    on_char: str,
    off_char: str,
    screenshot: Optional[Path],
    scale: int,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 ROM headlessly and print the final screen.

    ROM is the program image to load at $200.
    """
    setup_logging(verbose)

    try:
        config = build_config(rate, shift_source, seed)
        held_keys = parse_hold_keys(hold)

        emu = Emulator(0.0, config)
        emu.load_rom(rom)

        if trace:
            disasm = Chip8Disassembler()

            def trace_instruction(pc: int, word: int) -> None:
                instr = disasm.disassemble_one(word.to_bytes(2, "big"), pc)
                click.echo(str(instr))

            emu.cpu.on_instruction = trace_instruction

        for key in held_keys:
            emu.press(key)

        frames = math.ceil(duration * frame_rate)
        logger.debug(
            f"Running {rom.name} for {frames} frames at "
            f"{config.instruction_rate} Hz"
        )
        for frame in range(1, frames + 1):
            emu.step(frame / frame_rate)

        click.echo(emu.display.get_text(on_char, off_char))

        status = (
            f"; {emu.total_instructions} instructions, "
            f"PC=${emu.cpu.pc:04X} I=${emu.cpu.i:04X} "
            f"DT={emu.delay_timer.value} ST={emu.sound_timer.value}"
        )
        if emu.is_waiting_for_key:
            status += f", waiting for key into V{emu.cpu.waiting_register:X}"
        click.echo(status)

        if screenshot:
            screenshot.write_bytes(emu.render_display(scale=scale))
            logger.debug(f"Screenshot written to {screenshot}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Runtime")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()

"""
c8disasm - CHIP-8 Disassembler Command-Line Interface
=====================================================

Disassembles a CHIP-8 program image into a listing.

Usage Examples
--------------
Disassemble a ROM:
    $ c8disasm PONG

Limit number of instructions:
    $ c8disasm PONG --count 20

Output to file without raw bytes:
    $ c8disasm PONG --no-bytes -o pong.lst

Copyright (c) 2026 chip8-vm Contributors
"""

from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import handle_cli_exception, parse_address
from chip8_vm.disassembler import Chip8Disassembler
from chip8_vm.emulator.memory import MEMORY_SIZE


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0x200",
    help="Load address of the first byte (hex with 0x/$ prefix or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit raw bytes from output (show only mnemonic and operands)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program image.

    INPUT_FILE is the ROM to disassemble.
    """
    try:
        base_address = parse_address(address)
        if not 0 <= base_address < MEMORY_SIZE:
            raise click.BadParameter(
                f"address must be 0-4095 (0x000-0xFFF), got {address}"
            )

        data = input_file.read_bytes()
        if len(data) == 0:
            raise click.BadParameter(f"{input_file} is empty")

        if verbose:
            click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
            click.echo(f"Base address: ${base_address:04X}", err=True)

        output_lines = [
            f"; Disassembly of {input_file.name}",
            f"; Size: {len(data)} bytes",
            f"; Base address: ${base_address:04X}",
            "",
        ]

        instructions = Chip8Disassembler().disassemble(
            data, start_address=base_address, count=count
        )
        for instr in instructions:
            if no_bytes:
                line = f"${instr.address:04X}: {instr.mnemonic}"
                if instr.operand_str:
                    line += f" {instr.operand_str}"
                if instr.comment:
                    line += f"  ; {instr.comment}"
                output_lines.append(line)
            else:
                output_lines.append(str(instr))

        result = "\n".join(output_lines) + "\n"

        if output:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        else:
            click.echo(result, nl=False)

        if verbose:
            click.echo(f"Instructions disassembled: {len(instructions)}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()

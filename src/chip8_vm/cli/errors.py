"""
Exit Codes for c8run and c8disasm
=================================

Both commands route failures through handle_cli_exception() so a script
driving them can tell a misbehaving ROM from a bad command line:

    Code  Meaning                          Raised as
    ----  -------------------------------  ----------------------------------
    0     Success
    1     ROM could not be loaded, or the  Chip8Error (ProgramLoadError,
          interpreter faulted              MachineFault and subclasses)
    2     Bad option or unreadable file    click.BadParameter,
                                           FileNotFoundError, PermissionError
    3     Bug in chip8-vm itself           anything else (traceback with -v)

Machine faults already name the faulting address, e.g.
"Runtime error: $0200: stack underflow on return", so the message is
echoed as is.

Copyright (c) 2026 chip8-vm Contributors
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Process exit status of the chip8-vm commands."""
    SUCCESS = 0
    MACHINE_ERROR = 1    # Chip8Error
    INVALID_ARGS = 2     # Bad option value or ROM path
    INTERNAL_ERROR = 3


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an error on stderr and exit with its ExitCode.

    Args:
        error: The exception caught by the command
        verbose: Print the traceback of an INTERNAL_ERROR
        error_type: Message prefix naming the stage, e.g. "Runtime" or "Disassembly"

    Raises:
        SystemExit: Always
    """
    from chip8_vm.errors import Chip8Error

    if isinstance(error, Chip8Error):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.MACHINE_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)


def parse_address(text: str) -> int:
    """
    Parse an address given as hex ($200, 0x200) or decimal (512).

    Raises:
        click.BadParameter: If the text is not a number
    """
    try:
        if text.lower().startswith("0x"):
            return int(text, 16)
        if text.startswith("$"):
            return int(text[1:], 16)
        return int(text)
    except ValueError:
        raise click.BadParameter(f"invalid address '{text}'")

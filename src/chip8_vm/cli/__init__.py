"""
CHIP-8 VM Command-Line Interface
================================

This package provides command-line tools built on the interpreter:

- **c8run**: Headless runner, prints the final screen
- **c8disasm**: Disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["c8run", "c8disasm"]

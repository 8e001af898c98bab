"""
Command-Line Tool Tests
=======================

Tests for c8run and c8disasm using click's CliRunner.

Copyright (c) 2026 chip8-vm Contributors
"""

import click
import pytest
from click.testing import CliRunner

from chip8_vm.cli.c8disasm import main as c8disasm
from chip8_vm.cli.c8run import main as c8run
from chip8_vm.cli.errors import ExitCode, handle_cli_exception, parse_address
from chip8_vm.errors import ProgramSizeError, StackUnderflowError


def words(*values: int) -> bytes:
    return b"".join(v.to_bytes(2, "big") for v in values)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def make_rom(tmp_path):
    def _make(data: bytes, name: str = "test.ch8"):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _make


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CHIP8_INSTRUCTION_RATE", "CHIP8_SHIFT_SOURCE", "CHIP8_SEED"):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# c8run
# =============================================================================

class TestC8Run:
    """Test the headless runner."""

    # LD V0,0; LD V1,0; LD F,V0; DRW V0,V1,5; JP $208
    DIGIT_ZERO = words(0x6000, 0x6100, 0xF029, 0xD015, 0x1208)

    def test_draws_screen(self, runner, make_rom):
        result = runner.invoke(c8run, [make_rom(self.DIGIT_ZERO), "-d", "0.1"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("####....")
        assert lines[1].startswith("#..#....")
        assert len(lines[0]) == 64
        assert "PC=$0208" in lines[32]
        assert "I=$0050" in lines[32]

    def test_custom_pixel_chars(self, runner, make_rom):
        result = runner.invoke(
            c8run, [make_rom(self.DIGIT_ZERO), "-d", "0.1", "--on", "X", "--off", " "]
        )
        assert result.exit_code == 0
        assert result.output.splitlines()[0].startswith("XXXX    ")

    def test_instruction_count(self, runner, make_rom):
        rom = make_rom(words(0x1200))
        result = runner.invoke(c8run, [rom, "-d", "1", "-r", "64", "--frame-rate", "4"])
        assert result.exit_code == 0
        assert "; 64 instructions" in result.output

    def test_waiting_status(self, runner, make_rom):
        rom = make_rom(words(0xF00A, 0x1202))
        result = runner.invoke(c8run, [rom, "-d", "0.1"])
        assert result.exit_code == 0
        assert "waiting for key into V0" in result.output

    def test_held_key_resolves_wait(self, runner, make_rom):
        rom = make_rom(words(0xF00A, 0x1202))
        result = runner.invoke(c8run, [rom, "-d", "0.1", "--hold", "1"])
        assert result.exit_code == 0
        assert "waiting" not in result.output

    def test_unmapped_hold_key(self, runner, make_rom):
        rom = make_rom(words(0x1200))
        result = runner.invoke(c8run, [rom, "--hold", "p"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_fault_exit_code(self, runner, make_rom):
        rom = make_rom(words(0x00EE))
        result = runner.invoke(c8run, [rom, "-d", "0.1"])
        assert result.exit_code == ExitCode.MACHINE_ERROR
        assert "stack underflow" in result.output

    def test_oversized_rom(self, runner, make_rom):
        rom = make_rom(bytes(4000))
        result = runner.invoke(c8run, [rom])
        assert result.exit_code == ExitCode.MACHINE_ERROR
        assert "3584" in result.output

    def test_trace(self, runner, make_rom):
        rom = make_rom(words(0x600A, 0x1202))
        result = runner.invoke(c8run, [rom, "-d", "0.01", "--trace"])
        assert result.exit_code == 0
        assert "$0200: 60 0A  LD V0, $0A" in result.output
        assert "$0202: 12 02  JP $202" in result.output

    def test_screenshot(self, runner, make_rom, tmp_path):
        pytest.importorskip("PIL")
        out = tmp_path / "screen.png"
        result = runner.invoke(
            c8run,
            [make_rom(self.DIGIT_ZERO), "-d", "0.1", "--screenshot", str(out), "--scale", "2"],
        )
        assert result.exit_code == 0
        assert out.read_bytes().startswith(b"\x89PNG")

    def test_missing_rom(self, runner, tmp_path):
        result = runner.invoke(c8run, [str(tmp_path / "nope.ch8")])
        assert result.exit_code == 2

    def test_invalid_rate(self, runner, make_rom):
        result = runner.invoke(c8run, [make_rom(words(0x1200)), "-r", "0"])
        assert result.exit_code == 2

    def test_seed_option_is_deterministic(self, runner, make_rom):
        # RND V0,$FF; LD F,V0; DRW V1,V1,5; JP $206
        rom = make_rom(words(0xC0FF, 0xF029, 0xD115, 0x1206))
        first = runner.invoke(c8run, [rom, "-d", "0.1", "--seed", "5"])
        second = runner.invoke(c8run, [rom, "-d", "0.1", "--seed", "5"])
        assert first.exit_code == 0
        assert first.output == second.output

    def test_env_rate(self, runner, make_rom, monkeypatch):
        monkeypatch.setenv("CHIP8_INSTRUCTION_RATE", "32")
        result = runner.invoke(
            c8run, [make_rom(words(0x1200)), "-d", "1", "--frame-rate", "4"]
        )
        assert "; 32 instructions" in result.output

    def test_option_overrides_env(self, runner, make_rom, monkeypatch):
        monkeypatch.setenv("CHIP8_INSTRUCTION_RATE", "32")
        result = runner.invoke(
            c8run,
            [make_rom(words(0x1200)), "-d", "1", "--frame-rate", "4", "-r", "64"],
        )
        assert "; 64 instructions" in result.output


# =============================================================================
# c8disasm
# =============================================================================

class TestC8Disasm:
    """Test the disassembler CLI."""

    PROGRAM = bytes([0x60, 0x0A, 0x61, 0x0A, 0xA0, 0x05, 0xD0, 0x13])

    def test_listing(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM, "prog.ch8")])
        assert result.exit_code == 0
        assert "; Disassembly of prog.ch8" in result.output
        assert "; Size: 8 bytes" in result.output
        assert "$0200: 60 0A  LD V0, $0A" in result.output
        assert "$0206: D0 13  DRW V0, V1, 3" in result.output

    def test_no_bytes(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM), "--no-bytes"])
        assert "$0200: LD V0, $0A" in result.output

    def test_count(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM), "-c", "1"])
        assert "$0200:" in result.output
        assert "$0202:" not in result.output

    def test_address(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM), "-a", "$300"])
        assert "$0300: 60 0A" in result.output

    def test_output_file(self, runner, make_rom, tmp_path):
        out = tmp_path / "prog.lst"
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM), "-o", str(out)])
        assert result.exit_code == 0
        assert "LD I, $005" in out.read_text()

    def test_empty_file(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(b"")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_bad_address(self, runner, make_rom):
        result = runner.invoke(c8disasm, [make_rom(self.PROGRAM), "-a", "0x1000"])
        assert result.exit_code == ExitCode.INVALID_ARGS


class TestParseAddress:
    """Test address parsing."""

    @pytest.mark.parametrize("text,value", [
        ("0x200", 0x200), ("$2A0", 0x2A0), ("512", 512), ("0X1F", 0x1F),
    ])
    def test_valid(self, text, value):
        assert parse_address(text) == value

    def test_invalid(self):
        with pytest.raises(click.BadParameter):
            parse_address("zz")


class TestHandleCliException:
    """Test the mapping from exceptions to exit codes."""

    def exit_code(self, error, **kwargs):
        with pytest.raises(SystemExit) as excinfo:
            handle_cli_exception(error, **kwargs)
        return excinfo.value.code

    def test_machine_fault(self, capsys):
        code = self.exit_code(StackUnderflowError(0x200), error_type="Runtime")
        assert code == ExitCode.MACHINE_ERROR == 1
        assert "Runtime error: $0200: stack underflow on return" in capsys.readouterr().err

    def test_load_error(self, capsys):
        assert self.exit_code(ProgramSizeError(4000, 3584)) == ExitCode.MACHINE_ERROR
        assert capsys.readouterr().err.startswith("Error: ")

    @pytest.mark.parametrize("error", [
        click.BadParameter("bad"),
        FileNotFoundError("missing.ch8"),
        PermissionError("locked.ch8"),
    ])
    def test_invalid_arguments(self, error):
        assert self.exit_code(error) == ExitCode.INVALID_ARGS == 2

    def test_internal_error(self, capsys):
        assert self.exit_code(RuntimeError("boom")) == ExitCode.INTERNAL_ERROR == 3
        err = capsys.readouterr().err
        assert "Internal error: boom" in err
        assert "Traceback" not in err

    def test_internal_error_verbose_traceback(self, capsys):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            assert self.exit_code(e, verbose=True) == ExitCode.INTERNAL_ERROR
        assert "Traceback" in capsys.readouterr().err

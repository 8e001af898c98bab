"""
Emulator Integration Tests
==========================

End-to-end tests of the Emulator driver: loading programs, the
time-driven step loop, wait-for-key suspension, reset and configuration.

Timestamps use half-interval margins (e.g. 4.5 / 600) so tick counts do
not depend on float rounding at interval boundaries.

Copyright (c) 2026 chip8-vm Contributors
"""

import pytest
from chip8_vm.emulator import (
    Emulator,
    EmulatorConfig,
    ShiftSource,
    FONT_SET,
    FONT_START,
    MAX_PROGRAM_SIZE,
)
from chip8_vm.errors import (
    ClockError,
    KeyRangeError,
    ProgramLoadError,
    ProgramSizeError,
    StackUnderflowError,
)

RATE = 600.0


def at(ticks: float) -> float:
    """Timestamp for `ticks` instruction periods at the default rate."""
    return ticks / RATE


def words(*values: int) -> bytes:
    return b"".join(v.to_bytes(2, "big") for v in values)


@pytest.fixture
def emu():
    return Emulator(0.0, EmulatorConfig(seed=1))


# =============================================================================
# Drawing Scenario
# =============================================================================

class TestDrawScenario:
    """Draw a sprite, then draw it again over itself."""

    PROGRAM = bytes([0x60, 0x0A, 0x61, 0x0A, 0xA0, 0x05, 0xD0, 0x13])

    @pytest.fixture
    def loaded(self, emu):
        emu.load_program(self.PROGRAM)
        emu.cpu.memory.write_block(0x005, bytes([0xF0, 0x0F, 0xAA]))
        return emu

    def test_first_draw(self, loaded):
        assert loaded.step(at(4.5)) == 4
        assert loaded.pixel(10, 10)
        assert loaded.pixel(13, 10)
        assert not loaded.pixel(14, 10)
        assert loaded.pixel(14, 11)
        assert loaded.pixel(10, 12)
        assert not loaded.pixel(11, 12)
        assert loaded.cpu.v[0xF] == 0
        assert loaded.display.lit_count() == 12

    def test_second_draw_collides(self, loaded):
        loaded.step(at(4.5))
        loaded.cpu.pc = 0x206
        assert loaded.step(at(5.5)) == 1
        assert loaded.cpu.v[0xF] == 1
        assert not loaded.pixel(10, 10)
        assert loaded.display.lit_count() == 0

    def test_dirty_flag(self, loaded):
        """Dirty once at power-on, then once per change."""
        assert loaded.take_dirty()
        assert not loaded.take_dirty()
        loaded.step(at(3.5))
        assert not loaded.take_dirty()
        loaded.step(at(4.5))
        assert loaded.take_dirty()
        assert not loaded.take_dirty()


# =============================================================================
# Step Loop
# =============================================================================

class TestStep:
    """Test instruction pacing."""

    LOOP = words(0x7001, 0x1200)  # ADD V0, 1; JP $200

    def test_no_time_no_instructions(self, emu):
        emu.load_program(self.LOOP)
        assert emu.step(0.0) == 0
        assert emu.total_instructions == 0

    def test_executes_due_instructions(self, emu):
        emu.load_program(self.LOOP)
        assert emu.step(at(10.5)) == 10
        assert emu.cpu.v[0] == 5
        assert emu.step(at(20.5)) == 10
        assert emu.total_instructions == 20

    def test_partial_intervals_carry_over(self, emu):
        emu.load_program(self.LOOP)
        assert emu.step(at(0.75)) == 0
        assert emu.step(at(1.25)) == 1
        assert emu.step(at(1.75)) == 0
        assert emu.step(at(2.25)) == 1

    def test_time_going_backwards(self, emu):
        emu.load_program(self.LOOP)
        emu.step(1.0)
        with pytest.raises(ClockError):
            emu.step(0.5)

    def test_fault_propagates(self, emu):
        emu.load_program(words(0x00EE))
        with pytest.raises(StackUnderflowError) as exc_info:
            emu.step(at(1.5))
        assert exc_info.value.pc == 0x200

    def test_set_instruction_rate_keeps_pending_time(self, emu):
        emu.load_program(words(0x1200))
        emu.set_instruction_rate(100)
        assert emu.instruction_rate == 100
        assert emu.step(0.015) == 1

        emu.set_instruction_rate(50)
        assert emu.step(0.035) == 1

    @pytest.mark.parametrize("rate", [0, -5])
    def test_set_instruction_rate_rejects_non_positive(self, emu, rate):
        with pytest.raises(ValueError):
            emu.set_instruction_rate(rate)
        assert emu.instruction_rate == RATE


# =============================================================================
# Wait For Key
# =============================================================================

class TestWaitForKey:
    """Test Fx0A suspension through the Emulator."""

    PROGRAM = words(0xF30A, 0x6101, 0x1204)

    def test_wait_scenario(self, emu):
        emu.load_program(self.PROGRAM)

        assert emu.step(at(10.5)) == 1
        assert emu.is_waiting_for_key

        assert emu.step(at(20.5)) == 0
        assert emu.is_waiting_for_key

        emu.press(7)
        assert emu.cpu.v[3] == 7
        assert not emu.is_waiting_for_key

        # Ticks that accrued during the wait are discarded
        assert emu.step(at(30.5)) == 0
        assert emu.step(at(40.5)) == 10
        assert emu.cpu.v[1] == 1

    def test_held_key_resolves_immediately(self, emu):
        emu.load_program(self.PROGRAM)
        emu.press(0xB)
        assert emu.step(at(3.5)) == 3
        assert emu.cpu.v[3] == 0xB
        assert emu.cpu.v[1] == 1

    def test_timers_run_while_waiting(self, emu):
        emu.load_program(words(0x601E, 0xF015, 0xF10A))
        assert emu.step(at(3.5)) == 3
        assert emu.is_waiting_for_key
        assert emu.delay_timer.value == 30

        emu.step(0.26)
        assert emu.delay_timer.value == 15

    def test_release(self, emu):
        emu.press(4)
        emu.release(4)
        assert not emu.keypad.is_down(4)

    @pytest.mark.parametrize("key", [0x10, -1])
    def test_key_out_of_range(self, emu, key):
        with pytest.raises(KeyRangeError):
            emu.press(key)
        with pytest.raises(KeyRangeError):
            emu.release(key)


# =============================================================================
# Program Loading
# =============================================================================

class TestProgramLoading:
    """Test load_program() and load_rom()."""

    def test_program_at_0x200(self, emu):
        emu.load_program(b"\x12\x34")
        assert emu.cpu.memory.read_word(0x200) == 0x1234

    def test_largest_program_fits(self, emu):
        emu.load_program(bytes([0xAB]) * MAX_PROGRAM_SIZE)
        assert MAX_PROGRAM_SIZE == 3584
        assert emu.cpu.memory.read(0xFFF) == 0xAB

    def test_oversized_program(self, emu):
        with pytest.raises(ProgramSizeError) as exc_info:
            emu.load_program(bytes(MAX_PROGRAM_SIZE + 1))
        assert exc_info.value.size == 3585
        assert exc_info.value.capacity == 3584
        assert isinstance(exc_info.value, ProgramLoadError)
        assert emu.cpu.memory.read(0x200) == 0

    def test_load_rom(self, emu, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(words(0x6042))
        emu.load_rom(rom)
        emu.step(at(1.5))
        assert emu.cpu.v[0] == 0x42

    def test_load_missing_rom(self, emu, tmp_path):
        with pytest.raises(FileNotFoundError):
            emu.load_rom(tmp_path / "missing.ch8")


# =============================================================================
# Reset
# =============================================================================

class TestReset:
    """Test reset()."""

    def test_reset_rebuilds_machine(self, emu):
        emu.load_program(words(0x6042, 0xA300, 0x1204))
        emu.press(2)
        emu.step(at(3.5))

        emu.reset(1.0)
        cpu = emu.cpu
        assert cpu.pc == 0x200
        assert cpu.i == 0
        assert cpu.v[0] == 0
        assert cpu.memory.read_word(0x200) == 0
        assert cpu.memory.read_block(FONT_START, len(FONT_SET)) == FONT_SET
        assert not emu.keypad.is_down(2)
        assert emu.total_instructions == 0

    def test_reset_sets_time_base(self, emu):
        emu.reset(1.0)
        emu.load_program(words(0x1200))
        assert emu.step(1.0 + at(2.5)) == 2
        with pytest.raises(ClockError):
            emu.step(0.5)

    def test_reset_keeps_rate(self, emu):
        emu.set_instruction_rate(100)
        emu.reset(0.0)
        assert emu.instruction_rate == 100
        emu.load_program(words(0x1200))
        assert emu.step(0.025) == 2

    def test_reset_clears_wait(self, emu):
        emu.load_program(words(0xF00A))
        emu.step(at(1.5))
        assert emu.is_waiting_for_key
        emu.reset(1.0)
        assert not emu.is_waiting_for_key

    def test_start_time_is_required(self):
        """Construction needs a time base, just like reset()."""
        with pytest.raises(TypeError):
            Emulator()
        with pytest.raises(TypeError):
            emu = Emulator(0.0)
            emu.reset()

    def test_start_time_sets_time_base(self):
        emu = Emulator(5.0)
        emu.load_program(words(0x1200))
        assert emu.step(5.0 + at(2.5)) == 2


# =============================================================================
# Configuration
# =============================================================================

class TestEmulatorConfig:
    """Test EmulatorConfig and from_env()."""

    def test_defaults(self):
        config = EmulatorConfig()
        assert config.instruction_rate == 600
        assert config.shift_source is ShiftSource.VY
        assert config.load_font
        assert config.seed is None

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            EmulatorConfig(instruction_rate=0)

    def test_shift_source_applied(self):
        emu = Emulator(0.0, EmulatorConfig(shift_source=ShiftSource.VX))
        emu.load_program(words(0x6005, 0x8016))
        emu.step(at(2.5))
        assert emu.cpu.v[0] == 2

    def test_font_optional(self):
        emu = Emulator(0.0, EmulatorConfig(load_font=False))
        assert emu.cpu.memory.read(FONT_START) == 0

    def test_framebuffer_size(self, emu):
        assert emu.framebuffer_width == 64
        assert emu.framebuffer_height == 32
        assert emu.display_text.count("\n") == 31

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CHIP8_INSTRUCTION_RATE", "1000")
        monkeypatch.setenv("CHIP8_SHIFT_SOURCE", "VX")
        monkeypatch.setenv("CHIP8_SEED", "0x10")
        config = EmulatorConfig.from_env()
        assert config.instruction_rate == 1000
        assert config.shift_source is ShiftSource.VX
        assert config.seed == 16

    def test_from_env_ignores_invalid_values(self, monkeypatch):
        monkeypatch.setenv("CHIP8_INSTRUCTION_RATE", "fast")
        monkeypatch.setenv("CHIP8_SHIFT_SOURCE", "vz")
        monkeypatch.setenv("CHIP8_SEED", "abc")
        assert EmulatorConfig.from_env() == EmulatorConfig()

    def test_from_env_ignores_non_positive_rate(self, monkeypatch):
        monkeypatch.setenv("CHIP8_INSTRUCTION_RATE", "-3")
        assert EmulatorConfig.from_env().instruction_rate == 600

    def test_seeded_runs_match(self):
        program = words(0xC0FF, 0xC1FF, 0x1204)
        results = []
        for _ in range(2):
            emu = Emulator(0.0, EmulatorConfig(seed=99))
            emu.load_program(program)
            emu.step(at(2.5))
            results.append(bytes(emu.cpu.v[:2]))
        assert results[0] == results[1]

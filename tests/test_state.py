import io
import json

import pytest

from py6502.cpu import CPU
from py6502.errors import StateFileError
from py6502.memory import Memory


def test_save_and_restore_state(cpu, memory, load, tmp_path):
    load(0xA9, 0x80, 0xA2, 0x12, 0x38)  # LDA #$80, LDX #$12, SEC
    cpu.execute(6, memory)
    memory[0x4000] = 0x77
    filename = tmp_path / "state.json"

    cpu.save_state(filename, memory)

    other_memory = Memory()
    other = CPU()
    other.restore_state(filename, other_memory)

    assert (other.a, other.x, other.y) == (0x80, 0x12, 0x00)
    assert other.pc == cpu.pc == 0x0205
    assert other.sp == cpu.sp
    assert other.status == cpu.status
    assert other.c and not other.n
    assert other.total_cycles == 6
    assert other_memory[0x4000] == 0x77
    assert other_memory[0x0200] == 0xA9


def test_state_file_stores_packed_status(cpu, memory, tmp_path):
    cpu.c = cpu.z = True
    filename = tmp_path / "state.json"
    cpu.save_state(filename, memory)
    with open(filename) as f:
        state = json.load(f)
    assert state["cpu"]["status"] == 0x23
    assert len(state["ram"]) == 0x10000


def test_restore_missing_file(cpu, memory, tmp_path):
    with pytest.raises(StateFileError):
        cpu.restore_state(tmp_path / "missing.json", memory)


def test_restore_malformed_file(cpu, memory, tmp_path):
    filename = tmp_path / "bad.json"
    filename.write_text("{not json")
    with pytest.raises(StateFileError):
        cpu.restore_state(filename, memory)


def test_restore_rejects_short_memory_image(cpu, memory, tmp_path):
    filename = tmp_path / "short.json"
    state = {"cpu": {"a": 0, "x": 0, "y": 0, "pc": 0, "sp": 0x0100, "status": 0x20},
             "ram": [0] * 16}
    filename.write_text(json.dumps(state))
    with pytest.raises(StateFileError):
        cpu.restore_state(filename, memory)


@pytest.mark.parametrize("program, expected", [
    ([0xA9, 0x05], "$0200: LDA #$05"),
    ([0xB5, 0x80], "$0200: LDA $80,X"),
    ([0xBE, 0x34, 0x12], "$0200: LDX $1234,Y"),
    ([0x6C, 0xFF, 0x30], "$0200: JMP ($30FF)"),
    ([0xB1, 0x10], "$0200: LDA ($10),Y"),
    ([0x0A], "$0200: ASL A"),
    ([0xEA], "$0200: NOP"),
    ([0xD0, 0xFC], "$0200: BNE $01FE"),
    ([0x02], "$0200: 02       ???"),
])
def test_disassemble(cpu, memory, program, expected):
    memory.load_program(0x0200, program)
    assert cpu.disassemble(0x0200, memory) == expected


def test_tracing_writes_one_line_per_instruction(memory):
    trace = io.StringIO()
    cpu = CPU(tracing=True, trace_file=trace)
    cpu.reset(memory)
    memory.load_program(0x0200, [0xA9, 0x05, 0xEA])
    cpu.pc = 0x0200

    cpu.execute(4, memory)

    lines = trace.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("A:00 X:00 Y:00 PC:0200 SP:0100")
    assert lines[0].endswith("| $0200: LDA #$05")
    assert "Flags: - - - - - - -" in lines[0]
    assert lines[1].endswith("| $0202: NOP")


def test_disassemble_does_not_charge_cycles(cpu, memory, load):
    load(0xA9, 0x05)
    cpu.disassemble(0x0200)
    assert cpu.total_cycles == 0


@pytest.mark.parametrize("field, value", [("a", "x"), ("pc", None), ("status", 1.5)])
def test_restore_bad_register_keeps_memory(cpu, memory, tmp_path, field, value):
    memory[0x4000] = 0x99
    cpu.a = 0x42
    state = {"cpu": {"a": 0, "x": 0, "y": 0, "pc": 0, "sp": 0x0100, "status": 0x20},
             "ram": [0] * 0x10000}
    state["cpu"][field] = value
    filename = tmp_path / "bad_register.json"
    filename.write_text(json.dumps(state))

    with pytest.raises(StateFileError):
        cpu.restore_state(filename, memory)

    assert memory[0x4000] == 0x99
    assert cpu.a == 0x42

import pytest

from py6502.cpu import CPU
from py6502.memory import Memory

PROGRAM_START = 0x0200


@pytest.fixture
def memory():
    return Memory()


@pytest.fixture
def cpu(memory):
    cpu = CPU()
    cpu.reset(memory)
    return cpu


@pytest.fixture
def load(cpu, memory):
    """Pokes a program at $0200 and points PC at it."""
    def _load(*program, start=PROGRAM_START):
        memory.load_program(start, program)
        cpu.pc = start
    return _load

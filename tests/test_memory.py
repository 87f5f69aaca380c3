import pytest

from py6502.memory import MEMORY_SIZE, Memory


def test_new_memory_is_zero_filled():
    memory = Memory()
    assert len(memory) == MEMORY_SIZE == 0x10000
    assert not memory.data.any()


def test_initialize_clears_everything(memory):
    memory[0x0000] = 0x11
    memory[0xFFFF] = 0x22
    memory.initialize()
    assert memory[0x0000] == 0
    assert memory[0xFFFF] == 0
    memory.initialize()
    assert not memory.data.any()


def test_word_is_little_endian(memory):
    memory.write_word(0x1000, 0xBEEF)
    assert memory[0x1000] == 0xEF
    assert memory[0x1001] == 0xBE
    assert memory.read_word(0x1000) == 0xBEEF


def test_word_access_wraps_at_top_of_address_space(memory):
    memory.write_word(0xFFFF, 0x1234)
    assert memory[0xFFFF] == 0x34
    assert memory[0x0000] == 0x12
    assert memory.read_word(0xFFFF) == 0x1234


def test_byte_values_are_masked(memory):
    memory.write_byte(0x10, 0x1FF)
    assert memory.read_byte(0x10) == 0xFF
    assert isinstance(memory.read_byte(0x10), int)


def test_load_program(memory):
    memory.load_program(0x0600, [0xA9, 0x05, 0xEA])
    assert [memory[a] for a in range(0x0600, 0x0603)] == [0xA9, 0x05, 0xEA]


def test_dump_and_restore(memory):
    memory[0x1234] = 0x56
    image = memory.dump()
    other = Memory()
    other.restore(image)
    assert other[0x1234] == 0x56
    assert len(image) == MEMORY_SIZE


def test_restore_rejects_wrong_size(memory):
    with pytest.raises(ValueError):
        memory.restore([0] * 10)


def test_load_program_accepts_a_generator(memory):
    count = memory.load_program(0x0300, (byte for byte in [0xEA, 0xEA, 0x60]))
    assert count == 3
    assert [memory[a] for a in range(0x0300, 0x0303)] == [0xEA, 0xEA, 0x60]

# py6502/memory.py
import logging

import numpy as np

logger = logging.getLogger(__name__)

# 64KB, the whole 16-bit address space
MEMORY_SIZE = 0x10000


class Memory:
    """
    Flat 64KB byte store for the 6502.
    Words are little-endian: low byte at the address, high byte at address + 1.
    Accesses here cost no cycles; the CPU charges the bus cycles.
    """
    def __init__(self):
        self.data = np.zeros(MEMORY_SIZE, dtype=np.uint8)

    def initialize(self):
        self.data.fill(0)

    def read_byte(self, address):
        return int(self.data[address & 0xFFFF])

    def write_byte(self, address, value):
        self.data[address & 0xFFFF] = value & 0xFF

    def read_word(self, address):
        lsb = self.read_byte(address)
        # The address bus is 16 bits, so $FFFF + 1 is $0000
        msb = self.read_byte((address + 1) & 0xFFFF)
        return (msb << 8) | lsb

    def write_word(self, address, value):
        self.write_byte(address, value & 0xFF)
        self.write_byte((address + 1) & 0xFFFF, (value >> 8) & 0xFF)

    def __getitem__(self, address):
        return self.read_byte(address)

    def __setitem__(self, address, value):
        self.write_byte(address, value)

    def __len__(self):
        return MEMORY_SIZE

    def load_program(self, start_address, program_data):
        """Loads a program into memory at a specific address."""
        count = 0
        for byte in program_data:
            self.write_byte(start_address + count, byte)
            count += 1
        logger.debug("Loaded %d bytes at $%04X", count, start_address & 0xFFFF)
        return count

    def dump(self):
        return self.data.tolist()

    def restore(self, data):
        if len(data) != MEMORY_SIZE:
            raise ValueError(f"Memory image must be {MEMORY_SIZE} bytes, got {len(data)}")
        self.data[:] = np.asarray(data, dtype=np.uint8)

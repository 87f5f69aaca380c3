# 6502 opcode table
# REF: http://www.6502.org/tutorials/6502opcodes.html
from enum import Enum, auto


class Mode(Enum):
    IMMEDIATE = auto()
    ZEROPAGE = auto()
    ZEROPAGEX = auto()
    ZEROPAGEY = auto()
    ABSOLUTE = auto()
    ABSOLUTEX = auto()
    ABSOLUTEY = auto()
    IMPLIED = auto()
    INDIRECT = auto()
    RELATIVE = auto()
    ACCUMULATOR = auto()
    INDIRECTX = auto()
    INDIRECTY = auto()


# opcode: (mnemonic, addressing mode, base cycles)
# Base cycles exclude the page-cross and branch-taken penalties.
OPCODES = {
    # LDA
    0xA9: ("LDA", Mode.IMMEDIATE, 2),
    0xA5: ("LDA", Mode.ZEROPAGE, 3),
    0xB5: ("LDA", Mode.ZEROPAGEX, 4),
    0xAD: ("LDA", Mode.ABSOLUTE, 4),
    0xBD: ("LDA", Mode.ABSOLUTEX, 4),
    0xB9: ("LDA", Mode.ABSOLUTEY, 4),
    0xA1: ("LDA", Mode.INDIRECTX, 6),
    0xB1: ("LDA", Mode.INDIRECTY, 5),

    # LDX
    0xA2: ("LDX", Mode.IMMEDIATE, 2),
    0xA6: ("LDX", Mode.ZEROPAGE, 3),
    0xB6: ("LDX", Mode.ZEROPAGEY, 4),
    0xAE: ("LDX", Mode.ABSOLUTE, 4),
    0xBE: ("LDX", Mode.ABSOLUTEY, 4),

    # LDY
    0xA0: ("LDY", Mode.IMMEDIATE, 2),
    0xA4: ("LDY", Mode.ZEROPAGE, 3),
    0xB4: ("LDY", Mode.ZEROPAGEX, 4),
    0xAC: ("LDY", Mode.ABSOLUTE, 4),
    0xBC: ("LDY", Mode.ABSOLUTEX, 4),

    # STA
    0x85: ("STA", Mode.ZEROPAGE, 3),
    0x95: ("STA", Mode.ZEROPAGEX, 4),
    0x8D: ("STA", Mode.ABSOLUTE, 4),
    0x9D: ("STA", Mode.ABSOLUTEX, 5),
    0x99: ("STA", Mode.ABSOLUTEY, 5),
    0x81: ("STA", Mode.INDIRECTX, 6),
    0x91: ("STA", Mode.INDIRECTY, 6),

    # STX / STY
    0x86: ("STX", Mode.ZEROPAGE, 3),
    0x96: ("STX", Mode.ZEROPAGEY, 4),
    0x8E: ("STX", Mode.ABSOLUTE, 4),
    0x84: ("STY", Mode.ZEROPAGE, 3),
    0x94: ("STY", Mode.ZEROPAGEX, 4),
    0x8C: ("STY", Mode.ABSOLUTE, 4),

    # Transfers
    0xAA: ("TAX", Mode.IMPLIED, 2),
    0xA8: ("TAY", Mode.IMPLIED, 2),
    0x8A: ("TXA", Mode.IMPLIED, 2),
    0x98: ("TYA", Mode.IMPLIED, 2),
    0xBA: ("TSX", Mode.IMPLIED, 2),
    0x9A: ("TXS", Mode.IMPLIED, 2),

    # Stack
    0x48: ("PHA", Mode.IMPLIED, 3),
    0x08: ("PHP", Mode.IMPLIED, 3),
    0x68: ("PLA", Mode.IMPLIED, 4),
    0x28: ("PLP", Mode.IMPLIED, 4),

    # ADC
    0x69: ("ADC", Mode.IMMEDIATE, 2),
    0x65: ("ADC", Mode.ZEROPAGE, 3),
    0x75: ("ADC", Mode.ZEROPAGEX, 4),
    0x6D: ("ADC", Mode.ABSOLUTE, 4),
    0x7D: ("ADC", Mode.ABSOLUTEX, 4),
    0x79: ("ADC", Mode.ABSOLUTEY, 4),
    0x61: ("ADC", Mode.INDIRECTX, 6),
    0x71: ("ADC", Mode.INDIRECTY, 5),

    # SBC
    0xE9: ("SBC", Mode.IMMEDIATE, 2),
    0xE5: ("SBC", Mode.ZEROPAGE, 3),
    0xF5: ("SBC", Mode.ZEROPAGEX, 4),
    0xED: ("SBC", Mode.ABSOLUTE, 4),
    0xFD: ("SBC", Mode.ABSOLUTEX, 4),
    0xF9: ("SBC", Mode.ABSOLUTEY, 4),
    0xE1: ("SBC", Mode.INDIRECTX, 6),
    0xF1: ("SBC", Mode.INDIRECTY, 5),

    # AND
    0x29: ("AND", Mode.IMMEDIATE, 2),
    0x25: ("AND", Mode.ZEROPAGE, 3),
    0x35: ("AND", Mode.ZEROPAGEX, 4),
    0x2D: ("AND", Mode.ABSOLUTE, 4),
    0x3D: ("AND", Mode.ABSOLUTEX, 4),
    0x39: ("AND", Mode.ABSOLUTEY, 4),
    0x21: ("AND", Mode.INDIRECTX, 6),
    0x31: ("AND", Mode.INDIRECTY, 5),

    # ORA
    0x09: ("ORA", Mode.IMMEDIATE, 2),
    0x05: ("ORA", Mode.ZEROPAGE, 3),
    0x15: ("ORA", Mode.ZEROPAGEX, 4),
    0x0D: ("ORA", Mode.ABSOLUTE, 4),
    0x1D: ("ORA", Mode.ABSOLUTEX, 4),
    0x19: ("ORA", Mode.ABSOLUTEY, 4),
    0x01: ("ORA", Mode.INDIRECTX, 6),
    0x11: ("ORA", Mode.INDIRECTY, 5),

    # EOR
    0x49: ("EOR", Mode.IMMEDIATE, 2),
    0x45: ("EOR", Mode.ZEROPAGE, 3),
    0x55: ("EOR", Mode.ZEROPAGEX, 4),
    0x4D: ("EOR", Mode.ABSOLUTE, 4),
    0x5D: ("EOR", Mode.ABSOLUTEX, 4),
    0x59: ("EOR", Mode.ABSOLUTEY, 4),
    0x41: ("EOR", Mode.INDIRECTX, 6),
    0x51: ("EOR", Mode.INDIRECTY, 5),

    # BIT
    0x24: ("BIT", Mode.ZEROPAGE, 3),
    0x2C: ("BIT", Mode.ABSOLUTE, 4),

    # CMP
    0xC9: ("CMP", Mode.IMMEDIATE, 2),
    0xC5: ("CMP", Mode.ZEROPAGE, 3),
    0xD5: ("CMP", Mode.ZEROPAGEX, 4),
    0xCD: ("CMP", Mode.ABSOLUTE, 4),
    0xDD: ("CMP", Mode.ABSOLUTEX, 4),
    0xD9: ("CMP", Mode.ABSOLUTEY, 4),
    0xC1: ("CMP", Mode.INDIRECTX, 6),
    0xD1: ("CMP", Mode.INDIRECTY, 5),

    # CPX / CPY
    0xE0: ("CPX", Mode.IMMEDIATE, 2),
    0xE4: ("CPX", Mode.ZEROPAGE, 3),
    0xEC: ("CPX", Mode.ABSOLUTE, 4),
    0xC0: ("CPY", Mode.IMMEDIATE, 2),
    0xC4: ("CPY", Mode.ZEROPAGE, 3),
    0xCC: ("CPY", Mode.ABSOLUTE, 4),

    # INC / DEC
    0xE6: ("INC", Mode.ZEROPAGE, 5),
    0xF6: ("INC", Mode.ZEROPAGEX, 6),
    0xEE: ("INC", Mode.ABSOLUTE, 6),
    0xFE: ("INC", Mode.ABSOLUTEX, 7),
    0xC6: ("DEC", Mode.ZEROPAGE, 5),
    0xD6: ("DEC", Mode.ZEROPAGEX, 6),
    0xCE: ("DEC", Mode.ABSOLUTE, 6),
    0xDE: ("DEC", Mode.ABSOLUTEX, 7),
    0xE8: ("INX", Mode.IMPLIED, 2),
    0xC8: ("INY", Mode.IMPLIED, 2),
    0xCA: ("DEX", Mode.IMPLIED, 2),
    0x88: ("DEY", Mode.IMPLIED, 2),

    # Shifts
    0x0A: ("ASL", Mode.ACCUMULATOR, 2),
    0x06: ("ASL", Mode.ZEROPAGE, 5),
    0x16: ("ASL", Mode.ZEROPAGEX, 6),
    0x0E: ("ASL", Mode.ABSOLUTE, 6),
    0x1E: ("ASL", Mode.ABSOLUTEX, 7),
    0x4A: ("LSR", Mode.ACCUMULATOR, 2),
    0x46: ("LSR", Mode.ZEROPAGE, 5),
    0x56: ("LSR", Mode.ZEROPAGEX, 6),
    0x4E: ("LSR", Mode.ABSOLUTE, 6),
    0x5E: ("LSR", Mode.ABSOLUTEX, 7),
    0x2A: ("ROL", Mode.ACCUMULATOR, 2),
    0x26: ("ROL", Mode.ZEROPAGE, 5),
    0x36: ("ROL", Mode.ZEROPAGEX, 6),
    0x2E: ("ROL", Mode.ABSOLUTE, 6),
    0x3E: ("ROL", Mode.ABSOLUTEX, 7),
    0x6A: ("ROR", Mode.ACCUMULATOR, 2),
    0x66: ("ROR", Mode.ZEROPAGE, 5),
    0x76: ("ROR", Mode.ZEROPAGEX, 6),
    0x6E: ("ROR", Mode.ABSOLUTE, 6),
    0x7E: ("ROR", Mode.ABSOLUTEX, 7),

    # Jumps
    0x4C: ("JMP", Mode.ABSOLUTE, 3),
    0x6C: ("JMP", Mode.INDIRECT, 5),
    0x20: ("JSR", Mode.ABSOLUTE, 6),
    0x60: ("RTS", Mode.IMPLIED, 6),

    # Branches
    0x10: ("BPL", Mode.RELATIVE, 2),
    0x30: ("BMI", Mode.RELATIVE, 2),
    0x50: ("BVC", Mode.RELATIVE, 2),
    0x70: ("BVS", Mode.RELATIVE, 2),
    0x90: ("BCC", Mode.RELATIVE, 2),
    0xB0: ("BCS", Mode.RELATIVE, 2),
    0xD0: ("BNE", Mode.RELATIVE, 2),
    0xF0: ("BEQ", Mode.RELATIVE, 2),

    # Flags
    0x18: ("CLC", Mode.IMPLIED, 2),
    0x38: ("SEC", Mode.IMPLIED, 2),
    0x58: ("CLI", Mode.IMPLIED, 2),
    0x78: ("SEI", Mode.IMPLIED, 2),
    0xB8: ("CLV", Mode.IMPLIED, 2),
    0xD8: ("CLD", Mode.IMPLIED, 2),
    0xF8: ("SED", Mode.IMPLIED, 2),

    0xEA: ("NOP", Mode.IMPLIED, 2),
}

CYCLE_COUNTS = {opcode: cycles for opcode, (_, _, cycles) in OPCODES.items()}


def get_opcode_definitions(cpu):
    """Builds the dispatch table: opcode -> {"f": bound operation, "m": mode}."""
    return {
        opcode: {"f": getattr(cpu, mnemonic), "m": mode}
        for opcode, (mnemonic, mode, _) in OPCODES.items()
    }

# 6502 Emulator errors


class EmulatorError(Exception):
    """Base class for everything the emulator raises."""


class UnknownOpcodeError(EmulatorError):
    """Raised in strict mode when a fetched byte has no dispatch-table entry."""

    def __init__(self, opcode, address):
        self.opcode = opcode
        self.address = address
        super().__init__(f"Unhandled instruction ${opcode:02X} at ${address:04X}")


class StackError(EmulatorError):
    def __init__(self, sp, count):
        self.sp = sp
        self.count = count
        super().__init__(f"{self.kind}: SP=${sp:04X}, {count} byte(s)")


class StackOverflowError(StackError):
    kind = "Stack overflow"


class StackUnderflowError(StackError):
    kind = "Stack underflow"


class StateFileError(EmulatorError):
    """A state file could not be written, read or decoded."""

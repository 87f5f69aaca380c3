# 6502 CPU Emulator
# REF: http://www.6502.org/tutorials/6502opcodes.html
import json
import logging
from typing import Optional

from .errors import (
    StackOverflowError,
    StackUnderflowError,
    StateFileError,
    UnknownOpcodeError,
)
from .memory import Memory
from .opcodes import Mode, get_opcode_definitions

logger = logging.getLogger(__name__)

STACK_PAGE = 0x0100
RESET_VECTOR = 0xFFFC

# Status byte layout: NV1BDIZC
STATUS_C = 0x01
STATUS_Z = 0x02
STATUS_I = 0x04
STATUS_D = 0x08
STATUS_B = 0x10
STATUS_UNUSED = 0x20
STATUS_V = 0x40
STATUS_N = 0x80


class CPU:

    def __init__(self, memory: Optional[Memory] = None, strict=False,
                 check_stack=False, tracing=False, trace_file=None):
        self.memory = memory
        self.a = 0x00
        self.x = 0x00
        self.y = 0x00
        self.pc = RESET_VECTOR
        self.sp = STACK_PAGE

        self.n = False   # N - Negative flag
        self.v = False   # V - Overflow
        self.b = False   # B - Break
        self.d = False   # D - Decimal
        self.i = False   # I - Interrupt
        self.z = False   # Z - Zero
        self.c = False   # C - Carry

        # Remaining budget for the current execute() call
        self.cycles = 0
        self.total_cycles = 0
        self.unknown_opcodes = 0

        self.strict = strict
        self.check_stack = check_stack
        self.tracing = tracing
        self.trace_file = trace_file

        self.commands = get_opcode_definitions(self)

    def reset(self, memory: Memory):
        self.memory = memory
        self.pc = RESET_VECTOR
        self.sp = STACK_PAGE
        self.a = self.x = self.y = 0
        self.n = self.v = self.b = self.d = self.i = self.z = self.c = False
        memory.initialize()
        logger.debug("CPU reset: PC=$%04X SP=$%04X", self.pc, self.sp)

    def load_reset_vector(self, memory: Memory):
        """Points PC at the address stored in the reset vector ($FFFC/$FFFD)."""
        self.memory = memory
        self.pc = memory.read_word(RESET_VECTOR)
        logger.debug("PC set from reset vector: $%04X", self.pc)

    def execute(self, cycles, memory: Memory):
        """
        Runs the fetch-decode-execute loop until the cycle budget is used up.

        The budget is only checked between instructions, so the last
        instruction always completes and can leave self.cycles negative.
        Returns the number of cycles consumed.
        """
        self.memory = memory
        self.cycles = cycles
        while self.cycles > 0:
            self._execute_instruction()
        return cycles - self.cycles

    def step(self, memory: Memory):
        """Executes exactly one instruction and returns its cycle cost."""
        self.memory = memory
        before = self.cycles
        self._execute_instruction()
        return before - self.cycles

    def _execute_instruction(self):
        address = self.pc

        if self.tracing and self.trace_file:
            self._trace(address)

        # Fetch command
        command = self.fetch_byte()

        entry = self.commands.get(command)
        if entry is None:
            self.unknown_opcodes += 1
            if self.strict:
                raise UnknownOpcodeError(command, address)
            logger.warning("Unhandled instruction: $%02X at $%04X", command, address)
            return

        entry["f"](entry["m"])

    # --- Bus access, each one charged against the cycle budget ---

    def _spend(self, count=1):
        self.cycles -= count
        self.total_cycles += count

    def fetch_byte(self):
        data = self.memory.read_byte(self.pc)
        self.pc = (self.pc + 1) & 0xFFFF
        self._spend(1)
        return data

    def fetch_word(self):
        # processor is little endian
        lsb = self.fetch_byte()
        msb = self.fetch_byte()
        return (msb << 8) | lsb

    def read_byte(self, address):
        # Doesn't touch PC
        self._spend(1)
        return self.memory.read_byte(address)

    def write_byte(self, address, value):
        self._spend(1)
        self.memory.write_byte(address, value)

    def read_word(self, address):
        self._spend(2)
        return self.memory.read_word(address)

    def write_word(self, address, value):
        self._spend(2)
        self.memory.write_word(address, value)

    def _read_zero_page_word(self, address):
        # The pointer never leaves page 0: $FF + 1 is $00
        lsb = self.read_byte(address)
        msb = self.read_byte((address + 1) & 0xFF)
        return (msb << 8) | lsb

    # --- Addressing modes ---

    def get_location_by_mode(self, mode, write=False):
        """
        Resolves the effective address for an addressing mode, fetching the
        operand bytes from PC. Writes and read-modify-writes always pay the
        indexing cycle; reads pay it only on a page cross.
        """
        if mode == Mode.IMMEDIATE:
            # The operand byte itself; the read that follows charges the fetch
            loc = self.pc
            self.pc = (self.pc + 1) & 0xFFFF

        elif mode == Mode.ZEROPAGE:
            loc = self.fetch_byte()

        elif mode == Mode.ZEROPAGEX:
            loc = (self.fetch_byte() + self.x) & 0xFF
            self._spend(1)

        elif mode == Mode.ZEROPAGEY:
            loc = (self.fetch_byte() + self.y) & 0xFF
            self._spend(1)

        elif mode == Mode.ABSOLUTE:
            loc = self.fetch_word()

        elif mode == Mode.ABSOLUTEX:
            loc = self._index(self.fetch_word(), self.x, write)

        elif mode == Mode.ABSOLUTEY:
            loc = self._index(self.fetch_word(), self.y, write)

        elif mode == Mode.INDIRECT:
            pointer = self.fetch_word()
            lsb = self.read_byte(pointer)
            # NMOS bug: the high byte is fetched without carrying into the page
            msb = self.read_byte((pointer & 0xFF00) | ((pointer + 1) & 0xFF))
            loc = (msb << 8) | lsb

        elif mode == Mode.INDIRECTX:
            pointer = (self.fetch_byte() + self.x) & 0xFF
            self._spend(1)
            loc = self._read_zero_page_word(pointer)

        elif mode == Mode.INDIRECTY:
            base = self._read_zero_page_word(self.fetch_byte())
            loc = self._index(base, self.y, write)

        elif mode == Mode.RELATIVE:
            offset = self.fetch_byte()
            if offset >= 128:
                offset -= 256
            loc = (self.pc + offset) & 0xFFFF

        else:
            raise ValueError(f"Addressing mode {mode} has no operand address")

        return loc

    def _index(self, base, index, write):
        loc = (base + index) & 0xFFFF
        if write or self.page_boundary_crossed(base, loc):
            self._spend(1)
        return loc

    @staticmethod
    def page_boundary_crossed(address, new_address):
        return (address & 0xFF00) != (new_address & 0xFF00)

    def _read_operand(self, mode):
        loc = self.get_location_by_mode(mode)
        return self.read_byte(loc)

    # --- Stack ---

    # The stack grows upward from $0100: push writes at SP then advances,
    # pull retreats then reads. SP wraps inside page 1 unless check_stack.

    def push_byte(self, value):
        offset = (self.sp & 0xFF) + 1
        if self.check_stack and offset > 0xFF:
            raise StackOverflowError(self.sp, 1)
        self.write_byte(self.sp, value)
        self.sp = STACK_PAGE | (offset & 0xFF)

    def push_word(self, value):
        # Low byte at SP, high byte at SP+1, both inside page 1
        if self.check_stack and (self.sp & 0xFF) + 2 > 0xFF:
            raise StackOverflowError(self.sp, 2)
        self.push_byte(value & 0xFF)
        self.push_byte((value >> 8) & 0xFF)

    def pull_byte(self):
        offset = (self.sp & 0xFF) - 1
        if self.check_stack and offset < 0:
            raise StackUnderflowError(self.sp, 1)
        self.sp = STACK_PAGE | (offset & 0xFF)
        return self.read_byte(self.sp)

    def pull_word(self):
        if self.check_stack and (self.sp & 0xFF) < 2:
            raise StackUnderflowError(self.sp, 2)
        msb = self.pull_byte()
        lsb = self.pull_byte()
        return (msb << 8) | lsb

    # --- Flags ---

    def set_nz(self, value):
        self.z = (value & 0xFF) == 0
        self.n = bool(value & 0x80)

    def set_carry_overflow(self, result, a, operand):
        self.c = result > 0xFF
        # Both inputs share a sign that the result doesn't
        self.v = bool((~(a ^ operand) & (a ^ result)) & 0x80)

    @property
    def status(self):
        val = STATUS_UNUSED
        if self.n:
            val |= STATUS_N
        if self.v:
            val |= STATUS_V
        if self.b:
            val |= STATUS_B
        if self.d:
            val |= STATUS_D
        if self.i:
            val |= STATUS_I
        if self.z:
            val |= STATUS_Z
        if self.c:
            val |= STATUS_C
        return val

    @status.setter
    def status(self, val):
        self.n = bool(val & STATUS_N)
        self.v = bool(val & STATUS_V)
        self.b = bool(val & STATUS_B)
        self.d = bool(val & STATUS_D)
        self.i = bool(val & STATUS_I)
        self.z = bool(val & STATUS_Z)
        self.c = bool(val & STATUS_C)

    # --- Loads / stores ---

    # LDA
    def LDA(self, mode):
        self.a = self._read_operand(mode)
        self.set_nz(self.a)

    # LDX
    def LDX(self, mode):
        self.x = self._read_operand(mode)
        self.set_nz(self.x)

    # LDY
    def LDY(self, mode):
        self.y = self._read_operand(mode)
        self.set_nz(self.y)

    # STA
    def STA(self, mode):
        loc = self.get_location_by_mode(mode, write=True)
        self.write_byte(loc, self.a)

    # STX
    def STX(self, mode):
        loc = self.get_location_by_mode(mode, write=True)
        self.write_byte(loc, self.x)

    # STY
    def STY(self, mode):
        loc = self.get_location_by_mode(mode, write=True)
        self.write_byte(loc, self.y)

    # --- Transfers ---

    def TAX(self, mode):
        self._spend(1)
        self.x = self.a
        self.set_nz(self.x)

    def TAY(self, mode):
        self._spend(1)
        self.y = self.a
        self.set_nz(self.y)

    def TXA(self, mode):
        self._spend(1)
        self.a = self.x
        self.set_nz(self.a)

    def TYA(self, mode):
        self._spend(1)
        self.a = self.y
        self.set_nz(self.a)

    def TSX(self, mode):
        self._spend(1)
        self.x = self.sp & 0xFF
        self.set_nz(self.x)

    # TXS doesn't touch the flags
    def TXS(self, mode):
        self._spend(1)
        self.sp = STACK_PAGE | self.x

    # --- Stack operations ---

    # PHA
    def PHA(self, mode):
        self._spend(1)
        self.push_byte(self.a)

    # PHP
    def PHP(self, mode):
        self._spend(1)
        # B is always set in the pushed copy
        self.push_byte(self.status | STATUS_B)

    # PLA
    def PLA(self, mode):
        self._spend(2)
        self.a = self.pull_byte()
        self.set_nz(self.a)

    # PLP
    def PLP(self, mode):
        self._spend(2)
        b = self.b
        self.status = self.pull_byte()
        # B only exists in the pushed copy
        self.b = b

    # --- Arithmetic ---

    def _add(self, value):
        # Binary only; the D flag is not honoured
        result = self.a + value + (1 if self.c else 0)
        self.set_carry_overflow(result, self.a, value)
        self.a = result & 0xFF
        self.set_nz(self.a)

    # ADC
    def ADC(self, mode):
        self._add(self._read_operand(mode))

    # SBC
    def SBC(self, mode):
        # A - M - (1 - C) == A + ~M + C
        self._add(self._read_operand(mode) ^ 0xFF)

    # AND
    def AND(self, mode):
        self.a = self.a & self._read_operand(mode)
        self.set_nz(self.a)

    # ORA
    def ORA(self, mode):
        self.a = self.a | self._read_operand(mode)
        self.set_nz(self.a)

    # EOR
    def EOR(self, mode):
        self.a = self.a ^ self._read_operand(mode)
        self.set_nz(self.a)

    # BIT
    def BIT(self, mode):
        value = self._read_operand(mode)
        self.z = (self.a & value) == 0
        self.n = bool(value & 0x80)
        self.v = bool(value & 0x40)

    def _compare(self, mode, register_value):
        value = self._read_operand(mode)
        self.c = register_value >= value
        self.set_nz(register_value - value)

    def CMP(self, mode):
        self._compare(mode, self.a)

    def CPX(self, mode):
        self._compare(mode, self.x)

    def CPY(self, mode):
        self._compare(mode, self.y)

    # --- Increments / decrements ---

    def _read_modify_write(self, mode, operation):
        if mode == Mode.ACCUMULATOR:
            self._spend(1)
            self.a = operation(self.a)
            self.set_nz(self.a)
            return

        loc = self.get_location_by_mode(mode, write=True)
        value = self.read_byte(loc)
        # The chip spends a cycle writing the old value back
        self._spend(1)
        value = operation(value)
        self.write_byte(loc, value)
        self.set_nz(value)

    def INC(self, mode):
        self._read_modify_write(mode, lambda value: (value + 1) & 0xFF)

    def DEC(self, mode):
        self._read_modify_write(mode, lambda value: (value - 1) & 0xFF)

    def INX(self, mode):
        self._spend(1)
        self.x = (self.x + 1) & 0xFF
        self.set_nz(self.x)

    def INY(self, mode):
        self._spend(1)
        self.y = (self.y + 1) & 0xFF
        self.set_nz(self.y)

    def DEX(self, mode):
        self._spend(1)
        self.x = (self.x - 1) & 0xFF
        self.set_nz(self.x)

    def DEY(self, mode):
        self._spend(1)
        self.y = (self.y - 1) & 0xFF
        self.set_nz(self.y)

    # --- Shifts ---

    def _asl(self, value):
        self.c = bool(value & 0x80)
        return (value << 1) & 0xFF

    def _lsr(self, value):
        self.c = bool(value & 0x01)
        return value >> 1

    def _rol(self, value):
        carry_in = 1 if self.c else 0
        self.c = bool(value & 0x80)
        return ((value << 1) | carry_in) & 0xFF

    def _ror(self, value):
        carry_in = 0x80 if self.c else 0
        self.c = bool(value & 0x01)
        return (value >> 1) | carry_in

    def ASL(self, mode):
        self._read_modify_write(mode, self._asl)

    def LSR(self, mode):
        self._read_modify_write(mode, self._lsr)

    def ROL(self, mode):
        self._read_modify_write(mode, self._rol)

    def ROR(self, mode):
        self._read_modify_write(mode, self._ror)

    # --- Jumps ---

    def JMP(self, mode):
        self.pc = self.get_location_by_mode(mode)

    # JSR
    def JSR(self, mode):
        target = self.get_location_by_mode(mode)
        # Return address - 1; RTS adds the 1 back
        self.push_word((self.pc - 1) & 0xFFFF)
        self._spend(1)
        self.pc = target

    # RTS
    def RTS(self, mode):
        self._spend(1)
        loc = self.pull_word()
        self._spend(1)
        self.pc = (loc + 1) & 0xFFFF
        self._spend(1)

    # --- Branches ---

    def _branch(self, condition):
        loc = self.get_location_by_mode(Mode.RELATIVE)
        if condition:
            # Branch is taken, add one cycle
            self._spend(1)
            # If the page changes, add another cycle
            if self.page_boundary_crossed(self.pc, loc):
                self._spend(1)
            self.pc = loc

    def BPL(self, mode):
        self._branch(not self.n)

    def BMI(self, mode):
        self._branch(self.n)

    def BVC(self, mode):
        self._branch(not self.v)

    def BVS(self, mode):
        self._branch(self.v)

    def BCC(self, mode):
        self._branch(not self.c)

    def BCS(self, mode):
        self._branch(self.c)

    def BNE(self, mode):
        self._branch(not self.z)

    def BEQ(self, mode):
        self._branch(self.z)

    # --- Flag instructions ---

    def CLC(self, mode):
        self._spend(1)
        self.c = False

    def SEC(self, mode):
        self._spend(1)
        self.c = True

    def CLI(self, mode):
        self._spend(1)
        self.i = False

    def SEI(self, mode):
        self._spend(1)
        self.i = True

    def CLV(self, mode):
        self._spend(1)
        self.v = False

    def CLD(self, mode):
        self._spend(1)
        self.d = False

    def SED(self, mode):
        self._spend(1)
        self.d = True

    def NOP(self, mode):
        self._spend(1)

    # --- Tracing / state ---

    def disassemble(self, addr, memory: Memory = None):
        """Disassembles a single instruction at a given address."""
        if memory is None:
            memory = self.memory
        opcode = memory.read_byte(addr)

        if opcode not in self.commands:
            return f"${addr:04X}: {opcode:02X}       ???"

        mnemonic = self.commands[opcode]["f"].__name__
        mode = self.commands[opcode]["m"]
        lsb = memory.read_byte(addr + 1)
        msb = memory.read_byte(addr + 2)
        word = (msb << 8) | lsb

        operand_str = ""
        if mode == Mode.IMMEDIATE:
            operand_str = f"#${lsb:02X}"
        elif mode == Mode.ZEROPAGE:
            operand_str = f"${lsb:02X}"
        elif mode == Mode.ZEROPAGEX:
            operand_str = f"${lsb:02X},X"
        elif mode == Mode.ZEROPAGEY:
            operand_str = f"${lsb:02X},Y"
        elif mode == Mode.ABSOLUTE:
            operand_str = f"${word:04X}"
        elif mode == Mode.ABSOLUTEX:
            operand_str = f"${word:04X},X"
        elif mode == Mode.ABSOLUTEY:
            operand_str = f"${word:04X},Y"
        elif mode == Mode.INDIRECT:
            operand_str = f"(${word:04X})"
        elif mode == Mode.INDIRECTX:
            operand_str = f"(${lsb:02X},X)"
        elif mode == Mode.INDIRECTY:
            operand_str = f"(${lsb:02X}),Y"
        elif mode == Mode.ACCUMULATOR:
            operand_str = "A"
        elif mode == Mode.RELATIVE:
            offset = lsb - 256 if lsb >= 128 else lsb
            operand_str = f"${(addr + 2 + offset) & 0xFFFF:04X}"

        return f"${addr:04X}: {mnemonic} {operand_str}".rstrip()

    def _trace(self, address):
        status = f"A:{self.a:02X} X:{self.x:02X} Y:{self.y:02X} PC:{self.pc:04X} SP:{self.sp:04X}"
        flags = (f"  Flags: {'N' if self.n else '-'} {'V' if self.v else '-'} "
                 f"{'B' if self.b else '-'} {'D' if self.d else '-'} {'I' if self.i else '-'} "
                 f"{'Z' if self.z else '-'} {'C' if self.c else '-'}")
        self.trace_file.write(f"{status}{flags} | {self.disassemble(address)}\n")

    def save_state(self, filename, memory: Memory):
        """Saves registers, the packed status byte and all of memory as JSON."""
        state = {
            'cpu': {
                'a': self.a, 'x': self.x, 'y': self.y,
                'pc': self.pc, 'sp': self.sp,
                'status': self.status,
                'total_cycles': self.total_cycles,
            },
            'ram': memory.dump(),
        }
        try:
            with open(filename, 'w') as f:
                json.dump(state, f)
        except OSError as e:
            raise StateFileError(f"Error saving state to '{filename}': {e}") from e
        logger.info("Emulator state saved to '%s'", filename)

    def restore_state(self, filename, memory: Memory):
        """Restores the emulator state written by save_state()."""
        try:
            with open(filename, 'r') as f:
                state = json.load(f)
            cpu_state = state['cpu']
            ram = state['ram']
            a = cpu_state['a'] & 0xFF
            x = cpu_state['x'] & 0xFF
            y = cpu_state['y'] & 0xFF
            pc = cpu_state['pc'] & 0xFFFF
            sp = STACK_PAGE | (cpu_state['sp'] & 0xFF)
            status = cpu_state['status'] & 0xFF
            total_cycles = int(cpu_state.get('total_cycles', 0))
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StateFileError(f"Error restoring state from '{filename}': {e}") from e

        try:
            memory.restore(ram)
        except (ValueError, TypeError, OverflowError) as e:
            raise StateFileError(f"Bad memory image in '{filename}': {e}") from e

        self.memory = memory
        self.a = a
        self.x = x
        self.y = y
        self.pc = pc
        self.sp = sp
        self.status = status
        self.total_cycles = total_cycles
        logger.info("Emulator state restored from '%s'", filename)

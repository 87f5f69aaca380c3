from py6502.cpu import CPU, RESET_VECTOR
from py6502.memory import Memory

# Hand-built program: JSR $AA42 -> JSR $AE15 -> LDA #5
DEMO_PROGRAM = {
    RESET_VECTOR: [0x20, 0x42, 0xAA],  # JSR $AA42
    0xAA42: [0x20, 0x15, 0xAE],        # JSR $AE15
    0xAE15: [0xA9, 0x05],              # LDA #$05
}


class System:
    """One CPU and the memory it owns."""
    def __init__(self, **cpu_options):
        self.memory = Memory()
        self.cpu = CPU(self.memory, **cpu_options)

    def reset(self):
        self.cpu.reset(self.memory)

    def load_program(self, start_address, program_data):
        self.memory.load_program(start_address, program_data)

    def load_demo_program(self):
        for address, program_data in DEMO_PROGRAM.items():
            self.load_program(address, program_data)

    def run(self, cycles):
        return self.cpu.execute(cycles, self.memory)


def main():
    system = System()
    system.reset()
    system.load_demo_program()
    system.run(20)
    print(system.cpu.a)


if __name__ == "__main__":
    main()

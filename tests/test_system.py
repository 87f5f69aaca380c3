from py6502.system import DEMO_PROGRAM, System, main


def test_demo_program_loads_five():
    system = System()
    system.reset()
    system.load_demo_program()
    assert system.run(14) == 14
    assert system.cpu.a == 5
    assert system.cpu.cycles == 0


def test_demo_program_bytes():
    system = System()
    system.reset()
    system.load_demo_program()
    for address, program in DEMO_PROGRAM.items():
        assert [system.memory[address + i] for i in range(len(program))] == program


def test_reset_clears_loaded_program():
    system = System()
    system.load_program(0x0600, [0xA9, 0x01])
    system.reset()
    assert system.memory[0x0600] == 0


def test_cpu_options_are_passed_through():
    system = System(strict=True, check_stack=True)
    assert system.cpu.strict
    assert system.cpu.check_stack


def test_main_prints_accumulator(capsys):
    main()
    assert capsys.readouterr().out.strip() == "5"

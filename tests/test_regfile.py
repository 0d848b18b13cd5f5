import pytest

from mipsim.regfile import NUM_REGISTERS, PhysReg, Registers


def test_fresh_registers_are_zero_and_ready():
    regs = Registers()
    assert regs.pc == 0
    assert all(regs.ready(i) for i in range(NUM_REGISTERS))
    assert all(regs.access(i, i) == (0, 0) for i in range(NUM_REGISTERS))


def test_write_then_read():
    regs = Registers()
    regs.access(0, 0, write_reg=7, write=True, write_data=0x1234)
    regs.access(0, 0, write_reg=9, write=True, write_data=0xABCD)
    assert regs.access(7, 9) == (0x1234, 0xABCD)


def test_read_sees_value_before_write():
    regs = Registers()
    regs.access(0, 0, 4, True, 0x55)
    old = regs.access(4, 4, 4, True, 0x66)
    assert old == (0x55, 0x55)
    assert regs.access(4, 0)[0] == 0x66


def test_write_flag_off_does_not_write():
    regs = Registers()
    regs.access(0, 0, 5, False, 0x99)
    assert regs.access(5, 5) == (0, 0)


def test_values_wrap_to_32_bits_and_print_signed():
    regs = Registers()
    regs.access(0, 0, 5, True, 0xFFFFFFFF)
    assert regs.access(5, 0)[0] == 0xFFFFFFFF
    assert regs.describe_register(5) == "R[5]: -1\n"
    regs.access(0, 0, 6, True, 0x1_0000_0003)
    assert regs.access(6, 0)[0] == 3


def test_describe_lists_all_registers():
    regs = Registers()
    regs.access(0, 0, 31, True, 0x42)
    lines = regs.describe().splitlines()
    assert len(lines) == NUM_REGISTERS
    assert lines[0] == "R[0]: 0"
    assert lines[31] == f"R[31]: {0x42}"


@pytest.mark.parametrize("reg", [-1, NUM_REGISTERS])
def test_out_of_range_register(reg):
    regs = Registers()
    with pytest.raises(IndexError):
        regs.access(reg, 0)
    with pytest.raises(IndexError):
        regs.access(0, 0, reg, True, 1)
    with pytest.raises(IndexError):
        regs.ready(reg)


def test_physreg_defaults():
    reg = PhysReg()
    assert reg.ready is True
    assert reg.value == 0
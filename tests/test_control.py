import pytest

from mipsim.control import AluOp, Control


def r_type(funct, rs=1, rt=2, rd=3, shamt=0):
    return (rs << 21) | (rt << 16) | (rd << 11) | (shamt << 6) | funct


def i_type(opcode, rs=1, rt=2, imm=0x10):
    return (opcode << 26) | (rs << 21) | (rt << 16) | (imm & 0xFFFF)


def decoded(instruction):
    control = Control()
    control.decode(instruction)
    return control


def test_r_type_add():
    c = decoded(r_type(0x20))
    assert c.reg_dest and c.reg_write
    assert c.alu_op is AluOp.R_TYPE
    assert not (c.shift or c.jump or c.alu_src or c.mem_read or c.mem_write)


def test_jr():
    c = decoded(r_type(0x08))
    assert c.jump and c.jump_reg
    assert not c.reg_dest and not c.reg_write
    assert c.alu_op is AluOp.MEMORY


@pytest.mark.parametrize("funct", [0x00, 0x02])
def test_shifts(funct):
    c = decoded(r_type(funct, shamt=4))
    assert c.shift and c.reg_write and c.reg_dest


def test_jump_and_jal():
    j = decoded(0x2 << 26)
    assert j.jump and not j.link and not j.reg_write
    jal = decoded(0x3 << 26)
    assert jal.jump and jal.link and jal.reg_write
    assert not jal.jump_reg


def test_beq_and_bne():
    beq = decoded(i_type(0x4))
    assert beq.branch and not beq.bne
    assert beq.alu_op is AluOp.BRANCH
    assert not beq.alu_src
    bne = decoded(i_type(0x5))
    assert bne.branch and bne.bne


@pytest.mark.parametrize(
    "opcode, byte, halfword",
    [(0x2B, False, False), (0x28, True, False), (0x29, False, True)],
)
def test_stores(opcode, byte, halfword):
    c = decoded(i_type(opcode))
    assert c.mem_write and c.alu_src
    assert not c.reg_write and not c.mem_read
    assert c.alu_op is AluOp.MEMORY
    assert (c.byte, c.halfword) == (byte, halfword)


@pytest.mark.parametrize(
    "opcode, byte, halfword",
    [(0x23, False, False), (0x24, True, False), (0x25, False, True), (0x30, False, False)],
)
def test_loads(opcode, byte, halfword):
    c = decoded(i_type(opcode))
    assert c.mem_read and c.mem_to_reg and c.reg_write and c.alu_src
    assert not c.reg_dest
    assert (c.byte, c.halfword) == (byte, halfword)


@pytest.mark.parametrize(
    "opcode, zero_extend",
    [(0x8, False), (0x9, False), (0xA, False), (0xC, True), (0xD, True), (0xF, False)],
)
def test_other_immediates(opcode, zero_extend):
    c = decoded(i_type(opcode))
    assert c.alu_op is AluOp.OTHER
    assert c.reg_write and c.alu_src
    assert c.zero_extend is zero_extend


def test_decode_clears_previous_signals():
    c = decoded(i_type(0x23))
    c.decode(0x2 << 26)
    assert c.jump
    assert not c.mem_read and not c.reg_write and not c.alu_src


def test_reset_matches_fresh_control():
    c = decoded(r_type(0x08))
    c.reset()
    assert c == Control()


def test_describe():
    lines = decoded(r_type(0x20)).describe().splitlines()
    assert lines[0] == "REG_DEST: 1"
    assert "ALU_OP: 2" in lines
    assert "MEM_READ: 0" in lines
    assert len(lines) == 9
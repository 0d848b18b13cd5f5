"""Arithmetic logic unit of the simulated MIPS core."""

from __future__ import annotations

from enum import IntEnum

MASK32 = 0xFFFFFFFF


class AluOperation(IntEnum):
    """Operation selected by the ALU control lines."""

    AND = 0
    OR = 1
    ADD = 2
    SLL = 3
    SRL = 4
    LUI = 5
    SUB = 6
    SLT = 7
    NOR = 12


_R_TYPE_OPERATIONS = {
    0x00: AluOperation.SLL,
    0x02: AluOperation.SRL,
    0x08: AluOperation.ADD,  # jr: result unused
    0x20: AluOperation.ADD,
    0x21: AluOperation.ADD,
    0x22: AluOperation.SUB,
    0x23: AluOperation.SUB,
    0x24: AluOperation.AND,
    0x25: AluOperation.OR,
    0x27: AluOperation.NOR,
    0x2A: AluOperation.SLT,
    0x2B: AluOperation.SLT,
}

_I_TYPE_OPERATIONS = {
    0x8: AluOperation.ADD,
    0x9: AluOperation.ADD,
    0xA: AluOperation.SLT,
    0xB: AluOperation.SLT,
    0xC: AluOperation.AND,
    0xD: AluOperation.OR,
    0xF: AluOperation.LUI,
}


def _signed(value: int) -> int:
    value &= MASK32
    return value - (1 << 32) if value & 0x80000000 else value


class ALU:
    """A 32-bit ALU driven by control inputs derived from the instruction."""

    def __init__(self) -> None:
        self.operation = AluOperation.ADD

    def generate_control_inputs(self, alu_op: int, funct: int, opcode: int) -> AluOperation:
        """Select the operation for the given ALU op, function and opcode fields."""
        if alu_op == 0:  # loads and stores compute an address
            self.operation = AluOperation.ADD
        elif alu_op == 1:  # beq / bne compare by subtracting
            self.operation = AluOperation.SUB
        elif alu_op == 2:
            self.operation = _R_TYPE_OPERATIONS.get(funct, AluOperation.ADD)
        else:
            self.operation = _I_TYPE_OPERATIONS.get(opcode, AluOperation.ADD)
        return self.operation

    def execute(self, operand_1: int, operand_2: int) -> tuple[int, bool]:
        """Run the selected operation; return the 32-bit result and the zero flag."""
        a = operand_1 & MASK32
        b = operand_2 & MASK32
        op = self.operation
        if op is AluOperation.AND:
            result = a & b
        elif op is AluOperation.OR:
            result = a | b
        elif op is AluOperation.SLL:
            result = b << a
        elif op is AluOperation.SRL:
            result = b >> a
        elif op is AluOperation.LUI:
            result = b << 16
        elif op is AluOperation.SUB:
            result = a - b
        elif op is AluOperation.SLT:
            result = 1 if _signed(a) < _signed(b) else 0
        elif op is AluOperation.NOR:
            result = ~(a | b)
        else:
            result = a + b
        result &= MASK32
        return result, result == 0
"""Instruction decoding into datapath control signals."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum


class AluOp(IntEnum):
    """Two-bit ALU op code produced by the main decoder."""

    MEMORY = 0
    BRANCH = 1
    R_TYPE = 2
    OTHER = 3


@dataclass
class Control:
    """Control signals for one instruction."""

    reg_dest: bool = False  # write rd instead of rt
    jump: bool = False
    jump_reg: bool = False  # jr
    link: bool = False  # jal
    shift: bool = False  # sll / srl
    branch: bool = False
    bne: bool = False
    mem_read: bool = False
    mem_to_reg: bool = False
    alu_op: AluOp = AluOp.MEMORY
    mem_write: bool = False
    halfword: bool = False
    byte: bool = False
    alu_src: bool = False  # second operand is the immediate
    reg_write: bool = False
    zero_extend: bool = False

    def reset(self) -> None:
        """Clear every signal."""
        for field in fields(self):
            setattr(self, field.name, field.default)

    def decode(self, instruction: int) -> None:
        """Set the signals for a 32-bit instruction word."""
        self.reset()
        opcode = (instruction >> 26) & 0x3F
        funct = instruction & 0x3F

        if opcode == 0:
            self.reg_dest = True
            self.reg_write = True
            self.alu_op = AluOp.R_TYPE
            if funct == 0x08:  # jr
                self.reg_dest = False
                self.reg_write = False
                self.alu_op = AluOp.MEMORY
                self.jump = True
                self.jump_reg = True
            if funct in (0x0, 0x2):
                self.shift = True
        elif opcode in (0x2, 0x3):
            self.jump = True
            if opcode == 0x3:  # jal
                self.link = True
                self.reg_write = True
        else:
            self.alu_src = True
            if opcode in (0x4, 0x5):
                self.branch = True
                self.alu_op = AluOp.BRANCH
                self.alu_src = False
                self.bne = opcode == 0x5
            elif opcode in (0x2B, 0x28, 0x29):
                self.mem_write = True
                self.byte = opcode == 0x28
                self.halfword = opcode == 0x29
            elif 0x23 <= opcode <= 0x25 or opcode == 0x30:
                self.mem_read = True
                self.mem_to_reg = True
                self.reg_write = True
                self.byte = opcode == 0x24
                self.halfword = opcode == 0x25
            else:
                self.reg_write = True
                self.alu_op = AluOp.OTHER
                self.zero_extend = opcode in (0xC, 0xD)

    def describe(self) -> str:
        """Return the main signals, one per line."""
        items = [
            ("REG_DEST", self.reg_dest),
            ("JUMP", self.jump),
            ("BRANCH", self.branch),
            ("MEM_READ", self.mem_read),
            ("MEM_TO_REG", self.mem_to_reg),
            ("ALU_OP", self.alu_op),
            ("MEM_WRITE", self.mem_write),
            ("ALU_SRC", self.alu_src),
            ("REG_WRITE", self.reg_write),
        ]
        return "".join(f"{name}: {int(value)}\n" for name, value in items)
"""The 32-entry general-purpose register file."""

from __future__ import annotations

from dataclasses import dataclass

NUM_REGISTERS = 32
_MASK32 = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


@dataclass
class PhysReg:
    """One physical register: a signed 32-bit value and a ready flag."""

    value: int = 0
    ready: bool = True


class Registers:
    """Register file with two read ports, one write port and the program counter."""

    def __init__(self) -> None:
        self._regs = [PhysReg() for _ in range(NUM_REGISTERS)]
        self.pc = 0

    def _reg(self, reg: int) -> PhysReg:
        if not 0 <= reg < NUM_REGISTERS:
            raise IndexError(f"register {reg} out of range")
        return self._regs[reg]

    def access(
        self,
        read_reg_1: int,
        read_reg_2: int,
        write_reg: int = 0,
        write: bool = False,
        write_data: int = 0,
    ) -> tuple[int, int]:
        """Read two registers, then optionally write one.

        Returns the two values read, as unsigned 32-bit words, taken before the write.
        """
        first = self._reg(read_reg_1).value & _MASK32
        second = self._reg(read_reg_2).value & _MASK32
        if write:
            target = self._reg(write_reg)
            target.value = _to_int32(write_data)
            target.ready = True
        return first, second

    def ready(self, reg: int) -> bool:
        return self._reg(reg).ready

    def describe(self) -> str:
        """Return every register as a signed value, one per line."""
        return "".join(self.describe_register(i) for i in range(NUM_REGISTERS))

    def describe_register(self, reg: int) -> str:
        return f"R[{reg}]: {self._reg(reg).value}\n"
"""Single-cycle and five-stage pipelined MIPS processor models."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional, TextIO

from mipsim.alu import ALU
from mipsim.control import Control
from mipsim.memory import Memory
from mipsim.regfile import Registers

_MASK32 = 0xFFFFFFFF
_LINK_REGISTER = 31
_MISS_STALL_CYCLES = 60


def _extend_immediate(imm: int, zero_extend: bool) -> int:
    """Zero- or sign-extend a 16-bit immediate to 32 bits."""
    imm &= 0xFFFF
    if zero_extend or not imm >> 15:
        return imm
    return 0xFFFF0000 | imm


def _store_word(old: int, value: int, control: Control) -> int:
    """Merge a byte or halfword store into the word already in memory."""
    if control.halfword:
        return (old & 0xFFFF0000) | (value & 0xFFFF)
    if control.byte:
        return (old & 0xFFFFFF00) | (value & 0xFF)
    return value & _MASK32


def _load_mask(control: Control) -> int:
    if control.halfword:
        return 0xFFFF
    if control.byte:
        return 0xFF
    return _MASK32


@dataclass
class IfId:
    """Fetch/decode pipeline register."""

    instruction: int = 0
    pc: int = 0


@dataclass
class IdEx:
    """Decode/execute pipeline register."""

    opcode: int = 0
    rs: int = 0
    rt: int = 0
    rd: int = 0
    shamt: int = 0
    funct: int = 0
    imm: int = 0
    addr: int = 0
    read_data_1: int = 0
    read_data_2: int = 0
    control: Control = field(default_factory=Control)
    pc: int = 0


@dataclass
class ExMem:
    """Execute/memory pipeline register."""

    imm: int = 0
    read_data_1: int = 0
    read_data_2: int = 0
    rd: int = 0
    rt: int = 0
    write_data: int = 0
    alu_zero: bool = False
    alu_result: int = 0
    control: Control = field(default_factory=Control)
    pc: int = 0


@dataclass
class MemWb:
    """Memory/write-back pipeline register."""

    write_reg: int = 0
    write_data: int = 0
    imm: int = 0
    alu_zero: bool = False
    control: Control = field(default_factory=Control)
    pc: int = 0


@dataclass
class PipelineState:
    """All four pipeline registers."""

    fetch_decode: IfId = field(default_factory=IfId)
    dec_exe: IdEx = field(default_factory=IdEx)
    exe_mem: ExMem = field(default_factory=ExMem)
    mem_write: MemWb = field(default_factory=MemWb)


class Processor:
    """A MIPS core that runs single-cycle at level 0 and pipelined at level 1."""

    def __init__(self, memory: Memory, out: Optional[TextIO] = None) -> None:
        self.memory = memory
        self.out = out
        self.regfile = Registers()
        self.alu = ALU()
        self.control = Control()
        self.opt_level = 0
        self.stall = 0
        self.processor_pc = 0
        self.state = PipelineState()
        self.prev_state = PipelineState()

    @property
    def pc(self) -> int:
        """Program counter of the register file."""
        return self.regfile.pc

    def describe_registers(self) -> str:
        return self.regfile.describe()

    def initialize(self, level: int) -> None:
        """Reset the pipeline and select the optimization level."""
        self.processor_pc = 0
        self.control.reset()
        self.opt_level = level
        self.state = PipelineState()
        self.prev_state = copy.deepcopy(self.state)

    def advance(self) -> None:
        """Advance the processor by one cycle."""
        if self.opt_level == 0:
            self._single_cycle_advance()
        elif self.opt_level == 1:
            self._pipelined_advance()

    # ------------------------------------------------------------------
    # single-cycle datapath

    def _single_cycle_advance(self) -> None:
        regfile = self.regfile
        control = self.control

        instruction = self.memory.access(regfile.pc, 0, True, False).data or 0
        regfile.pc = (regfile.pc + 4) & _MASK32

        control.decode(instruction)
        opcode = (instruction >> 26) & 0x3F
        rs = (instruction >> 21) & 0x1F
        rt = (instruction >> 16) & 0x1F
        rd = (instruction >> 11) & 0x1F
        shamt = (instruction >> 6) & 0x1F
        funct = instruction & 0x3F
        addr = instruction & 0x3FFFFFF

        read_data_1, read_data_2 = regfile.access(rs, rt)

        self.alu.generate_control_inputs(control.alu_op, funct, opcode)
        imm = _extend_immediate(instruction, control.zero_extend)
        operand_1 = shamt if control.shift else read_data_1
        operand_2 = imm if control.alu_src else read_data_2
        alu_result, alu_zero = self.alu.execute(operand_1, operand_2)

        # Read first whether it is a load or a store, so partial stores keep the rest.
        read_data_mem = 0
        result = self.memory.access(alu_result, 0, control.mem_read or control.mem_write, False)
        if result.data is not None:
            read_data_mem = result.data
        write_data_mem = _store_word(read_data_mem, read_data_2, control)
        result = self.memory.access(alu_result, write_data_mem, control.mem_read, control.mem_write)
        if result.data is not None:
            read_data_mem = result.data
        read_data_mem &= _load_mask(control)

        if control.link:
            write_reg = _LINK_REGISTER
            write_data = (regfile.pc + 8) & _MASK32
        else:
            write_reg = rd if control.reg_dest else rt
            write_data = read_data_mem if control.mem_to_reg else alu_result
        regfile.access(0, 0, write_reg, control.reg_write, write_data)

        taken = (control.branch and not control.bne and alu_zero) or (control.bne and not alu_zero)
        if taken:
            regfile.pc = (regfile.pc + (imm << 2)) & _MASK32
        if control.jump_reg:
            regfile.pc = read_data_1
        elif control.jump:
            regfile.pc = (regfile.pc & 0xF0000000) & (addr << 2)

    # ------------------------------------------------------------------
    # pipelined datapath

    def _pipelined_advance(self) -> None:
        self.prev_state = copy.deepcopy(self.state)
        self.pipelined_fetch()
        self.pipelined_decode()
        self.pipelined_execute()
        self.pipelined_mem()
        self.pipelined_wb()

    def pipelined_fetch(self) -> None:
        """Fetch the next instruction into IF/ID unless stalled or missing."""
        print(f"pc: {self.processor_pc}", file=self.out)
        if self.stall:
            return
        result = self.memory.access(self.processor_pc, 0, True, False)
        if not result.ok:
            self.clear_if_id()
            return
        self.state.fetch_decode.instruction = result.data or 0
        self.state.fetch_decode.pc = self.processor_pc
        self.processor_pc = (self.processor_pc + 4) & _MASK32

    def pipelined_decode(self) -> None:
        """Decode the instruction in IF/ID and read its registers into ID/EX."""
        prev = self.prev_state
        dec = self.state.dec_exe
        instruction = prev.fetch_decode.instruction

        new_control = Control()
        new_control.decode(instruction)
        dec.control = new_control

        rs = dec.rs = (instruction >> 21) & 0x1F
        rt = dec.rt = (instruction >> 16) & 0x1F
        dec.rd = (instruction >> 11) & 0x1F

        if self.stall:
            self.stall = 0
            self.clear_id_ex()
            return

        self._detect_data_hazard()

        dec.opcode = (instruction >> 26) & 0x3F
        dec.shamt = (instruction >> 6) & 0x1F
        dec.funct = instruction & 0x3F
        dec.imm = instruction & 0xFFFF
        dec.addr = instruction & 0x3FFFFFF

        read_data_1, read_data_2 = self.regfile.access(rs, rt)
        wb = prev.mem_write
        if wb.control.reg_write and wb.write_reg != 0:
            if wb.write_reg == rs and rs != 0:
                read_data_1 = wb.write_data
            if wb.write_reg == rt and rt != 0 and not new_control.alu_src:
                read_data_2 = wb.write_data

        dec.read_data_1 = read_data_1
        dec.read_data_2 = read_data_2
        dec.pc = prev.fetch_decode.pc

    def pipelined_execute(self) -> None:
        """Run the ALU on ID/EX, with forwarding, and resolve branches."""
        prev = self.prev_state
        ex = self.state.exe_mem
        ctrl = prev.dec_exe.control
        ex.control = copy.copy(ctrl)

        self.alu.generate_control_inputs(ctrl.alu_op, prev.dec_exe.funct, prev.dec_exe.opcode)
        imm = ex.imm = _extend_immediate(prev.dec_exe.imm, ctrl.zero_extend)

        forward_a = self._forwarding(prev.dec_exe.rs)
        if forward_a == 1:
            operand_1 = prev.mem_write.write_data
        elif forward_a == 2:
            operand_1 = prev.exe_mem.alu_result
        else:
            operand_1 = prev.dec_exe.shamt if ctrl.shift else prev.dec_exe.read_data_1

        forward_b = self._forwarding(prev.dec_exe.rt)
        if forward_b == 1:
            operand_2 = prev.mem_write.write_data
        elif forward_b == 2:
            operand_2 = prev.exe_mem.alu_result
        else:
            operand_2 = prev.dec_exe.read_data_2

        ex.write_data = operand_2
        if ctrl.alu_src:
            operand_2 = imm

        ex.alu_result, ex.alu_zero = self.alu.execute(operand_1, operand_2)
        ex.rd = prev.dec_exe.rd
        ex.rt = prev.dec_exe.rt
        ex.pc = prev.dec_exe.pc

        self._detect_control_hazard(ctrl)

    def pipelined_mem(self) -> None:
        """Perform the memory access of EX/MEM; stall the pipeline on a miss."""
        prev = self.prev_state
        ctrl = prev.exe_mem.control
        self.state.mem_write.control = copy.copy(ctrl)

        read_data_mem = 0
        if ctrl.mem_read:
            result = self.memory.access(prev.exe_mem.alu_result, 0, ctrl.mem_read, ctrl.mem_write)
            if result.data is not None:
                read_data_mem = result.data
            if self._hold_for_memory(result.ok):
                return

        write_data_mem = _store_word(read_data_mem, prev.exe_mem.write_data, ctrl)
        if ctrl.mem_write:
            result = self.memory.access(
                prev.exe_mem.alu_result, write_data_mem, ctrl.mem_read, ctrl.mem_write
            )
            if result.data is not None:
                read_data_mem = result.data
            if self._hold_for_memory(result.ok):
                return

        read_data_mem &= _load_mask(ctrl)

        wb = self.state.mem_write
        if ctrl.link:
            wb.write_reg = _LINK_REGISTER
        else:
            wb.write_reg = prev.exe_mem.rd if ctrl.reg_dest else prev.exe_mem.rt
        wb.write_data = read_data_mem if ctrl.mem_read else prev.exe_mem.alu_result
        wb.pc = prev.exe_mem.pc

    def pipelined_wb(self) -> None:
        """Write MEM/WB's result back to the register file."""
        wb = self.prev_state.mem_write
        self.regfile.access(0, 0, wb.write_reg, wb.control.reg_write, wb.write_data)
        self.regfile.pc = wb.pc

    def clear_id_ex(self) -> None:
        self.state.dec_exe = IdEx()

    def clear_if_id(self) -> None:
        self.state.fetch_decode = IfId()

    # ------------------------------------------------------------------
    # hazard handling

    def _hold_for_memory(self, ok: bool) -> bool:
        """Freeze the pipeline while a memory access is outstanding."""
        if self.stall > 1:
            self.stall -= 1
        elif not ok:
            self.stall = _MISS_STALL_CYCLES
        else:
            return False
        self.state = copy.deepcopy(self.prev_state)
        return True

    def _detect_data_hazard(self) -> None:
        """Request a stall when the instruction in decode uses a value being loaded."""
        prev_dec = self.prev_state.dec_exe
        cur = self.state.dec_exe
        if prev_dec.control.reg_write and prev_dec.control.mem_read:
            dest = prev_dec.rd if prev_dec.control.reg_dest else prev_dec.rt
            if cur.rs == dest or (not cur.control.alu_src and cur.rt == dest):
                self.stall = 1

    def _forwarding(self, reg: int) -> int:
        """Forwarding source for a register: 0 none, 1 from write-back, 2 from memory."""
        if not reg:
            return 0
        prev = self.prev_state
        exe_mem = prev.exe_mem
        if exe_mem.control.reg_write:
            is_r_type = exe_mem.control.alu_op == 2 and exe_mem.control.reg_dest
            dest = exe_mem.rd if is_r_type else exe_mem.rt
            if dest == reg:
                return 2
        if prev.mem_write.control.reg_write and prev.mem_write.write_reg == reg:
            return 1
        return 0

    def _detect_control_hazard(self, control: Control) -> None:
        prev = self.prev_state
        ex = self.state.exe_mem

        # A load right after a store to the same address takes the stored value.
        if prev.dec_exe.control.mem_read and prev.exe_mem.control.mem_write:
            if prev.exe_mem.alu_result == ex.alu_result:
                ex.alu_result = prev.exe_mem.write_data
                ex.control.mem_read = False

        if control.branch or control.bne:
            if control.bne:
                taken = not ex.alu_zero
            else:
                taken = ex.alu_zero
            if taken:
                self.clear_if_id()
                self.clear_id_ex()
                self.processor_pc = (ex.pc + 4 + (ex.imm << 2)) & _MASK32
                print(f"Detected branch, branching to {self.processor_pc}", file=self.out)
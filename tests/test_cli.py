import io
import struct

import pytest

from mipsim.cli import help_text, main, run
from mipsim.memory import Memory
from mipsim.processor import Processor

ADDI_T0_5 = 0x20080005  # addi $t0, $zero, 5


def _elf(text):
    shoff = 52
    text_offset = shoff + 2 * 40
    null = struct.pack("<10I", *([0] * 10))
    text_hdr = struct.pack("<10I", 1, 1, 0x6, 0, text_offset, len(text), 0, 0, 4, 0)
    header = struct.pack(
        "<16sHHIIIIIHHHHHH",
        b"\x7fELF\x01\x01\x01".ljust(16, b"\0"), 2, 8, 1, 0, 0, shoff, 0, 52, 0, 0, 40, 2, 0,
    )
    return header + null + text_hdr + text


@pytest.fixture
def program(tmp_path):
    path = tmp_path / "prog.elf"
    path.write_bytes(_elf(struct.pack("<I", ADDI_T0_5)))
    return path


def _single_cycle_processor(words):
    memory = Memory()
    for i, word in enumerate(words):
        memory.access(4 * i, word, False, True)
    processor = Processor(memory, io.StringIO())
    processor.initialize(0)
    return processor


def test_help_text_lists_options():
    text = help_text()
    assert text.startswith("Required Options.\n")
    assert "--bmk <path-to-executable>" in text
    assert "Defaults to -O0" in text


def test_run_counts_cycles_and_writes_registers():
    processor = _single_cycle_processor([ADDI_T0_5])
    out = io.StringIO()
    cycles = run(processor, 4, 0, out)
    text = out.getvalue()
    assert text.count("\nCYCLE ") == cycles
    assert "CYCLE 0\n" in text
    assert f"CYCLE {cycles}\n" not in text
    assert "R[8]: 5\n" in text
    assert processor.pc > 4


def test_run_single_cycle_timing():
    processor = _single_cycle_processor([])
    out = io.StringIO()
    assert run(processor, 0, 0, out) == 1
    assert out.getvalue().endswith("\nCompleted execution in 62.5 nanoseconds.\n")


def test_run_optimized_timing_uses_unit_factor():
    processor = _single_cycle_processor([])
    out = io.StringIO()
    assert run(processor, 0, 1, out) == 1
    assert out.getvalue().endswith("\nCompleted execution in 0.5 nanoseconds.\n")


def test_main_without_arguments_prints_help(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_help_option(capsys):
    assert main(["-h", "-O0"]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_unknown_option_prints_help(capsys):
    assert main(["--bogus"]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_without_level_prints_help(program, capsys):
    assert main(["--bmk", str(program)]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_runs_program(program, capsys):
    assert main(["--bmk", str(program), "-O0"]) == 0
    out = capsys.readouterr().out
    assert "R[8]: 5\n" in out
    assert "Completed execution in" in out
    assert "pc: " not in out


def test_main_accepts_long_level_option(program, capsys):
    assert main(["-b", str(program), "--opt0"]) == 0
    out = capsys.readouterr().out
    assert "R[8]: 5\n" in out
    assert "Required Options." not in out


def test_main_reports_missing_binary(tmp_path, capsys):
    missing = tmp_path / "absent.elf"
    assert main(["--bmk", str(missing), "-O0"]) == 0
    out = capsys.readouterr().out
    assert f"Failed to open executable binary: {missing}\n" in out
    assert out.count("\nCYCLE ") == 1
"""Command-line front end: load an executable and run it cycle by cycle."""

from __future__ import annotations

import getopt
import sys
from typing import Optional, Sequence, TextIO

from mipsim.loader import LoaderError, load_elf
from mipsim.memory import Memory
from mipsim.processor import Processor

_SHORT_OPTIONS = "b:O01234h"
_LONG_OPTIONS = ["bmk=", "opt", "opt0", "opt1", "opt2", "opt3", "opt4", "help"]
_LEVEL_OPTIONS = {
    "-0": 0, "-1": 1, "-2": 2, "-3": 3, "-4": 4,
    "--opt0": 0, "--opt1": 1, "--opt2": 2, "--opt3": 3, "--opt4": 4,
}
_SINGLE_CYCLE_FACTOR = 125
_CYCLE_TIME_NS = 0.5


def help_text() -> str:
    """Return the usage message."""
    return (
        "Required Options.\n"
        "--bmk <path-to-executable>           Path to the benchmark executable binary.\n"
        "Optional:\n"
        "--help                               Print this help message\n"
        "-O0                                  Optimization Level 0 (single-cycle processor)\n"
        "-O1                                  Optimization Level 1 (pipelined processor)\n"
        "-O2                                  Optimization Level 2 (custom optimization TBD; includes O1)\n"
        "-O3                                  Optimization Level 3 (custom optimization TBD; includes O2)\n"
        "-O4                                  Optimization Level 4 (custom optimization TBD; includes O3)\n"
        "                                     Defaults to -O0\n"
    )


def run(processor: Processor, end_pc: int, opt_level: int, out: TextIO) -> int:
    """Advance the processor until its pc passes end_pc; return the cycle count."""
    num_cycles = 0
    while processor.pc <= end_pc:
        processor.advance()
        out.write(f"\nCYCLE {num_cycles}\n")
        out.write(processor.describe_registers())
        num_cycles += 1
    factor = 1 if opt_level else _SINGLE_CYCLE_FACTOR
    elapsed = num_cycles * factor * _CYCLE_TIME_NS
    out.write(f"\nCompleted execution in {elapsed:g} nanoseconds.\n")
    return num_cycles


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse options, load the benchmark and simulate it."""
    args = list(sys.argv[1:] if argv is None else argv)
    out = sys.stdout

    memory = Memory()
    processor = Processor(memory, out)
    end_pc = 0
    opt_level = 0
    initialized = False

    try:
        options, _operands = getopt.gnu_getopt(args, _SHORT_OPTIONS, _LONG_OPTIONS)
    except getopt.GetoptError:
        out.write(help_text())
        return 0

    for option, value in options:
        if option in ("-h", "--help"):
            out.write(help_text())
            return 0
        if option in ("-b", "--bmk"):
            try:
                end_pc = load_elf(value, memory)
            except LoaderError as exc:
                out.write(f"{exc}\n")
                end_pc = 0
        elif option in _LEVEL_OPTIONS:
            opt_level = _LEVEL_OPTIONS[option]
            processor.initialize(opt_level)
            initialized = True

    if not initialized:
        out.write(help_text())
        return 0

    memory.set_opt_level(opt_level)
    run(processor, end_pc, opt_level, out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
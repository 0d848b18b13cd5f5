# mipsim

A cycle-level simulator for a small 32-bit MIPS processor. It loads the text
section of a 32-bit little-endian ELF executable into simulated memory and runs
it on one of two processor models:

- **Level 0**: a single-cycle processor over flat memory.
- **Level 1**: a five-stage pipeline (fetch, decode, execute, memory,
  write-back) with forwarding, load/use hazard stalls, branch resolution in the
  execute stage, and an inclusive two-level write-back cache (L1: 32 KiB, 8-way,
  12-call miss penalty; L2: 256 KiB, 8-way, 59-call miss penalty).

After every cycle the 32 registers are printed as signed values, and at the end
the total simulated time is reported in nanoseconds (a level-0 cycle counts as
62.5 ns, a pipelined cycle as 0.5 ns).

## Installation

```
pip install .
```

## Command line

```
mipsim --bmk path/to/program.elf -0
mipsim --bmk path/to/program.elf -1
```

Options:

```
-b, --bmk <path>       Executable to load
-h, --help             Print the help message
-0 ... -4              Optimization level (also --opt0 ... --opt4)
-O, --opt              Accepted and ignored, so -O1 reads as -O -1
```

An optimization level must be given; without one the help message is printed
and nothing is run. If the executable cannot be loaded, the error is printed
and the run goes ahead with an empty program. In pipelined mode the processor
also prints the fetch address (`pc: N`) each cycle and a line for every taken
branch.

## Library use

```python
import io

from mipsim.cli import run
from mipsim.loader import load_elf
from mipsim.memory import Memory
from mipsim.processor import Processor

memory = Memory()
out = io.StringIO()
processor = Processor(memory, out)
processor.initialize(0)
end_pc = load_elf("program.elf", memory)
memory.set_opt_level(0)

cycles = run(processor, end_pc, 0, out)
print(cycles, out.getvalue().splitlines()[-1])
```

`load_elf` copies the executable section linked at address 0 into memory and
returns its size in bytes (0 if there is none); it raises
`mipsim.loader.LoaderError` when the file cannot be opened or its headers are
broken. `run` advances the processor until its `pc` passes `end_pc` and returns
the number of cycles.

The building blocks can be used on their own:

- `mipsim.alu.ALU`: `generate_control_inputs(alu_op, funct, opcode)` selects an
  operation; `execute(a, b)` returns the 32-bit result and the zero flag.
- `mipsim.control.Control`: `decode(instruction)` sets the control signals of a
  32-bit instruction word; `describe()` renders the main ones.
- `mipsim.regfile.Registers`: the 32-entry register file plus `pc`;
  `access(r1, r2, write_reg, write, write_data)` returns the two values read.
- `mipsim.memory.Cache` and `mipsim.memory.Memory`: above level 0,
  `Memory.access` returns an `AccessResult` with `ok=False` while a miss is
  being serviced; keep calling until `ok` is true.
- `mipsim.processor.Processor`: `initialize(level)`, `advance()`, and the
  individual pipeline stages.

## Limitations

- Only the executable section linked at address 0 is loaded; data sections are
  not, and there are no system calls.
- Levels 2 to 4 select the cached memory but the processor does not advance at
  those levels, so a run never reaches its end.
- The pipelined model does not redirect fetch on jumps (`j`, `jal`, `jr`);
  only conditional branches change the fetch address.

## Running the tests

```
pip install ".[test]"
pytest
```
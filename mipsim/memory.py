"""Main memory with a two-level, set-associative, write-back cache hierarchy."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

CACHE_LINE_SIZE = 64
WORDS_PER_LINE = CACHE_LINE_SIZE // 4
MEMORY_WORDS = 2097152
_MASK32 = 0xFFFFFFFF
_LINE_MASK = ~(CACHE_LINE_SIZE - 1) & _MASK32
_OFFSET_BITS = CACHE_LINE_SIZE.bit_length() - 1


@dataclass
class CacheLine:
    """One cache line: sixteen words plus bookkeeping bits."""

    data: list[int] = field(default_factory=lambda: [0] * WORDS_PER_LINE)
    address: int = 0
    tag: int = 0
    valid: bool = False
    dirty: bool = False
    repl_bits: int = 0


def _copy_line(line: CacheLine) -> CacheLine:
    return dataclasses.replace(line, data=list(line.data))


class Cache:
    """A set-associative cache that models a fixed miss penalty in calls."""

    def __init__(self, name: str, size: int, assoc: int, penalty: int) -> None:
        self.name = name
        self.size = size
        self.assoc = assoc
        self.miss_penalty = penalty
        self.miss_countdown = 0
        self._num_sets = size // CACHE_LINE_SIZE
        self._tag_shift = size.bit_length() - 1
        # Every index the address mapping can produce owns `assoc` ways.
        self._lines = [CacheLine() for _ in range(self._num_sets * assoc)]

    def _ways(self, idx: int) -> range:
        start = idx * self.assoc
        return range(start, start + self.assoc)

    def _find(self, address: int) -> Optional[int]:
        tag = self.tag(address)
        for loc in self._ways(self.index(address)):
            line = self._lines[loc]
            if line.valid and line.tag == tag:
                return loc
        return None

    def offset(self, address: int) -> int:
        return address & (CACHE_LINE_SIZE - 1)

    def index(self, address: int) -> int:
        return (address >> _OFFSET_BITS) & (self._num_sets - 1)

    def tag(self, address: int) -> int:
        return (address & _MASK32) >> self._tag_shift

    def is_hit(self, address: int) -> Optional[int]:
        """Return the location of the line holding address, updating LRU bits, or None."""
        loc = self._find(address)
        if loc is not None:
            idx = self.index(address)
            self.update_replacement_bits(idx, loc - idx * self.assoc)
        return loc

    def update_replacement_bits(self, idx: int, way: int) -> None:
        """Make the given way the most recently used in its set."""
        current = self._lines[idx * self.assoc + way].repl_bits
        for loc in self._ways(idx):
            line = self._lines[loc]
            if line.valid and line.repl_bits > current:
                line.repl_bits -= 1
        self._lines[idx * self.assoc + way].repl_bits = self.assoc - 1

    def _service_miss(self, address: int) -> Optional[int]:
        if self.miss_countdown:
            self.miss_countdown -= 1
            return None
        loc = self.is_hit(address)
        if loc is None:
            self.miss_countdown = self.miss_penalty - 1
        return loc

    def read(self, address: int) -> Optional[int]:
        """Return the word at address, or None while a miss is being serviced."""
        loc = self._service_miss(address)
        if loc is None:
            return None
        return self._lines[loc].data[self.offset(address) // 4]

    def write(self, address: int, write_data: int) -> bool:
        """Store a word; return False while a miss is being serviced."""
        loc = self._service_miss(address)
        if loc is None:
            return False
        line = self._lines[loc]
        line.data[self.offset(address) // 4] = write_data & _MASK32
        line.dirty = True
        return True

    def read_line(self, address: int) -> Optional[CacheLine]:
        """Return a copy of the valid line holding address, or None."""
        loc = self._find(address)
        return None if loc is None else _copy_line(self._lines[loc])

    def write_back_line(self, evicted_line: CacheLine) -> None:
        """Copy an evicted line's data into the matching line here and mark it dirty."""
        tag = self.tag(evicted_line.address)
        for loc in self._ways(self.index(evicted_line.address)):
            line = self._lines[loc]
            if line.valid and line.tag == tag:
                line.data[:] = evicted_line.data[:WORDS_PER_LINE]
                line.dirty = True

    def replace(self, address: int, new_line: CacheLine) -> Optional[CacheLine]:
        """Install new_line for address; return the line it displaced.

        Returns None when the address is already present or no way can be replaced.
        """
        incoming = _copy_line(new_line)
        incoming.address = address & _MASK32
        incoming.tag = self.tag(address)
        incoming.valid = True
        idx = self.index(address)
        ways = self._ways(idx)
        if any(self._lines[loc].valid and self._lines[loc].tag == incoming.tag for loc in ways):
            return None
        for loc in ways:
            line = self._lines[loc]
            if not line.valid or line.repl_bits == 0:
                self._lines[loc] = incoming
                return line
        return None

    def invalidate_line(self, address: int) -> None:
        tag = self.tag(address)
        for loc in self._ways(self.index(address)):
            line = self._lines[loc]
            if line.valid and line.tag == tag:
                line.valid = False

    def describe_line(self, address: int) -> str:
        """Return the line holding address as text, or an empty string."""
        loc = self._find(address)
        if loc is None:
            return ""
        line = self._lines[loc]
        parts = [
            f"Valid:{int(line.valid)}\n",
            f"Address:{line.address}\n",
            f"Tag:{line.tag}\n",
            f"Dirty:{int(line.dirty)}\n",
            f"Replacement Bits:{line.repl_bits}\n",
        ]
        parts.extend(f"DATA[{i}]: {word}\n" for i, word in enumerate(line.data))
        return "".join(parts)


class AccessResult(NamedTuple):
    """Outcome of a memory access: whether it completed and any word read."""

    ok: bool
    data: Optional[int]


class Memory:
    """Word-addressed main memory, fronted by L1 and L2 caches above level 0."""

    def __init__(self) -> None:
        self._mem = [0] * MEMORY_WORDS
        self.l1 = Cache("L1", 32768, 8, 12)
        self.l2 = Cache("L2", 262144, 8, 59)
        self.opt_level = 0

    def set_opt_level(self, level: int) -> None:
        self.opt_level = level

    def access(
        self, address: int, write_data: int = 0, mem_read: bool = False, mem_write: bool = False
    ) -> AccessResult:
        """Read and/or write the word at address.

        Above level 0 a miss returns ok=False; keep calling until ok is True.
        """
        address &= _MASK32
        write_data &= _MASK32
        data: Optional[int] = None

        if self.opt_level == 0:
            if mem_read:
                data = self._mem[address // 4]
            if mem_write:
                self._mem[address // 4] = write_data
            return AccessResult(True, data)

        if not mem_read and not mem_write:
            return AccessResult(True, None)

        if mem_read:
            data = self.l1.read(address)
            if data is not None:
                return AccessResult(True, data)
        if mem_write and self.l1.write(address, write_data):
            return AccessResult(True, data)

        l2_hit = False
        if mem_read:
            data = self.l2.read(address)
            l2_hit = data is not None
        if not l2_hit and mem_write:
            l2_hit = self.l2.write(address, write_data)

        if l2_hit:
            line = self.l2.read_line(address) or CacheLine()
            evicted = self.l1.replace(address, line)
            if evicted is not None and evicted.valid and evicted.dirty:
                self.l2.write_back_line(evicted)
        else:
            line_addr = address & _LINE_MASK
            start = line_addr // 4
            fresh = CacheLine(data=self._mem[start:start + WORDS_PER_LINE])
            evicted = self.l2.replace(address, fresh)
            if evicted is not None and evicted.valid:
                # keep the hierarchy inclusive
                self.l1.invalidate_line(evicted.address)
                if evicted.dirty:
                    base = (evicted.address & _LINE_MASK) // 4
                    self._mem[base:base + WORDS_PER_LINE] = evicted.data[:WORDS_PER_LINE]
        return AccessResult(False, data)

    def describe(self, address: int, num_words: int) -> str:
        """Return num_words words starting at word index address, in hex."""
        return "".join(
            f"MEM[{i:x}]: {self._mem[i]:x}\n" for i in range(address, address + num_words)
        )
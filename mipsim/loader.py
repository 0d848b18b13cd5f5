"""Loading the text section of a 32-bit little-endian ELF executable into memory."""

from __future__ import annotations

import os
import struct
from typing import Union

from mipsim.memory import Memory

SHF_EXECINSTR = 0x4
ELF_IDENT = b"\x7fELF\x01\x01\x01"

_EHDR = struct.Struct("<16sHHIIIIIHHHHHH")
_SHDR = struct.Struct("<10I")
_EHDR_SHOFF = 6
_EHDR_SHNUM = 12


class LoaderError(Exception):
    """Raised when an executable cannot be loaded."""


def load_elf(path: Union[str, os.PathLike], memory: Memory) -> int:
    """Copy the executable section linked at address 0 into memory.

    Returns the size of that section in bytes, or 0 when there is none.
    """
    try:
        binary = open(path, "rb")
    except OSError as exc:
        raise LoaderError(f"Failed to open executable binary: {os.fspath(path)}") from exc

    with binary:
        header = binary.read(_EHDR.size)
        if len(header) != _EHDR.size or header[: len(ELF_IDENT)] != ELF_IDENT:
            raise LoaderError("Error in ELF header")
        ehdr = _EHDR.unpack(header)

        binary.seek(ehdr[_EHDR_SHOFF])
        last_addr = 0
        for _ in range(ehdr[_EHDR_SHNUM]):
            raw = binary.read(_SHDR.size)
            if len(raw) != _SHDR.size:
                raise LoaderError(f"Error in section header: 0 shdr={last_addr}")
            _name, _type, flags, addr, offset, size, *_rest = _SHDR.unpack(raw)
            last_addr = addr
            # The text section is linked at address zero.
            if flags & SHF_EXECINSTR and addr == 0:
                binary.seek(offset)
                for j in range(0, size, 4):
                    word = binary.read(4)
                    if len(word) != 4:
                        raise LoaderError(
                            f"Could not populate memory from section: {addr}: "
                            f"bytes read={j + len(word)}, section header size={size}"
                        )
                    memory.access(addr + j, int.from_bytes(word, "little"), False, True)
                return size
    return 0
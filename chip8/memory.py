"""Memory model for the CHIP-8 virtual machine."""

import logging
from typing import Iterable

from .errors import ProgramTooLarge

logger = logging.getLogger(__name__)

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START

# Sprites for the hex digits 0-F, five bytes each, stored from address 0.
FONT_SPRITE_SIZE = 5
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
FONT_END = len(FONTSET)


class Memory:
    """Flat byte-addressed memory with the font preloaded.

    Every access wraps its address into the 4 KiB address space, so a
    program steering the index register past the end reads from the start
    of memory instead of failing.
    """

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)
        self._data[:FONT_END] = FONTSET

    def _wrap(self, addr: int) -> int:
        return addr % self.size

    def read(self, addr: int) -> int:
        """Read a byte from memory address."""
        return self._data[self._wrap(addr)]

    def write(self, addr: int, value: int) -> None:
        """Write the low 8 bits of value to memory address."""
        self._data[self._wrap(addr)] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word starting at addr."""
        return (self.read(addr) << 8) | self.read(addr + 1)

    def read_block(self, addr: int, length: int) -> bytes:
        """Read length bytes starting at addr, wrapping at the end."""
        return bytes(self.read(addr + offset) for offset in range(length))

    def write_block(self, addr: int, values: Iterable[int]) -> None:
        """Write consecutive bytes starting at addr, wrapping at the end."""
        for offset, value in enumerate(values):
            self.write(addr + offset, value)

    def load_program(self, data: bytes, offset: int = PROGRAM_START) -> None:
        """Copy a program image into memory at offset.

        The whole image is checked before anything is written, so a rejected
        image leaves memory untouched.
        """
        available = self.size - offset
        if len(data) > available:
            raise ProgramTooLarge(
                f"Program of {len(data)} bytes exceeds the {available} bytes "
                f"available at 0x{offset:03X}",
                addr=offset,
            )
        self._data[offset:offset + len(data)] = bytes(data)
        logger.info("Loaded %d byte program at 0x%03X", len(data), offset)

    def clear(self) -> None:
        """Restore the font and zero the rest of memory."""
        self._data[:FONT_END] = FONTSET
        self._data[FONT_END:] = bytes(self.size - FONT_END)

    def get_watched(self, addresses: list[int]) -> dict[str, int]:
        """Get values at watched addresses as string-keyed dict."""
        result = {}
        for addr in addresses:
            if 0 <= addr < self.size:
                result[str(addr)] = self._data[addr]
        return result

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)

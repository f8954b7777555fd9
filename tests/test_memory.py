"""Tests for the Memory module."""

import pytest
from chip8.memory import Memory, FONTSET, MAX_PROGRAM_SIZE
from chip8.errors import ProgramTooLarge, LoadError


class TestMemory:
    """Memory module tests."""

    def test_font_preloaded(self):
        """Font occupies the first 80 bytes, the rest is zero."""
        mem = Memory()
        assert mem.read_block(0, 80) == FONTSET
        assert mem.read_block(80, 16) == bytes(16)

    def test_write_and_read(self):
        """Can write and read back values."""
        mem = Memory()
        mem.write(0x300, 42)
        assert mem.read(0x300) == 42

    def test_write_masks_to_byte(self):
        mem = Memory()
        mem.write(0x300, 0x1AB)
        assert mem.read(0x300) == 0xAB

    def test_addresses_wrap(self):
        """Addresses past the end wrap to the start."""
        mem = Memory()
        assert mem.read(4096) == mem.read(0) == 0xF0
        mem.write(4096 + 0x300, 7)
        assert mem.read(0x300) == 7

    def test_read_word_big_endian(self):
        mem = Memory()
        mem.write_block(0x200, [0x12, 0x34])
        assert mem.read_word(0x200) == 0x1234

    def test_load_program(self):
        """Program bytes land at 0x200 and the font is untouched."""
        mem = Memory()
        data = bytes(range(256)) * 2
        mem.load_program(data)
        assert mem.read_block(0x200, len(data)) == data
        assert mem.read_block(0, 80) == FONTSET

    def test_load_program_max_size(self):
        """A 3584 byte image fills memory to the last byte."""
        mem = Memory()
        mem.load_program(b"\xAA" * MAX_PROGRAM_SIZE)
        assert mem.read(4095) == 0xAA

    def test_load_program_too_large(self):
        """Oversized image is rejected and nothing is written."""
        mem = Memory()
        with pytest.raises(ProgramTooLarge):
            mem.load_program(b"\xAA" * (MAX_PROGRAM_SIZE + 1))
        assert mem.read_block(0x200, 4) == bytes(4)

    def test_too_large_is_a_load_error(self):
        mem = Memory()
        with pytest.raises(LoadError):
            mem.load_program(bytes(5000))

    def test_clear_restores_font(self):
        mem = Memory()
        mem.load_program(b"\x01\x02")
        mem.write_block(0, bytes(10))
        mem.clear()
        assert mem.read_block(0x200, 2) == bytes(2)
        assert mem.read_block(0, 80) == FONTSET

    def test_get_watched(self):
        """Get watched addresses as dict."""
        mem = Memory()
        mem.write_block(0x300, [10, 8])
        watched = mem.get_watched([0x300, 0x301, 0x302, 5000])
        assert watched == {"768": 10, "769": 8, "770": 0}

    def test_snapshot(self):
        """Snapshot returns copy of memory."""
        mem = Memory()
        snap = mem.snapshot()
        assert len(snap) == 4096
        mem.write(0x300, 1)
        assert snap[0x300] == 0

    def test_instances_do_not_share_storage(self):
        first, second = Memory(), Memory()
        first.write(0, 0)
        assert second.read(0) == 0xF0

"""Tests for the Display module."""

import pytest
from chip8.display import Display, SCREEN_SIZE
from chip8.errors import InvalidPixelIndex


class TestDisplay:
    """Framebuffer tests."""

    def test_initially_blank(self):
        display = Display()
        assert display.snapshot() == bytes(SCREEN_SIZE)
        assert display.draw_flag is False

    def test_draw_sets_pixels_msb_first(self):
        display = Display()
        collision = display.draw_sprite(0, 0, b"\xA0")
        assert collision is False
        assert display.pixel(0) == 1
        assert display.pixel(1) == 0
        assert display.pixel(2) == 1
        assert display.draw_flag is True

    def test_redraw_erases_and_collides(self):
        display = Display()
        display.draw_sprite(10, 5, b"\x80")
        assert display.draw_sprite(10, 5, b"\x80") is True
        assert display.pixel(5 * 64 + 10) == 0

    def test_collision_accumulates_over_sprite(self):
        """A collision on the first row survives non-colliding later rows."""
        display = Display()
        display.draw_sprite(0, 0, b"\x80")
        assert display.draw_sprite(0, 0, b"\x80\x80") is True
        assert display.pixel(0) == 0
        assert display.pixel(64) == 1

    def test_wraps_past_last_cell(self):
        display = Display()
        display.draw_sprite(63, 31, b"\xC0")
        assert display.pixel(SCREEN_SIZE - 1) == 1
        assert display.pixel(0) == 1

    def test_clear(self):
        display = Display()
        display.draw_sprite(0, 0, b"\xFF")
        display.draw_flag = False
        display.clear()
        assert display.snapshot() == bytes(SCREEN_SIZE)
        assert display.draw_flag is True

    def test_pixel_out_of_range(self):
        display = Display()
        with pytest.raises(InvalidPixelIndex):
            display.pixel(SCREEN_SIZE)
        with pytest.raises(InvalidPixelIndex):
            display.pixel(-1)

    def test_rows(self):
        display = Display()
        display.draw_sprite(2, 1, b"\xF0")
        rows = display.rows()
        assert len(rows) == 32
        assert all(len(row) == 64 for row in rows)
        assert rows[0] == "." * 64
        assert rows[1].startswith("..####..")

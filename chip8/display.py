"""Monochrome framebuffer for the CHIP-8 virtual machine."""

from .errors import InvalidPixelIndex

SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SCREEN_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT

# Characters used by rows() for off and on pixels.
PIXEL_CHARS = {0: ".", 1: "#"}


class Display:
    """A 64 x 32 framebuffer, one byte (0 or 1) per pixel, row-major.

    The draw flag is raised whenever the contents may have changed and is
    lowered only by the host once it has rendered the frame.
    """

    def __init__(self):
        self._cells = bytearray(SCREEN_SIZE)
        self.draw_flag = False

    def clear(self) -> None:
        """Turn every pixel off and request a redraw."""
        self._cells = bytearray(SCREEN_SIZE)
        self.draw_flag = True

    def reset(self) -> None:
        self._cells = bytearray(SCREEN_SIZE)
        self.draw_flag = False

    def draw_sprite(self, x_pos: int, y_pos: int, sprite: bytes) -> bool:
        """
        XOR an 8-pixel-wide sprite onto the framebuffer at (x_pos, y_pos).

        Each byte of sprite is one row, most significant bit leftmost. Target
        cells are computed linearly and wrapped into the framebuffer, so a
        sprite running off the right edge continues on the next row and one
        running off the bottom continues at the top.

        :param x_pos: the x coordinate of the top left corner
        :param y_pos: the y coordinate of the top left corner
        :param sprite: the sprite rows
        :return: True if any set pixel was turned off
        """
        collision = False
        for row, row_bits in enumerate(sprite):
            for col in range(8):
                if row_bits & (0x80 >> col):
                    cell = ((x_pos + col) + (y_pos + row) * SCREEN_WIDTH) % SCREEN_SIZE
                    if self._cells[cell]:
                        collision = True
                    self._cells[cell] ^= 1
        self.draw_flag = True
        return collision

    def pixel(self, index: int) -> int:
        """Return the state (0 or 1) of framebuffer cell index."""
        if not 0 <= index < SCREEN_SIZE:
            raise InvalidPixelIndex(
                f"Pixel index out of range: {index}"
            )
        return self._cells[index]

    def snapshot(self) -> bytes:
        """Return a copy of the framebuffer."""
        return bytes(self._cells)

    def rows(self) -> list[str]:
        """Render the framebuffer as one string per row."""
        return [
            "".join(
                PIXEL_CHARS[self._cells[y * SCREEN_WIDTH + x]]
                for x in range(SCREEN_WIDTH)
            )
            for y in range(SCREEN_HEIGHT)
        ]

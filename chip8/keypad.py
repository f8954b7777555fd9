"""Sixteen-key hex keypad state."""

from typing import Optional

from .errors import InvalidKeyIndex

NUM_KEYS = 16


class Keypad:
    """Pressed/released flags for keys 0x0-0xF."""

    def __init__(self):
        self._keys = [False] * NUM_KEYS

    def _check_index(self, index: int) -> None:
        if not 0 <= index < NUM_KEYS:
            raise InvalidKeyIndex(f"Key index out of range: {index}")

    def set_key(self, index: int, pressed: bool) -> None:
        self._check_index(index)
        self._keys[index] = bool(pressed)

    def toggle_key(self, index: int) -> None:
        """Flip the state of a key, as a host forwarding raw key edges does."""
        self._check_index(index)
        self._keys[index] = not self._keys[index]

    def is_pressed(self, index: int) -> bool:
        """Check a key chosen by the running program.

        Register values may exceed 0xF, only the low nibble names a key.
        """
        return self._keys[index & 0xF]

    def first_pressed(self) -> Optional[int]:
        """Return the lowest-numbered pressed key, or None."""
        for index, pressed in enumerate(self._keys):
            if pressed:
                return index
        return None

    def get_state(self) -> list[bool]:
        return list(self._keys)

    def reset(self) -> None:
        self._keys = [False] * NUM_KEYS

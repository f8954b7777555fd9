"""Shared helpers for building small programs."""

import pytest

from chip8 import Machine


def assemble(*words: int) -> bytes:
    """Pack 16-bit instruction words big-endian."""
    return b"".join(word.to_bytes(2, "big") for word in words)


@pytest.fixture
def make_machine():
    """Build a machine with the given words loaded at 0x200."""

    def _make(*words: int, seed: int = 0, strict: bool = False) -> Machine:
        machine = Machine(seed=seed, strict=strict)
        machine.load_program(assemble(*words))
        return machine

    return _make

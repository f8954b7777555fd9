"""CPU register state for the CHIP-8 virtual machine."""

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGISTERS = 16
STACK_DEPTH = 16
FLAG_REGISTER = 0xF


class CPU:
    """Registers, call stack and timers with value normalization."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.start_address = start_address

        # Registers
        self.v = bytearray(NUM_REGISTERS)
        self.index: int = 0
        self.pc: int = start_address
        self.stack: list[int] = []

        # Timers, decremented at 60 Hz by the host
        self.delay_timer: int = 0
        self.sound_timer: int = 0

    def set_v(self, register: int, value: int) -> None:
        """Set Vx, wrapping the value into a byte."""
        self.v[register] = value & 0xFF

    def set_flag(self, value: int) -> None:
        """Set VF."""
        self.v[FLAG_REGISTER] = value & 0xFF

    def set_index(self, value: int) -> None:
        """Set I with normalization to 16 bits."""
        self.index = value & 0xFFFF

    def push(self, address: int) -> None:
        """Push a return address; the stack is unchanged on overflow."""
        if len(self.stack) >= STACK_DEPTH:
            raise StackOverflow(
                f"Call stack full ({STACK_DEPTH} return addresses)"
            )
        self.stack.append(address)

    def pop(self) -> int:
        """Pop a return address."""
        if not self.stack:
            raise StackUnderflow("Return with empty call stack")
        return self.stack.pop()

    def tick_timers(self) -> None:
        """Decrement both timers by one, never below zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "pc": self.pc,
            "index": self.index,
            "v": list(self.v),
            "stack": list(self.stack),
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }

    def reset(self) -> None:
        """Reset CPU to initial state."""
        self.v = bytearray(NUM_REGISTERS)
        self.index = 0
        self.pc = self.start_address
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0

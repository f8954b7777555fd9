"""The CHIP-8 virtual machine."""

import logging
from typing import Optional

from .cpu import CPU
from .decoder import Instruction, decode
from .errors import Chip8RuntimeError
from .instructions import Peripherals, execute_instruction
from .memory import Memory

logger = logging.getLogger(__name__)


class Machine:
    """
    A CHIP-8 machine: 4 KiB of memory with the hex font at address 0,
    sixteen 8-bit registers V0-VF, a 16-bit index register I, a program
    counter starting at 0x200, a 16-entry call stack, delay and sound
    timers, a 64 x 32 framebuffer and a 16-key keypad.

    The machine does no I/O and keeps no clock. A host drives it by calling
    step() some number of times per 60 Hz period, tick_timers() once per
    period, feeding keys through set_key() and rendering the framebuffer
    whenever draw_flag is raised.

    Stack overflow and underflow are reported as faults. By default the
    faulting instruction is logged, recorded in last_fault and otherwise
    ignored; with strict=True the fault is raised from step().
    """

    def __init__(self, seed: Optional[int] = None, strict: bool = False):
        self.strict = strict
        self.cpu = CPU()
        self.memory = Memory()
        self.io = Peripherals(seed)
        self.last_fault: Optional[Chip8RuntimeError] = None

    def reset(self) -> None:
        """Return to power-on state with a freshly written font."""
        self.cpu.reset()
        self.memory.clear()
        self.io.reset()
        self.last_fault = None

    def load_program(self, data: bytes) -> None:
        """Copy a program image to 0x200. Oversized images are rejected whole."""
        self.memory.load_program(data)

    def step(self) -> Instruction:
        """Fetch, decode and execute one instruction.

        Returns:
            The decoded instruction that was executed
        """
        self.last_fault = None
        addr = self.cpu.pc
        instr = decode(self.memory.read_word(addr), addr)
        self.cpu.pc = (addr + 2) & 0xFFF

        if not instr.is_known:
            logger.debug("Ignoring unknown opcode %04X at 0x%03X", instr.word, addr)
            return instr

        logger.debug("0x%03X: %04X %s", addr, instr.word, instr.text)
        try:
            new_pc = execute_instruction(instr, self.cpu, self.memory, self.io)
        except Chip8RuntimeError as e:
            e.addr = addr
            e.word = instr.word
            if self.strict:
                raise
            logger.warning("%s at 0x%03X (%s), ignored", e.message, addr, instr.text)
            self.last_fault = e
            return instr

        if new_pc is not None:
            self.cpu.pc = new_pc
        return instr

    def tick_timers(self) -> None:
        """Decrement delay and sound timers; call at 60 Hz."""
        self.cpu.tick_timers()

    def set_key(self, index: int, pressed: bool) -> None:
        self.io.keypad.set_key(index, pressed)

    def toggle_key(self, index: int) -> None:
        self.io.keypad.toggle_key(index)

    @property
    def draw_flag(self) -> bool:
        """True when the framebuffer changed since the host last cleared it."""
        return self.io.display.draw_flag

    def clear_draw_flag(self) -> None:
        self.io.display.draw_flag = False

    def set_draw_flag(self, value: bool) -> None:
        self.io.display.draw_flag = bool(value)

    def pixel(self, index: int) -> int:
        return self.io.display.pixel(index)

    def framebuffer(self) -> bytes:
        return self.io.display.snapshot()

    def rows(self) -> list[str]:
        return self.io.display.rows()

    def read_memory(self, addr: int, length: int = 1) -> bytes:
        return self.memory.read_block(addr, length)

    def get_state(self) -> dict:
        """Get registers, timers, keys and draw flag as a dictionary."""
        state = self.cpu.get_state()
        state["draw_flag"] = self.draw_flag
        state["keys"] = self.io.keypad.get_state()
        return state

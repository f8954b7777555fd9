"""CHIP-8 Virtual Machine Package."""

from .machine import Machine
from .decoder import Instruction, decode, disassemble
from .runner import run_program, load_rom, RunOptions, RunResult
from .errors import (
    Chip8Error,
    LoadError,
    ProgramTooLarge,
    Chip8RuntimeError,
    StackOverflow,
    StackUnderflow,
    ContractViolation,
    InvalidKeyIndex,
    InvalidPixelIndex,
)

__all__ = [
    "Machine",
    "Instruction",
    "decode",
    "disassemble",
    "run_program",
    "load_rom",
    "RunOptions",
    "RunResult",
    "Chip8Error",
    "LoadError",
    "ProgramTooLarge",
    "Chip8RuntimeError",
    "StackOverflow",
    "StackUnderflow",
    "ContractViolation",
    "InvalidKeyIndex",
    "InvalidPixelIndex",
]

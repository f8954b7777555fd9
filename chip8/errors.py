"""Custom exceptions for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    addr: int
    word: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "addr": self.addr,
            "word": self.word,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        addr: int = 0,
        word: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.word = word

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            addr=self.addr,
            word=self.word,
        )


class LoadError(Chip8Error):
    """Program image could not be loaded."""
    pass


class ProgramTooLarge(LoadError):
    """Program image does not fit between 0x200 and the end of memory."""
    pass


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""
    pass


class StackOverflow(Chip8RuntimeError):
    """CALL executed with a full call stack."""
    pass


class StackUnderflow(Chip8RuntimeError):
    """RET executed with an empty call stack."""
    pass


class ContractViolation(Chip8Error, ValueError):
    """Host passed an argument outside the machine's interface contract."""
    pass


class InvalidKeyIndex(ContractViolation):
    """Key index outside 0..15."""
    pass


class InvalidPixelIndex(ContractViolation):
    """Framebuffer index outside 0..2047."""
    pass

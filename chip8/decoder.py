"""Instruction decoder and disassembler for CHIP-8 machine code."""

from dataclasses import dataclass
from typing import Optional

from .memory import PROGRAM_START


# Valid mnemonics, one per instruction form
VALID_MNEMONICS = {
    "CLS",
    "RET",
    "JP",
    "CALL",
    "SE",
    "SNE",
    "SE_REG",
    "LD",
    "ADD",
    "LD_REG",
    "OR",
    "AND",
    "XOR",
    "ADD_REG",
    "SUB",
    "SHR",
    "SUBN",
    "SHL",
    "SNE_REG",
    "LD_I",
    "JP_V0",
    "RND",
    "DRW",
    "SKP",
    "SKNP",
    "LD_DT",
    "LD_KEY",
    "SET_DT",
    "SET_ST",
    "ADD_I",
    "LD_F",
    "BCD",
    "STORE",
    "LOAD",
}

# Single-nibble families resolved on the top nibble alone
_PRIMARY_MNEMONICS = {
    0x1: "JP",
    0x2: "CALL",
    0x3: "SE",
    0x4: "SNE",
    0x6: "LD",
    0x7: "ADD",
    0xA: "LD_I",
    0xB: "JP_V0",
    0xC: "RND",
    0xD: "DRW",
}

# 0x0NNN family, matched on the whole word
_SYSTEM_MNEMONICS = {
    0x00E0: "CLS",
    0x00EE: "RET",
}

# 8xyN family, matched on n
_LOGICAL_MNEMONICS = {
    0x0: "LD_REG",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD_REG",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

# ExNN family, matched on kk
_KEYBOARD_MNEMONICS = {
    0x9E: "SKP",
    0xA1: "SKNP",
}

# FxNN family, matched on kk
_MISC_MNEMONICS = {
    0x07: "LD_DT",
    0x0A: "LD_KEY",
    0x15: "SET_DT",
    0x18: "SET_ST",
    0x1E: "ADD_I",
    0x29: "LD_F",
    0x33: "BCD",
    0x55: "STORE",
    0x65: "LOAD",
}

# Assembly text per mnemonic, formatted with the instruction's fields
_TEXT_FORMATS = {
    "CLS": "CLS",
    "RET": "RET",
    "JP": "JP 0x{nnn:03X}",
    "CALL": "CALL 0x{nnn:03X}",
    "SE": "SE V{x:X}, 0x{kk:02X}",
    "SNE": "SNE V{x:X}, 0x{kk:02X}",
    "SE_REG": "SE V{x:X}, V{y:X}",
    "LD": "LD V{x:X}, 0x{kk:02X}",
    "ADD": "ADD V{x:X}, 0x{kk:02X}",
    "LD_REG": "LD V{x:X}, V{y:X}",
    "OR": "OR V{x:X}, V{y:X}",
    "AND": "AND V{x:X}, V{y:X}",
    "XOR": "XOR V{x:X}, V{y:X}",
    "ADD_REG": "ADD V{x:X}, V{y:X}",
    "SUB": "SUB V{x:X}, V{y:X}",
    "SHR": "SHR V{x:X}",
    "SUBN": "SUBN V{x:X}, V{y:X}",
    "SHL": "SHL V{x:X}",
    "SNE_REG": "SNE V{x:X}, V{y:X}",
    "LD_I": "LD I, 0x{nnn:03X}",
    "JP_V0": "JP V0, 0x{nnn:03X}",
    "RND": "RND V{x:X}, 0x{kk:02X}",
    "DRW": "DRW V{x:X}, V{y:X}, {n}",
    "SKP": "SKP V{x:X}",
    "SKNP": "SKNP V{x:X}",
    "LD_DT": "LD V{x:X}, DT",
    "LD_KEY": "LD V{x:X}, K",
    "SET_DT": "LD DT, V{x:X}",
    "SET_ST": "LD ST, V{x:X}",
    "ADD_I": "ADD I, V{x:X}",
    "LD_F": "LD F, V{x:X}",
    "BCD": "LD B, V{x:X}",
    "STORE": "LD [I], V{x:X}",
    "LOAD": "LD V{x:X}, [I]",
}


@dataclass
class Instruction:
    """Decoded instruction word with its operand fields."""
    addr: int
    word: int
    op: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int
    mnemonic: Optional[str]  # None for encodings the machine ignores
    text: str

    @property
    def is_known(self) -> bool:
        return self.mnemonic is not None

    def to_dict(self) -> dict:
        return {
            "addr": self.addr,
            "word": f"{self.word:04X}",
            "mnemonic": self.mnemonic,
            "text": self.text,
        }


def resolve_mnemonic(word: int) -> Optional[str]:
    """Map an instruction word to its mnemonic, or None if unrecognized."""
    op = (word >> 12) & 0xF
    n = word & 0xF
    kk = word & 0xFF

    if op == 0x0:
        return _SYSTEM_MNEMONICS.get(word)
    if op == 0x5:
        return "SE_REG" if n == 0 else None
    if op == 0x8:
        return _LOGICAL_MNEMONICS.get(n)
    if op == 0x9:
        return "SNE_REG" if n == 0 else None
    if op == 0xE:
        return _KEYBOARD_MNEMONICS.get(kk)
    if op == 0xF:
        return _MISC_MNEMONICS.get(kk)
    return _PRIMARY_MNEMONICS.get(op)


def decode(word: int, addr: int = 0) -> Instruction:
    """Split a 16-bit word into fields and resolve its mnemonic.

    Never raises: any word decodes, unrecognized ones with mnemonic None.

    Args:
        word: Instruction word, big-endian as fetched
        addr: Address the word was fetched from

    Returns:
        Instruction with fields x, y, n, kk, nnn filled in
    """
    word &= 0xFFFF
    fields = {
        "x": (word >> 8) & 0xF,
        "y": (word >> 4) & 0xF,
        "n": word & 0xF,
        "kk": word & 0xFF,
        "nnn": word & 0xFFF,
    }
    mnemonic = resolve_mnemonic(word)
    if mnemonic is None:
        text = f"DW 0x{word:04X}"
    else:
        text = _TEXT_FORMATS[mnemonic].format(**fields)

    return Instruction(
        addr=addr,
        word=word,
        op=(word >> 12) & 0xF,
        mnemonic=mnemonic,
        text=text,
        **fields,
    )


def disassemble(data: bytes, start_address: int = PROGRAM_START) -> list[Instruction]:
    """Decode a program image word by word.

    A trailing odd byte is decoded as the high byte of a word whose low
    byte is zero, matching what the machine fetches from cleared memory.
    """
    instructions = []
    for offset in range(0, len(data), 2):
        high = data[offset]
        low = data[offset + 1] if offset + 1 < len(data) else 0
        instructions.append(decode((high << 8) | low, start_address + offset))
    return instructions

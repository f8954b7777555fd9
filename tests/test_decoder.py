"""Tests for the instruction decoder."""

import pytest
from chip8.decoder import decode, disassemble, resolve_mnemonic, VALID_MNEMONICS


class TestDecode:
    """Field extraction and mnemonic resolution."""

    def test_fields(self):
        instr = decode(0xD12A, addr=0x204)
        assert instr.addr == 0x204
        assert instr.op == 0xD
        assert instr.x == 0x1
        assert instr.y == 0x2
        assert instr.n == 0xA
        assert instr.kk == 0x2A
        assert instr.nnn == 0x12A

    @pytest.mark.parametrize("word, mnemonic, text", [
        (0x00E0, "CLS", "CLS"),
        (0x00EE, "RET", "RET"),
        (0x1234, "JP", "JP 0x234"),
        (0x2ABC, "CALL", "CALL 0xABC"),
        (0x3A0F, "SE", "SE VA, 0x0F"),
        (0x5120, "SE_REG", "SE V1, V2"),
        (0x6BFF, "LD", "LD VB, 0xFF"),
        (0x8124, "ADD_REG", "ADD V1, V2"),
        (0x810E, "SHL", "SHL V1"),
        (0xA300, "LD_I", "LD I, 0x300"),
        (0xB200, "JP_V0", "JP V0, 0x200"),
        (0xD015, "DRW", "DRW V0, V1, 5"),
        (0xE39E, "SKP", "SKP V3"),
        (0xE3A1, "SKNP", "SKNP V3"),
        (0xF40A, "LD_KEY", "LD V4, K"),
        (0xF533, "BCD", "LD B, V5"),
        (0xF655, "STORE", "LD [I], V6"),
        (0xF765, "LOAD", "LD V7, [I]"),
    ])
    def test_known_words(self, word, mnemonic, text):
        instr = decode(word)
        assert instr.mnemonic == mnemonic
        assert instr.text == text
        assert instr.is_known

    @pytest.mark.parametrize("word", [
        0x0000,  # SYS 000
        0x0123,  # SYS 123
        0x00E1,
        0x5121,  # 5xy with non-zero low nibble
        0x9128,
        0x8128,
        0xE19F,
        0xF0FF,
        0xFFFF,
    ])
    def test_unknown_words(self, word):
        instr = decode(word)
        assert instr.mnemonic is None
        assert not instr.is_known
        assert instr.text == f"DW 0x{word:04X}"

    def test_every_word_decodes(self):
        """No 16-bit word makes the decoder raise."""
        seen = set()
        for word in range(0x10000):
            mnemonic = resolve_mnemonic(word)
            if mnemonic is not None:
                seen.add(mnemonic)
        assert seen == VALID_MNEMONICS

    def test_to_dict(self):
        assert decode(0x00E0, 0x200).to_dict() == {
            "addr": 0x200,
            "word": "00E0",
            "mnemonic": "CLS",
            "text": "CLS",
        }


class TestDisassemble:
    """Whole-image disassembly."""

    def test_addresses_advance_by_two(self):
        listing = disassemble(bytes([0x60, 0x05, 0x12, 0x02]))
        assert [instr.addr for instr in listing] == [0x200, 0x202]
        assert [instr.text for instr in listing] == ["LD V0, 0x05", "JP 0x202"]

    def test_custom_start_address(self):
        listing = disassemble(b"\x00\xE0", start_address=0x300)
        assert listing[0].addr == 0x300

    def test_odd_length_pads_low_byte(self):
        listing = disassemble(bytes([0x00, 0xE0, 0x12]))
        assert len(listing) == 2
        assert listing[1].word == 0x1200

    def test_empty(self):
        assert disassemble(b"") == []

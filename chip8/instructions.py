"""Instruction execution for the CHIP-8 virtual machine."""

import random
from typing import Callable, Optional

from .cpu import CPU
from .decoder import Instruction
from .display import Display
from .keypad import Keypad
from .memory import Memory, FONT_SPRITE_SIZE


class Peripherals:
    """Framebuffer, keypad and random source used by instructions."""

    def __init__(self, seed: Optional[int] = None):
        self.display = Display()
        self.keypad = Keypad()
        self.rng = random.Random(seed)

    def random_byte(self) -> int:
        return self.rng.randint(0, 255)

    def reset(self) -> None:
        self.display.reset()
        self.keypad.reset()


# Instruction executor type. The returned value, if any, replaces PC; None
# keeps the PC already advanced past the instruction.
InstructionExecutor = Callable[[Instruction, CPU, Memory, Peripherals], Optional[int]]


def _skip(cpu: CPU, condition: bool) -> Optional[int]:
    """Return the address after the next instruction if condition holds."""
    if condition:
        return (cpu.pc + 2) & 0xFFF
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """00E0 CLS: clear the display"""
    io.display.clear()
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """00EE RET: PC := pop()"""
    return cpu.pop()


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """1nnn JP nnn: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """2nnn CALL nnn: push(PC), PC := nnn"""
    cpu.push(cpu.pc)
    return instr.nnn


def execute_se(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """3xkk SE Vx, kk: skip if Vx == kk"""
    return _skip(cpu, cpu.v[instr.x] == instr.kk)


def execute_sne(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """4xkk SNE Vx, kk: skip if Vx != kk"""
    return _skip(cpu, cpu.v[instr.x] != instr.kk)


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """5xy0 SE Vx, Vy: skip if Vx == Vy"""
    return _skip(cpu, cpu.v[instr.x] == cpu.v[instr.y])


def execute_ld(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """6xkk LD Vx, kk: Vx := kk"""
    cpu.set_v(instr.x, instr.kk)
    return None


def execute_add(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """7xkk ADD Vx, kk: Vx := Vx + kk, VF unchanged"""
    cpu.set_v(instr.x, cpu.v[instr.x] + instr.kk)
    return None


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy0 LD Vx, Vy: Vx := Vy"""
    cpu.set_v(instr.x, cpu.v[instr.y])
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy1 OR Vx, Vy: Vx := Vx OR Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] | cpu.v[instr.y])
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy2 AND Vx, Vy: Vx := Vx AND Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] & cpu.v[instr.y])
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy3 XOR Vx, Vy: Vx := Vx XOR Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] ^ cpu.v[instr.y])
    return None


# The flag-setting forms below compute VF from the operands before anything
# is written, then store the result, then VF. With x == F the flag wins.

def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy4 ADD Vx, Vy: Vx := Vx + Vy, VF := carry"""
    total = cpu.v[instr.x] + cpu.v[instr.y]
    carry = 1 if total > 0xFF else 0
    cpu.set_v(instr.x, total)
    cpu.set_flag(carry)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy5 SUB Vx, Vy: Vx := Vx - Vy, VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    no_borrow = 1 if vx >= vy else 0
    cpu.set_v(instr.x, vx - vy)
    cpu.set_flag(no_borrow)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy6 SHR Vx: VF := bit 0 of Vx, Vx := Vx >> 1"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx >> 1)
    cpu.set_flag(vx & 0x1)
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy7 SUBN Vx, Vy: Vx := Vy - Vx, VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    no_borrow = 1 if vy >= vx else 0
    cpu.set_v(instr.x, vy - vx)
    cpu.set_flag(no_borrow)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xyE SHL Vx: VF := bit 7 of Vx, Vx := Vx << 1"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx << 1)
    cpu.set_flag(vx >> 7)
    return None


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """9xy0 SNE Vx, Vy: skip if Vx != Vy"""
    return _skip(cpu, cpu.v[instr.x] != cpu.v[instr.y])


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Annn LD I, nnn: I := nnn"""
    cpu.set_index(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Bnnn JP V0, nnn: PC := nnn + V0"""
    return (instr.nnn + cpu.v[0]) & 0xFFF


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Cxkk RND Vx, kk: Vx := random byte AND kk"""
    cpu.set_v(instr.x, io.random_byte() & instr.kk)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Dxyn DRW Vx, Vy, n: XOR n-row sprite at MEM[I] onto the display, VF := collision"""
    sprite = mem.read_block(cpu.index, instr.n)
    collision = io.display.draw_sprite(cpu.v[instr.x], cpu.v[instr.y], sprite)
    cpu.set_flag(1 if collision else 0)
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Ex9E SKP Vx: skip if key Vx is pressed"""
    return _skip(cpu, io.keypad.is_pressed(cpu.v[instr.x]))


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """ExA1 SKNP Vx: skip if key Vx is not pressed"""
    return _skip(cpu, not io.keypad.is_pressed(cpu.v[instr.x]))


def execute_ld_dt(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx07 LD Vx, DT: Vx := delay timer"""
    cpu.set_v(instr.x, cpu.delay_timer)
    return None


def execute_ld_key(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx0A LD Vx, K: wait for a key, Vx := its index

    No key pressed rewinds PC onto this instruction, so the next step
    executes it again.
    """
    key = io.keypad.first_pressed()
    if key is None:
        return (cpu.pc - 2) & 0xFFF
    cpu.set_v(instr.x, key)
    return None


def execute_set_dt(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx15 LD DT, Vx: delay timer := Vx"""
    cpu.delay_timer = cpu.v[instr.x]
    return None


def execute_set_st(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx18 LD ST, Vx: sound timer := Vx"""
    cpu.sound_timer = cpu.v[instr.x]
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx1E ADD I, Vx: I := I + Vx, VF unchanged"""
    cpu.set_index(cpu.index + cpu.v[instr.x])
    return None


def execute_ld_f(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx29 LD F, Vx: I := address of the font sprite for digit Vx"""
    cpu.set_index((cpu.v[instr.x] & 0xF) * FONT_SPRITE_SIZE)
    return None


def execute_bcd(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx33 LD B, Vx: MEM[I..I+2] := hundreds, tens, units of Vx"""
    value = cpu.v[instr.x]
    mem.write_block(cpu.index, (value // 100, (value // 10) % 10, value % 10))
    return None


def execute_store(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx55 LD [I], Vx: MEM[I+i] := Vi for i in 0..x, I unchanged"""
    mem.write_block(cpu.index, cpu.v[:instr.x + 1])
    return None


def execute_load(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx65 LD Vx, [I]: Vi := MEM[I+i] for i in 0..x, I unchanged"""
    for register, value in enumerate(mem.read_block(cpu.index, instr.x + 1)):
        cpu.set_v(register, value)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "CLS": execute_cls,
    "RET": execute_ret,
    "JP": execute_jp,
    "CALL": execute_call,
    "SE": execute_se,
    "SNE": execute_sne,
    "SE_REG": execute_se_reg,
    "LD": execute_ld,
    "ADD": execute_add,
    "LD_REG": execute_ld_reg,
    "OR": execute_or,
    "AND": execute_and,
    "XOR": execute_xor,
    "ADD_REG": execute_add_reg,
    "SUB": execute_sub,
    "SHR": execute_shr,
    "SUBN": execute_subn,
    "SHL": execute_shl,
    "SNE_REG": execute_sne_reg,
    "LD_I": execute_ld_i,
    "JP_V0": execute_jp_v0,
    "RND": execute_rnd,
    "DRW": execute_drw,
    "SKP": execute_skp,
    "SKNP": execute_sknp,
    "LD_DT": execute_ld_dt,
    "LD_KEY": execute_ld_key,
    "SET_DT": execute_set_dt,
    "SET_ST": execute_set_st,
    "ADD_I": execute_add_i,
    "LD_F": execute_ld_f,
    "BCD": execute_bcd,
    "STORE": execute_store,
    "LOAD": execute_load,
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    io: Peripherals,
) -> Optional[int]:
    """Execute a single decoded instruction.

    Unrecognized encodings are no-ops.

    Returns:
        New PC value if the instruction redirects control, None otherwise
    """
    if not instr.is_known:
        return None
    executor = INSTRUCTION_EXECUTORS.get(instr.mnemonic)
    if executor is None:
        raise ValueError(f"No executor for mnemonic: {instr.mnemonic}")
    return executor(instr, cpu, mem, io)

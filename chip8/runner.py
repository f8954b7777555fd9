"""Headless program runner with tracing for the CHIP-8 virtual machine."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .decoder import Instruction
from .errors import Chip8Error, ErrorInfo
from .machine import Machine

logger = logging.getLogger(__name__)

# Stop reasons
STOP_TICK_LIMIT = "tick_limit"
STOP_SELF_JUMP = "self_jump"
STOP_KEY_WAIT = "key_wait"
STOP_ERROR = "error"


@dataclass
class RunOptions:
    """Options for program execution."""
    max_ticks: int = 60
    steps_per_tick: int = 10
    seed: Optional[int] = None
    strict: bool = False
    keys_pressed: list[int] = field(default_factory=list)
    stop_on_key_wait: bool = True
    stop_on_self_jump: bool = True
    trace: bool = False
    trace_watch: list[int] = field(default_factory=list)
    trace_limit: int = 1000


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    addr: int
    pc: int
    index: int
    v: list[int]
    mem: dict[str, int]
    word: Optional[int] = None
    instr_text: str = ""
    fault: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "addr": self.addr,
            "word": None if self.word is None else f"{self.word:04X}",
            "instr_text": self.instr_text,
            "pc": self.pc,
            "index": self.index,
            "v": self.v,
            "mem": self.mem,
            "fault": self.fault,
        }


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    stop_reason: str
    steps_executed: int
    ticks_executed: int
    final_state: dict
    screen: list[str]
    trace_watch: list[int]
    trace: list[dict]
    faults: list[ErrorInfo] = field(default_factory=list)
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "stop_reason": self.stop_reason,
            "steps_executed": self.steps_executed,
            "ticks_executed": self.ticks_executed,
            "final_state": self.final_state,
            "screen": self.screen,
            "trace_watch": self.trace_watch,
            "trace": self.trace,
            "faults": [fault.to_dict() for fault in self.faults],
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def load_rom(path: Union[str, Path]) -> bytes:
    """Read a ROM image from disk. Size is checked when it is loaded."""
    return Path(path).read_bytes()


def _trace_row(machine: Machine, step: int, options: RunOptions,
               instr: Optional[Instruction]) -> TraceRow:
    cpu = machine.cpu
    return TraceRow(
        step=step,
        addr=instr.addr if instr else cpu.pc,
        pc=cpu.pc,
        index=cpu.index,
        v=list(cpu.v),
        mem=machine.memory.get_watched(options.trace_watch),
        word=instr.word if instr else None,
        instr_text=instr.text if instr else "",
        fault=machine.last_fault.message if machine.last_fault else None,
    )


def run_program(
    rom: bytes,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a CHIP-8 program image without a display or real-time pacing.

    Each tick executes steps_per_tick instructions and then decrements the
    timers once, the same schedule a 60 Hz host loop uses. The run ends
    after max_ticks, or earlier when the program parks itself on a jump to
    its own address or waits for a key that is never pressed.

    Args:
        rom: Program image loaded at 0x200
        options: Execution options

    Returns:
        RunResult with status, final state, rendered screen and trace
    """
    if options is None:
        options = RunOptions()

    trace_rows: list[dict] = []
    faults: list[ErrorInfo] = []
    error_info: Optional[ErrorInfo] = None
    steps_executed = 0
    ticks_executed = 0
    stop_reason = STOP_TICK_LIMIT

    machine = Machine(seed=options.seed, strict=options.strict)
    options.trace_watch.sort()

    try:
        machine.load_program(rom)
        for key in options.keys_pressed:
            machine.set_key(key, True)
    except Chip8Error as e:
        return RunResult(
            status="error",
            stop_reason=STOP_ERROR,
            steps_executed=0,
            ticks_executed=0,
            final_state=machine.get_state(),
            screen=machine.rows(),
            trace_watch=options.trace_watch,
            trace=[],
            error=e.to_error_info(),
        )

    if options.trace:
        trace_rows.append(_trace_row(machine, 0, options, None).to_dict())

    current_instr: Optional[Instruction] = None

    try:
        while ticks_executed < options.max_ticks and stop_reason == STOP_TICK_LIMIT:
            for _ in range(options.steps_per_tick):
                current_instr = machine.step()
                steps_executed += 1

                if machine.last_fault is not None:
                    fault = machine.last_fault
                    fault.step = steps_executed
                    faults.append(fault.to_error_info())

                if options.trace and len(trace_rows) < options.trace_limit:
                    trace_rows.append(
                        _trace_row(machine, steps_executed, options, current_instr).to_dict()
                    )

                parked = machine.cpu.pc == current_instr.addr
                if parked and current_instr.mnemonic == "LD_KEY" and options.stop_on_key_wait:
                    stop_reason = STOP_KEY_WAIT
                    break
                if parked and current_instr.mnemonic == "JP" and options.stop_on_self_jump:
                    stop_reason = STOP_SELF_JUMP
                    break

            machine.tick_timers()
            ticks_executed += 1

    except Chip8Error as e:
        # Attach context to error
        e.step = steps_executed + 1
        error_info = e.to_error_info()
        stop_reason = STOP_ERROR

    logger.info(
        "Run stopped (%s) after %d steps, %d ticks",
        stop_reason, steps_executed, ticks_executed,
    )

    return RunResult(
        status="ok" if error_info is None else "error",
        stop_reason=stop_reason,
        steps_executed=steps_executed,
        ticks_executed=ticks_executed,
        final_state=machine.get_state(),
        screen=machine.rows(),
        trace_watch=options.trace_watch,
        trace=trace_rows,
        faults=faults,
        error=error_info,
    )

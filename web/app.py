"""FastAPI web adapter for the CHIP-8 virtual machine."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from chip8 import run_program, disassemble, RunOptions
from chip8.memory import MAX_PROGRAM_SIZE, PROGRAM_START

logger = logging.getLogger(__name__)


# Constants
MAX_ROM_HEX_SIZE = MAX_PROGRAM_SIZE * 2 + 64  # hex digits plus whitespace slack


# Request/Response models
class RunOptionsModel(BaseModel):
    max_ticks: int = Field(default=60, ge=1, le=36000)
    steps_per_tick: int = Field(default=10, ge=1, le=1000)
    seed: Optional[int] = None
    strict: bool = False
    keys_pressed: list[int] = Field(default_factory=list)
    stop_on_key_wait: bool = True
    stop_on_self_jump: bool = True
    trace: bool = False
    trace_watch: list[int] = Field(default_factory=list)
    trace_limit: int = Field(default=1000, ge=0, le=100000)


class RunRequest(BaseModel):
    rom: str  # hex digits, whitespace ignored
    options: Optional[RunOptionsModel] = None


class DisassembleRequest(BaseModel):
    rom: str
    start_address: int = Field(default=PROGRAM_START, ge=0, le=0xFFF)


class RunResponse(BaseModel):
    status: str
    stop_reason: str
    steps_executed: int
    ticks_executed: int
    final_state: dict
    screen: list[str]
    trace_watch: list[int]
    trace: list[dict]
    faults: list[dict]
    error: Optional[dict] = None


class DisassembleResponse(BaseModel):
    instructions: list[dict]


def _decode_rom(rom_hex: str) -> bytes:
    """Convert the hex text of a request into a program image."""
    if len(rom_hex) > MAX_ROM_HEX_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"ROM text exceeds limit of {MAX_ROM_HEX_SIZE} characters",
        )
    try:
        return bytes.fromhex(rom_hex)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="ROM must be a string of hex byte pairs",
        )


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Virtual Machine",
    description="Web API for running and disassembling CHIP-8 programs",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Execute a CHIP-8 program headlessly.

    Args:
        request: Program image as hex text and execution options

    Returns:
        Execution result with final state, screen and trace
    """
    rom = _decode_rom(request.rom)
    opts = request.options or RunOptionsModel()

    for key in opts.keys_pressed:
        if not 0 <= key <= 0xF:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid key index: {key}",
            )

    run_opts = RunOptions(
        max_ticks=opts.max_ticks,
        steps_per_tick=opts.steps_per_tick,
        seed=opts.seed,
        strict=opts.strict,
        keys_pressed=opts.keys_pressed,
        stop_on_key_wait=opts.stop_on_key_wait,
        stop_on_self_jump=opts.stop_on_self_jump,
        trace=opts.trace,
        trace_watch=opts.trace_watch,
        trace_limit=opts.trace_limit,
    )

    result = run_program(rom, options=run_opts)
    return result.to_dict()


@app.post("/api/disassemble", response_model=DisassembleResponse)
async def disassemble_code(request: DisassembleRequest):
    """Decode a CHIP-8 program image into assembly text."""
    rom = _decode_rom(request.rom)
    return {
        "instructions": [
            instr.to_dict() for instr in disassemble(rom, request.start_address)
        ],
    }


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8080)

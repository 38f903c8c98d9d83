"""FastAPI web adapter for the CHIP-8 emulator."""

import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional

from chip8 import run_program, RunOptions, disassemble
from chip8.constants import MAX_PROGRAM_SIZE, PROGRAM_START_ADDRESS


# Request/Response models
class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=10000, ge=1, le=1000000)
    cycles_per_timer_tick: int = Field(default=10, ge=0, le=10000)
    trace: bool = True
    trace_registers: list[int] = Field(default_factory=list)
    trace_include_i: bool = False
    trace_include_timers: bool = False
    stop_on_self_jump: bool = True
    keys_down: list[int] = Field(default_factory=list)
    seed: Optional[int] = None
    include_display: bool = False


class RunRequest(BaseModel):
    rom: str  # hex text, whitespace ignored
    options: Optional[RunOptionsModel] = None


class DisassembleRequest(BaseModel):
    rom: str
    start_address: int = Field(default=PROGRAM_START_ADDRESS, ge=0, le=0xFFF)


class RunResponse(BaseModel):
    status: str
    steps_executed: int
    halted: bool
    final_state: dict
    trace: list[dict]
    display: Optional[list[str]] = None
    error: Optional[dict] = None


class DisassemblyRow(BaseModel):
    addr: int
    opcode: int
    mnemonic: str
    text: str


def _parse_rom(text: str) -> bytes:
    """Decode hex ROM text, rejecting malformed or oversized input."""
    cleaned = "".join(text.split())
    if cleaned.lower().startswith("0x"):
        cleaned = cleaned[2:]
    try:
        rom = bytes.fromhex(cleaned)
    except ValueError:
        raise HTTPException(status_code=400, detail="ROM must be hex text")
    if len(rom) > MAX_PROGRAM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Program size exceeds limit of {MAX_PROGRAM_SIZE} bytes",
        )
    return rom


def _check_registers(values: list[int], what: str) -> None:
    for value in values:
        if not 0 <= value <= 0xF:
            raise HTTPException(status_code=400, detail=f"Invalid {what}: {value}")


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Emulator",
    description="Web API for executing CHIP-8 programs with tracing",
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
    """Execute a CHIP-8 program.

    Args:
        request: ROM bytes as hex and execution options

    Returns:
        Execution result with trace and final state
    """
    rom = _parse_rom(request.rom)

    opts = request.options or RunOptionsModel()
    _check_registers(opts.trace_registers, "register index")
    _check_registers(opts.keys_down, "key")

    run_opts = RunOptions(
        max_steps=opts.max_steps,
        cycles_per_timer_tick=opts.cycles_per_timer_tick,
        trace=opts.trace,
        trace_registers=opts.trace_registers,
        trace_include_i=opts.trace_include_i,
        trace_include_timers=opts.trace_include_timers,
        stop_on_self_jump=opts.stop_on_self_jump,
        keys_down=opts.keys_down,
        seed=opts.seed,
        include_display=opts.include_display,
    )

    result = run_program(rom, options=run_opts)

    return result.to_dict()


@app.post("/api/disassemble", response_model=list[DisassemblyRow])
async def disassemble_code(request: DisassembleRequest):
    """Decode a ROM into one row per 16-bit word."""
    rom = _parse_rom(request.rom)
    return [
        DisassemblyRow(addr=addr, opcode=opcode, mnemonic=instr.mnemonic, text=instr.text)
        for addr, opcode, instr in disassemble(rom, request.start_address)
    ]


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8080)

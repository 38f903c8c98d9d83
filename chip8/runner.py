"""Program runner with tracing for the CHIP-8 emulator."""

import logging
from dataclasses import dataclass, field
from typing import Optional
from .machine import Chip8
from .timers import ticks_for_cycles
from .constants import TIMER_HZ
from .decoder import Instruction
from .errors import Chip8Error, ErrorInfo

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for program execution."""
    max_steps: int = 10000
    cycles_per_timer_tick: int = 10
    trace: bool = True
    trace_registers: list[int] = field(default_factory=list)
    trace_include_i: bool = False
    trace_include_timers: bool = False
    stop_on_self_jump: bool = True
    keys_down: list[int] = field(default_factory=list)
    seed: Optional[int] = None
    include_display: bool = False


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    addr: int
    opcode: int
    instr_text: str
    regs: dict[str, int]
    i: Optional[int] = None
    delay_timer: Optional[int] = None
    sound_timer: Optional[int] = None

    def to_dict(self, include_i: bool, include_timers: bool) -> dict:
        result = {
            "step": self.step,
            "addr": self.addr,
            "opcode": self.opcode,
            "instr_text": self.instr_text,
            "regs": self.regs,
        }
        if include_i:
            result["i"] = self.i
        if include_timers:
            result["delay_timer"] = self.delay_timer
            result["sound_timer"] = self.sound_timer
        return result


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    steps_executed: int
    halted: bool
    final_state: dict
    trace: list[dict]
    display: Optional[list[str]] = None
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "steps_executed": self.steps_executed,
            "halted": self.halted,
            "final_state": self.final_state,
            "trace": self.trace,
        }
        if self.display is not None:
            result["display"] = self.display
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def _is_self_jump(instr: Instruction, addr: int) -> bool:
    return instr.mnemonic == "JP" and instr.nnn == addr


def run_program(
    rom: bytes,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a CHIP-8 program.

    Args:
        rom: Raw program bytes, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with execution status, trace and final state
    """
    if options is None:
        options = RunOptions()

    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    steps_executed = 0
    halted = False

    chip = Chip8(seed=options.seed)

    try:
        chip.load_program(rom)
    except Chip8Error as e:
        logger.warning("Program rejected: %s", e.message)
        return RunResult(
            status="error",
            steps_executed=0,
            halted=False,
            final_state=chip.cpu.get_state(),
            trace=[],
            error=e.to_error_info(),
        )

    for key in options.keys_down:
        chip.keypad.press(key)

    timer_ticks = 0
    cycles_per_second = options.cycles_per_timer_tick * TIMER_HZ

    try:
        while steps_executed < options.max_steps:
            addr = chip.cpu.pc
            was_waiting = chip.cpu.waiting_for_key
            instr = chip.tick()
            steps_executed += 1

            # A fresh key wait drops earlier events; re-press held keys
            if chip.cpu.waiting_for_key and not was_waiting:
                for key in options.keys_down:
                    chip.keypad.release(key)
                    chip.keypad.press(key)

            if cycles_per_second > 0:
                due = ticks_for_cycles(steps_executed, cycles_per_second)
                while timer_ticks < due:
                    chip.timer_tick()
                    timer_ticks += 1

            if options.trace:
                row = TraceRow(
                    step=steps_executed,
                    addr=addr,
                    opcode=instr.raw,
                    instr_text=instr.text,
                    regs={f"V{r:X}": chip.cpu.v[r] for r in options.trace_registers},
                    i=chip.cpu.i if options.trace_include_i else None,
                    delay_timer=chip.cpu.delay_timer if options.trace_include_timers else None,
                    sound_timer=chip.cpu.sound_timer if options.trace_include_timers else None,
                )
                trace_rows.append(row.to_dict(
                    include_i=options.trace_include_i,
                    include_timers=options.trace_include_timers,
                ))

            if options.stop_on_self_jump and _is_self_jump(instr, addr):
                halted = True
                break

    except Chip8Error as e:
        # Step of the failing instruction, which did not complete
        e.step = steps_executed + 1
        logger.warning("Runtime error at 0x%03X: %s", e.addr, e.message)
        error_info = e.to_error_info()

    logger.info("Run finished after %d steps (halted=%s)", steps_executed, halted)

    return RunResult(
        status="ok" if error_info is None else "error",
        steps_executed=steps_executed,
        halted=halted,
        final_state=chip.cpu.get_state(),
        trace=trace_rows,
        display=chip.display.to_text() if options.include_display else None,
        error=error_info,
    )

"""CHIP-8 Emulator Core Package."""

from .machine import Chip8
from .decoder import decode, disassemble, Instruction
from .runner import run_program, RunOptions, RunResult
from .timers import TimerClock
from .errors import (
    Chip8Error,
    Chip8RuntimeError,
    ProgramTooLarge,
    UnimplementedOpcode,
    StackOverflow,
    StackUnderflow,
    OutOfBoundsAddress,
)

__all__ = [
    "Chip8",
    "decode",
    "disassemble",
    "Instruction",
    "run_program",
    "RunOptions",
    "RunResult",
    "TimerClock",
    "Chip8Error",
    "Chip8RuntimeError",
    "ProgramTooLarge",
    "UnimplementedOpcode",
    "StackOverflow",
    "StackUnderflow",
    "OutOfBoundsAddress",
]

"""CHIP-8 machine: state store plus the fetch-decode-execute cycle."""

import logging
from typing import Optional
from .constants import PROGRAM_START_ADDRESS, MEMORY_SIZE
from .cpu import CPU
from .memory import Memory
from .display import Display
from .keypad import Keypad
from .decoder import decode, Instruction
from .instructions import execute_instruction, default_random_source, Peripherals, RandomSource
from .errors import Chip8Error, OutOfBoundsAddress

logger = logging.getLogger(__name__)


class Chip8:
    """A single CHIP-8 session.

    Owns all machine state; only tick() and timer_tick() mutate it
    once a program is loaded.
    """

    def __init__(self, random_byte: Optional[RandomSource] = None, seed: Optional[int] = None):
        self.cpu = CPU()
        self.memory = Memory()
        if random_byte is None:
            random_byte = default_random_source(seed)
        self.io = Peripherals(display=Display(), keypad=Keypad(), random_byte=random_byte)

    @property
    def display(self) -> Display:
        return self.io.display

    @property
    def keypad(self) -> Keypad:
        return self.io.keypad

    @property
    def framebuffer(self) -> tuple[tuple[bool, ...], ...]:
        """Read-only 64x32 grid for a renderer."""
        return self.io.display.rows()

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is running."""
        return self.cpu.sound_timer > 0

    def reset(self) -> None:
        """Return every component to its power-on state."""
        self.cpu.reset(PROGRAM_START_ADDRESS)
        self.memory.clear()
        self.io.display.clear()
        self.io.keypad.reset()

    def load_program(self, program: bytes) -> None:
        """Reset the machine and copy program into memory at 0x200."""
        program = bytes(program)
        memory = Memory()
        memory.load_program(program, PROGRAM_START_ADDRESS)
        self.reset()
        self.memory = memory
        logger.info("Loaded %d-byte program at 0x%03X", len(program), PROGRAM_START_ADDRESS)

    def fetch(self) -> int:
        """Read the big-endian opcode at PC."""
        pc = self.cpu.pc
        if pc < 0 or pc + 1 >= MEMORY_SIZE:
            raise OutOfBoundsAddress(f"Program counter out of range: 0x{pc:X}", addr=pc)
        return self.memory.read_word(pc)

    def tick(self) -> Instruction:
        """Execute one instruction.

        Returns:
            The executed instruction

        Raises:
            Chip8Error: on failure, with PC and all other state left
                as they were before the instruction

        A taken skip past the end of memory fails here; a plain
        instruction in the last word advances PC to 0x1000 and the
        next fetch fails.
        """
        pc = self.cpu.pc
        opcode = self.fetch()
        instr = decode(opcode)
        try:
            new_pc = execute_instruction(instr, self.cpu, self.memory, self.io)
        except Chip8Error as e:
            e.addr = pc
            e.opcode = opcode
            e.instr_text = instr.text
            raise

        if new_pc is not None:
            self.cpu.pc = new_pc
        else:
            self.cpu.pc = pc + 2
        logger.debug("0x%03X  %04X  %s", pc, opcode, instr.text)
        return instr

    def timer_tick(self) -> None:
        """Decrement delay and sound timers; call at 60 Hz."""
        self.cpu.timer_tick()

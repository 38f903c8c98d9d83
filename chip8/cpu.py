"""CPU state model for the CHIP-8 emulator."""

from .constants import NUM_REGISTERS, FLAG_REGISTER, STACK_SIZE, PROGRAM_START_ADDRESS
from .errors import StackOverflow, StackUnderflow


class CPU:
    """Registers, call stack and timers."""

    def __init__(self, start_address: int = PROGRAM_START_ADDRESS):
        self.v: list[int] = [0] * NUM_REGISTERS
        self.i: int = 0
        self.pc: int = start_address
        self.stack: list[int] = [0] * STACK_SIZE
        self.sp: int = 0
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self.waiting_for_key: bool = False

    def set_v(self, x: int, value: int) -> None:
        """Set Vx, wrapping to 8 bits."""
        self.v[x] = value & 0xFF

    def set_flag(self, value: int) -> None:
        """Set VF to 0 or 1."""
        self.v[FLAG_REGISTER] = 1 if value else 0

    def push(self, addr: int) -> None:
        """Push a return address."""
        if self.sp >= STACK_SIZE:
            raise StackOverflow(f"Call stack overflow (depth {STACK_SIZE})", addr=self.pc)
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self) -> int:
        """Pop a return address."""
        if self.sp == 0:
            raise StackUnderflow("Return with empty call stack", addr=self.pc)
        self.sp -= 1
        return self.stack[self.sp]

    def timer_tick(self) -> None:
        """Decrement both timers, floored at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "i": self.i,
            "pc": self.pc,
            "sp": self.sp,
            "stack": self.stack[:self.sp],
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }

    def reset(self, start_address: int = PROGRAM_START_ADDRESS) -> None:
        """Reset CPU to initial state."""
        self.v = [0] * NUM_REGISTERS
        self.i = 0
        self.pc = start_address
        self.stack = [0] * STACK_SIZE
        self.sp = 0
        self.delay_timer = 0
        self.sound_timer = 0
        self.waiting_for_key = False

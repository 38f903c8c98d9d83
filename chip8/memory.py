"""Memory model for the CHIP-8 emulator."""

from typing import Iterable
from .constants import (
    MEMORY_SIZE,
    PROGRAM_START_ADDRESS,
    FONT_ADDRESS,
    FONT_SPRITES,
)
from .errors import OutOfBoundsAddress, ProgramTooLarge


class Memory:
    """Byte-addressed 4 KiB memory with the hex font resident below 0x200."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)
        self.load_font()

    def load_font(self) -> None:
        """Copy the built-in 4x5 hex font into the reserved area."""
        self._data[FONT_ADDRESS:FONT_ADDRESS + len(FONT_SPRITES)] = FONT_SPRITES

    def check_range(self, addr: int, length: int = 1) -> None:
        """Check that [addr, addr + length) lies inside memory."""
        if addr < 0 or addr + length > self.size:
            if length == 1:
                raise OutOfBoundsAddress(f"Memory address out of range: 0x{addr:X}")
            raise OutOfBoundsAddress(
                f"Memory range out of bounds: 0x{addr:X}..0x{addr + length - 1:X}"
            )

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self.check_range(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write byte (masked to 8 bits) to memory address."""
        self.check_range(addr)
        self._data[addr] = value & 0xFF

    def read_block(self, addr: int, length: int) -> bytes:
        """Read length bytes starting at addr."""
        self.check_range(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_block(self, addr: int, values: Iterable[int]) -> None:
        """Write a sequence of bytes starting at addr, all or nothing."""
        block = bytes(v & 0xFF for v in values)
        self.check_range(addr, len(block))
        self._data[addr:addr + len(block)] = block

    def read_word(self, addr: int) -> int:
        """Read big-endian 16-bit word at addr."""
        self.check_range(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    def load_program(self, program: bytes, start_address: int = PROGRAM_START_ADDRESS) -> None:
        """Copy program bytes verbatim into memory at start_address."""
        limit = self.size - start_address
        if len(program) > limit:
            raise ProgramTooLarge(
                f"Program is {len(program)} bytes, maximum is {limit}",
                addr=start_address,
            )
        self._data[start_address:start_address + len(program)] = program

    def clear(self) -> None:
        """Zero all memory and reload the font."""
        self._data = bytearray(self.size)
        self.load_font()

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)

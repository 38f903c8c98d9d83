"""Custom exceptions for the CHIP-8 emulator."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    addr: int
    opcode: Optional[int] = None
    instr_text: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "addr": self.addr,
            "opcode": self.opcode,
            "instr_text": self.instr_text,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        addr: int = 0,
        opcode: Optional[int] = None,
        instr_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.opcode = opcode
        self.instr_text = instr_text

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            addr=self.addr,
            opcode=self.opcode,
            instr_text=self.instr_text,
        )


class ProgramLoadError(Chip8Error):
    """Error while placing a program into memory."""
    pass


class ProgramTooLarge(ProgramLoadError):
    """Program does not fit between 0x200 and the end of memory."""
    pass


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""
    pass


class UnimplementedOpcode(Chip8RuntimeError):
    """Opcode decoded to no known instruction."""

    def __init__(self, opcode: int, **kwargs):
        super().__init__(f"Unimplemented opcode: 0x{opcode:04X}", opcode=opcode, **kwargs)


class StackOverflow(Chip8RuntimeError):
    """CALL with all 16 stack slots in use."""
    pass


class StackUnderflow(Chip8RuntimeError):
    """RET with an empty stack."""
    pass


class OutOfBoundsAddress(Chip8RuntimeError):
    """Memory address (pc or i) outside [0, 4095]."""
    pass

"""Opcode decoder for the CHIP-8 instruction set."""

from dataclasses import dataclass
from typing import Optional
from .constants import PROGRAM_START_ADDRESS


# Closed instruction set, one mnemonic per variant
VALID_MNEMONICS = {
    "CLS",
    "RET",
    "SYS",
    "JP",
    "CALL",
    "SE_BYTE",
    "SNE_BYTE",
    "SE_REG",
    "LD_BYTE",
    "ADD_BYTE",
    "LD_REG",
    "OR",
    "AND",
    "XOR",
    "ADD_REG",
    "SUB",
    "SHR",
    "SUBN",
    "SHL",
    "SNE_REG",
    "LD_I",
    "JP_V0",
    "RND",
    "DRW",
    "SKP",
    "SKNP",
    "LD_VX_DT",
    "LD_VX_K",
    "LD_DT_VX",
    "LD_ST_VX",
    "ADD_I",
    "LD_F",
    "LD_B",
    "LD_MEM_VX",
    "LD_VX_MEM",
}

UNKNOWN = "UNKNOWN"

# 0x8xyN sub-family keyed by the last nibble
_ALU_BY_N4 = {
    0x0: "LD_REG",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD_REG",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

# 0xFxNN sub-family keyed by the trailing byte
_MISC_BY_KK = {
    0x07: "LD_VX_DT",
    0x0A: "LD_VX_K",
    0x15: "LD_DT_VX",
    0x18: "LD_ST_VX",
    0x1E: "ADD_I",
    0x29: "LD_F",
    0x33: "LD_B",
    0x55: "LD_MEM_VX",
    0x65: "LD_VX_MEM",
}

# Assembly text templates
_TEMPLATES = {
    "CLS": "CLS",
    "RET": "RET",
    "SYS": "SYS 0x{nnn:03X}",
    "JP": "JP 0x{nnn:03X}",
    "CALL": "CALL 0x{nnn:03X}",
    "SE_BYTE": "SE V{x:X}, 0x{kk:02X}",
    "SNE_BYTE": "SNE V{x:X}, 0x{kk:02X}",
    "SE_REG": "SE V{x:X}, V{y:X}",
    "LD_BYTE": "LD V{x:X}, 0x{kk:02X}",
    "ADD_BYTE": "ADD V{x:X}, 0x{kk:02X}",
    "LD_REG": "LD V{x:X}, V{y:X}",
    "OR": "OR V{x:X}, V{y:X}",
    "AND": "AND V{x:X}, V{y:X}",
    "XOR": "XOR V{x:X}, V{y:X}",
    "ADD_REG": "ADD V{x:X}, V{y:X}",
    "SUB": "SUB V{x:X}, V{y:X}",
    "SHR": "SHR V{x:X}",
    "SUBN": "SUBN V{x:X}, V{y:X}",
    "SHL": "SHL V{x:X}",
    "SNE_REG": "SNE V{x:X}, V{y:X}",
    "LD_I": "LD I, 0x{nnn:03X}",
    "JP_V0": "JP V0, 0x{nnn:03X}",
    "RND": "RND V{x:X}, 0x{kk:02X}",
    "DRW": "DRW V{x:X}, V{y:X}, {n}",
    "SKP": "SKP V{x:X}",
    "SKNP": "SKNP V{x:X}",
    "LD_VX_DT": "LD V{x:X}, DT",
    "LD_VX_K": "LD V{x:X}, K",
    "LD_DT_VX": "LD DT, V{x:X}",
    "LD_ST_VX": "LD ST, V{x:X}",
    "ADD_I": "ADD I, V{x:X}",
    "LD_F": "LD F, V{x:X}",
    "LD_B": "LD B, V{x:X}",
    "LD_MEM_VX": "LD [I], V{x:X}",
    "LD_VX_MEM": "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class Instruction:
    """Decoded instruction; only the operands its family uses are set."""
    mnemonic: str
    raw: int
    x: Optional[int] = None
    y: Optional[int] = None
    n: Optional[int] = None
    kk: Optional[int] = None
    nnn: Optional[int] = None

    @property
    def text(self) -> str:
        """Assembly text for tracing and disassembly."""
        template = _TEMPLATES.get(self.mnemonic)
        if template is None:
            return f"DW 0x{self.raw:04X}"
        return template.format(x=self.x, y=self.y, n=self.n, kk=self.kk, nnn=self.nnn)


def decode(opcode: int) -> Instruction:
    """Decode a 16-bit opcode into an Instruction.

    Never fails: bit patterns outside the instruction set decode to
    an UNKNOWN instruction carrying the raw value.
    """
    opcode &= 0xFFFF
    n1 = (opcode & 0xF000) >> 12
    x = (opcode & 0x0F00) >> 8
    y = (opcode & 0x00F0) >> 4
    n4 = opcode & 0x000F
    kk = opcode & 0x00FF
    nnn = opcode & 0x0FFF

    if n1 == 0x0:
        if opcode == 0x00E0:
            return Instruction("CLS", opcode)
        if opcode == 0x00EE:
            return Instruction("RET", opcode)
        return Instruction("SYS", opcode, nnn=nnn)
    if n1 == 0x1:
        return Instruction("JP", opcode, nnn=nnn)
    if n1 == 0x2:
        return Instruction("CALL", opcode, nnn=nnn)
    if n1 == 0x3:
        return Instruction("SE_BYTE", opcode, x=x, kk=kk)
    if n1 == 0x4:
        return Instruction("SNE_BYTE", opcode, x=x, kk=kk)
    if n1 == 0x5:
        if n4 == 0:
            return Instruction("SE_REG", opcode, x=x, y=y)
        return Instruction(UNKNOWN, opcode)
    if n1 == 0x6:
        return Instruction("LD_BYTE", opcode, x=x, kk=kk)
    if n1 == 0x7:
        return Instruction("ADD_BYTE", opcode, x=x, kk=kk)
    if n1 == 0x8:
        mnemonic = _ALU_BY_N4.get(n4)
        if mnemonic is None:
            return Instruction(UNKNOWN, opcode)
        return Instruction(mnemonic, opcode, x=x, y=y)
    if n1 == 0x9:
        if n4 == 0:
            return Instruction("SNE_REG", opcode, x=x, y=y)
        return Instruction(UNKNOWN, opcode)
    if n1 == 0xA:
        return Instruction("LD_I", opcode, nnn=nnn)
    if n1 == 0xB:
        return Instruction("JP_V0", opcode, nnn=nnn)
    if n1 == 0xC:
        return Instruction("RND", opcode, x=x, kk=kk)
    if n1 == 0xD:
        return Instruction("DRW", opcode, x=x, y=y, n=n4)
    if n1 == 0xE:
        if kk == 0x9E:
            return Instruction("SKP", opcode, x=x)
        if kk == 0xA1:
            return Instruction("SKNP", opcode, x=x)
        return Instruction(UNKNOWN, opcode)
    # n1 == 0xF
    mnemonic = _MISC_BY_KK.get(kk)
    if mnemonic is None:
        return Instruction(UNKNOWN, opcode)
    return Instruction(mnemonic, opcode, x=x)


def disassemble(
    data: bytes,
    start_address: int = PROGRAM_START_ADDRESS,
) -> list[tuple[int, int, Instruction]]:
    """Decode a byte sequence into (address, opcode, instruction) rows.

    A trailing odd byte is reported as UNKNOWN with the byte in the high half.
    """
    rows = []
    for offset in range(0, len(data), 2):
        if offset + 1 < len(data):
            opcode = (data[offset] << 8) | data[offset + 1]
            instr = decode(opcode)
        else:
            opcode = data[offset] << 8
            instr = Instruction(UNKNOWN, opcode)
        rows.append((start_address + offset, opcode, instr))
    return rows

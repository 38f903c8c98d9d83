"""Instruction execution for the CHIP-8 emulator."""

import random
from functools import partial
from dataclasses import dataclass, field
from typing import Callable, Optional
from .cpu import CPU
from .memory import Memory
from .display import Display
from .keypad import Keypad
from .decoder import Instruction, UNKNOWN
from .constants import FONT_ADDRESS, FONT_GLYPH_SIZE, MEMORY_SIZE
from .errors import UnimplementedOpcode, OutOfBoundsAddress


RandomSource = Callable[[], int]


def default_random_source(seed: Optional[int] = None) -> RandomSource:
    """Uniform byte source, reproducible when seeded."""
    return partial(random.Random(seed).randrange, 256)


@dataclass
class Peripherals:
    """Devices an instruction may touch besides CPU and memory."""
    display: Display = field(default_factory=Display)
    keypad: Keypad = field(default_factory=Keypad)
    random_byte: RandomSource = field(default_factory=default_random_source)


# Instruction executor type: returns explicit next pc, or None for pc + 2
InstructionExecutor = Callable[[Instruction, CPU, Memory, Peripherals], Optional[int]]


def _check_address(addr: int) -> None:
    if addr < 0 or addr >= MEMORY_SIZE:
        raise OutOfBoundsAddress(f"Address out of range: 0x{addr:X}")


def _skip(cpu: CPU, condition: bool) -> Optional[int]:
    """Next pc for a skip instruction: pc + 4 if condition holds."""
    if condition:
        target = cpu.pc + 4
        _check_address(target)
        return target
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """00E0 CLS: clear display"""
    io.display.clear()
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """00EE RET: PC := pop()"""
    return cpu.pop()


def execute_sys(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """0nnn SYS: ignored"""
    return None


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """1nnn JP: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """2nnn CALL: push return address, PC := nnn"""
    cpu.push(cpu.pc + 2)
    return instr.nnn


def execute_se_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """3xkk SE Vx, kk: skip if Vx == kk"""
    return _skip(cpu, cpu.v[instr.x] == instr.kk)


def execute_sne_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """4xkk SNE Vx, kk: skip if Vx != kk"""
    return _skip(cpu, cpu.v[instr.x] != instr.kk)


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """5xy0 SE Vx, Vy: skip if Vx == Vy"""
    return _skip(cpu, cpu.v[instr.x] == cpu.v[instr.y])


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """9xy0 SNE Vx, Vy: skip if Vx != Vy"""
    return _skip(cpu, cpu.v[instr.x] != cpu.v[instr.y])


def execute_ld_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """6xkk LD Vx, kk"""
    cpu.set_v(instr.x, instr.kk)
    return None


def execute_add_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """7xkk ADD Vx, kk: no carry flag"""
    cpu.set_v(instr.x, cpu.v[instr.x] + instr.kk)
    return None


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy0 LD Vx, Vy"""
    cpu.set_v(instr.x, cpu.v[instr.y])
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy1 OR Vx, Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] | cpu.v[instr.y])
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy2 AND Vx, Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] & cpu.v[instr.y])
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy3 XOR Vx, Vy"""
    cpu.set_v(instr.x, cpu.v[instr.x] ^ cpu.v[instr.y])
    return None


# For the flag-setting ALU ops the flag is written last, so VF as
# destination ends up holding the flag.

def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy4 ADD Vx, Vy: VF := carry"""
    total = cpu.v[instr.x] + cpu.v[instr.y]
    cpu.set_v(instr.x, total)
    cpu.set_flag(total > 0xFF)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy5 SUB Vx, Vy: VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vx - vy)
    cpu.set_flag(vx >= vy)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy6 SHR Vx: VF := LSB before shift"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx >> 1)
    cpu.set_flag(vx & 0x01)
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xy7 SUBN Vx, Vy: Vx := Vy - Vx, VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vy - vx)
    cpu.set_flag(vy >= vx)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """8xyE SHL Vx: VF := MSB before shift"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx << 1)
    cpu.set_flag(vx & 0x80)
    return None


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Annn LD I, nnn"""
    cpu.i = instr.nnn
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Bnnn JP V0, nnn: PC := nnn + V0"""
    target = instr.nnn + cpu.v[0]
    _check_address(target)
    return target


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Cxkk RND Vx, kk: Vx := random byte AND kk"""
    cpu.set_v(instr.x, io.random_byte() & instr.kk)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Dxyn DRW Vx, Vy, n: XOR sprite from MEM[I..I+n] at (Vx, Vy), VF := collision"""
    rows = mem.read_block(cpu.i, instr.n)
    collision = io.display.draw_sprite(cpu.v[instr.x], cpu.v[instr.y], rows)
    cpu.set_flag(collision)
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Ex9E SKP Vx: skip if key Vx is down"""
    return _skip(cpu, io.keypad.is_pressed(cpu.v[instr.x]))


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """ExA1 SKNP Vx: skip if key Vx is up"""
    return _skip(cpu, not io.keypad.is_pressed(cpu.v[instr.x]))


def execute_ld_vx_dt(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx07 LD Vx, DT"""
    cpu.set_v(instr.x, cpu.delay_timer)
    return None


def execute_ld_vx_k(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx0A LD Vx, K: wait for a key press, then Vx := key.

    Stays on the same instruction until a press event arrives. Events
    queued before the wait began are discarded.
    """
    if not cpu.waiting_for_key:
        io.keypad.clear_events()
        cpu.waiting_for_key = True
        return cpu.pc
    key = io.keypad.next_event()
    if key is None:
        return cpu.pc
    cpu.set_v(instr.x, key)
    cpu.waiting_for_key = False
    return None


def execute_ld_dt_vx(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx15 LD DT, Vx"""
    cpu.delay_timer = cpu.v[instr.x]
    return None


def execute_ld_st_vx(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx18 LD ST, Vx"""
    cpu.sound_timer = cpu.v[instr.x]
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx1E ADD I, Vx"""
    target = cpu.i + cpu.v[instr.x]
    _check_address(target)
    cpu.i = target
    return None


def execute_ld_f(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx29 LD F, Vx: I := address of hex glyph for Vx"""
    cpu.i = FONT_ADDRESS + FONT_GLYPH_SIZE * (cpu.v[instr.x] & 0xF)
    return None


def execute_ld_b(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx33 LD B, Vx: MEM[I..I+2] := hundreds, tens, ones of Vx"""
    vx = cpu.v[instr.x]
    mem.write_block(cpu.i, (vx // 100, (vx // 10) % 10, vx % 10))
    return None


def execute_ld_mem_vx(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx55 LD [I], Vx: MEM[I..I+x] := V0..Vx"""
    mem.write_block(cpu.i, cpu.v[:instr.x + 1])
    return None


def execute_ld_vx_mem(instr: Instruction, cpu: CPU, mem: Memory, io: Peripherals) -> Optional[int]:
    """Fx65 LD Vx, [I]: V0..Vx := MEM[I..I+x]"""
    values = mem.read_block(cpu.i, instr.x + 1)
    for reg, value in enumerate(values):
        cpu.set_v(reg, value)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "CLS": execute_cls,
    "RET": execute_ret,
    "SYS": execute_sys,
    "JP": execute_jp,
    "CALL": execute_call,
    "SE_BYTE": execute_se_byte,
    "SNE_BYTE": execute_sne_byte,
    "SE_REG": execute_se_reg,
    "LD_BYTE": execute_ld_byte,
    "ADD_BYTE": execute_add_byte,
    "LD_REG": execute_ld_reg,
    "OR": execute_or,
    "AND": execute_and,
    "XOR": execute_xor,
    "ADD_REG": execute_add_reg,
    "SUB": execute_sub,
    "SHR": execute_shr,
    "SUBN": execute_subn,
    "SHL": execute_shl,
    "SNE_REG": execute_sne_reg,
    "LD_I": execute_ld_i,
    "JP_V0": execute_jp_v0,
    "RND": execute_rnd,
    "DRW": execute_drw,
    "SKP": execute_skp,
    "SKNP": execute_sknp,
    "LD_VX_DT": execute_ld_vx_dt,
    "LD_VX_K": execute_ld_vx_k,
    "LD_DT_VX": execute_ld_dt_vx,
    "LD_ST_VX": execute_ld_st_vx,
    "ADD_I": execute_add_i,
    "LD_F": execute_ld_f,
    "LD_B": execute_ld_b,
    "LD_MEM_VX": execute_ld_mem_vx,
    "LD_VX_MEM": execute_ld_vx_mem,
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    io: Peripherals,
) -> Optional[int]:
    """Execute a single instruction.

    Returns:
        New PC value if the instruction sets it, None for the normal PC + 2
    """
    if instr.mnemonic == UNKNOWN:
        raise UnimplementedOpcode(instr.raw, addr=cpu.pc)
    executor = INSTRUCTION_EXECUTORS.get(instr.mnemonic)
    if executor is None:
        raise UnimplementedOpcode(instr.raw, addr=cpu.pc)
    return executor(instr, cpu, mem, io)

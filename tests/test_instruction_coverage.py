"""Ensure every mnemonic has a dedicated behavioral test."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from chip8 import run_program, RunOptions
from chip8.decoder import VALID_MNEMONICS


def expect_reg(reg: int, value: int) -> Callable:
    def _check(result):
        assert result.final_state["v"][reg] == value

    return _check


def expect_regs(values: list[int]) -> Callable:
    def _check(result):
        assert result.final_state["v"][:len(values)] == values

    return _check


def expect_i(value: int) -> Callable:
    def _check(result):
        assert result.final_state["i"] == value

    return _check


def expect_pc(value: int) -> Callable:
    def _check(result):
        assert result.final_state["pc"] == value

    return _check


def expect_timers(delay: int, sound: int) -> Callable:
    def _check(result):
        assert result.final_state["delay_timer"] == delay
        assert result.final_state["sound_timer"] == sound

    return _check


def expect_lit_rows(rows: list[str]) -> Callable:
    def _check(result):
        assert result.display[:len(rows)] == rows

    return _check


def rom(*opcodes: int) -> bytes:
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@dataclass
class InstructionCase:
    mnemonic: str
    program: bytes
    checker: Callable
    options_kwargs: dict = field(default_factory=dict)


# Programs end in a jump to self unless noted
INSTRUCTION_CASES = [
    InstructionCase(
        "CLS",
        rom(0xF029, 0xD005, 0x00E0, 0x1206),
        expect_lit_rows(["." * 64]),
        options_kwargs={"include_display": True},
    ),
    InstructionCase("RET", rom(0x2206, 0x6101, 0x1204, 0x00EE), expect_regs([0, 1])),
    InstructionCase("SYS", rom(0x0ABC, 0x6003, 0x1204), expect_reg(0, 3)),
    InstructionCase("JP", rom(0x1204, 0x6009, 0x1204), expect_reg(0, 0)),
    InstructionCase("CALL", rom(0x2204, 0x0000, 0x1204), expect_pc(0x204)),
    InstructionCase("SE_BYTE", rom(0x6005, 0x3005, 0x6101, 0x1206), expect_reg(1, 0)),
    InstructionCase("SNE_BYTE", rom(0x6005, 0x4006, 0x6101, 0x1206), expect_reg(1, 0)),
    InstructionCase("SE_REG", rom(0x6005, 0x6105, 0x5010, 0x6201, 0x1208), expect_reg(2, 0)),
    InstructionCase("SNE_REG", rom(0x6005, 0x6106, 0x9010, 0x6201, 0x1208), expect_reg(2, 0)),
    InstructionCase("LD_BYTE", rom(0x6A7F, 0x1202), expect_reg(0xA, 0x7F)),
    InstructionCase("ADD_BYTE", rom(0x60FF, 0x7002, 0x1204), expect_regs([1])),
    InstructionCase("LD_REG", rom(0x6109, 0x8010, 0x1204), expect_reg(0, 9)),
    InstructionCase("OR", rom(0x600C, 0x610A, 0x8011, 0x1206), expect_reg(0, 0xE)),
    InstructionCase("AND", rom(0x600C, 0x610A, 0x8012, 0x1206), expect_reg(0, 0x8)),
    InstructionCase("XOR", rom(0x600C, 0x610A, 0x8013, 0x1206), expect_reg(0, 0x6)),
    InstructionCase("ADD_REG", rom(0x60FE, 0x6102, 0x8014, 0x1206), expect_reg(0xF, 1)),
    InstructionCase("SUB", rom(0x6005, 0x6103, 0x8015, 0x1206), expect_regs([2, 3])),
    InstructionCase("SHR", rom(0x6005, 0x8006, 0x1204), expect_reg(0xF, 1)),
    InstructionCase("SUBN", rom(0x6003, 0x6105, 0x8017, 0x1206), expect_regs([2, 5])),
    InstructionCase("SHL", rom(0x6081, 0x800E, 0x1204), expect_regs([2])),
    InstructionCase("LD_I", rom(0xA2F0, 0x1202), expect_i(0x2F0)),
    InstructionCase("JP_V0", rom(0x6002, 0xB204, 0x1204, 0x1206), expect_pc(0x206)),
    InstructionCase("RND", rom(0xC000, 0x1202), expect_reg(0, 0), options_kwargs={"seed": 3}),
    InstructionCase(
        "DRW",
        rom(0xF029, 0xD005, 0x1204),
        expect_lit_rows(["####" + "." * 60]),
        options_kwargs={"include_display": True},
    ),
    InstructionCase("SKP", rom(0x6103, 0xE19E, 0x6201, 0x1206), expect_reg(2, 0), options_kwargs={"keys_down": [3]}),
    InstructionCase("SKNP", rom(0x6103, 0xE1A1, 0x6201, 0x1206), expect_reg(2, 0)),
    InstructionCase(
        "LD_VX_DT",
        rom(0x6014, 0xF015, 0xF107, 0x1206),
        expect_reg(1, 20),
        options_kwargs={"cycles_per_timer_tick": 0},
    ),
    InstructionCase("LD_VX_K", rom(0xF30A, 0x1202), expect_reg(3, 7), options_kwargs={"keys_down": [7]}),
    InstructionCase(
        "LD_DT_VX",
        rom(0x6007, 0xF015, 0x1204),
        expect_timers(7, 0),
        options_kwargs={"cycles_per_timer_tick": 0},
    ),
    InstructionCase(
        "LD_ST_VX",
        rom(0x6007, 0xF018, 0x1204),
        expect_timers(0, 7),
        options_kwargs={"cycles_per_timer_tick": 0},
    ),
    InstructionCase("ADD_I", rom(0xA300, 0x6020, 0xF01E, 0x1206), expect_i(0x320)),
    InstructionCase("LD_F", rom(0x600F, 0xF029, 0x1204), expect_i(0x050 + 75)),
    InstructionCase("LD_B", rom(0x607B, 0xA300, 0xF033, 0xF265, 0x1208), expect_regs([1, 2, 3])),
    InstructionCase(
        "LD_MEM_VX",
        rom(0x6004, 0x6105, 0xA300, 0xF155, 0x6000, 0x6100, 0xF165, 0x120E),
        expect_regs([4, 5]),
    ),
    InstructionCase("LD_VX_MEM", rom(0xA050, 0xF165, 0x1204), expect_regs([0xF0, 0x90])),
]


@pytest.mark.parametrize("case", INSTRUCTION_CASES, ids=lambda case: case.mnemonic)
def test_all_instructions_have_behavioral_tests(case: InstructionCase):
    options = RunOptions(**case.options_kwargs)
    result = run_program(case.program, options=options)
    assert result.status == "ok"
    case.checker(result)


def test_instruction_case_coverage_matches_valid_mnemonics():
    covered = {case.mnemonic for case in INSTRUCTION_CASES}
    assert covered == VALID_MNEMONICS

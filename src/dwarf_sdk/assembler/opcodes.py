"""
Dwarf Instruction Set Definition
================================

This module defines the Dwarf register file and instruction set: every
mnemonic, its opcode base value and the operand form that decides how the
operand fields are packed into the 16-bit instruction word.

The Dwarf is a minimalist 16-bit RISC CPU. Every instruction is exactly one
word; the top nibble selects the major opcode, and for major opcode 0 the
second nibble selects one of the single-operand ("SO") instructions.

Operand Forms
-------------
Fields are named after the register roles in the hardware description:
rs = source/destination (bits 8-11), rt = operand (bits 4-7),
rd = destination (bits 0-3).

| Form        | Syntax          | Layout                               |
|-------------|-----------------|--------------------------------------|
| NONE        | nop             |                                      |
| REG         | brr rt          | rt:4-7                               |
| REG_REG     | mov rt, rd      | rt:4-7  rd:0-3                       |
| REG_IMM4    | sks rt, imm     | rt:4-7  imm&0xF:0-3                  |
| REG_SIMM8   | addi rs, imm    | rs:8-11 imm&0xFF:0-7                 |
| REG_UIMM8   | ldu rs, imm     | rs:8-11 (imm>>8)&0xFF:0-7            |
| REG_REG_REG | add rs, rt, rd  | rs:8-11 rt:4-7  rd:0-3               |
| IMM12       | brl addr        | (addr>>1)&0xFFF:0-11                 |
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Register File
# =============================================================================

# Canonical register names, index == register number
REGISTER_NAMES: tuple[str, ...] = tuple(f"r{i}" for i in range(16))

REGISTERS: dict[str, int] = {name: i for i, name in enumerate(REGISTER_NAMES)}


def get_register(name: str) -> Optional[int]:
    """
    Look up a register by its exact (case-sensitive) name.

    Returns:
        Register index 0-15, or None if the name is not a register
    """
    return REGISTERS.get(name)


# =============================================================================
# Operand Form Enumeration
# =============================================================================

class OperandForm(Enum):
    """
    Operand layouts of the Dwarf instruction set.

    Each form fixes how many register and immediate operands an
    instruction takes and where they land in the instruction word.
    """
    NONE = auto()         # no operands
    REG = auto()          # rt
    REG_REG = auto()      # rt, rd
    REG_IMM4 = auto()     # rt, imm4
    REG_SIMM8 = auto()    # rs, signed imm8 (low byte of value)
    REG_UIMM8 = auto()    # rs, imm8 taken from the high byte of value
    REG_REG_REG = auto()  # rs, rt, rd
    IMM12 = auto()        # word address, halved

    def __str__(self) -> str:
        return self.name.lower()


# Bits used by the operand fields of each form. Opcode bases never
# set any of these bits.
FORM_OPERAND_MASKS: dict[OperandForm, int] = {
    OperandForm.NONE: 0x0000,
    OperandForm.REG: 0x00F0,
    OperandForm.REG_REG: 0x00FF,
    OperandForm.REG_IMM4: 0x00FF,
    OperandForm.REG_SIMM8: 0x0FFF,
    OperandForm.REG_UIMM8: 0x0FFF,
    OperandForm.REG_REG_REG: 0x0FFF,
    OperandForm.IMM12: 0x0FFF,
}


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Descriptor of one instruction.

    Attributes:
        mnemonic: Instruction name as written in source (lower case)
        opcode: 16-bit opcode base with all operand fields zero
        form: Operand layout
    """
    mnemonic: str
    opcode: int
    form: OperandForm

    def __repr__(self) -> str:
        return f"InstructionInfo({self.mnemonic!r}, opcode=${self.opcode:04X}, form={self.form})"


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic
# Value: InstructionInfo(mnemonic, opcode base, form)
#
# Comments give the register transfer performed by the CPU.
# =============================================================================

_INSTRUCTIONS = (
    # =========================================================================
    # SINGLE-OPERAND GROUP (major opcode 0)
    # =========================================================================
    InstructionInfo("rdm", 0x0100, OperandForm.REG_REG),      # r[rd] = *r[rt]
    InstructionInfo("wrm", 0x0200, OperandForm.REG_REG),      # *r[rt] = r[rd]
    InstructionInfo("mov", 0x0300, OperandForm.REG_REG),      # r[rd] = r[rt]
    InstructionInfo("not", 0x0400, OperandForm.REG_REG),      # r[rd] = ~r[rt]
    InstructionInfo("sks", 0x0500, OperandForm.REG_IMM4),     # skip if bit set
    InstructionInfo("skc", 0x0600, OperandForm.REG_IMM4),     # skip if bit clear
    InstructionInfo("skz", 0x0700, OperandForm.REG),          # skip if r[rt] == 0
    InstructionInfo("skn", 0x0800, OperandForm.REG),          # skip if r[rt] != 0
    InstructionInfo("brr", 0x0900, OperandForm.REG),          # pc = r[rt]

    # =========================================================================
    # ALU / IMMEDIATE GROUP (major opcodes 1-E)
    # =========================================================================
    InstructionInfo("ldu", 0x1000, OperandForm.REG_UIMM8),    # r[rs] = imm8 << 8
    InstructionInfo("shr", 0x2000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] >> r[rt]
    InstructionInfo("ror", 0x3000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] >>> r[rt]
    InstructionInfo("sub", 0x4000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] - r[rt]
    InstructionInfo("subi", 0x5000, OperandForm.REG_SIMM8),   # r[rs] -= imm8
    InstructionInfo("add", 0x6000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] + r[rt]
    InstructionInfo("addi", 0x7000, OperandForm.REG_SIMM8),   # r[rs] += imm8
    InstructionInfo("mul", 0x8000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] * r[rt]
    InstructionInfo("or", 0x9000, OperandForm.REG_REG_REG),   # r[rd] = r[rs] | r[rt]
    InstructionInfo("ori", 0xA000, OperandForm.REG_SIMM8),    # r[rs] |= imm8
    InstructionInfo("xor", 0xB000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] ^ r[rt]
    InstructionInfo("and", 0xC000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] & r[rt]
    InstructionInfo("andi", 0xD000, OperandForm.REG_SIMM8),   # r[rs] &= imm8
    InstructionInfo("cmp", 0xE000, OperandForm.REG_REG_REG),  # r[rd] = r[rs] ? r[rt]

    # =========================================================================
    # BRANCH AND LINK (major opcode F)
    # =========================================================================
    InstructionInfo("brl", 0xF000, OperandForm.IMM12),        # r15 = pc; pc = imm12 << 1

    InstructionInfo("nop", 0x0000, OperandForm.NONE),
)

OPCODE_TABLE: dict[str, InstructionInfo] = {
    info.mnemonic: info for info in _INSTRUCTIONS
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS: frozenset[str] = frozenset(OPCODE_TABLE)

# Instructions that take an immediate operand (resolved on the emission pass)
IMMEDIATE_FORMS: frozenset[OperandForm] = frozenset({
    OperandForm.REG_IMM4,
    OperandForm.REG_SIMM8,
    OperandForm.REG_UIMM8,
    OperandForm.IMM12,
})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """
    Look up an instruction by exact mnemonic.

    Mnemonics are case-sensitive: the instruction set is lower case.

    Returns:
        InstructionInfo if found, None otherwise
    """
    return OPCODE_TABLE.get(mnemonic)


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a Dwarf instruction."""
    return mnemonic in MNEMONICS

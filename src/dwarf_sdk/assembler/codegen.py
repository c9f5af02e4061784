"""
Dwarf Instruction Encoder
=========================

Turns one instruction line into its 16-bit machine word.

Encoding is table driven: every OperandForm has an encoder function that
reads the operands it needs from the line cursor, in source order, and
packs them into the fields of the word. All field values are masked to
the field width; out-of-range values wrap silently.

Example
-------
>>> from dwarf_sdk.assembler.lexer import LineCursor
>>> from dwarf_sdk.assembler.operands import Pass
>>> from dwarf_sdk.assembler.symbols import SymbolTable
>>> cursor = LineCursor("mov r1, r2", 1)
>>> mnemonic = cursor.next_token().text
>>> f"{encode(mnemonic, cursor, Pass.EMIT, SymbolTable()):04X}"
'0312'
"""

from typing import Callable, Optional

from dwarf_sdk.assembler.lexer import LineCursor, Token
from dwarf_sdk.assembler.opcodes import (
    InstructionInfo,
    OperandForm,
    get_instruction_info,
)
from dwarf_sdk.assembler.operands import Pass, parse_immediate, parse_register
from dwarf_sdk.assembler.symbols import SymbolTable
from dwarf_sdk.errors import UnknownMnemonicError


# =============================================================================
# Field Packing
# =============================================================================

def pack_fields(
    form: OperandForm,
    registers: tuple[int, ...] = (),
    immediate: int = 0,
) -> int:
    """
    Pack operand values into the operand bits of an instruction word.

    Args:
        form: Operand layout
        registers: Register numbers in source order
        immediate: Immediate value (ignored by register-only forms)

    Returns:
        The operand bits, to be OR-ed into the opcode base
    """
    if form == OperandForm.NONE:
        return 0
    if form == OperandForm.REG:
        (rt,) = registers
        return (rt & 0xF) << 4
    if form == OperandForm.REG_REG:
        rt, rd = registers
        return ((rt & 0xF) << 4) | (rd & 0xF)
    if form == OperandForm.REG_IMM4:
        (rt,) = registers
        return ((rt & 0xF) << 4) | (immediate & 0xF)
    if form == OperandForm.REG_SIMM8:
        (rs,) = registers
        return ((rs & 0xF) << 8) | (immediate & 0xFF)
    if form == OperandForm.REG_UIMM8:
        # Only the high byte of the value reaches the word
        (rs,) = registers
        return ((rs & 0xF) << 8) | ((immediate >> 8) & 0xFF)
    if form == OperandForm.REG_REG_REG:
        rs, rt, rd = registers
        return ((rs & 0xF) << 8) | ((rt & 0xF) << 4) | (rd & 0xF)
    if form == OperandForm.IMM12:
        return (immediate >> 1) & 0xFFF
    raise ValueError(f"unknown operand form {form!r}")


def encode_fields(
    info: InstructionInfo,
    registers: tuple[int, ...] = (),
    immediate: int = 0,
) -> int:
    """Build the complete word for an instruction from operand values."""
    return info.opcode | pack_fields(info.form, registers, immediate)


# =============================================================================
# Per-Form Operand Readers
# =============================================================================
# Each reader consumes the operands of its form from the cursor and
# returns (registers, immediate). Immediates are read after registers,
# matching the source syntax "mnemonic reg[, reg...][, imm]".
# =============================================================================

OperandReader = Callable[[LineCursor, Pass, SymbolTable], tuple[tuple[int, ...], int]]


def _read_none(cursor, pass_, symbols):
    return (), 0


def _read_regs(count: int) -> OperandReader:
    def reader(cursor, pass_, symbols):
        return tuple(parse_register(cursor) for _ in range(count)), 0
    return reader


def _read_reg_imm(cursor, pass_, symbols):
    reg = parse_register(cursor)
    return (reg,), parse_immediate(cursor, pass_, symbols)


def _read_imm(cursor, pass_, symbols):
    return (), parse_immediate(cursor, pass_, symbols)


OPERAND_READERS: dict[OperandForm, OperandReader] = {
    OperandForm.NONE: _read_none,
    OperandForm.REG: _read_regs(1),
    OperandForm.REG_REG: _read_regs(2),
    OperandForm.REG_IMM4: _read_reg_imm,
    OperandForm.REG_SIMM8: _read_reg_imm,
    OperandForm.REG_UIMM8: _read_reg_imm,
    OperandForm.REG_REG_REG: _read_regs(3),
    OperandForm.IMM12: _read_imm,
}


# =============================================================================
# Encoder Entry Points
# =============================================================================

def lookup_instruction(
    mnemonic: Token | str,
    source_line: Optional[str] = None,
) -> InstructionInfo:
    """
    Find the descriptor for a mnemonic.

    Raises:
        UnknownMnemonicError: If the mnemonic is not in the instruction set
    """
    text = mnemonic.text if isinstance(mnemonic, Token) else mnemonic
    info = get_instruction_info(text)
    if info is None:
        location = mnemonic.location if isinstance(mnemonic, Token) else None
        raise UnknownMnemonicError(text, location=location, source_line=source_line)
    return info


def encode(
    mnemonic: Token | str,
    cursor: LineCursor,
    pass_: Pass,
    symbols: SymbolTable,
) -> int:
    """
    Encode an instruction whose mnemonic has already been taken off the line.

    Operands are consumed from `cursor`. Tokens left over after the last
    operand are ignored. On the collection pass immediates are not read
    and the returned word is meaningless apart from its register fields.

    Returns:
        The 16-bit instruction word
    """
    info = lookup_instruction(mnemonic, cursor.text)
    registers, immediate = OPERAND_READERS[info.form](cursor, pass_, symbols)
    return encode_fields(info, registers, immediate)

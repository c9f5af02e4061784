"""
Dwarf Disassembler
==================

Decodes 16-bit Dwarf instruction words back into assembly source.
This is the inverse operation of the assembler's encoder.

Decoding
--------
- Top nibble 1..F selects one of the ALU/immediate/branch instructions.
- Top nibble 0 uses the second nibble to select a single-operand
  instruction (rdm .. brr), or nop when the whole word is zero.
- Anything else is not an instruction and is shown as a data word.

Immediate fields decode to the value the assembler would need to be given
to produce the same word: ldu yields the value with the field in the high
byte, brl yields the (even) target address.

Usage:
    disasm = DwarfDisassembler()
    print(disasm.disassemble_one(0x0312))         # mov r1, r2

    words = parse_word_stream("0000:0312\\n0002:7005\\n")
    for instr in disasm.disassemble(words):
        print(instr)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
import re

from ..assembler.opcodes import (
    OPCODE_TABLE,
    InstructionInfo,
    OperandForm,
    REGISTER_NAMES,
)
from ..errors import DisassemblerError


# "AAAA:WWWW" (compact) or "AAAA WWWW" (listing data line), optionally followed by text
_WORD_LINE_RE = re.compile(r"^([0-9A-Fa-f]{4})[: ]([0-9A-Fa-f]{4})(?:\s.*)?$")


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    A single decoded word.

    Attributes:
        address: Memory address of the word
        word: The raw 16-bit value
        info: Instruction descriptor, or None for a data word
        registers: Register fields in source order
        immediate: Decoded immediate operand (None if the form has none)
        comment: Optional annotation (e.g. symbol at a branch target)
    """
    address: int
    word: int
    info: Optional[InstructionInfo]
    registers: Tuple[int, ...] = ()
    immediate: Optional[int] = None
    comment: str = ""

    @property
    def mnemonic(self) -> str:
        return self.info.mnemonic if self.info else "$"

    @property
    def operand_str(self) -> str:
        """Operands formatted the way the assembler accepts them."""
        if self.info is None:
            return f"0x{self.word:04X}"
        parts = [REGISTER_NAMES[r] for r in self.registers]
        if self.immediate is not None:
            if self.info.form in (OperandForm.REG_UIMM8, OperandForm.IMM12):
                parts.append(f"0x{self.immediate:04X}")
            else:
                parts.append(str(self.immediate))
        return ", ".join(parts)

    @property
    def text(self) -> str:
        """Source text for this word."""
        operands = self.operand_str
        return f"{self.mnemonic} {operands}" if operands else self.mnemonic

    def __str__(self) -> str:
        line = f"{self.address:04X}: {self.word:04X}  {self.text}"
        if self.comment:
            return f"{line:<32} ; {self.comment}"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"{self.address:04X}",
            "word": f"{self.word:04X}",
            "mnemonic": self.mnemonic,
            "form": str(self.info.form) if self.info else None,
            "registers": list(self.registers),
            "immediate": self.immediate,
            "text": self.text,
            "comment": self.comment,
        }


# =============================================================================
# Field Extraction
# =============================================================================

def unpack_fields(form: OperandForm, word: int) -> Tuple[Tuple[int, ...], Optional[int]]:
    """
    Extract operand fields from a word.

    Returns:
        (registers in source order, immediate or None)
    """
    rs = (word >> 8) & 0xF
    rt = (word >> 4) & 0xF
    rd = word & 0xF

    if form == OperandForm.NONE:
        return (), None
    if form == OperandForm.REG:
        return (rt,), None
    if form == OperandForm.REG_REG:
        return (rt, rd), None
    if form == OperandForm.REG_IMM4:
        return (rt,), word & 0xF
    if form == OperandForm.REG_SIMM8:
        return (rs,), word & 0xFF
    if form == OperandForm.REG_UIMM8:
        return (rs,), (word & 0xFF) << 8
    if form == OperandForm.REG_REG_REG:
        return (rs, rt, rd), None
    if form == OperandForm.IMM12:
        return (), (word & 0xFFF) << 1
    raise ValueError(f"unknown operand form {form!r}")


# =============================================================================
# Dwarf Disassembler
# =============================================================================

class DwarfDisassembler:
    """
    Disassembler for Dwarf machine words.

    Attributes:
        _major_table: Maps top nibble (1-F) to instruction
        _minor_table: Maps second nibble (1-F) of major opcode 0 to instruction
        _symbol_table: Optional address -> name map for branch annotations
    """

    def __init__(self, symbol_table: Optional[Dict[int, str]] = None):
        self._symbol_table = symbol_table or {}
        self._major_table: Dict[int, InstructionInfo] = {}
        self._minor_table: Dict[int, InstructionInfo] = {}
        for info in OPCODE_TABLE.values():
            major = info.opcode >> 12
            if major:
                self._major_table[major] = info
            elif info.opcode:
                self._minor_table[(info.opcode >> 8) & 0xF] = info

    def decode(self, word: int) -> Optional[InstructionInfo]:
        """Find the instruction a word belongs to, or None."""
        word &= 0xFFFF
        major = word >> 12
        if major:
            return self._major_table.get(major)
        if word == 0:
            return OPCODE_TABLE["nop"]
        return self._minor_table.get((word >> 8) & 0xF)

    def disassemble_one(self, word: int, address: int = 0) -> DisassembledInstruction:
        """Decode a single word placed at `address`."""
        word &= 0xFFFF
        info = self.decode(word)
        if info is None:
            return DisassembledInstruction(address, word, None, comment="not an instruction")

        registers, immediate = unpack_fields(info.form, word)
        comment = ""
        if info.form == OperandForm.IMM12 and immediate in self._symbol_table:
            comment = self._symbol_table[immediate]
        return DisassembledInstruction(address, word, info, registers, immediate, comment)

    def disassemble(self, words: Iterable[Tuple[int, int]]) -> List[DisassembledInstruction]:
        """Decode (address, word) pairs."""
        return [self.disassemble_one(word, address) for address, word in words]

    def disassemble_to_text(self, words: Iterable[Tuple[int, int]]) -> str:
        return "\n".join(str(instr) for instr in self.disassemble(words))

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        """Add address -> name annotations."""
        self._symbol_table.update(symbols)


# =============================================================================
# Word Stream Parsing
# =============================================================================

def parse_word_stream(text: str) -> List[Tuple[int, int]]:
    """
    Parse assembler output into (address, word) pairs.

    Accepts the compact "AAAA:WWWW" form and the listing form; listing
    lines that carry no word (labels, constants, blank lines) are skipped.

    Raises:
        DisassemblerError: On a line that is neither
    """
    pairs = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip() or line[0] in " \t":
            continue
        match = _WORD_LINE_RE.match(line)
        if match is None:
            raise DisassemblerError(f"line {number}: expected AAAA:WWWW, got {line!r}")
        pairs.append((int(match.group(1), 16), int(match.group(2), 16)))
    return pairs

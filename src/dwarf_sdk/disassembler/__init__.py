"""
Dwarf SDK Disassembler Module
=============================

Decodes Dwarf machine words, as printed by the assembler, back into
assembly source.

Usage:
    from dwarf_sdk.disassembler import DwarfDisassembler, parse_word_stream

    disasm = DwarfDisassembler()
    for instr in disasm.disassemble(parse_word_stream(text)):
        print(instr)
"""

from .dwarf import (
    DwarfDisassembler,
    DisassembledInstruction,
    parse_word_stream,
    unpack_fields,
)

__all__ = [
    "DwarfDisassembler",
    "DisassembledInstruction",
    "parse_word_stream",
    "unpack_fields",
]

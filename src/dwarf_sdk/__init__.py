"""
Dwarf SDK - Toolchain for the Dwarf 16-bit RISC CPU
===================================================

This package provides a two-pass assembler and a word-level disassembler
for the Dwarf, a minimalist 16-bit RISC CPU with sixteen registers and
one-word instructions.

Main Components
---------------
- **assembler**: Dwarf assembler (dwasm)
    Converts assembly source into an "AAAA:WWWW" word stream, the input
    of the memory-image tooling of the hardware design

- **disassembler**: Dwarf disassembler (dwdisasm)
    Turns a word stream back into assembly source

Quick Start
-----------
Assemble a program:
    >>> from dwarf_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> words = asm.assemble("addi r0, 5\\n")
    >>> print(asm.get_output(), end="")
    0000:7005

Or use the command-line tools:
    $ dwasm -f blink.s > blink.hex
    $ dwasm -l -f blink.s
    $ dwdisasm blink.hex
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from dwarf_sdk.assembler import Assembler, AssemblerOptions, EmittedWord
from dwarf_sdk.disassembler import DwarfDisassembler, parse_word_stream
from dwarf_sdk.errors import (
    DwarfError,
    AssemblerError,
    MissingOperandError,
    UnknownRegisterError,
    InvalidLiteralError,
    UndefinedSymbolError,
    UnknownMnemonicError,
    DuplicateSymbolError,
    SourceFileError,
    DisassemblerError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerOptions",
    "EmittedWord",
    # Disassembler
    "DwarfDisassembler",
    "parse_word_stream",
    # Exception hierarchy
    "DwarfError",
    "AssemblerError",
    "MissingOperandError",
    "UnknownRegisterError",
    "InvalidLiteralError",
    "UndefinedSymbolError",
    "UnknownMnemonicError",
    "DuplicateSymbolError",
    "SourceFileError",
    "DisassemblerError",
]

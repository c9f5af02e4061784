"""
Dwarf Assembler
===============

This package provides a two-pass assembler for the Dwarf 16-bit RISC CPU.
It turns line-oriented assembly source into 16-bit instruction words and
prints them as an "AAAA:WWWW" stream (address:word, upper-case hex).

Main Components
---------------
- **Assembler**: Two-pass driver (symbol collection, then emission)
- **Lexer / LineCursor**: Splits source into lines and lines into tokens
- **SymbolTable**: Labels and constants in one namespace
- **encode**: Table-driven instruction encoder (eight operand forms)

Example Usage
-------------
>>> from dwarf_sdk.assembler import Assembler
>>> asm = Assembler()
>>> words = asm.assemble('''
... .count 10
... start:  ldu r1, 0x1200
...         addi r1, count
...         brl start
... ''')
>>> [f"{w.value:04X}" for w in words]
['1112', '710A', 'F000']
"""

from dwarf_sdk.assembler.assembler import (
    Assembler,
    AssemblerOptions,
    EmittedWord,
    RESET_VECTOR,
    assemble,
    assemble_file,
)
from dwarf_sdk.assembler.codegen import encode, encode_fields, pack_fields
from dwarf_sdk.assembler.lexer import Lexer, LineCursor, Token
from dwarf_sdk.assembler.opcodes import (
    InstructionInfo,
    OperandForm,
    OPCODE_TABLE,
    MNEMONICS,
    REGISTERS,
    get_instruction_info,
    get_register,
)
from dwarf_sdk.assembler.operands import (
    IMMEDIATE_PLACEHOLDER,
    Pass,
    parse_immediate,
    parse_register,
    try_parse_literal,
)
from dwarf_sdk.assembler.symbols import Symbol, SymbolKind, SymbolTable

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblerOptions",
    "EmittedWord",
    "RESET_VECTOR",
    "assemble",
    "assemble_file",
    # Encoder
    "encode",
    "encode_fields",
    "pack_fields",
    # Lexer
    "Lexer",
    "LineCursor",
    "Token",
    # Opcodes
    "InstructionInfo",
    "OperandForm",
    "OPCODE_TABLE",
    "MNEMONICS",
    "REGISTERS",
    "get_instruction_info",
    "get_register",
    # Operands
    "IMMEDIATE_PLACEHOLDER",
    "Pass",
    "parse_immediate",
    "parse_register",
    "try_parse_literal",
    # Symbols
    "Symbol",
    "SymbolKind",
    "SymbolTable",
]

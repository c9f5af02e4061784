"""
Dwarf SDK Command-Line Interface
================================

This package provides command-line tools for the Dwarf SDK:

- **dwasm**: Dwarf assembler
- **dwdisasm**: Dwarf word-stream disassembler

Each tool is implemented as a Click-based CLI application with
sysexits-style exit codes.
"""

__all__ = ["dwasm", "dwdisasm"]

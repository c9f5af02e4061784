"""
Dwarf SDK Error Hierarchy
=========================

This module defines the exception hierarchy for the Dwarf SDK.
All exceptions inherit from DwarfError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
DwarfError (base)
├── AssemblerError (assembler-related)
│   ├── MissingOperandError - instruction/directive ran out of tokens
│   ├── UnknownRegisterError - register slot holds an unknown name
│   ├── InvalidLiteralError - token is not a valid numeric literal
│   ├── UndefinedSymbolError - reference to undefined label/constant
│   ├── UnknownMnemonicError - leading token is not an instruction
│   └── DuplicateSymbolError - symbol defined multiple times
├── SourceFileError - input file cannot be read
└── DisassemblerError - malformed word stream

Every assembler error is fatal: the two-pass driver does not try to
recover, it lets the first error propagate to the caller.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class DwarfError(Exception):
    """
    Base exception for all Dwarf SDK errors.

        try:
            asm.assemble_file("program.s")
        except DwarfError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(DwarfError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            blink.s:7:9: error: undefined symbol 'lop'
                brl lop
                    ^
            hint: did you mean 'loop'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MissingOperandError(AssemblerError):
    """
    An instruction form or directive expects another operand and the
    line has no tokens left.

    Example:
        mov r1      ; Error: 'mov' needs two registers
    """

    def __init__(
        self,
        what: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.what = what
        super().__init__(
            f"missing {what} operand",
            location=location,
            source_line=source_line,
        )


class UnknownRegisterError(AssemblerError):
    """A register slot holds something other than r0..r15."""

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.name = name
        super().__init__(
            f"unknown register '{name}'",
            location=location,
            hint="registers are named r0 through r15",
            source_line=source_line,
        )


class InvalidLiteralError(AssemblerError):
    """
    A numeral position holds text that is not an integer literal.

    Raised by the constant, data and origin directives, which never
    fall back to symbol lookup.
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.text = text
        message = f"cannot translate value '{text}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            location=location,
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError):
    """
    Reference to an undefined symbol (label or constant).

    Only raised during the emission pass, the first point at which the
    symbol table is known to be complete. Similarly-named symbols are
    offered as a hint to catch typos.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownMnemonicError(AssemblerError):
    """The leading token of an instruction line is not in the instruction set."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"unknown mnemonic '{mnemonic}'",
            location=location,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Symbol defined multiple times.

    Labels and constants share one namespace, so a constant may collide
    with a label and vice versa. Includes the original definition
    location when available.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"duplicate symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# I/O Exceptions
# =============================================================================

class SourceFileError(DwarfError):
    """
    The source file could not be read.

    Wraps the underlying OSError and always names the offending path.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read '{path}': {reason}")


# =============================================================================
# Disassembler Exceptions
# =============================================================================

class DisassemblerError(DwarfError):
    """Malformed line in an AAAA:WWWW word stream."""
    pass

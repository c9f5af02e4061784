"""
Dwarf Assembler - Two-Pass Driver
=================================

This module provides the Assembler class, the primary interface for
turning Dwarf assembly source into 16-bit machine words.

Assembly Process
----------------
The whole source is traversed twice with identical line classification:

1. **Collection pass**: every label and constant is entered into the
   symbol table. Immediate operands are not read (they may name symbols
   defined further down). Nothing is printed.
2. **Emission pass**: the same traversal again, now with a complete
   symbol table. Immediates are resolved and the output stream is built.

Both passes start the program counter at the reset vector and advance it
by exactly the same amounts, so every label has the same address in both.

Line Syntax
-----------
The first token of a line decides what the line is:

| First token  | Meaning                                                  |
|--------------|----------------------------------------------------------|
| name:        | Label, value = current address. Rest of line continues.  |
| .name value  | Constant                                                 |
| $ items...   | Data words: numbers, or "strings" (one word per char)    |
| @address     | Origin: set the program counter                          |
| mnemonic ... | Instruction                                              |

Output Format
-------------
Compact output has one "AAAA:WWWW" line per instruction word. With
listing enabled, label and constant lines, data words and the source text
of each instruction are added:

            loop:
    0000:0000   loop: nop
    0002:0900       brr r0

Example Usage
-------------
>>> from dwarf_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble("mov r1 r2\\n")
[EmittedWord(address=0, value=786, line=1, kind='instruction')]
>>> print(asm.get_output(), end="")
0000:0312
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
import logging
import os

from dwarf_sdk.assembler.codegen import encode
from dwarf_sdk.assembler.lexer import Lexer, LineCursor, Token
from dwarf_sdk.assembler.operands import (
    Pass,
    expect_token,
    parse_literal,
)
from dwarf_sdk.assembler.symbols import SymbolKind, SymbolTable
from dwarf_sdk.errors import (
    AssemblerError,
    InvalidLiteralError,
    SourceFileError,
)

logger = logging.getLogger(__name__)


# Program counter value at the start of each pass
RESET_VECTOR = 0x0000

# Every instruction and data item occupies one 16-bit word
WORD_SIZE = 2


# =============================================================================
# Options
# =============================================================================

@dataclass
class AssemblerOptions:
    """
    Assembler configuration.

    Attributes:
        listing: Produce the listing form of the output instead of the
                 compact AAAA:WWWW stream
        reset_vector: Program counter at the start of each pass
    """
    listing: bool = False
    reset_vector: int = RESET_VECTOR

    @classmethod
    def from_env(cls) -> "AssemblerOptions":
        """
        Create options from environment variables.

        Environment variables (all optional):
            DWARF_ASM_LISTING: "1", "true" or "yes" enables the listing
            DWARF_ASM_RESET_VECTOR: Start address (decimal or 0x hex)

        Invalid values are ignored.
        """
        options = cls()

        if listing := os.environ.get("DWARF_ASM_LISTING"):
            options.listing = listing.strip().lower() in ("1", "true", "yes", "on")

        if reset := os.environ.get("DWARF_ASM_RESET_VECTOR"):
            try:
                options.reset_vector = int(reset, 0) & 0xFFFF
            except ValueError:
                logger.warning(f"Ignoring invalid DWARF_ASM_RESET_VECTOR={reset!r}")

        return options


# =============================================================================
# Output Records
# =============================================================================

@dataclass(frozen=True)
class EmittedWord:
    """
    One word placed in memory by the emission pass.

    Attributes:
        address: Program counter at which the word is placed
        value: The 16-bit word
        line: Source line number that produced it
        kind: "instruction" or "data"
    """
    address: int
    value: int
    line: int
    kind: str = "instruction"

    def __str__(self) -> str:
        return f"{self.address:04X}:{self.value:04X}"


@dataclass
class _PassState:
    """Mutable state of one traversal of the source."""
    pass_: Pass
    pc: int
    words: list[EmittedWord] = field(default_factory=list)
    output: list[str] = field(default_factory=list)


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Two-pass Dwarf assembler.

    Each call to assemble() is an independent run: the symbol table and
    program counter are created fresh and any error aborts the run
    without leaving partial results behind.

    Usage:
        asm = Assembler(listing=True)
        asm.assemble_file("blink.s")
        print(asm.get_output(), end="")
    """

    def __init__(self, options: Optional[AssemblerOptions] = None,
                 listing: Optional[bool] = None):
        """
        Initialize the assembler.

        Args:
            options: Full configuration (defaults to AssemblerOptions())
            listing: Shortcut overriding options.listing
        """
        self._options = options or AssemblerOptions()
        if listing is not None:
            self._options = replace(self._options, listing=listing)
        self._symbols = SymbolTable()
        self._words: list[EmittedWord] = []
        self._output: list[str] = []

    @property
    def listing(self) -> bool:
        return self._options.listing

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble(self, source: str, filename: str = "<input>") -> list[EmittedWord]:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Every word emitted (instructions and data), in program order

        Raises:
            AssemblerError: On the first error in the source
        """
        self._words = []
        self._output = []
        self._symbols = SymbolTable()
        symbols = SymbolTable()
        lexer = Lexer(source, filename)

        self._run_pass(lexer, Pass.COLLECT, symbols)
        logger.debug(f"Collected {len(symbols)} symbols")
        state = self._run_pass(lexer, Pass.EMIT, symbols)

        self._symbols = symbols
        self._words = state.words
        self._output = state.output
        logger.debug(f"Emitted {len(self._words)} words")
        return list(self._words)

    def assemble_file(self, filepath: str | Path) -> list[EmittedWord]:
        """
        Assemble source code from a file.

        Raises:
            SourceFileError: If the file cannot be read
            AssemblerError: On the first error in the source
        """
        filepath = Path(filepath)
        logger.debug(f"Reading {filepath}")
        try:
            source = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
            raise SourceFileError(str(filepath), reason) from e
        return self.assemble(source, str(filepath))

    def collect_symbols(self, source: str, filename: str = "<input>") -> dict[str, int]:
        """
        Run only the collection pass and return the symbol values.

        Useful to inspect label addresses without resolving operands.
        """
        symbols = SymbolTable()
        self._run_pass(Lexer(source, filename), Pass.COLLECT, symbols)
        return symbols.as_dict()

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[EmittedWord]:
        """Words emitted by the last successful run."""
        return list(self._words)

    def get_symbol_table(self) -> SymbolTable:
        return self._symbols

    def get_symbols(self) -> dict[str, int]:
        """Symbol name -> value, in definition order."""
        return self._symbols.as_dict()

    def get_output_lines(self) -> list[str]:
        return list(self._output)

    def get_output(self) -> str:
        """The output stream (compact or listing), newline terminated."""
        if not self._output:
            return ""
        return "\n".join(self._output) + "\n"

    def write_output(self, filepath: str | Path) -> None:
        """Write the output stream to a file."""
        with open(filepath, "w") as f:
            f.write(self.get_output())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name = $value ; kind (one per line, definition order)
        """
        with open(filepath, "w") as f:
            f.write("; Symbol table\n")
            f.write("; Generated by dwasm\n")
            for symbol in self._symbols:
                f.write(f"{symbol.name} = ${symbol.value:04X} ; {symbol.kind.value}\n")

    # =========================================================================
    # Pass Driver
    # =========================================================================

    def _run_pass(self, lexer: Lexer, pass_: Pass, symbols: SymbolTable) -> _PassState:
        state = _PassState(pass_=pass_, pc=self._options.reset_vector & 0xFFFF)
        logger.debug(f"Pass {pass_.name} starting at ${state.pc:04X}")
        for cursor in lexer.lines():
            self._process_line(cursor, state, symbols)
        return state

    def _process_line(self, cursor: LineCursor, state: _PassState,
                      symbols: SymbolTable) -> None:
        token = cursor.next_token()

        # Labels do not end the line: "loop: addi r1, 1" is legal
        while token is not None and token.text.endswith(":"):
            self._define_label(token, cursor, state, symbols)
            token = cursor.next_token()

        if token is None:
            return

        if token.text.startswith("."):
            self._define_constant(token, cursor, state, symbols)
        elif token.text.startswith("$"):
            self._emit_data(cursor, state)
        elif token.text.startswith("@"):
            self._set_origin(token, cursor, state)
        else:
            self._emit_instruction(token, cursor, state, symbols)

    def _emit(self, state: _PassState, value: int, line: int, kind: str) -> None:
        if state.pass_ == Pass.EMIT:
            state.words.append(EmittedWord(state.pc, value & 0xFFFF, line, kind))
        state.pc = (state.pc + WORD_SIZE) & 0xFFFF

    def _listing_enabled(self, state: _PassState) -> bool:
        return state.pass_ == Pass.EMIT and self._options.listing

    # =========================================================================
    # Labels and Constants
    # =========================================================================

    def _check_name(self, name: str, token: Token, cursor: LineCursor) -> None:
        if not name:
            raise AssemblerError(
                "empty symbol name",
                location=token.location,
                source_line=cursor.text,
            )

    def _define_label(self, token: Token, cursor: LineCursor, state: _PassState,
                      symbols: SymbolTable) -> None:
        name = token.text[:token.text.index(":")]
        self._check_name(name, token, cursor)

        if state.pass_ == Pass.COLLECT:
            symbols.insert(
                name, state.pc, SymbolKind.LABEL,
                location=token.location, source_line=cursor.text,
            )
            logger.debug(f"Label {name} = ${state.pc:04X}")
        else:
            # The counter trajectory must match the collection pass
            symbol = symbols.get(name)
            if symbol is not None and symbol.kind == SymbolKind.LABEL \
                    and symbol.location == token.location and symbol.value != state.pc:
                raise AssemblerError(
                    f"label '{name}' moved from ${symbol.value:04X} "
                    f"to ${state.pc:04X} between passes",
                    location=token.location,
                    source_line=cursor.text,
                )
            if self._listing_enabled(state):
                state.output.append(f"\t\t{name}:")

    def _define_constant(self, token: Token, cursor: LineCursor, state: _PassState,
                         symbols: SymbolTable) -> None:
        name = token.text[1:]
        self._check_name(name, token, cursor)
        literal = expect_token(cursor, "constant value")
        value = parse_literal(literal, cursor.text)

        if state.pass_ == Pass.COLLECT:
            symbols.insert(
                name, value, SymbolKind.CONSTANT,
                location=token.location, source_line=cursor.text,
            )
            logger.debug(f"Constant {name} = ${value:04X}")
        elif self._listing_enabled(state):
            state.output.append(f"\t\t{name} {literal.text}")

    # =========================================================================
    # Data and Origin Directives
    # =========================================================================

    def _emit_data(self, cursor: LineCursor, state: _PassState) -> None:
        listing = self._listing_enabled(state)
        if listing:
            state.output.append("")

        for operand in cursor.data_operands():
            if operand.text.startswith('"'):
                closing = operand.text.find('"', 1)
                if closing < 0:
                    raise InvalidLiteralError(
                        operand.text,
                        location=operand.location,
                        source_line=cursor.text,
                        reason="missing closing quote",
                    )
                for char in operand.text[1:closing]:
                    if listing:
                        state.output.append(
                            f"{state.pc:04X} {ord(char) & 0xFFFF:04X}\t\t'{char}'"
                        )
                    self._emit(state, ord(char), cursor.line, "data")
            else:
                value = parse_literal(operand, cursor.text)
                if listing:
                    state.output.append(f"{state.pc:04X} {value:04X}\t\t{operand.text}")
                self._emit(state, value, cursor.line, "data")

        if listing:
            state.output.append("")

    def _set_origin(self, token: Token, cursor: LineCursor, state: _PassState) -> None:
        text = token.text[1:]
        if text:
            literal = Token(text, token.line, token.column + 1, token.filename)
        else:
            # "@ 0x100" is accepted as well as "@0x100"
            literal = expect_token(cursor, "origin address")
        state.pc = parse_literal(literal, cursor.text)
        if state.pass_ == Pass.COLLECT:
            logger.debug(f"Origin set to ${state.pc:04X} at line {cursor.line}")

    # =========================================================================
    # Instructions
    # =========================================================================

    def _emit_instruction(self, mnemonic: Token, cursor: LineCursor,
                          state: _PassState, symbols: SymbolTable) -> None:
        word = encode(mnemonic, cursor, state.pass_, symbols)

        if state.pass_ == Pass.EMIT:
            if self._options.listing:
                state.output.append(f"{state.pc:04X}:{word:04X}\t{cursor.text}")
            else:
                state.output.append(f"{state.pc:04X}:{word:04X}")

        self._emit(state, word, cursor.line, "instruction")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, listing: bool = False, filename: str = "<input>") -> str:
    """
    Assemble a string and return the output stream.

    >>> assemble("addi r0, 5\\n")
    '0000:7005\\n'
    """
    asm = Assembler(listing=listing)
    asm.assemble(source, filename)
    return asm.get_output()


def assemble_file(filepath: str | Path, listing: bool = False) -> str:
    """Assemble a file and return the output stream."""
    asm = Assembler(listing=listing)
    asm.assemble_file(filepath)
    return asm.get_output()

"""
Dwarf Assembly Language Line Tokenizer
======================================

This module splits Dwarf assembly source into logical lines and each line
into tokens. The language is line oriented and has no expression syntax,
so tokens are plain words separated by commas, spaces and tabs.

Comments
--------
A semicolon starts a comment. Only the LAST semicolon on a line is
honored: everything from it to the end of the line is dropped.

    mov r1, r2      ; copy        -> "mov r1, r2      "
    $ "a;b" ; text                -> '$ "a;b" '

Cursors
-------
Tokens are produced lazily through a LineCursor, one per logical line.
The cursor is the only tokenizer state; it is handed explicitly to every
function that consumes tokens, so the driver, operand parser and encoder
always agree on how much of the line has been used. Each pass calls
Lexer.lines() again and gets brand new cursors.

Example
-------
>>> from dwarf_sdk.assembler.lexer import Lexer
>>> lexer = Lexer("loop: addi r1, 1  ; count", "example.s")
>>> cursor = next(lexer.lines())
>>> [t.text for t in cursor.tokens()]
['loop:', 'addi', 'r1', '1']
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from dwarf_sdk.errors import SourceLocation


# Characters separating instruction tokens
TOKEN_DELIMITERS = ", \t"

# Characters separating data directive operands (spaces belong to strings)
DATA_DELIMITERS = ",\t"

COMMENT_CHAR = ";"


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single word of a source line.

    Attributes:
        text: The token text, never empty
        line: Line number in source (1-indexed)
        column: Column of the first character (1-indexed)
        filename: Name of the source file
    """
    text: str
    line: int
    column: int
    filename: str

    def __repr__(self) -> str:
        return f"Token({self.text!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


def strip_comment(text: str) -> str:
    """Drop everything from the last ';' onward."""
    index = text.rfind(COMMENT_CHAR)
    if index >= 0:
        return text[:index]
    return text


# =============================================================================
# Line Cursor
# =============================================================================

class LineCursor:
    """
    Left-to-right token cursor over one logical line.

    Attributes:
        line: Line number (1-indexed)
        text: The original line, comment included (used in listings)
        code: The line with its comment removed
        filename: Source file name for diagnostics
    """

    def __init__(self, text: str, line: int, filename: str = "<input>"):
        self.text = text
        self.line = line
        self.filename = filename
        self.code = strip_comment(text)
        self._pos = 0

    def __repr__(self) -> str:
        return f"LineCursor({self.line}, {self.code[self._pos:]!r})"

    def _skip_delimiters(self, pos: int) -> int:
        while pos < len(self.code) and self.code[pos] in TOKEN_DELIMITERS:
            pos += 1
        return pos

    def _scan(self) -> Optional[tuple[int, int]]:
        """Return (start, end) of the next token without consuming it."""
        start = self._skip_delimiters(self._pos)
        if start >= len(self.code):
            return None
        end = start
        while end < len(self.code) and self.code[end] not in TOKEN_DELIMITERS:
            end += 1
        return start, end

    def _make_token(self, start: int, end: int) -> Token:
        return Token(self.code[start:end], self.line, start + 1, self.filename)

    def next_token(self) -> Optional[Token]:
        """Consume and return the next token, or None at end of line."""
        span = self._scan()
        if span is None:
            self._pos = len(self.code)
            return None
        start, end = span
        # The delimiter that ended the token is consumed with it
        self._pos = min(end + 1, len(self.code))
        return self._make_token(start, end)

    def peek(self) -> Optional[Token]:
        """Return the next token without consuming it."""
        span = self._scan()
        if span is None:
            return None
        return self._make_token(*span)

    def has_more(self) -> bool:
        """True if at least one token remains on the line."""
        return self._scan() is not None

    def tokens(self) -> Iterator[Token]:
        """Consume and yield all remaining tokens."""
        while (token := self.next_token()) is not None:
            yield token

    def data_operands(self) -> Iterator[Token]:
        """
        Consume the rest of the line as data directive operands.

        Operands are separated by commas and tabs only, so a quoted
        string keeps its spaces. Surrounding spaces are trimmed and
        operands that are empty after trimming are skipped.
        """
        pos = self._pos
        while pos < len(self.code):
            end = pos
            while end < len(self.code) and self.code[end] not in DATA_DELIMITERS:
                end += 1
            raw = self.code[pos:end]
            stripped = raw.lstrip(" ")
            column = pos + (len(raw) - len(stripped)) + 1
            if stripped.startswith('"'):
                # A string runs to its closing quote, trailing spaces after it are noise
                closing = stripped.find('"', 1)
                if closing > 0:
                    stripped = stripped[:closing + 1]
            else:
                stripped = stripped.rstrip(" ")
            if stripped:
                yield Token(stripped, self.line, column, self.filename)
            pos = end + 1
        self._pos = len(self.code)

    def location(self, token: Optional[Token] = None) -> SourceLocation:
        """Location of a token, or of the current cursor position."""
        if token is not None:
            return token.location
        return SourceLocation(self.filename, self.line, self._pos + 1)


# =============================================================================
# Lexer
# =============================================================================

class Lexer:
    """
    Splits Dwarf assembly source into logical lines.

    The lexer keeps only the source text; lines() may be called any
    number of times and always starts from the first line.

    Usage:
        lexer = Lexer(source_text, filename)
        for cursor in lexer.lines():
            first = cursor.next_token()

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

    def lines(self) -> Iterator[LineCursor]:
        """Yield a fresh LineCursor for every line of the source."""
        for number, text in enumerate(self.source.splitlines(), start=1):
            yield LineCursor(text, number, self.filename)

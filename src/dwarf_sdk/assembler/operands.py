"""
Operand Parsing
===============

Register and immediate operands are read from a LineCursor.

Numeric Literals
----------------
Literals follow the C strtol(..., 0) rules, applied to the whole token:

| Format      | Example      | Value  |
|-------------|--------------|--------|
| Decimal     | 42, -1       | 42     |
| Hexadecimal | 0x2A, 0X2a   | 42     |
| Octal       | 052          | 42     |

Values are truncated to 16 bits, so -1 becomes $FFFF.

Pass Behavior
-------------
Immediate operands are only read on the emission pass. During the
collection pass parse_immediate() leaves the cursor untouched and returns
IMMEDIATE_PLACEHOLDER: forward references cannot be resolved yet, and the
value is not needed until the word is emitted. Register operands are read
on both passes.
"""

from enum import IntEnum
from typing import Optional
import re

from dwarf_sdk.assembler.lexer import LineCursor, Token
from dwarf_sdk.assembler.opcodes import get_register
from dwarf_sdk.assembler.symbols import SymbolTable
from dwarf_sdk.errors import (
    InvalidLiteralError,
    MissingOperandError,
    UnknownRegisterError,
)


class Pass(IntEnum):
    """The two assembly passes."""
    COLLECT = 0  # symbol collection, no output
    EMIT = 1     # operand resolution and output


# Value returned for immediates that are not read on the collection pass
IMMEDIATE_PLACEHOLDER = 0xDEAD

_LITERAL_RE = re.compile(
    r"""
    ^(?P<sign>[+-]?)
    (?:
        0[xX](?P<hex>[0-9a-fA-F]+)
      | (?P<oct>0[0-7]*)
      | (?P<dec>[1-9][0-9]*)
    )$
    """,
    re.VERBOSE,
)


def try_parse_literal(text: str) -> Optional[int]:
    """
    Parse a C-style integer literal.

    Returns:
        The value truncated to 16 bits, or None if `text` is not a literal
    """
    match = _LITERAL_RE.match(text)
    if match is None:
        return None

    if match.group("hex") is not None:
        value = int(match.group("hex"), 16)
    elif match.group("oct") is not None:
        value = int(match.group("oct"), 8)
    else:
        value = int(match.group("dec"))

    if match.group("sign") == "-":
        value = -value
    return value & 0xFFFF


def parse_literal(token: Token, source_line: Optional[str] = None) -> int:
    """
    Parse a token that must be a numeric literal.

    Raises:
        InvalidLiteralError: If the token is not a literal
    """
    value = try_parse_literal(token.text)
    if value is None:
        raise InvalidLiteralError(
            token.text,
            location=token.location,
            source_line=source_line,
        )
    return value


def expect_token(cursor: LineCursor, what: str) -> Token:
    """
    Consume the next token, which must exist.

    Raises:
        MissingOperandError: At end of line
    """
    token = cursor.next_token()
    if token is None:
        raise MissingOperandError(
            what,
            location=cursor.location(),
            source_line=cursor.text,
        )
    return token


def parse_register(cursor: LineCursor) -> int:
    """
    Consume one token and return its register number.

    Raises:
        MissingOperandError: No token left
        UnknownRegisterError: Token is not r0..r15
    """
    token = expect_token(cursor, "register")
    reg = get_register(token.text)
    if reg is None:
        raise UnknownRegisterError(
            token.text,
            location=token.location,
            source_line=cursor.text,
        )
    return reg


def parse_immediate(cursor: LineCursor, pass_: Pass, symbols: SymbolTable) -> int:
    """
    Read an immediate operand: a literal or a symbol name.

    On the collection pass nothing is consumed and IMMEDIATE_PLACEHOLDER
    is returned.

    Raises:
        MissingOperandError: No token left (emission pass only)
        UndefinedSymbolError: Token is neither a literal nor a known symbol
    """
    if pass_ == Pass.COLLECT:
        return IMMEDIATE_PLACEHOLDER

    token = expect_token(cursor, "immediate")
    value = try_parse_literal(token.text)
    if value is not None:
        return value
    return symbols.resolve(token.text, location=token.location, source_line=cursor.text)

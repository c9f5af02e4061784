"""
Symbol Table
============

Labels and constants share a single namespace. A symbol is created the
first time its definition is seen during the collection pass and is never
updated afterwards: a second definition is an error.

The table is insertion ordered, so listings and symbol files present
symbols in the order they were defined.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional
import difflib

from dwarf_sdk.errors import (
    DuplicateSymbolError,
    SourceLocation,
    UndefinedSymbolError,
)


class SymbolKind(Enum):
    """How a symbol got its value."""
    LABEL = "label"        # program counter at definition
    CONSTANT = "constant"  # explicit literal from a '.' directive


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name
        value: 16-bit value (address or constant)
        kind: Label or constant
        location: Where the symbol was defined
    """
    name: str
    value: int
    kind: SymbolKind
    location: Optional[SourceLocation] = None


class SymbolTable:
    """
    Name to 16-bit value mapping used by the assembler.

    Usage:
        table = SymbolTable()
        table.insert("loop", 0x0010)
        table.lookup("loop")      # 0x0010
        table.lookup("missing")   # None
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def lookup(self, name: str) -> Optional[int]:
        """Return the value of a symbol, or None if it is not defined."""
        symbol = self._symbols.get(name)
        if symbol is None:
            return None
        return symbol.value

    def get(self, name: str) -> Optional[Symbol]:
        """Return the full symbol entry, or None."""
        return self._symbols.get(name)

    def insert(
        self,
        name: str,
        value: int,
        kind: SymbolKind = SymbolKind.LABEL,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Define a new symbol.

        Args:
            name: Symbol name
            value: Value, truncated to 16 bits
            kind: Label or constant
            location: Definition site, reported on redefinition
            source_line: Source text of the definition, for diagnostics

        Returns:
            The new Symbol

        Raises:
            DuplicateSymbolError: If the name is already defined
        """
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateSymbolError(
                name,
                location=location,
                original_location=existing.location,
                source_line=source_line,
            )
        symbol = Symbol(name, value & 0xFFFF, kind, location)
        self._symbols[name] = symbol
        return symbol

    def resolve(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Return the value of a symbol that must exist.

        Raises:
            UndefinedSymbolError: If the name is not defined. The error
                carries close matches as suggestions.
        """
        value = self.lookup(name)
        if value is None:
            raise UndefinedSymbolError(
                name,
                location=location,
                source_line=source_line,
                similar_symbols=self.similar(name),
            )
        return value

    def similar(self, name: str, limit: int = 3) -> list[str]:
        """Names that look like `name`, closest first."""
        return difflib.get_close_matches(name, list(self._symbols), n=limit)

    def as_dict(self) -> dict[str, int]:
        """Plain name -> value mapping, in definition order."""
        return {name: symbol.value for name, symbol in self._symbols.items()}

    def clear(self) -> None:
        """Forget every symbol."""
        self._symbols.clear()

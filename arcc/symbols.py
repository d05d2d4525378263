"""Symbol table: symbols and chained scopes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional

from arcc.errors import DuplicateDeclarationError


class DataType(Enum):
    """Declared type of a symbol"""
    UNKNOWN = auto()
    INTEGER = auto()
    REAL = auto()
    BOOLEAN = auto()
    CHAR = auto()
    STRING = auto()
    RECORD = auto()
    LIST = auto()
    PROCEDURE = auto()


class SymbolKind(Enum):
    """What a symbol names; types and variables share one namespace"""
    TYPE = auto()
    VARIABLE = auto()


@dataclass
class Symbol:
    name: str
    type: DataType
    scope_level: int
    kind: SymbolKind = SymbolKind.VARIABLE


class Scope:
    """One symbol table; `parent` is a lookup link, not ownership."""

    def __init__(self, parent: Optional["Scope"] = None):
        self.parent = parent
        self.level = 0 if parent is None else parent.level + 1
        self._symbols: Dict[str, Symbol] = {}

    def define(self, symbol: Symbol) -> Symbol:
        if symbol.name in self._symbols:
            raise DuplicateDeclarationError(f"Symbol '{symbol.name}' is already defined in this scope.")
        self._symbols[symbol.name] = symbol
        return symbol

    def lookup_local(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def lookup(self, name: str) -> Optional[Symbol]:
        """Search this scope, then each enclosing scope outward."""
        scope: Optional[Scope] = self
        while scope is not None:
            symbol = scope._symbols.get(name)
            if symbol is not None:
                return symbol
            scope = scope.parent
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)

"""Error model shared by every compiler stage.

Each stage raises its own subclass (lexer, parser, semantics) at the first
fault it finds; the driver turns the exception into a single diagnostic.
"""

from __future__ import annotations

from typing import Optional


class CompilerError(Exception):
    """Base class for all diagnostics surfaced to users."""

    category = "Internal"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self.format())

    def format(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.category} Error at Line {self.line}, Column {self.column}: {self.message}"
        return f"{self.category} Error: {self.message}"


class InternalError(CompilerError):
    """Parser/generator mismatch; never caused by user input."""

    category = "Internal"


class SemanticError(CompilerError):
    """Semantic analysis error"""

    category = "Semantic"


class DuplicateDeclarationError(SemanticError):
    """A name was defined twice in the same scope"""

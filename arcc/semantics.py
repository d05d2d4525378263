"""arcc.semantics

Semantic analysis over the parsed tree.

Checks performed:
- every assignment/read target and every variable reference resolves in the
  scope chain
- duplicate declarations in the same scope are rejected at `declare` time

Operand type compatibility is not checked yet; binary and unary operations
only have their operands visited.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from arcc.errors import SemanticError, DuplicateDeclarationError
from arcc.symbols import DataType, Scope, Symbol, SymbolKind
from arcc.ast_nodes import (
    ASTNode,
    Program,
    StatementList,
    Assignment,
    Print,
    Read,
    VariableAccess,
    Literal,
    BinaryOp,
    UnaryOp,
)

__all__ = [
    "SemanticAnalyzer",
    "SemanticError",
    "DuplicateDeclarationError",
    "BUILTIN_TYPES",
]

logger = logging.getLogger(__name__)


# Built-in type names live in the global scope next to user variables.
BUILTIN_TYPES = {
    "صحيح": DataType.INTEGER,
    "حقيقي": DataType.REAL,
    "منطقي": DataType.BOOLEAN,
    "حرفي": DataType.CHAR,
    "خيط رمزي": DataType.STRING,
}


class SemanticAnalyzer:
    """Validates declarations and usages against a chain of scopes"""

    def __init__(self):
        self._scope = Scope()
        for name, ty in BUILTIN_TYPES.items():
            self._scope.define(Symbol(name, ty, self._scope.level, SymbolKind.TYPE))

    @property
    def current_scope(self) -> Scope:
        return self._scope

    def push_scope(self) -> Scope:
        self._scope = Scope(parent=self._scope)
        logger.debug("entered scope level %d", self._scope.level)
        return self._scope

    def pop_scope(self) -> Scope:
        if self._scope.parent is None:
            raise SemanticError("cannot leave the global scope")
        logger.debug("left scope level %d", self._scope.level)
        self._scope = self._scope.parent
        return self._scope

    def declare(self, name: str, ty: DataType = DataType.INTEGER) -> Symbol:
        """Register a variable in the innermost scope.

        Raises DuplicateDeclarationError if `name` is already defined in that
        exact scope (built-in type names included).
        """
        symbol = self._scope.define(Symbol(name, ty, self._scope.level))
        logger.debug("declared %s: %s at scope level %d", name, ty.name, symbol.scope_level)
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self._scope.lookup(name)

    def resolve_type(self, name: str) -> DataType:
        """Map a built-in type name (or a DataType member name) to a DataType."""
        symbol = self._scope.lookup(name)
        if symbol is not None and symbol.kind == SymbolKind.TYPE:
            return symbol.type
        try:
            return DataType[name.upper()]
        except KeyError:
            raise SemanticError(f"Unknown type '{name}'.") from None

    def analyze(self, ast: Union[Program, StatementList]) -> None:
        """Analyze AST for semantic errors; the tree is left untouched"""
        if isinstance(ast, Program):
            self._visit_statement_list(ast.body)
        else:
            self._visit_statement_list(ast)

    # -------------
    # Visitors
    # -------------

    def _visit_statement_list(self, node: StatementList) -> None:
        for stmt in node.statements:
            self._visit(stmt)

    def _visit(self, node: ASTNode) -> None:
        if isinstance(node, Assignment):
            self._visit_assignment(node)
        elif isinstance(node, Print):
            for item in node.items:
                self._visit(item)
        elif isinstance(node, Read):
            self._visit_read(node)
        elif isinstance(node, BinaryOp):
            self._visit(node.left)
            self._visit(node.right)
        elif isinstance(node, UnaryOp):
            self._visit(node.operand)
        elif isinstance(node, VariableAccess):
            if self._scope.lookup(node.name) is None:
                raise SemanticError(f"Variable '{node.name}' not declared.", node.line, node.column)
        elif isinstance(node, Literal):
            pass
        elif isinstance(node, StatementList):
            self._visit_statement_list(node)
        else:
            raise SemanticError(f"Unexpected node {node.__class__.__name__}", node.line, node.column)

    def _visit_assignment(self, node: Assignment) -> None:
        target = node.target
        if not isinstance(target, VariableAccess):
            raise SemanticError("Left side of assignment must be a variable.", node.line, node.column)
        if self._scope.lookup(target.name) is None:
            raise SemanticError(f"Variable '{target.name}' not declared.", target.line, target.column)
        self._visit(node.expression)

    def _visit_read(self, node: Read) -> None:
        target = node.target
        if not isinstance(target, VariableAccess):
            raise SemanticError("Read statement must target a variable.", node.line, node.column)
        if self._scope.lookup(target.name) is None:
            raise SemanticError(
                f"Variable '{target.name}' not declared for reading.", target.line, target.column
            )

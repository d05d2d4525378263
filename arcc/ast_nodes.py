"""
Abstract Syntax Tree (AST) Node Definitions

Defines the structure of AST nodes built by the parser. The node family is
closed: the analyzer and the IR generator each match every variant below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from arcc.lexer import Token, TokenType


@dataclass
class ASTNode:
    """Base class for all AST nodes"""
    # Location fields (line/column) are required constructor arguments
    # so subclasses' non-default fields don't follow defaults.
    line: int
    column: int


# ============== Expression Nodes ==============

@dataclass
class Expression(ASTNode):
    """Base class for expressions"""
    pass


@dataclass
class VariableAccess(Expression):
    """Reference to a named variable"""
    name: str
    token: Optional[Token] = None


@dataclass
class Literal(Expression):
    """Integer, real, char, string or boolean constant"""
    kind: TokenType
    value: object
    token: Optional[Token] = None


@dataclass
class BinaryOp(Expression):
    """Binary operation; `operator` is the token that introduced it"""
    operator: Token
    left: Expression
    right: Expression


@dataclass
class UnaryOp(Expression):
    """Unary operation (sign or logical not)"""
    operator: Token
    operand: Expression


# ============== Statement Nodes ==============

@dataclass
class Statement(ASTNode):
    """Base class for statements"""
    pass


@dataclass
class Assignment(Statement):
    """Assignment statement: target = expression"""
    target: VariableAccess
    expression: Expression


@dataclass
class Print(Statement):
    """Output statement: اطبع ( item, ... )"""
    items: List[Union[VariableAccess, Literal]] = field(default_factory=list)
    token: Optional[Token] = None


@dataclass
class Read(Statement):
    """Input statement: اقرأ ( variable )"""
    target: VariableAccess
    token: Optional[Token] = None


@dataclass
class StatementList(ASTNode):
    """Block { statement ; ... }"""
    statements: List[Statement] = field(default_factory=list)


# ============== Program Node ==============

@dataclass
class Program(ASTNode):
    """Root node: برنامج name ; block ."""
    name: str
    body: StatementList


# ============== Utility Functions ==============

def dump_ast(node: ASTNode, indent: int = 0) -> str:
    """Pretty-print AST node"""
    prefix = "  " * indent

    if isinstance(node, Program):
        return f"{prefix}Program: {node.name}\n" + dump_ast(node.body, indent + 1)

    elif isinstance(node, StatementList):
        result = f"{prefix}StatementList\n"
        for stmt in node.statements:
            result += dump_ast(stmt, indent + 1)
        return result

    elif isinstance(node, Assignment):
        result = f"{prefix}Assignment\n"
        result += dump_ast(node.target, indent + 1)
        result += dump_ast(node.expression, indent + 1)
        return result

    elif isinstance(node, Print):
        result = f"{prefix}Print\n"
        for item in node.items:
            result += dump_ast(item, indent + 1)
        return result

    elif isinstance(node, Read):
        return f"{prefix}Read\n" + dump_ast(node.target, indent + 1)

    elif isinstance(node, BinaryOp):
        result = f"{prefix}BinaryOp({node.operator.lexeme})\n"
        result += dump_ast(node.left, indent + 1)
        result += dump_ast(node.right, indent + 1)
        return result

    elif isinstance(node, UnaryOp):
        return f"{prefix}UnaryOp({node.operator.lexeme})\n" + dump_ast(node.operand, indent + 1)

    elif isinstance(node, VariableAccess):
        return f"{prefix}VariableAccess({node.name})\n"

    elif isinstance(node, Literal):
        return f"{prefix}Literal({node.kind.name}, {node.value!r})\n"

    else:
        return f"{prefix}{node.__class__.__name__}\n"

r"""arcc.ir

Intermediate Representation (IR): flat three-address code.

The program is an append-only list of `IRInstruction`. Each instruction has
an opcode, an optional result operand and up to two argument operands.

Operands are one of:

- variables, named after the source variable (``x``)
- temporaries, allocated by a counter (``T_0``, ``T_1``, ...)
- constants, carrying the literal value (``10``, ``"text"``). Only string
  constants are quoted, so a char constant ``x`` renders, and compares,
  the same as the variable ``x``

`format_ir` renders a program as text, one line per instruction::

    \t0: ADD T_0 10 5
    \t1: ASSIGN x T_0
    \t2: HALT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Union

from arcc.errors import InternalError
from arcc.lexer import Token, TokenType
from arcc.ast_nodes import (
    ASTNode,
    Program,
    StatementList,
    Assignment,
    Print,
    Read,
    BinaryOp,
    UnaryOp,
    VariableAccess,
    Literal,
)

logger = logging.getLogger(__name__)


class OpCode(Enum):
    # arithmetic / logical
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    IDIV = auto()
    MOD = auto()
    POW = auto()
    AND = auto()
    OR = auto()
    NOT = auto()

    # comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()

    ASSIGN = auto()

    # control flow
    GOTO = auto()
    IF_GOTO = auto()

    # io
    READ = auto()
    PRINT = auto()

    # procedures
    CALL = auto()
    RETURN = auto()
    PARAM = auto()

    LABEL = auto()
    HALT = auto()


# Total over the operator tokens the parser can put in a BinaryOp/UnaryOp.
# Unary '-' and '+' reuse SUB and ADD with a single argument.
OPERATOR_OPCODES: Dict[TokenType, OpCode] = {
    TokenType.PLUS: OpCode.ADD,
    TokenType.MINUS: OpCode.SUB,
    TokenType.MULTIPLY: OpCode.MUL,
    TokenType.DIVIDE: OpCode.DIV,
    TokenType.INT_DIVIDE: OpCode.IDIV,
    TokenType.MODULO: OpCode.MOD,
    TokenType.POWER: OpCode.POW,
    TokenType.AND: OpCode.AND,
    TokenType.OR: OpCode.OR,
    TokenType.NOT: OpCode.NOT,
    TokenType.EQ: OpCode.EQ,
    TokenType.NEQ: OpCode.NEQ,
    TokenType.LT: OpCode.LT,
    TokenType.GT: OpCode.GT,
    TokenType.LTE: OpCode.LTE,
    TokenType.GTE: OpCode.GTE,
}


@dataclass(frozen=True, eq=False)
class Operand:
    """A value reference; identity is the rendered name."""
    name: str
    value: object = None
    is_temporary: bool = False
    is_constant: bool = False
    kind: Optional[TokenType] = None  # literal kind, constants only

    @classmethod
    def variable(cls, name: str) -> "Operand":
        return cls(name)

    @classmethod
    def temporary(cls, index: int) -> "Operand":
        return cls(f"T_{index}", is_temporary=True)

    @classmethod
    def constant(cls, value: object, kind: Optional[TokenType] = None) -> "Operand":
        if kind == TokenType.STRING_LITERAL:
            name = f'"{value}"'
        else:
            name = str(value)
        return cls(name, value=value, is_constant=True, kind=kind)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Operand):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass
class IRInstruction:
    op: OpCode
    result: Optional[Operand] = None
    arg1: Optional[Operand] = None
    arg2: Optional[Operand] = None

    def __str__(self) -> str:
        parts = [self.op.name]
        for operand in (self.result, self.arg1, self.arg2):
            if operand is not None:
                parts.append(str(operand))
        return " ".join(parts)


def format_ir(instructions: List[IRInstruction]) -> str:
    """Render instructions as text: labels flush left, the rest indexed."""
    lines = []
    for index, instr in enumerate(instructions):
        if instr.op == OpCode.LABEL:
            lines.append(f"{instr.result}:\n")
        else:
            lines.append(f"\t{index}: {instr}\n")
    return "".join(lines)


class IRGenerator:
    """Generates intermediate representation (3-Address Code)"""

    def __init__(self):
        self.instructions: List[IRInstruction] = []
        self.temp_counter = 0
        self.label_counter = 0

    def generate(self, ast: Union[Program, StatementList]) -> List[IRInstruction]:
        """Generate IR from an analyzed AST; always ends with HALT"""
        self.instructions = []
        self.temp_counter = 0
        self.label_counter = 0

        body = ast.body if isinstance(ast, Program) else ast
        self._gen_statement_list(body)
        self.emit(OpCode.HALT)

        logger.debug("generated %d instruction(s)", len(self.instructions))
        return self.instructions

    def listing(self) -> str:
        return format_ir(self.instructions)

    # -------------
    # Helpers
    # -------------

    def new_temp(self) -> Operand:
        t = Operand.temporary(self.temp_counter)
        self.temp_counter += 1
        return t

    def new_label(self) -> str:
        l = f"L{self.label_counter}"
        self.label_counter += 1
        return l

    def emit(
        self,
        op: OpCode,
        result: Optional[Operand] = None,
        arg1: Optional[Operand] = None,
        arg2: Optional[Operand] = None,
    ) -> IRInstruction:
        instr = IRInstruction(op=op, result=result, arg1=arg1, arg2=arg2)
        self.instructions.append(instr)
        return instr

    def emit_label(self, name: str) -> IRInstruction:
        return self.emit(OpCode.LABEL, Operand.variable(name))

    def opcode_for(self, operator: Token) -> OpCode:
        op = OPERATOR_OPCODES.get(operator.type)
        if op is None:
            raise InternalError(
                f"Unsupported token type for OpCode: {operator.type.name}", operator.line, operator.column
            )
        return op

    # -------------
    # Statements
    # -------------

    def _gen_statement_list(self, node: StatementList) -> None:
        for stmt in node.statements:
            self._gen_stmt(stmt)

    def _gen_stmt(self, stmt: ASTNode) -> None:
        if isinstance(stmt, Assignment):
            value = self._gen_expr(stmt.expression)
            self.emit(OpCode.ASSIGN, Operand.variable(stmt.target.name), value)
            return

        if isinstance(stmt, Print):
            for item in stmt.items:
                self.emit(OpCode.PRINT, None, self._gen_expr(item))
            return

        if isinstance(stmt, Read):
            self.emit(OpCode.READ, Operand.variable(stmt.target.name))
            return

        if isinstance(stmt, StatementList):
            self._gen_statement_list(stmt)
            return

        raise InternalError(
            f"Code generation not implemented for node type: {stmt.__class__.__name__}",
            stmt.line,
            stmt.column,
        )

    # -------------
    # Expressions
    # -------------

    def _gen_expr(self, expr: ASTNode) -> Operand:
        if isinstance(expr, BinaryOp):
            left = self._gen_expr(expr.left)
            right = self._gen_expr(expr.right)
            result = self.new_temp()
            self.emit(self.opcode_for(expr.operator), result, left, right)
            return result

        if isinstance(expr, UnaryOp):
            operand = self._gen_expr(expr.operand)
            result = self.new_temp()
            self.emit(self.opcode_for(expr.operator), result, operand)
            return result

        if isinstance(expr, VariableAccess):
            return Operand.variable(expr.name)

        if isinstance(expr, Literal):
            return Operand.constant(expr.value, expr.kind)

        raise InternalError(
            f"Code generation not implemented for node type: {expr.__class__.__name__}",
            expr.line,
            expr.column,
        )

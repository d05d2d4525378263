"""arcc.parser

Recursive-descent parser for the statement/expression subset of the language.

Grammar implemented (one token of lookahead, no backtracking):

    program        := PROGRAM name ';' block '.' EOF
    block          := declarations? statement_list
    statement_list := '{' (statement (';' statement)*)? '}'
    statement      := assignment | print_stmt | read_stmt
    assignment     := variable '=' expression
    print_stmt     := PRINT '(' print_item (',' print_item)* ')'
    print_item     := STRING_LITERAL | CHAR_LITERAL | variable
    read_stmt      := READ '(' variable ')'
    expression     := simple_expr (rel_op simple_expr)?
    simple_expr    := [('+'|'-')] term (('+'|'-') term)*
    term           := factor (('*'|'/'|'\\'|'%'|'^') factor)*
    factor         := literal | variable | '(' expression ')' | '!' factor

Declarations are a placeholder: nothing is consumed for them, so variables
must be registered with the semantic analyzer by the caller. Relational and
logical operators appear at most once per expression level. Nesting and
expression height are bounded by MAX_NESTING_DEPTH and MAX_EXPRESSION_HEIGHT.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from arcc.errors import CompilerError
from arcc.lexer import Lexer, Token, TokenType
from arcc.ast_nodes import (
    Program,
    StatementList,
    Statement,
    Assignment,
    Print,
    Read,
    Expression,
    VariableAccess,
    Literal,
    BinaryOp,
    UnaryOp,
)

logger = logging.getLogger(__name__)

# Bounds on parenthesis/`!` nesting and on expression tree height. Deeper
# input is a syntax error; later stages walk the tree recursively.
MAX_NESTING_DEPTH = 100
MAX_EXPRESSION_HEIGHT = 250


RELATIONAL_OPERATORS = {
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.LT,
    TokenType.GT,
    TokenType.LTE,
    TokenType.GTE,
    TokenType.AND,
    TokenType.OR,
}

ADDITIVE_OPERATORS = {TokenType.PLUS, TokenType.MINUS}

MULTIPLICATIVE_OPERATORS = {
    TokenType.MULTIPLY,
    TokenType.DIVIDE,
    TokenType.INT_DIVIDE,
    TokenType.MODULO,
    TokenType.POWER,
}

LITERAL_TOKENS = {
    TokenType.INTEGER_LITERAL,
    TokenType.REAL_LITERAL,
    TokenType.CHAR_LITERAL,
    TokenType.STRING_LITERAL,
    TokenType.TRUE_KW,
    TokenType.FALSE_KW,
}


class ParserError(CompilerError):
    """Parser error"""
    category = "Syntax"

    def __init__(
        self,
        message: str,
        token: Token,
        expected: Optional[TokenType] = None,
    ):
        self.token = token
        self.expected = expected
        self.found = token.type
        super().__init__(message, token.line, token.column)


class Parser:
    """Parser pulling tokens from a `Lexer` one at a time"""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current_token: Token = self.lexer.next_token()
        self._depth = 0
        self._heights: Dict[int, int] = {}

    def parse_program(self) -> Program:
        """Parse entire program"""
        start = self._expect(TokenType.PROGRAM_KW, "Program must start with 'برنامج'")
        name_tok = self._expect(TokenType.IDENTIFIER, "Expected program name (identifier)")
        self._expect(TokenType.SEMICOLON, "Expected ';' after program name")

        body = self._parse_block()

        self._expect(TokenType.DOT, "Program must end with '.'")
        self._expect(TokenType.EOF, "Expected end of file")

        logger.debug("parsed program %s with %d statement(s)", name_tok.lexeme, len(body.statements))
        return Program(name=name_tok.lexeme, body=body, line=start.line, column=start.column)

    def advance(self) -> Token:
        """Move to next token"""
        self.current_token = self.lexer.next_token()
        return self.current_token

    # -----------------
    # Helpers
    # -----------------

    def _at(self, t: TokenType) -> bool:
        return self.current_token.type == t

    def _match(self, t: TokenType) -> bool:
        if self._at(t):
            self.advance()
            return True
        return False

    def _expect(self, t: TokenType, msg: str) -> Token:
        tok = self.current_token
        if tok.type != t:
            raise ParserError(f"{msg}. Expected {t.name}, got {tok.type.name}", tok, expected=t)
        self.advance()
        return tok

    # -----------------
    # Blocks and statements
    # -----------------

    def _parse_block(self) -> StatementList:
        self._parse_declarations()
        return self._parse_statement_list()

    def _parse_declarations(self) -> None:
        # Constant/type/variable/procedure sections are not compiled yet.
        pass

    def _parse_statement_list(self) -> StatementList:
        start = self._expect(TokenType.LBRACE, "Expected '{' to start statement list")

        statements: List[Statement] = []
        while not self._at(TokenType.RBRACE) and not self._at(TokenType.EOF):
            statements.append(self._parse_statement())

            # statements are separated by ';', a trailing one before '}' is allowed
            if self._match(TokenType.SEMICOLON):
                continue
            if not self._at(TokenType.RBRACE):
                raise ParserError("Expected ';' to separate statements", self.current_token)

        self._expect(TokenType.RBRACE, "Expected '}' to end statement list")
        return StatementList(statements=statements, line=start.line, column=start.column)

    def _parse_statement(self) -> Statement:
        tok = self.current_token
        if tok.type == TokenType.IDENTIFIER:
            return self._parse_assignment()
        if tok.type == TokenType.PRINT_KW:
            return self._parse_print()
        if tok.type == TokenType.READ_KW:
            return self._parse_read()
        raise ParserError(f"Unexpected token while parsing statement: {tok.lexeme}", tok)

    def _parse_assignment(self) -> Assignment:
        target = self._parse_variable()
        self._expect(TokenType.ASSIGN, "Expected '=' for assignment")
        expression = self._parse_expression()
        return Assignment(target=target, expression=expression, line=target.line, column=target.column)

    def _parse_print(self) -> Print:
        print_tok = self._expect(TokenType.PRINT_KW, "Expected 'اطبع'")
        self._expect(TokenType.LPAREN, "Expected '(' after 'اطبع'")

        items = [self._parse_print_item()]
        while self._match(TokenType.COMMA):
            items.append(self._parse_print_item())

        self._expect(TokenType.RPAREN, "Expected ')' after print list")
        return Print(items=items, token=print_tok, line=print_tok.line, column=print_tok.column)

    def _parse_print_item(self) -> Union[Literal, VariableAccess]:
        tok = self.current_token
        if tok.type in (TokenType.STRING_LITERAL, TokenType.CHAR_LITERAL):
            self.advance()
            return Literal(kind=tok.type, value=tok.value, token=tok, line=tok.line, column=tok.column)
        return self._parse_variable()

    def _parse_read(self) -> Read:
        read_tok = self._expect(TokenType.READ_KW, "Expected 'اقرأ'")
        self._expect(TokenType.LPAREN, "Expected '(' after 'اقرأ'")
        target = self._parse_variable()
        self._expect(TokenType.RPAREN, "Expected ')' after variable name")
        return Read(target=target, token=read_tok, line=read_tok.line, column=read_tok.column)

    def _parse_variable(self) -> VariableAccess:
        # Field and index selectors are not supported; a variable is a bare name.
        tok = self._expect(TokenType.IDENTIFIER, "Expected variable identifier")
        return VariableAccess(name=tok.lexeme, token=tok, line=tok.line, column=tok.column)

    # -----------------
    # Expressions
    # -----------------

    def _binary(self, op: Token, left: Expression, right: Expression) -> BinaryOp:
        node = BinaryOp(operator=op, left=left, right=right, line=op.line, column=op.column)
        return self._track_height(node, op, left, right)

    def _unary(self, op: Token, operand: Expression) -> UnaryOp:
        node = UnaryOp(operator=op, operand=operand, line=op.line, column=op.column)
        return self._track_height(node, op, operand)

    def _track_height(self, node, op: Token, *children: Expression):
        # Leaves are absent from the map and count as height 1.
        height = 1 + max(self._heights.get(id(child), 1) for child in children)
        if height > MAX_EXPRESSION_HEIGHT:
            raise ParserError("Expression nested too deeply", op)
        self._heights[id(node)] = height
        return node

    def _parse_expression(self) -> Expression:
        left = self._parse_simple_expression()
        if self.current_token.type in RELATIONAL_OPERATORS:
            op = self.current_token
            self.advance()
            right = self._parse_simple_expression()
            return self._binary(op, left, right)
        return left

    def _parse_simple_expression(self) -> Expression:
        sign: Optional[Token] = None
        if self.current_token.type in ADDITIVE_OPERATORS:
            sign = self.current_token
            self.advance()

        left = self._parse_term()
        if sign is not None:
            left = self._unary(sign, left)

        while self.current_token.type in ADDITIVE_OPERATORS:
            op = self.current_token
            self.advance()
            right = self._parse_term()
            left = self._binary(op, left, right)
        return left

    def _parse_term(self) -> Expression:
        left = self._parse_factor()
        while self.current_token.type in MULTIPLICATIVE_OPERATORS:
            op = self.current_token
            self.advance()
            right = self._parse_factor()
            left = self._binary(op, left, right)
        return left

    def _parse_factor(self) -> Expression:
        tok = self.current_token

        if tok.type in LITERAL_TOKENS:
            self.advance()
            return Literal(kind=tok.type, value=tok.value, token=tok, line=tok.line, column=tok.column)

        if tok.type == TokenType.IDENTIFIER:
            return self._parse_variable()

        if tok.type in (TokenType.LPAREN, TokenType.NOT):
            self._depth += 1
            if self._depth > MAX_NESTING_DEPTH:
                raise ParserError("Expression nested too deeply", tok)
            try:
                self.advance()
                if tok.type == TokenType.NOT:
                    return self._unary(tok, self._parse_factor())
                expr = self._parse_expression()
                self._expect(TokenType.RPAREN, "Expected ')' to close expression")
                return expr
            finally:
                self._depth -= 1

        raise ParserError(f"Unexpected token while parsing factor: {tok.lexeme}", tok)

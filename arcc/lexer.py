"""
Lexical Analyzer (Lexer) for the Arabic-keyword language

Converts source code into a stream of tokens for the parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional

from arcc.errors import CompilerError


class TokenType(Enum):
    """Token types for the lexer"""
    # Keywords
    PROGRAM_KW = auto()          # برنامج
    CONST_KW = auto()            # ثابت
    TYPE_KW = auto()             # نوع
    VAR_KW = auto()              # متغير
    PROCEDURE_KW = auto()        # إجراء
    LIST_KW = auto()             # قائمة
    RECORD_KW = auto()           # سجل
    FROM_KW = auto()             # من
    READ_KW = auto()             # اقرأ
    PRINT_KW = auto()            # اطبع
    IF_KW = auto()               # إذا
    THEN_KW = auto()             # فإن
    ELSE_KW = auto()             # وإلا
    REPEAT_KW = auto()           # كرر / عد
    TO_KW = auto()               # إلى
    ADD_KW = auto()              # أضف
    WHILE_KW = auto()            # ماطال
    CONTINUE_KW = auto()         # استمر
    UNTIL_KW = auto()            # حتى
    BY_VALUE_KW = auto()         # بالقيمة
    BY_REF_KW = auto()           # بالمرجع
    INTEGER_KW = auto()          # صحيح
    REAL_KW = auto()             # حقيقي
    BOOLEAN_KW = auto()          # منطقي
    CHAR_KW = auto()             # حرفي
    STRING_KW = auto()           # خيط رمزي
    TRUE_KW = auto()             # صح
    FALSE_KW = auto()            # خطأ

    # Identifiers
    IDENTIFIER = auto()

    # Literals
    INTEGER_LITERAL = auto()
    REAL_LITERAL = auto()
    CHAR_LITERAL = auto()
    STRING_LITERAL = auto()

    # Operators
    ASSIGN = auto()              # =
    EQ = auto()                  # ==
    NEQ = auto()                 # !=
    LT = auto()                  # <
    GT = auto()                  # >
    LTE = auto()                 # =<
    GTE = auto()                 # =>
    PLUS = auto()                # +
    MINUS = auto()               # -
    MULTIPLY = auto()            # *
    DIVIDE = auto()              # /
    INT_DIVIDE = auto()          # \
    MODULO = auto()              # %
    POWER = auto()               # ^
    AND = auto()                 # &&
    OR = auto()                  # ||
    NOT = auto()                 # !

    # Delimiters
    SEMICOLON = auto()           # ;
    COMMA = auto()               # ,
    COLON = auto()               # :
    DOT = auto()                 # .
    LPAREN = auto()              # (
    RPAREN = auto()              # )
    LBRACE = auto()              # {
    RBRACE = auto()              # }
    LBRACKET = auto()            # [
    RBRACKET = auto()            # ]

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """Represents a lexical token"""
    type: TokenType
    lexeme: str
    value: object
    line: int
    column: int

    def __str__(self) -> str:
        return f"[{self.type.name}] {self.lexeme} at ({self.line}:{self.column})"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {repr(self.lexeme)}, {self.line}:{self.column})"


class LexerError(CompilerError):
    """Lexer error with line and column information"""
    category = "Lexical"


# "عد" and "كرر" both spell REPEAT_KW.
KEYWORDS: Dict[str, TokenType] = {
    "برنامج": TokenType.PROGRAM_KW,
    "ثابت": TokenType.CONST_KW,
    "نوع": TokenType.TYPE_KW,
    "متغير": TokenType.VAR_KW,
    "إجراء": TokenType.PROCEDURE_KW,
    "قائمة": TokenType.LIST_KW,
    "سجل": TokenType.RECORD_KW,
    "من": TokenType.FROM_KW,
    "اقرأ": TokenType.READ_KW,
    "اطبع": TokenType.PRINT_KW,
    "إذا": TokenType.IF_KW,
    "فإن": TokenType.THEN_KW,
    "وإلا": TokenType.ELSE_KW,
    "كرر": TokenType.REPEAT_KW,
    "إلى": TokenType.TO_KW,
    "أضف": TokenType.ADD_KW,
    "ماطال": TokenType.WHILE_KW,
    "استمر": TokenType.CONTINUE_KW,
    "عد": TokenType.REPEAT_KW,
    "حتى": TokenType.UNTIL_KW,
    "بالقيمة": TokenType.BY_VALUE_KW,
    "بالمرجع": TokenType.BY_REF_KW,
    "صحيح": TokenType.INTEGER_KW,
    "حقيقي": TokenType.REAL_KW,
    "منطقي": TokenType.BOOLEAN_KW,
    "حرفي": TokenType.CHAR_KW,
    "خيط رمزي": TokenType.STRING_KW,
    "صح": TokenType.TRUE_KW,
    "خطأ": TokenType.FALSE_KW,
}

BOOLEAN_VALUES: Dict[TokenType, bool] = {
    TokenType.TRUE_KW: True,
    TokenType.FALSE_KW: False,
}

SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    '.': TokenType.DOT,
    ':': TokenType.COLON,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '<': TokenType.LT,
    '>': TokenType.GT,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '\\': TokenType.INT_DIVIDE,
    '%': TokenType.MODULO,
    '^': TokenType.POWER,
}

# Integer literals are 32-bit signed values.
INT_MAX = 2 ** 31 - 1

CHAR_DELIMITER = '`'


class Lexer:
    """Lexical analyzer producing one token per `next_token` call"""

    def __init__(self, source: str):
        """Initialize lexer with source code"""
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def current_char(self) -> Optional[str]:
        """Get current character without consuming"""
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def advance(self) -> Optional[str]:
        """Consume and return current character"""
        if self.position >= len(self.source):
            return None

        char = self.source[self.position]
        self.position += 1

        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included"""
        while self.current_char() is not None and self.current_char().isspace():
            self.advance()

    def _is_digit(self) -> bool:
        char = self.current_char()
        return char is not None and char.isdecimal()

    def _is_letter_or_digit(self) -> bool:
        char = self.current_char()
        return char is not None and (char.isalpha() or char.isdecimal())

    def read_identifier(self, line: int, column: int) -> Token:
        """Read identifier or keyword"""
        start = self.position
        while self._is_letter_or_digit():
            self.advance()
        lexeme = self.source[start:self.position]

        kind = KEYWORDS.get(lexeme)
        if kind is not None:
            return Token(kind, lexeme, BOOLEAN_VALUES.get(kind), line, column)
        return Token(TokenType.IDENTIFIER, lexeme, lexeme, line, column)

    def read_number(self, line: int, column: int) -> Token:
        """Read number literal (integer or real)"""
        start = self.position
        is_real = False

        while self._is_digit():
            self.advance()

        if self.current_char() == '.':
            is_real = True
            self.advance()
            while self._is_digit():
                self.advance()

        lexeme = self.source[start:self.position]
        try:
            if is_real:
                return Token(TokenType.REAL_LITERAL, lexeme, float(lexeme), line, column)
            value = int(lexeme)
        except ValueError:
            raise LexerError(f"Invalid number format: {lexeme}", line, column) from None
        if value > INT_MAX:
            raise LexerError(f"Invalid number format: {lexeme}", line, column)
        return Token(TokenType.INTEGER_LITERAL, lexeme, value, line, column)

    def read_string(self, line: int, column: int) -> Token:
        """Read string literal; no escape sequences, no embedded newline"""
        self.advance()  # skip opening quote
        start = self.position
        while self.current_char() not in ('"', '\n', None):
            self.advance()

        if self.current_char() != '"':
            raise LexerError("Unterminated string literal.", line, column)

        value = self.source[start:self.position]
        self.advance()  # skip closing quote
        return Token(TokenType.STRING_LITERAL, f'"{value}"', value, line, column)

    def read_char(self, line: int, column: int) -> Token:
        """Read character literal: exactly one raw character between backticks"""
        self.advance()  # skip opening delimiter
        if self.current_char() in ('\n', None):
            raise LexerError("Unterminated character literal.", line, column)

        value = self.advance()
        if self.current_char() != CHAR_DELIMITER:
            raise LexerError(
                "Character literal must contain exactly one character and be terminated by `.",
                line,
                column,
            )
        self.advance()  # skip closing delimiter
        return Token(TokenType.CHAR_LITERAL, f"`{value}`", value, line, column)

    def next_token(self) -> Token:
        """Return the next token; EOF is returned again on every later call"""
        self.skip_whitespace()

        # Save token start position
        token_line = self.line
        token_column = self.column

        char = self.current_char()
        if char is None:
            return Token(TokenType.EOF, "EOF", None, token_line, token_column)

        if char.isalpha():
            return self.read_identifier(token_line, token_column)

        if char.isdecimal():
            return self.read_number(token_line, token_column)

        if char == '"':
            return self.read_string(token_line, token_column)

        if char == CHAR_DELIMITER:
            return self.read_char(token_line, token_column)

        self.advance()

        if char == '=':
            if self.current_char() == '=':
                self.advance()
                return Token(TokenType.EQ, '==', None, token_line, token_column)
            if self.current_char() == '>':
                self.advance()
                return Token(TokenType.GTE, '=>', None, token_line, token_column)
            if self.current_char() == '<':
                self.advance()
                return Token(TokenType.LTE, '=<', None, token_line, token_column)
            return Token(TokenType.ASSIGN, '=', None, token_line, token_column)

        if char == '!':
            if self.current_char() == '=':
                self.advance()
                return Token(TokenType.NEQ, '!=', None, token_line, token_column)
            return Token(TokenType.NOT, '!', None, token_line, token_column)

        if char == '&':
            if self.current_char() == '&':
                self.advance()
                return Token(TokenType.AND, '&&', None, token_line, token_column)
            raise LexerError("Invalid token: &", token_line, token_column)

        if char == '|':
            if self.current_char() == '|':
                self.advance()
                return Token(TokenType.OR, '||', None, token_line, token_column)
            raise LexerError("Invalid token: |", token_line, token_column)

        kind = SINGLE_CHAR_TOKENS.get(char)
        if kind is None:
            raise LexerError(f"Unknown character: '{char}'", token_line, token_column)
        return Token(kind, char, None, token_line, token_column)

    def tokenize(self) -> List[Token]:
        """Tokenize remaining source, up to and including EOF"""
        tokens: List[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                return tokens

"""
arcc - Arabic-keyword language front end

Lexer, recursive-descent parser, scope-based semantic analyzer and
three-address-code generator, written in pure Python.
"""

__version__ = "0.1.0"
__author__ = "arcc Contributors"
__license__ = "MIT"

from .errors import CompilerError, InternalError, SemanticError, DuplicateDeclarationError
from .lexer import Lexer, Token, TokenType, LexerError
from .parser import Parser, ParserError
from .symbols import DataType, Scope, Symbol, SymbolKind
from .semantics import SemanticAnalyzer
from .ir import IRGenerator, IRInstruction, OpCode, Operand, format_ir
from .compiler import Compiler, CompilationResult

__all__ = [
    'CompilerError',
    'InternalError',
    'SemanticError',
    'DuplicateDeclarationError',
    'Lexer',
    'Token',
    'TokenType',
    'LexerError',
    'Parser',
    'ParserError',
    'DataType',
    'Scope',
    'Symbol',
    'SymbolKind',
    'SemanticAnalyzer',
    'IRGenerator',
    'IRInstruction',
    'OpCode',
    'Operand',
    'format_ir',
    'Compiler',
    'CompilationResult',
]

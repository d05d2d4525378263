"""
Main Compiler Driver

Orchestrates the compilation pipeline: lexer -> parser -> semantic analysis
-> intermediate code. Every call builds fresh stage objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from arcc.errors import CompilerError, DuplicateDeclarationError, InternalError
from arcc.lexer import Lexer, Token
from arcc.parser import Parser
from arcc.ast_nodes import Program
from arcc.semantics import SemanticAnalyzer
from arcc.symbols import DataType
from arcc.ir import IRGenerator, IRInstruction, format_ir

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Result of compilation"""
    success: bool
    instructions: List[IRInstruction] = field(default_factory=list)
    listing: Optional[str] = None
    diagnostic: Optional[CompilerError] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class Compiler:
    """Main compiler class orchestrating all compilation stages"""

    def __init__(self, declarations: Optional[Dict[str, DataType]] = None):
        # Variables pre-registered before every analysis; the grammar has no
        # declaration section yet.
        self.declarations: Dict[str, DataType] = dict(declarations or {})

    def compile_file(
        self,
        source_file: str,
        declarations: Optional[Dict[str, DataType]] = None,
    ) -> CompilationResult:
        """Compile a UTF-8 source file."""
        try:
            with open(source_file, "r", encoding="utf-8") as f:
                source_code = f.read()
        except (OSError, UnicodeDecodeError) as e:
            return CompilationResult(success=False, errors=[f"Failed to read source file: {e}"])
        return self.compile_code(source_code, declarations, source_path=source_file)

    def compile_code(
        self,
        source_code: str,
        declarations: Optional[Dict[str, DataType]] = None,
        source_path: str = "<input>",
    ) -> CompilationResult:
        """Compile source code.

        The first diagnostic from any stage aborts the pipeline; no partial
        output is returned with a failure.
        """
        warnings: List[str] = []
        wanted = dict(self.declarations)
        wanted.update(declarations or {})

        try:
            logger.debug("%s: parsing", source_path)
            ast = self.get_ast(source_code)

            logger.debug("%s: semantic analysis", source_path)
            analyzer = self._new_analyzer(wanted, warnings)
            analyzer.analyze(ast)

            logger.debug("%s: generating intermediate code", source_path)
            ir = self.get_ir(ast)
        except InternalError as e:
            logger.exception("%s: internal compiler error", source_path)
            return CompilationResult(success=False, diagnostic=e, errors=[str(e)], warnings=warnings)
        except CompilerError as e:
            logger.debug("%s: %s", source_path, e)
            return CompilationResult(success=False, diagnostic=e, errors=[str(e)], warnings=warnings)

        return CompilationResult(success=True, instructions=ir, listing=format_ir(ir), warnings=warnings)

    def _new_analyzer(self, declarations: Dict[str, DataType], warnings: List[str]) -> SemanticAnalyzer:
        analyzer = SemanticAnalyzer()
        for name, ty in declarations.items():
            try:
                analyzer.declare(name, ty)
            except DuplicateDeclarationError as e:
                # Reported to the caller, not propagated into analysis.
                logger.warning("%s", e.message)
                warnings.append(e.message)
        return analyzer

    def get_tokens(self, source_code: str) -> List[Token]:
        """Get tokens from source code"""
        return Lexer(source_code).tokenize()

    def get_ast(self, source_code: str) -> Program:
        """Get AST from source code"""
        parser = Parser(Lexer(source_code))
        return parser.parse_program()

    def analyze_semantics(self, ast: Program, declarations: Optional[Dict[str, DataType]] = None) -> SemanticAnalyzer:
        """Perform semantic analysis"""
        wanted = dict(self.declarations)
        wanted.update(declarations or {})
        analyzer = self._new_analyzer(wanted, [])
        analyzer.analyze(ast)
        return analyzer

    def get_ir(self, ast: Program) -> List[IRInstruction]:
        """Generate IR from AST"""
        generator = IRGenerator()
        return generator.generate(ast)

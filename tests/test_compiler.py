import os
import subprocess
import sys
from pathlib import Path

import pytest

from arcc.compiler import Compiler
from arcc.errors import InternalError
from arcc.ir import IRGenerator
from arcc.lexer import LexerError, TokenType
from arcc.parser import ParserError, MAX_EXPRESSION_HEIGHT
from arcc.semantics import SemanticError
from arcc.symbols import DataType


SAMPLE = """
برنامج TestProgram ;
{
    اقرأ ( x ) ;
    y = 5 ;
    z = 10 + ( 5 * 2 ) ;
    اطبع ( z , "القيمة هي" ) ;
} .
""".lstrip()

SAMPLE_LISTING = (
    "\t0: READ x\n"
    "\t1: ASSIGN y 5\n"
    "\t2: MUL T_0 5 2\n"
    "\t3: ADD T_1 10 T_0\n"
    "\t4: ASSIGN z T_1\n"
    "\t5: PRINT z\n"
    '\t6: PRINT "القيمة هي"\n'
    "\t7: HALT\n"
)

XYZ = {"x": DataType.INTEGER, "y": DataType.INTEGER, "z": DataType.INTEGER}


def test_compile_sample_program():
    res = Compiler(declarations=XYZ).compile_code(SAMPLE)
    assert res.success, res.errors
    assert res.diagnostic is None
    assert res.listing == SAMPLE_LISTING
    assert len(res.instructions) == 8


def test_per_call_declarations_extend_defaults():
    comp = Compiler(declarations={"x": DataType.INTEGER})
    res = comp.compile_code(SAMPLE, declarations={"y": DataType.INTEGER, "z": DataType.REAL})
    assert res.success, res.errors


def test_empty_program():
    res = Compiler().compile_code("برنامج P ; { } .")
    assert res.success
    assert res.listing == "\t0: HALT\n"


@pytest.mark.parametrize(
    "source, error_type, category",
    [
        ("برنامج P ; { x = 1 & 2 } .", LexerError, "Lexical"),
        ("برنامج P ; { x = } .", ParserError, "Syntax"),
        ("برنامج P ; { w = 1 } .", SemanticError, "Semantic"),
    ],
)
def test_single_diagnostic_without_partial_output(source, error_type, category):
    res = Compiler(declarations=XYZ).compile_code(source)
    assert not res.success
    assert isinstance(res.diagnostic, error_type)
    assert res.diagnostic.category == category
    assert res.errors == [str(res.diagnostic)]
    assert res.errors[0].startswith(f"{category} Error at Line 1")
    assert res.instructions == []
    assert res.listing is None


@pytest.mark.parametrize(
    "expr",
    [
        "(" * 300 + "1" + ")" * 300,
        "! " * 300 + "x",
        " + ".join(["1"] * 1000),
    ],
)
def test_deep_nesting_is_a_syntax_diagnostic(expr):
    res = Compiler(declarations=XYZ).compile_code("برنامج P ; { x = " + expr + " } .")
    assert not res.success
    assert isinstance(res.diagnostic, ParserError)
    assert res.diagnostic.message == "Expression nested too deeply"
    assert res.errors[0].startswith("Syntax Error at Line 1, Column ")
    assert res.listing is None


def test_deepest_accepted_expression_compiles():
    res = Compiler(declarations=XYZ).compile_code(
        "برنامج P ; { x = " + " + ".join(["y"] * MAX_EXPRESSION_HEIGHT) + " } ."
    )
    assert res.success, res.errors
    # one ADD per operator, then ASSIGN and HALT
    assert len(res.instructions) == MAX_EXPRESSION_HEIGHT - 1 + 2


def test_duplicate_predeclaration_is_a_warning():
    res = Compiler().compile_code("برنامج P ; { x = 1 } .", declarations={"x": DataType.INTEGER, "صحيح": DataType.INTEGER})
    assert res.success
    assert len(res.warnings) == 1
    assert "صحيح" in res.warnings[0]


def test_internal_error_is_reported(monkeypatch):
    def broken(self, operator):
        raise InternalError("Unsupported token type for OpCode: PLUS", operator.line, operator.column)

    monkeypatch.setattr(IRGenerator, "opcode_for", broken)
    res = Compiler(declarations=XYZ).compile_code("برنامج P ; { x = 1 + 2 } .")
    assert not res.success
    assert res.diagnostic.category == "Internal"


def test_compilations_are_independent():
    comp = Compiler(declarations=XYZ)
    first = comp.compile_code("برنامج P ; { x = 1 + 2 } .")
    second = comp.compile_code("برنامج P ; { y = 3 * 4 } .")
    assert first.listing == "\t0: ADD T_0 1 2\n\t1: ASSIGN x T_0\n\t2: HALT\n"
    assert second.listing == "\t0: MUL T_0 3 4\n\t1: ASSIGN y T_0\n\t2: HALT\n"


def test_compile_file(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text(SAMPLE, encoding="utf-8")
    res = Compiler(declarations=XYZ).compile_file(str(src))
    assert res.success
    assert res.listing == SAMPLE_LISTING


def test_compile_missing_file(tmp_path):
    res = Compiler().compile_file(str(tmp_path / "missing.ar"))
    assert not res.success
    assert res.diagnostic is None
    assert "Failed to read source file" in res.errors[0]


def test_stage_helpers():
    comp = Compiler(declarations=XYZ)
    tokens = comp.get_tokens("برنامج P ; { } .")
    assert tokens[0].type == TokenType.PROGRAM_KW
    assert tokens[-1].type == TokenType.EOF
    ast = comp.get_ast(SAMPLE)
    analyzer = comp.analyze_semantics(ast)
    assert analyzer.lookup("z").type == DataType.INTEGER
    assert len(comp.get_ir(ast)) == 8


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run_cli(*args):
    env = dict(os.environ, PYTHONIOENCODING="utf-8")
    # Run from repo root so relative 'arcc.py' resolves.
    return subprocess.run(
        [sys.executable, "arcc.py", *args],
        cwd=str(REPO_ROOT),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
        encoding="utf-8",
    )


def test_cli_prints_listing(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text(SAMPLE, encoding="utf-8")
    p = _run_cli(str(src), "-D", "x", "-D", "y:صحيح", "-D", "z:real")
    assert p.returncode == 0, p.stdout + p.stderr
    assert p.stdout == SAMPLE_LISTING


def test_cli_writes_output_file(tmp_path):
    src = tmp_path / "prog.ar"
    out = tmp_path / "prog.tac"
    src.write_text("برنامج P ; { } .", encoding="utf-8")
    p = _run_cli(str(src), "-o", str(out))
    assert p.returncode == 0, p.stdout + p.stderr
    assert out.read_text(encoding="utf-8") == "\t0: HALT\n"


def test_cli_reports_semantic_error(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text(SAMPLE, encoding="utf-8")
    p = _run_cli(str(src), "-D", "x")
    assert p.returncode == 1
    assert "Error: Semantic Error at Line 4, Column 5" in p.stdout
    assert "'y'" in p.stdout


def test_cli_rejects_unknown_type(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text("برنامج P ; { } .", encoding="utf-8")
    p = _run_cli(str(src), "-D", "x:نص")
    assert p.returncode == 1
    assert "Unknown type" in p.stdout


def test_cli_tokens(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text("برنامج P ; { } .", encoding="utf-8")
    p = _run_cli(str(src), "--tokens")
    assert p.returncode == 0, p.stdout + p.stderr
    lines = p.stdout.splitlines()
    assert lines[0] == "[PROGRAM_KW] برنامج at (1:1)"
    assert lines[-1] == "[EOF] EOF at (1:17)"


def test_cli_ast(tmp_path):
    src = tmp_path / "prog.ar"
    src.write_text("برنامج P ; { اقرأ ( x ) } .", encoding="utf-8")
    p = _run_cli(str(src), "--ast")
    assert p.returncode == 0, p.stdout + p.stderr
    assert p.stdout.splitlines() == ["Program: P", "  StatementList", "    Read", "      VariableAccess(x)"]

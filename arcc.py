#!/usr/bin/env python3
"""arcc - top-level CLI wrapper for the Arabic-keyword compiler front end

Compatible with Python 3.8+.

Usage examples:
  ./arcc.py prog.ar -D x -D y:حقيقي
  ./arcc.py prog.ar -D x -o prog.tac
  ./arcc.py prog.ar --tokens
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, List, Optional

from arcc.ast_nodes import dump_ast
from arcc.compiler import Compiler
from arcc.errors import CompilerError
from arcc.semantics import SemanticAnalyzer
from arcc.symbols import DataType


def _parse_declarations(specs: List[str]) -> Dict[str, DataType]:
    """Turn `NAME` / `NAME:TYPE` options into a declaration map."""
    resolver = SemanticAnalyzer()
    declarations: Dict[str, DataType] = {}
    for spec in specs:
        name, _, type_name = spec.partition(":")
        name = name.strip()
        if not name:
            raise CompilerError(f"bad declaration '{spec}'")
        declarations[name] = resolver.resolve_type(type_name.strip()) if type_name.strip() else DataType.INTEGER
    return declarations


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="arcc", description="Arabic-keyword compiler front end")
    ap.add_argument("source", help="Input source file (UTF-8)")
    ap.add_argument(
        "-D",
        dest="declare",
        action="append",
        default=[],
        metavar="NAME[:TYPE]",
        help="Pre-declare a variable (type defaults to صحيح)",
    )
    ap.add_argument("--tokens", action="store_true", help="Print the token stream and stop")
    ap.add_argument("--ast", action="store_true", help="Print the syntax tree and stop")
    ap.add_argument("-o", dest="output", required=False, help="Write the intermediate code listing here")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress to stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        declarations = _parse_declarations(args.declare)
    except CompilerError as e:
        print(f"Error: {e}")
        return 1

    compiler = Compiler(declarations=declarations)

    if args.tokens or args.ast:
        try:
            with open(args.source, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {args.source}: {e}")
            return 1
        try:
            if args.tokens:
                for token in compiler.get_tokens(text):
                    print(token)
            else:
                sys.stdout.write(dump_ast(compiler.get_ast(text)))
        except CompilerError as e:
            print(f"Error: {e}")
            return 1
        return 0

    result = compiler.compile_file(args.source)
    for w in result.warnings:
        print("Warning:", w)
    if not result.success:
        for e in result.errors:
            print("Error:", e)
        return 1

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(result.listing)
        except OSError as e:
            print(f"Error: cannot write {args.output}: {e}")
            return 1
        print("Done:", args.output)
        return 0

    sys.stdout.write(result.listing)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

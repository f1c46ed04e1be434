"""CLI entry point for the Flux interpreter.

Usage:
    python -m flux [-v|-vv|-vvv] <program_file>
    python -m flux [-v...] --emit-ast <program_file>
    python -m flux [-v...] --ast <ast_json_file>
    python -m flux [-v...]

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .flux file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file the interactive shell is started. Debug
information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from .errors import FluxError
from .interpreter import Interpreter
from .parser import parse_program
from .ast_json import ast_to_obj, ast_from_obj
from . import repl

RECURSION_LIMIT = 20000


def execute(program, interpreter: Interpreter, filename: str) -> None:
    try:
        interpreter.run(program, filename=filename)
    except FluxError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def parse_or_exit(source: str, filename: str):
    try:
        return parse_program(source, filename)
    except FluxError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Flux language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='FLUX_FILE', help='emit AST JSON for the given .flux file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Flux program file (.flux) to execute')
    args = parser.parse_args(argv)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        ast_program = parse_or_exit(read_source(program_file), str(program_file))
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        ast_program = ast_from_obj(data)
        execute(ast_program, Interpreter(debug_level=args.v), str(ast_path))
        return

    # No program: interactive shell
    if not args.program:
        interpreter = Interpreter(debug_level=args.v)
        try:
            repl.start(interpreter)
        finally:
            interpreter.close()
        return

    # Default: execute source file
    program_file = Path(args.program)
    ast_program = parse_or_exit(read_source(program_file), str(program_file))
    execute(ast_program, Interpreter(debug_level=args.v), str(program_file))


if __name__ == '__main__':
    main()

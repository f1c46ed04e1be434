"""Interactive shell for Flux.

Lines are read with `input`, so the shell works with any stdin. Bindings
persist across lines in a single top-level environment. When a line
leaves a block or bracket open the shell keeps reading continuation
lines until the statement is complete.
"""

import builtins
from typing import Any, List, Optional

from .ast import ExprStmt
from .errors import FluxError, LexError, ParseError, ReturnSignal
from .interpreter import Interpreter
from .parser import parse_program
from .types import UNIT, ErrorVal, to_string

PROMPT = '>> '
CONTINUATION_PROMPT = '.. '
BANNER = [
    'Flux (interactive shell)',
    "Type 'exit' to shut down.",
    '-------------------------------',
]


def read_statement() -> Optional[str]:
    """Read one complete input, joining continuation lines. None means end of input."""
    lines: List[str] = []
    prompt = PROMPT
    while True:
        try:
            line = builtins.input(prompt)
        except EOFError:
            return None
        if not lines and line.strip() == 'exit':
            return 'exit'
        lines.append(line)
        source = '\n'.join(lines)
        try:
            parse_program(source, '<stdin>')
        except (LexError, ParseError) as ex:
            if ex.incomplete:
                prompt = CONTINUATION_PROMPT
                continue
        except FluxError:
            pass
        return source


def eval_source(interpreter: Interpreter, source: str) -> Any:
    """Run `source` in the shell's environment and return the trailing expression value."""
    program = parse_program(source, '<stdin>')
    interpreter.current_file = '<stdin>'
    result: Any = UNIT
    try:
        for stmt in program.body:
            res = interpreter.execute(stmt, interpreter.global_env)
            if isinstance(res, ReturnSignal):
                return res.value
            result = res if isinstance(stmt, ExprStmt) else UNIT
    except RecursionError:
        raise FluxError(ErrorVal('RecursionError', 'maximum recursion depth exceeded')) from None
    finally:
        interpreter.current_file = None
    return result


def start(interpreter: Optional[Interpreter] = None):
    interpreter = interpreter or Interpreter()
    for line in BANNER:
        print(line)
    while True:
        source = read_statement()
        if source is None:
            break
        if source == 'exit':
            print('Shutting down...')
            break
        if not source.strip():
            continue
        try:
            value = eval_source(interpreter, source)
        except FluxError as ex:
            print('  Whoops! We hit a snag:')
            print(f'\t{ex}')
            continue
        if value is not UNIT:
            print(to_string(value))

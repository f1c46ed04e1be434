# Flux language package
# This package provides a lexer, parser and tree-walking interpreter for Flux.
from .interpreter import run_program, run_file, Interpreter
from .errors import FluxError, LexError, ParseError
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'Interpreter',
    'FluxError',
    'LexError',
    'ParseError',
    'parse_program',
]

from typing import Any, Optional
from flux.types import ErrorVal


class FluxError(Exception):
    """Exception type used to propagate Flux errors to the host."""
    def __init__(self, err: ErrorVal):
        super().__init__(err.name, err.message)
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.name

    def locate(self, line: int, column: int, file: Optional[str] = None) -> 'FluxError':
        # the innermost construct that sees the error wins
        if not self.err.located and line > 0:
            self.err.line = line
            self.err.column = column
        if self.err.file is None and file is not None:
            self.err.file = file
        return self

    def __str__(self) -> str:
        return str(self.err)


class LexError(FluxError):
    """Raised when the source text contains a malformed token.

    `incomplete` is set for a string literal still open at the end of the
    input.
    """
    def __init__(self, message: str, line: int, column: int,
                 file: Optional[str] = None, incomplete: bool = False):
        super().__init__(ErrorVal('LexError', message, line, column, file))
        self.incomplete = incomplete


class ParseError(FluxError):
    """Raised when the token sequence does not match the grammar.

    `incomplete` is set when the input ran out while a construct was still
    open, which lets the interactive shell ask for more lines.
    """
    def __init__(self, message: str, line: int, column: int,
                 file: Optional[str] = None, incomplete: bool = False):
        super().__init__(ErrorVal('ParseError', message, line, column, file))
        self.incomplete = incomplete


class ReturnSignal(Exception):
    """Carries the value of an executed `return` up to the call boundary."""
    def __init__(self, value: Any):
        super().__init__('return')
        self.value = value

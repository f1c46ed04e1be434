"""Lexer for the Flux language.

Token shapes are declared once as a small Lark grammar and scanned with
Lark's basic lexer; this module only converts Lark tokens into Flux
`Token` records and splits keywords out of the identifier stream. Line
comments (`//` to end of line) and whitespace are discarded.

The result always ends with a single `EOF` token. Lexing is not
resumable: the first malformed character aborts the file with a
`LexError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexError


KEYWORDS = frozenset({'mut', 'fn', 'if', 'else', 'while', 'return', 'true', 'false'})


FLUX_TOKENS = r"""
    start: (NAME | INT | STRING | OP | PUNCT)*

    NAME: /[A-Za-z_][A-Za-z0-9_]*/
    INT: /[0-9]+/
    STRING: /"[^"]*"/
    // two-character operators first so that "==" never lexes as "=" "="
    OP: "==" | "!=" | "=" | "+" | "-" | "*" | "/" | "<" | ">" | "!"
    PUNCT: "(" | ")" | "{" | "}" | "[" | "]" | "," | ":"

    COMMENT: /\/\/[^\n]*/
    %import common.WS
    %ignore WS
    %ignore COMMENT
"""


FLUX_LEXER = Lark(
    FLUX_TOKENS,
    parser='lalr',
    lexer='basic',
)


@dataclass(frozen=True)
class Token:
    """A lexical token.

    `kind` is one of IDENT, KEYWORD, INT, STRING, OP, PUNCT or EOF.
    String literals hold their text without the surrounding quotes.
    """
    kind: str
    value: str
    line: int
    column: int

    def is_(self, expected: str) -> bool:
        """Match either a token kind or the exact text of a keyword/operator/punctuation."""
        if self.kind == expected:
            return True
        return self.kind in ('KEYWORD', 'OP', 'PUNCT') and self.value == expected

    def describe(self) -> str:
        if self.kind == 'EOF':
            return 'end of input'
        if self.kind == 'STRING':
            return f'string "{self.value}"'
        return f"{self.kind} '{self.value}'"


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """Convert source code into a list of tokens terminated by EOF."""
    tokens: List[Token] = []
    try:
        for tok in FLUX_LEXER.lex(source):
            if tok.type == 'NAME':
                kind = 'KEYWORD' if tok.value in KEYWORDS else 'IDENT'
                tokens.append(Token(kind, tok.value, tok.line, tok.column))
            elif tok.type == 'STRING':
                tokens.append(Token('STRING', tok.value[1:-1], tok.line, tok.column))
            else:
                tokens.append(Token(tok.type, tok.value, tok.line, tok.column))
    except UnexpectedCharacters as e:
        unterminated = e.char == '"'
        if unterminated:
            message = 'unterminated string literal'
        else:
            message = f'unexpected character {e.char!r}'
        raise LexError(message, e.line, e.column, filename, incomplete=unterminated) from None
    line, column = _end_position(source)
    tokens.append(Token('EOF', '', line, column))
    return tokens


def _end_position(source: str):
    line = source.count('\n') + 1
    column = len(source) - (source.rfind('\n') + 1) + 1
    return line, column

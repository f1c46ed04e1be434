"""Parser for the Flux language.

A recursive-descent parser over the token list produced by
`flux.lexer.tokenize`. Statements need no terminator; each statement
form is recognised by its leading token:

    statement  := "mut" IDENT "=" expression
                | "if" expression block ["else" (block | if)]
                | "while" expression block
                | "return" [expression]
                | expression
    block      := "{" statement* "}"

Expressions, lowest precedence first:

    equality   := comparison (("==" | "!=") comparison)*
    comparison := term (("<" | ">") term)*
    term       := factor (("+" | "-") factor)*
    factor     := unary (("*" | "/") unary)*
    unary      := ("-" | "!") unary | postfix
    postfix    := primary ("(" args ")" | "[" expression "]")*
    primary    := INT | STRING | "true" | "false" | IDENT
                | "(" expression ")" | "fn" "(" params ")" block
                | "[" [expression ("," expression)*] "]"
                | "{" [expression ":" expression ("," ...)*] "}"

The `parse_program` function is the public entry point and returns a
`Program` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from .ast import (
    Program, Block, VarBind, IfStmt, WhileStmt, ReturnStmt, ExprStmt,
    FunctionLit, Call, BinaryOp, UnaryOp, Literal, Ident, ListLit, DictLit,
    Index, Node,
)
from .errors import ParseError
from .lexer import Token, tokenize


class Parser:
    def __init__(self, tokens: List[Token], filename: Optional[str] = None):
        self.tokens = tokens
        self.pos = 0
        self.filename = filename

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def error(self, expected: str, token: Token) -> ParseError:
        return ParseError(
            f"expected {expected}, got {token.describe()}",
            token.line, token.column, self.filename,
            incomplete=token.kind == 'EOF',
        )

    def consume(self, expected: Union[str, List[str]], what: Optional[str] = None) -> Token:
        token = self.peek()
        if not self.match(expected):
            if what is None:
                what = ' or '.join(repr(e) for e in expected) if isinstance(expected, list) else repr(expected)
            raise self.error(what, token)
        self.pos += 1
        return token

    def match(self, expected: Union[str, List[str]]) -> bool:
        token = self.peek()
        if isinstance(expected, list):
            return any(token.is_(e) for e in expected)
        return token.is_(expected)

    @staticmethod
    def at(node: Node, token: Token) -> Node:
        node.line = token.line
        node.column = token.column
        return node

    def parse_program(self) -> Program:
        start = self.peek()
        statements: List[Node] = []
        while not self.match('EOF'):
            statements.append(self.parse_statement())
        return self.at(Program(statements), start)

    def parse_statement(self) -> Node:
        token = self.peek()
        if token.is_('mut'):
            return self.parse_var_bind()
        if token.is_('if'):
            return self.parse_if_stmt()
        if token.is_('while'):
            return self.parse_while_stmt()
        if token.is_('return'):
            return self.parse_return_stmt()
        expr = self.parse_expression()
        return self.at(ExprStmt(expr), token)

    def parse_var_bind(self) -> VarBind:
        start = self.consume('mut')
        name_token = self.consume('IDENT', 'identifier after mut')
        self.consume('=')
        value = self.parse_expression()
        return self.at(VarBind(name_token.value, value), start)

    def parse_block(self) -> Block:
        start = self.consume('{', "'{' to open a block")
        statements: List[Node] = []
        while not self.match('}'):
            if self.match('EOF'):
                raise self.error("'}' to close the block", self.peek())
            statements.append(self.parse_statement())
        self.consume('}')
        return self.at(Block(statements), start)

    def parse_if_stmt(self) -> IfStmt:
        start = self.consume('if')
        condition = self.parse_expression()
        then_block = self.parse_block()
        else_block: Optional[Node] = None
        if self.match('else'):
            self.consume('else')
            if self.match('if'):
                else_block = self.parse_if_stmt()
            else:
                else_block = self.parse_block()
        return self.at(IfStmt(condition, then_block, else_block), start)

    def parse_while_stmt(self) -> WhileStmt:
        start = self.consume('while')
        condition = self.parse_expression()
        body = self.parse_block()
        return self.at(WhileStmt(condition, body), start)

    def parse_return_stmt(self) -> ReturnStmt:
        start = self.consume('return')
        # a bare `return` ends its line, block or file
        if self.match(['}', 'EOF']) or self.peek().line != start.line:
            return self.at(ReturnStmt(None), start)
        value = self.parse_expression()
        return self.at(ReturnStmt(value), start)

    # Expression parsing, one method per precedence level
    def parse_expression(self) -> Node:
        return self.parse_equality()

    def parse_binary(self, operators: List[str], operand) -> Node:
        node = operand()
        while self.match(operators):
            op_token = self.consume(operators)
            right = operand()
            node = self.at(BinaryOp(op_token.value, node, right), op_token)
        return node

    def parse_equality(self) -> Node:
        return self.parse_binary(['==', '!='], self.parse_comparison)

    def parse_comparison(self) -> Node:
        return self.parse_binary(['<', '>'], self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary(['+', '-'], self.parse_factor)

    def parse_factor(self) -> Node:
        return self.parse_binary(['*', '/'], self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match(['-', '!']):
            op_token = self.consume(['-', '!'])
            operand = self.parse_unary()
            return self.at(UnaryOp(op_token.value, operand), op_token)
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        node = self.parse_primary()
        while True:
            if self.match('('):
                start = self.consume('(')
                args = self.parse_expression_list(')')
                node = self.at(Call(node, args), start)
                continue
            if self.match('['):
                start = self.consume('[')
                index_expr = self.parse_expression()
                self.consume(']')
                node = self.at(Index(node, index_expr), start)
                continue
            break
        return node

    def parse_expression_list(self, closing: str) -> List[Node]:
        items: List[Node] = []
        if not self.match(closing):
            items.append(self.parse_expression())
            while self.match(','):
                self.consume(',')
                items.append(self.parse_expression())
        self.consume(closing)
        return items

    def parse_primary(self) -> Node:
        token = self.peek()
        if token.kind == 'INT':
            self.pos += 1
            return self.at(Literal(int(token.value), 'Int'), token)
        if token.kind == 'STRING':
            self.pos += 1
            return self.at(Literal(token.value, 'Str'), token)
        if token.is_('true') or token.is_('false'):
            self.pos += 1
            return self.at(Literal(token.value == 'true', 'Bool'), token)
        if token.kind == 'IDENT':
            self.pos += 1
            return self.at(Ident(token.value), token)
        if token.is_('fn'):
            return self.parse_function_lit()
        if token.is_('['):
            self.consume('[')
            elements = self.parse_expression_list(']')
            return self.at(ListLit(elements), token)
        if token.is_('{'):
            return self.parse_dict_lit()
        if token.is_('('):
            self.consume('(')
            expr = self.parse_expression()
            self.consume(')')
            return expr
        raise self.error('an expression', token)

    def parse_function_lit(self) -> FunctionLit:
        start = self.consume('fn')
        self.consume('(')
        params: List[str] = []
        if not self.match(')'):
            params.append(self.consume('IDENT', 'parameter name').value)
            while self.match(','):
                self.consume(',')
                params.append(self.consume('IDENT', 'parameter name').value)
        self.consume(')')
        if len(set(params)) != len(params):
            raise ParseError('duplicate parameter name', start.line, start.column, self.filename)
        body = self.parse_block()
        return self.at(FunctionLit(params, body), start)

    def parse_dict_lit(self) -> DictLit:
        start = self.consume('{')
        entries: List[Tuple[Node, Node]] = []
        if not self.match('}'):
            entries.append(self.parse_dict_entry())
            while self.match(','):
                self.consume(',')
                entries.append(self.parse_dict_entry())
        self.consume('}')
        return self.at(DictLit(entries), start)

    def parse_dict_entry(self) -> Tuple[Node, Node]:
        key = self.parse_expression()
        self.consume(':')
        value = self.parse_expression()
        return (key, value)


def parse_program(source: str, filename: Optional[str] = None) -> Program:
    """Parse Flux source code into an AST Program.

    Lexical errors raise `LexError`, grammar errors raise `ParseError`;
    both carry the offending position.
    """
    tokens = tokenize(source, filename)
    parser = Parser(tokens, filename)
    try:
        return parser.parse_program()
    except RecursionError:
        token = parser.peek()
        raise ParseError('expression nested too deeply', token.line, token.column, filename) from None

"""Abstract Syntax Tree (AST) definitions for the Flux language.

The AST classes defined in this module represent the syntactic structure
of parsed Flux programs. They are used by the interpreter to evaluate
Flux code. Each node corresponds to a construct in the Flux grammar and
records the source position of the token that introduced it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Any


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False, repr=False)
    column: int = field(default=0, kw_only=True, compare=False, repr=False)


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class VarBind(Node):
    """`mut name = value`: declares a new binding or mutates an existing one."""
    name: str
    value: Node


@dataclass
class IfStmt(Node):
    condition: Node
    then_block: Block
    else_block: Optional[Node]  # Block, or IfStmt for `else if`


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Block


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class FunctionLit(Node):
    params: List[str]
    body: Block


@dataclass
class Call(Node):
    func: Node
    args: List[Node]


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'Int', 'Str', 'Bool'


@dataclass
class Ident(Node):
    name: str


@dataclass
class ListLit(Node):
    elements: List[Node]


@dataclass
class DictLit(Node):
    entries: List[Tuple[Node, Node]]


@dataclass
class Index(Node):
    target: Node
    index: Node

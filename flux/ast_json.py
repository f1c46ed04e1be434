"""JSON serialization/deserialization for Flux AST.

This module converts between Flux AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Every node becomes an
object with a `type` tag, its fields, and its source position, which
supports a full round-trip for all node types.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from .ast import (
    Node,
    Program,
    Block,
    VarBind,
    IfStmt,
    WhileStmt,
    ReturnStmt,
    ExprStmt,
    FunctionLit,
    Call,
    BinaryOp,
    UnaryOp,
    Literal,
    Ident,
    ListLit,
    DictLit,
    Index,
)


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (
        Program, Block, VarBind, IfStmt, WhileStmt, ReturnStmt, ExprStmt,
        FunctionLit, Call, BinaryOp, UnaryOp, Literal, Ident, ListLit,
        DictLit, Index,
    )
}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, str)):
        return node
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, Node) and type(node).__name__ in NODE_TYPES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(item) for item in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj.get(f.name)) for f in fields(cls)}
    if cls is DictLit:
        kwargs["entries"] = [tuple(pair) for pair in kwargs["entries"]]
    kwargs["line"] = kwargs["line"] or 0
    kwargs["column"] = kwargs["column"] or 0
    return cls(**kwargs)

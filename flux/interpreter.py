"""Interpreter for the Flux language.

This module implements the evaluator, the core built-in functions and
the module loader. Source text is turned into an AST by
`flux.parser.parse_program`; the `Interpreter` then walks that tree
against a chain of `Environment` frames.

Scoping follows one rule for `mut name = expr`: if `name` is bound
anywhere up the current scope chain that binding is overwritten,
otherwise a new binding is created in the innermost frame. Every block
entry (if/else body, each loop iteration, each call) gets a fresh frame,
and a call frame is chained to the function's defining frame, so
closures are lexical and share the frames they captured.
"""

from __future__ import annotations

import re
import sys
from typing import Any, Dict, List, Optional, TextIO

from .ast import (
    Program, Block, VarBind, IfStmt, WhileStmt, ReturnStmt, ExprStmt,
    FunctionLit, Call, BinaryOp, UnaryOp, Literal, Ident, ListLit, DictLit,
    Index, Node,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import FluxError, ReturnSignal
from .parser import parse_program
from .std.io import BasicIO, populate_io_builtins
from .types import (
    UNIT, DictVal, ErrorVal, ListVal, is_int, to_string, type_name, values_equal,
)


INT_LITERAL = re.compile(r'-?[0-9]+')


class FunctionValue:
    """Represents a user-defined Flux function (a closure)."""
    def __init__(self, params: List[str], body: Block, env: Environment, file: Optional[str] = None):
        self.params = params
        self.body = body
        self.env = env  # defining frame, shared with every other holder
        self.file = file  # source file errors in the body are reported against

    def __repr__(self) -> str:
        return f"fn({', '.join(self.params)})"


class Interpreter:
    """Core interpreter that executes Flux AST."""
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.global_env = Environment()
        self.debug_level = debug_level
        self.debug_fp: Optional[TextIO] = None
        if debug_level > 0 and debug_file is not None:
            self.debug_fp = open(debug_file, 'w', encoding='utf-8')
        self.current_file: Optional[str] = None
        self.io = BasicIO(on_error=lambda msg: self.debug(msg))
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.load_builtins()

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def load_builtins(self):
        # Built-in functions: int, len, push, first, last, import

        def std_int(args: List[Any]) -> Any:
            s = args[0]
            if is_int(s):
                return s
            if not isinstance(s, str):
                raise FluxError(ErrorVal('TypeError', f'int expects Str, got {type_name(s)}'))
            text = s.strip()
            if not INT_LITERAL.fullmatch(text):
                raise FluxError(ErrorVal('ValueError', f'cannot parse int: {s!r}'))
            return int(text)

        def std_len(args: List[Any]) -> Any:
            x = args[0]
            if isinstance(x, (str, ListVal, DictVal)):
                return len(x)
            raise FluxError(ErrorVal('TypeError', f'len expects Str, List or Dict, got {type_name(x)}'))

        def std_push(args: List[Any]) -> Any:
            lst, value = args
            if not isinstance(lst, ListVal):
                raise FluxError(ErrorVal('TypeError', f'push expects List, got {type_name(lst)}'))
            return lst.appended(value)

        def std_first(args: List[Any]) -> Any:
            lst = args[0]
            if not isinstance(lst, ListVal):
                raise FluxError(ErrorVal('TypeError', f'first expects List, got {type_name(lst)}'))
            if not lst.items:
                raise FluxError(ErrorVal('IndexError', 'first of empty list'))
            return lst.items[0]

        def std_last(args: List[Any]) -> Any:
            lst = args[0]
            if not isinstance(lst, ListVal):
                raise FluxError(ErrorVal('TypeError', f'last expects List, got {type_name(lst)}'))
            if not lst.items:
                raise FluxError(ErrorVal('IndexError', 'last of empty list'))
            return lst.items[-1]

        def std_import(args: List[Any]) -> Any:
            path = args[0]
            if not isinstance(path, str):
                raise FluxError(ErrorVal('TypeError', 'import path argument must be Str'))
            return self.import_module(path)

        self.builtins.update(populate_io_builtins(self.io))
        self.builtins['int'] = BuiltinFunction('int', 1, std_int)
        self.builtins['len'] = BuiltinFunction('len', 1, std_len)
        self.builtins['push'] = BuiltinFunction('push', 2, std_push)
        self.builtins['first'] = BuiltinFunction('first', 1, std_first)
        self.builtins['last'] = BuiltinFunction('last', 1, std_last)
        self.builtins['import'] = BuiltinFunction('import', 1, std_import)

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None, filename: Optional[str] = None) -> None:
        """Execute a program for its side effects in `env` (the global frame by default)."""
        if env is None:
            env = self.global_env
        saved_file = self.current_file
        self.current_file = filename
        self.debug(f"run {filename or '<string>'}")
        try:
            self.execute_block(program.body, env)
        except RecursionError:
            raise FluxError(ErrorVal('RecursionError', 'maximum recursion depth exceeded', file=filename)) from None
        finally:
            self.current_file = saved_file

    def execute_block(self, statements: List[Node], env: Environment) -> Any:
        for stmt in statements:
            result = self.execute(stmt, env)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Node, env: Environment) -> Any:
        if isinstance(node, VarBind):
            value = self.evaluate(node.value, env)
            self.bind(node.name, value, env, node)
            return None
        if isinstance(node, Block):
            block_env = Environment(parent=env)
            return self.execute_block(node.statements, block_env)
        if isinstance(node, IfStmt):
            cond = self.condition(node.condition, env, 'if')
            if self.debug_level >= 3:
                self.debug(f"if condition at line {node.line} -> {to_string(cond)}", 3)
            if cond:
                return self.execute(node.then_block, env)
            if node.else_block is not None:
                return self.execute(node.else_block, env)
            return None
        if isinstance(node, WhileStmt):
            while self.condition(node.condition, env, 'while'):
                res = self.execute(node.body, env)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, ReturnStmt):
            value = self.evaluate(node.value, env) if node.value is not None else UNIT
            return ReturnSignal(value)
        if isinstance(node, ExprStmt):
            return self.evaluate(node.expr, env)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def bind(self, name: str, value: Any, env: Environment, node: Node):
        if name in self.builtins:
            raise self.fail('TypeError', f'cannot rebind builtin {name}', node)
        mutated = env.set(name, value)
        if self.debug_level >= 2:
            verb = 'mutate' if mutated else 'declare'
            self.debug(f"{verb} {name}: {type_name(value)} = {to_string(value)}", 2)

    def condition(self, expr: Node, env: Environment, construct: str) -> bool:
        cond = self.evaluate(expr, env)
        if not isinstance(cond, bool):
            raise self.fail('TypeError', f'{construct} condition must be Bool, got {type_name(cond)}', expr)
        return cond

    def fail(self, kind: str, message: str, node: Node) -> FluxError:
        return FluxError(ErrorVal(kind, message, node.line, node.column, self.current_file))

    def evaluate(self, node: Node, env: Environment) -> Any:
        try:
            return self.evaluate_node(node, env)
        except FluxError as ex:
            raise ex.locate(node.line, node.column, self.current_file)

    def evaluate_node(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            if node.name in self.builtins:
                return self.builtins[node.name]
            return env.get(node.name)
        if isinstance(node, ListLit):
            return ListVal(tuple(self.evaluate(el, env) for el in node.elements))
        if isinstance(node, DictLit):
            entries: Dict[str, Any] = {}
            for key_node, val_node in node.entries:
                key = self.evaluate(key_node, env)
                if not isinstance(key, str):
                    raise self.fail('TypeError', f'dict key must be Str, got {type_name(key)}', key_node)
                entries[key] = self.evaluate(val_node, env)
            return DictVal(entries)
        if isinstance(node, FunctionLit):
            return FunctionValue(node.params, node.body, env, self.current_file)
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            if node.op == '-':
                if is_int(operand):
                    return -operand
                raise self.fail('TypeError', f'unary - expects Int, got {type_name(operand)}', node)
            if node.op == '!':
                if isinstance(operand, bool):
                    return not operand
                raise self.fail('TypeError', f'unary ! expects Bool, got {type_name(operand)}', node)
            raise self.fail('TypeError', f'unsupported unary operator {node.op}', node)
        if isinstance(node, BinaryOp):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Index):
            target = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            return self.index_value(target, index)
        if isinstance(node, Call):
            func = self.evaluate(node.func, env)
            args = [self.evaluate(arg, env) for arg in node.args]
            return self.call_function(func, args)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def index_value(self, target: Any, index: Any) -> Any:
        if isinstance(target, (ListVal, str)):
            if not is_int(index):
                raise FluxError(ErrorVal('TypeError', f'{type_name(target)} index must be Int, got {type_name(index)}'))
            if index < 0 or index >= len(target):
                raise FluxError(ErrorVal('IndexError', f'index {index} out of range for length {len(target)}'))
            if isinstance(target, str):
                return target[index]
            return target.items[index]
        if isinstance(target, DictVal):
            if not isinstance(index, str):
                raise FluxError(ErrorVal('TypeError', f'dict key must be Str, got {type_name(index)}'))
            if index not in target:
                raise FluxError(ErrorVal('IndexError', f'key {index!r} not found'))
            return target[index]
        raise FluxError(ErrorVal('TypeError', f'cannot index type {type_name(target)}'))

    def call_function(self, func: Any, args: List[Any]) -> Any:
        if isinstance(func, BuiltinFunction):
            # Check arity; None means variadic
            if func.arity is not None and len(args) != func.arity:
                raise FluxError(ErrorVal('TypeError', f"{func.name} expects {func.arity} arguments, got {len(args)}"))
            return func.fn(args)
        if isinstance(func, FunctionValue):
            if len(args) != len(func.params):
                raise FluxError(ErrorVal('TypeError', f"{func!r} expects {len(func.params)} arguments, got {len(args)}"))
            if self.debug_level >= 3:
                self.debug(f"call {func!r} with ({', '.join(to_string(a) for a in args)})", 3)
            # Create new environment for call; closure's env is parent
            call_env = Environment(parent=func.env)
            for name, arg in zip(func.params, args):
                if name in self.builtins:
                    raise FluxError(ErrorVal('TypeError', f'cannot rebind builtin {name}'))
                call_env.declare(name, arg)
            saved_file = self.current_file
            self.current_file = func.file
            try:
                res = self.execute_block(func.body.statements, call_env)
            finally:
                self.current_file = saved_file
            if isinstance(res, ReturnSignal):
                return res.value
            return UNIT
        raise FluxError(ErrorVal('TypeError', f'{type_name(func)} is not callable'))

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '+':
            if is_int(a) and is_int(b):
                return a + b
            if isinstance(a, str) and isinstance(b, str):
                return a + b
            # Str + Int and Int + Str concatenate the decimal form
            if isinstance(a, str) and is_int(b):
                return a + str(b)
            if is_int(a) and isinstance(b, str):
                return str(a) + b
            if isinstance(a, ListVal) and isinstance(b, ListVal):
                return ListVal(a.items + b.items)
            raise self.operand_error(op, a, b)
        if op in ('-', '*', '/'):
            if not (is_int(a) and is_int(b)):
                raise self.operand_error(op, a, b)
            if op == '-':
                return a - b
            if op == '*':
                return a * b
            if b == 0:
                raise FluxError(ErrorVal('ZeroDivisionError', 'division by zero'))
            # integer division truncating toward zero
            quotient = abs(a) // abs(b)
            return quotient if (a < 0) == (b < 0) else -quotient
        if op in ('==', '!='):
            eq = values_equal(a, b)
            return eq if op == '==' else not eq
        if op in ('<', '>'):
            if (is_int(a) and is_int(b)) or (isinstance(a, str) and isinstance(b, str)):
                return a < b if op == '<' else a > b
            raise FluxError(ErrorVal('TypeError', f'cannot compare {type_name(a)} and {type_name(b)} with {op}'))
        raise FluxError(ErrorVal('TypeError', f'unknown operator {op}'))

    @staticmethod
    def operand_error(op: str, a: Any, b: Any) -> FluxError:
        return FluxError(ErrorVal('TypeError', f'unsupported operand types for {op}: {type_name(a)} and {type_name(b)}'))

    def import_module(self, path: str) -> DictVal:
        """Run the file at `path` in a fresh top-level frame and return its bindings.

        The module is read with the same host read as `read_file`, executed
        from scratch on every call (no caching), and its top-level names are
        snapshotted into a Dict. Functions in the Dict keep the module frame
        they were defined in.
        """
        self.debug(f"import {path}")
        source = self.io.read_file(path)
        program = parse_program(source, path)
        module_env = Environment()
        saved_file = self.current_file
        self.current_file = path
        try:
            self.execute_block(program.body, module_env)
        finally:
            self.current_file = saved_file
        return module_env.snapshot()


def run_program(source: str, debug_level: int = 0, filename: Optional[str] = None) -> Interpreter:
    """Convenience function to parse and run a Flux program from a source string."""
    ast_program = parse_program(source, filename)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(ast_program, filename=filename)
    finally:
        interpreter.close()
    return interpreter


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and execute a Flux file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level, filename=file_path)

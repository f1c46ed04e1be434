"""Runtime values for Flux.

Int, Str and Bool are represented by the native Python `int`, `str` and
`bool` objects. Because `bool` is a subclass of `int`, every check in the
runtime tests for `bool` before `int` (see `is_int`). Lists, dictionaries
and the unit value have dedicated classes defined here, and functions are
defined by the interpreter (`FunctionValue`) and the built-in table
(`BuiltinFunction`).

Lists and dictionaries have value semantics: once built they are never
changed. Operations that "add" to a collection, such as `push` or list
`+`, always build a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


class UnitVal:
    """Marker object for the Flux unit (no-value) result."""
    _instance: Optional['UnitVal'] = None

    def __new__(cls) -> 'UnitVal':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'null'


UNIT = UnitVal()


@dataclass
class ErrorVal:
    """Describes a Flux error: its kind, a message and where it happened.

    Position fields stay at their defaults until the evaluator (or the
    front end) knows which source construct produced the error.
    """
    name: str
    message: str
    line: int = 0
    column: int = 0
    file: Optional[str] = None

    @property
    def located(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        text = f"{self.name}: {self.message}"
        if self.located:
            where = f"{self.line}:{self.column}"
            if self.file:
                where = f"{self.file}:{where}"
            text += f" (at {where})"
        return text


@dataclass(frozen=True)
class ListVal:
    """An ordered Flux list.

    Items are held in a tuple so that no operation can change a list in
    place; `push` and `+` construct new `ListVal` objects instead.
    """
    items: Tuple[Any, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def appended(self, value: Any) -> 'ListVal':
        return ListVal(self.items + (value,))

    def __repr__(self) -> str:
        return f"List({list(self.items)!r})"


class DictVal:
    """A Flux dictionary mapping Str keys to values.

    Insertion order is kept for display. Writing an existing key while the
    dictionary is being built overwrites the value but keeps the original
    position (plain `dict` behaviour). Once constructed the mapping is
    treated as read-only.
    """
    __slots__ = ('entries',)

    def __init__(self, entries: Optional[Dict[str, Any]] = None):
        self.entries: Dict[str, Any] = dict(entries) if entries else {}

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __getitem__(self, key: str) -> Any:
        return self.entries[key]

    def keys(self):
        return self.entries.keys()

    def __repr__(self) -> str:
        return f"Dict({self.entries!r})"


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the Flux type name of a runtime value."""
    # Imported lazily: both modules depend on this one.
    from .builtin_function import BuiltinFunction
    from .interpreter import FunctionValue

    if isinstance(value, bool):
        return 'Bool'
    if isinstance(value, int):
        return 'Int'
    if isinstance(value, str):
        return 'Str'
    if isinstance(value, ListVal):
        return 'List'
    if isinstance(value, DictVal):
        return 'Dict'
    if isinstance(value, FunctionValue):
        return 'Function'
    if isinstance(value, BuiltinFunction):
        return 'Builtin'
    if isinstance(value, UnitVal):
        return 'Unit'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Convert a Flux value to the text `print` writes for it."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, DictVal):
        entries = ', '.join(f"{k}: {to_string(v)}" for k, v in value.entries.items())
        return '{' + entries + '}'
    if isinstance(value, UnitVal):
        return 'null'
    # functions and builtins render through their own __repr__
    return repr(value)


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality; values of different kinds are never equal."""
    if type_name(a) != type_name(b):
        return False
    if isinstance(a, ListVal):
        if len(a.items) != len(b.items):
            return False
        return all(values_equal(x, y) for x, y in zip(a.items, b.items))
    if isinstance(a, DictVal):
        if a.entries.keys() != b.entries.keys():
            return False
        return all(values_equal(v, b.entries[k]) for k, v in a.entries.items())
    if isinstance(a, (bool, int, str, UnitVal)):
        return a == b
    # functions compare by identity
    return a is b

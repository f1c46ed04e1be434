from .basic_io import BasicIO
from flux.builtin_function import BuiltinFunction
from flux.errors import FluxError
from flux.types import ErrorVal, UNIT, to_string
from typing import Dict, List, Any


def populate_io_builtins(basic_io: BasicIO) -> Dict[str, BuiltinFunction]:
        """Build the console and file built-ins around one `BasicIO` instance."""

        def std_print(args: List[Any]) -> Any:
            basic_io.write_line(''.join(to_string(a) for a in args))
            return UNIT

        def std_input(args: List[Any]) -> Any:
            prompt = args[0]
            if not isinstance(prompt, str):
                raise FluxError(ErrorVal('TypeError', 'input prompt argument must be Str'))
            return basic_io.read_line(prompt)

        def std_read_file(args: List[Any]) -> Any:
            path = args[0]
            if not isinstance(path, str):
                raise FluxError(ErrorVal('TypeError', 'read_file path argument must be Str'))
            return basic_io.read_file(path)

        def std_write_file(args: List[Any]) -> Any:
            path = args[0]
            if not isinstance(path, str):
                raise FluxError(ErrorVal('TypeError', 'write_file path argument must be Str'))
            content = args[1]
            if not isinstance(content, str):
                raise FluxError(ErrorVal('TypeError', 'write_file content argument must be Str'))
            return basic_io.write_file(path, content)

        return {
            'print': BuiltinFunction('print', None, std_print),
            'input': BuiltinFunction('input', 1, std_input),
            'read_file': BuiltinFunction('read_file', 1, std_read_file),
            'write_file': BuiltinFunction('write_file', 2, std_write_file),
        }

import builtins
from typing import Callable, Optional


class BasicIO:
    """Host console and file-system access used by the Flux built-ins.

    Failures are reported through `on_error` (the interpreter's debug trace)
    and turned into the plain results the language promises: an empty
    string for a failed read, `False` for a failed write.
    """
    def __init__(self, on_error: Optional[Callable[[str], None]] = None):
        self.on_error = on_error

    def report(self, msg: str):
        if self.on_error is not None:
            self.on_error(msg)

    def write_line(self, text: str):
        print(text)

    def read_line(self, prompt: str) -> str:
        try:
            return builtins.input(prompt)
        except EOFError:
            return ''

    def read_file(self, path: str) -> str:
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except FileNotFoundError:
            return ''
        except (OSError, UnicodeDecodeError) as e:
            self.report(f"read_file {path!r} failed: {e}")
            return ''

    def write_file(self, path: str, content: str) -> bool:
        try:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            return True
        except OSError as e:
            self.report(f"write_file {path!r} failed: {e}")
            return False

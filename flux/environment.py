from typing import Any, Dict, Optional
from flux.errors import FluxError
from flux.types import DictVal, ErrorVal


class Environment:
    """A scope frame mapping names to values, linked to its enclosing frame.

    Frames are shared by reference: a function value keeps the frame it was
    created in, and every holder sees the same bindings.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self._parent = parent
        self.values: Dict[str, Any] = {}

    @property
    def parent(self) -> Optional['Environment']:
        return self._parent

    def resolve(self, name: str) -> Optional['Environment']:
        """Return the nearest frame that binds `name`, or None."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env
            env = env._parent
        return None

    def get(self, name: str) -> Any:
        owner = self.resolve(name)
        if owner is None:
            raise FluxError(ErrorVal('NameError', f'undefined variable {name}'))
        return owner.values[name]

    def set(self, name: str, value: Any) -> bool:
        """Bind `name` using the declare-or-mutate rule.

        An existing binding anywhere up the chain is overwritten in place;
        otherwise a new binding is created in this frame. Returns True when
        an existing binding was mutated.
        """
        owner = self.resolve(name)
        if owner is None:
            self.values[name] = value
            return False
        owner.values[name] = value
        return True

    def declare(self, name: str, value: Any):
        self.values[name] = value

    def snapshot(self) -> DictVal:
        """Copy this frame's own bindings into a Dict value."""
        return DictVal(self.values)

from typing import Any, Dict, List, Optional

from ptipy.errors import PtipyError, Failure


class Environment:
    """Variable and function bindings for one program evaluation.

    Variables live in a global frame plus a stack of local frames, one per
    active user-function call. Reads look in the innermost local frame, then
    in the global frame; writes always go to the innermost frame. Functions
    live in their own flat namespace.
    """
    def __init__(self):
        self.globals: Dict[str, Any] = {}
        self.frames: List[Dict[str, Any]] = []
        self.functions: Dict[str, Any] = {}

    @property
    def depth(self) -> int:
        return len(self.frames)

    def lookup(self, name: str) -> Optional[Any]:
        if self.frames and name in self.frames[-1]:
            return self.frames[-1][name]
        return self.globals.get(name)

    def get(self, name: str) -> Any:
        value = self.lookup(name)
        if value is None:
            raise PtipyError(Failure('NameError', f'variable {name} is not defined'))
        return value

    def set(self, name: str, value: Any):
        if self.frames:
            self.frames[-1][name] = value
        else:
            self.globals[name] = value

    def push_frame(self, bindings: Dict[str, Any]):
        self.frames.append(bindings)

    def pop_frame(self) -> Dict[str, Any]:
        return self.frames.pop()

    def define_function(self, name: str, func: Any):
        # Later definitions replace earlier ones, builtins included
        self.functions[name] = func

    def get_function(self, name: str) -> Any:
        if name not in self.functions:
            raise PtipyError(Failure('NameError', f'function {name} is not defined'))
        return self.functions[name]

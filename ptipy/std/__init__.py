from typing import Any, List, Optional, TextIO

from ptipy.builtin_function import BuiltinFunction
from ptipy.environment import Environment
from ptipy.errors import PtipyError, Failure
from ptipy.types import NONE, ListVal, RangeVal, is_int, to_string, type_name


def populate_builtins(env: Environment, out: Optional[TextIO] = None) -> Environment:
        """Register `print`, `len`, `type` and `range` in the function namespace.

        `print` writes to ``out``, or to whatever ``sys.stdout`` is at call time
        when ``out`` is None.
        """

        def std_print(args: List[Any]) -> Any:
            print(to_string(args[0]), file=out)
            return NONE

        def std_len(args: List[Any]) -> Any:
            value = args[0]
            if not isinstance(value, (ListVal, RangeVal)):
                raise PtipyError(Failure('TypeError', f'len expects a list or a range, got {type_name(value)}'))
            return len(value)

        def std_type(args: List[Any]) -> Any:
            return type_name(args[0])

        def std_range(args: List[Any]) -> Any:
            if not 1 <= len(args) <= 3:
                raise PtipyError(Failure('ArityError', f'range expects from 1 to 3 arguments, got {len(args)}'))
            for arg in args:
                if not is_int(arg):
                    raise PtipyError(Failure('TypeError', f'range arguments must be int, got {type_name(arg)}'))
            if len(args) == 1:
                return RangeVal(0, args[0], 1)
            if len(args) == 2:
                return RangeVal(args[0], args[1], 1)
            if args[2] == 0:
                raise PtipyError(Failure('ValueError', 'range step must not be zero'))
            return RangeVal(args[0], args[1], args[2])

        env.define_function('print', BuiltinFunction('print', 1, std_print))
        env.define_function('len', BuiltinFunction('len', 1, std_len))
        env.define_function('type', BuiltinFunction('type', 1, std_type))
        env.define_function('range', BuiltinFunction('range', None, std_range))
        return env

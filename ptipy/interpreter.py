"""Tree-walking interpreter for ptipy programs.

This module evaluates a :class:`~ptipy.ast.Program` against an
:class:`~ptipy.environment.Environment`. Statements are run by
:meth:`Interpreter.execute`, which returns ``None`` on normal completion or a
:class:`ReturnSignal` when a ``return`` must unwind to the enclosing call.
Expressions are reduced to values by :meth:`Interpreter.evaluate`. Runtime
failures are raised as :class:`~ptipy.errors.PtipyError` and are never caught
by the interpreted program.
"""

from __future__ import annotations

import operator
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple

from .ast import (
    Program, FuncDef, Block, If, While, For, Return, Assign, ExprStmt,
    Literal, Var, Index, UnaryOp, BinaryOp, ListLit, Call, Comprehension,
    Node,
)
from .ast_json import load_program
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import PtipyError, Failure, FatalError
from .std import populate_builtins
from .types import NONE, NoneVal, ListVal, RangeVal, is_int, to_string, type_name


###############################################################################
# Binary operators
###############################################################################


def _repeat(seq: Any, count: int) -> Any:
    # Python repetition already yields an empty result for count <= 0
    if isinstance(seq, ListVal):
        return ListVal(seq.items * count)
    return seq * count


def _divide(a: int, b: int) -> int:
    if b == 0:
        raise PtipyError(Failure('ZeroDivisionError', 'division by zero'))
    return a // b


def _modulo(a: int, b: int) -> int:
    if b == 0:
        raise PtipyError(Failure('ZeroDivisionError', 'modulo by zero'))
    return a % b


# operator -> (description of the accepted operands, {(left type, right type): implementation})
# `==` and `!=` accept any operands and are handled by Interpreter.equal_values.
BINARY_OPERATORS: Dict[str, Tuple[str, Dict[Tuple[str, str], Callable[[Any, Any], Any]]]] = {
    '+': ('two integers, two strings or two lists', {
        ('int', 'int'): operator.add,
        ('str', 'str'): operator.add,
        ('list', 'list'): lambda a, b: ListVal(a.items + b.items),
    }),
    '-': ('two integers', {
        ('int', 'int'): operator.sub,
    }),
    '*': ('two integers, an integer and a string or an integer and a list', {
        ('int', 'int'): operator.mul,
        ('str', 'int'): _repeat,
        ('int', 'str'): lambda a, b: _repeat(b, a),
        ('list', 'int'): _repeat,
        ('int', 'list'): lambda a, b: _repeat(b, a),
    }),
    '/': ('two integers', {
        ('int', 'int'): _divide,
    }),
    '%': ('two integers', {
        ('int', 'int'): _modulo,
    }),
    'and': ('two booleans', {
        ('bool', 'bool'): lambda a, b: a and b,
    }),
    'or': ('two booleans', {
        ('bool', 'bool'): lambda a, b: a or b,
    }),
    '<': ('two integers or two strings', {
        ('int', 'int'): operator.lt,
        ('str', 'str'): operator.lt,
    }),
    '<=': ('two integers or two strings', {
        ('int', 'int'): operator.le,
        ('str', 'str'): operator.le,
    }),
    '>': ('two integers or two strings', {
        ('int', 'int'): operator.gt,
        ('str', 'str'): operator.gt,
    }),
    '>=': ('two integers or two strings', {
        ('int', 'int'): operator.ge,
        ('str', 'str'): operator.ge,
    }),
}


###############################################################################
# Interpreter implementation
###############################################################################


@dataclass
class ReturnSignal:
    """Result of executing a `return`: carries the value up to the call site."""
    value: Any


class FunctionValue:
    """Represents a user-defined ptipy function."""
    def __init__(self, name: str, params: List[str], body: Node):
        self.name = name
        self.params = params
        self.body = body

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<function {self.name}>"


# host frames used per interpreted call level, with some headroom
FRAMES_PER_CALL = 12
DEFAULT_RECURSION_LIMIT = 20000


class Interpreter:
    """Core interpreter that executes a ptipy AST.

    Each instance owns its own :class:`Environment`, so independent
    interpreters never see each other's variables or functions.

    While :meth:`run` is active the host recursion limit is raised to at
    least ``recursion_limit`` Python frames (scaled up from ``max_depth``
    when that is set), then restored.
    """
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 out: Optional[TextIO] = None, max_depth: Optional[int] = None,
                 recursion_limit: int = DEFAULT_RECURSION_LIMIT):
        self.env = populate_builtins(Environment(), out)
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None
        self._debug_started = False
        self.max_depth = max_depth
        self.recursion_limit = recursion_limit
        if max_depth is not None:
            self.recursion_limit = max(recursion_limit, max_depth * FRAMES_PER_CALL + 1000)

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def open_debug_file(self):
        # the first run truncates the trace file, later runs append to it
        if self.debug_level > 0 and self.debug_file and self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'a' if self._debug_started else 'w')
            self._debug_started = True

    def close_debug_file(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> None:
        if env is None:
            env = self.env
        self.open_debug_file()
        self.debug(f"run program ({len(program.body)} global statements)")
        old_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(old_limit, self.recursion_limit))
        try:
            for node in program.body:
                if isinstance(node, FuncDef):
                    self.define_function(node, env)
                    continue
                res = self.execute(node, env)
                if isinstance(res, ReturnSignal):
                    raise PtipyError(Failure('ReturnError', "'return' outside function", node.pos))
        except RecursionError:
            raise FatalError('maximum recursion depth exceeded') from None
        finally:
            sys.setrecursionlimit(old_limit)
            self.debug("end of program")
            self.close_debug_file()

    def define_function(self, node: FuncDef, env: Environment):
        env.define_function(node.name, FunctionValue(node.name, node.params, node.body))
        if self.debug_level >= 2:
            self.debug(f"define function {node.name}({', '.join(node.params)})")

    def execute(self, node: Node, env: Environment) -> Optional[ReturnSignal]:
        try:
            return self._execute(node, env)
        except PtipyError as ex:
            if ex.err.pos is None:
                ex.err.pos = node.pos
            raise

    def _execute(self, node: Node, env: Environment) -> Optional[ReturnSignal]:
        if isinstance(node, Block):
            for stmt in node.statements:
                res = self.execute(stmt, env)
                # propagate return signals
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, If):
            cond = self.evaluate(node.condition, env)
            truthy = self.is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {to_string(cond, True)} -> {truthy}")
            if truthy:
                return self.execute(node.then_branch, env)
            if node.else_branch is not None:
                return self.execute(node.else_branch, env)
            return None
        if isinstance(node, While):
            while True:
                cond = self.evaluate(node.condition, env)
                if self.debug_level >= 3:
                    self.debug(f"while condition {to_string(cond, True)}")
                if not self.is_truthy(cond):
                    break
                res = self.execute(node.body, env)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, For):
            for item in self.iterate(self.evaluate(node.iterable, env)):
                env.set(node.var, item)
                if self.debug_level >= 3:
                    self.debug(f"for {node.var} = {to_string(item, True)}")
                res = self.execute(node.body, env)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, Return):
            value = self.evaluate(node.value, env) if node.value is not None else NONE
            return ReturnSignal(value)
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            self.assign_lvalue(node.target, value, env)
            if self.debug_level >= 2:
                self.debug(f"assign {self.describe_target(node.target)} = {to_string(value, True)}")
            return None
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, env)
            return None
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node).__name__}")

    def evaluate(self, node: Node, env: Environment) -> Any:
        try:
            return self._evaluate(node, env)
        except PtipyError as ex:
            if ex.err.pos is None:
                ex.err.pos = node.pos
            raise

    def _evaluate(self, node: Node, env: Environment) -> Any:
        if isinstance(node, Literal):
            if node.literal_type == 'None':
                return NONE
            return node.value
        if isinstance(node, Var):
            return env.get(node.name)
        if isinstance(node, ListLit):
            return ListVal([self.evaluate(el, env) for el in node.elements])
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            if node.op == '-':
                if not is_int(operand):
                    raise PtipyError(Failure('TypeError', f'operator - must be applied to an integer, got {type_name(operand)}'))
                return -operand
            if node.op == 'not':
                if not isinstance(operand, bool):
                    raise PtipyError(Failure('TypeError', f'operator not must be applied to a boolean, got {type_name(operand)}'))
                return not operand
            raise PtipyError(Failure('TypeError', f'unsupported unary operator {node.op}'))
        if isinstance(node, BinaryOp):
            # both operands are always evaluated, left first, even for `and`/`or`
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Index):
            target = self.evaluate(node.target, env)
            index = self.evaluate(node.index, env)
            return target.items[self.check_index(target, index)]
        if isinstance(node, Call):
            return self.call_function(node.name, node.args, env)
        if isinstance(node, Comprehension):
            result: List[Any] = []
            for item in self.iterate(self.evaluate(node.iterable, env)):
                # the loop variable lives in the enclosing scope, like a `for` loop's
                env.set(node.var, item)
                if node.condition is not None and not self.is_truthy(self.evaluate(node.condition, env)):
                    continue
                result.append(self.evaluate(node.expr, env))
            return ListVal(result)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node).__name__}")

    def iterate(self, value: Any) -> Any:
        if isinstance(value, ListVal):
            return value.items
        if isinstance(value, RangeVal):
            return value.materialize().items
        raise PtipyError(Failure('TypeError', f'for must iterate on a list or a range, got {type_name(value)}'))

    def check_index(self, container: Any, index: Any) -> int:
        if not is_int(index):
            raise PtipyError(Failure('IndexError', f'index must be an integer, got {type_name(index)}'))
        if not isinstance(container, ListVal):
            raise PtipyError(Failure('TypeError', f'only lists can be indexed, got {type_name(container)}'))
        if not 0 <= index < len(container.items):
            raise PtipyError(Failure('IndexError', f'index {index} out of range'))
        return index

    def assign_lvalue(self, target: Node, value: Any, env: Environment):
        if isinstance(target, Var):
            env.set(target.name, value)
            return
        if isinstance(target, Index):
            idx = self.evaluate(target.index, env)
            root = target.target
            while isinstance(root, Index):
                root = root.target
            if not isinstance(root, Var):
                raise PtipyError(Failure('AssignmentError', 'only variables can be modified'))
            container = self.evaluate(target.target, env)
            container.items[self.check_index(container, idx)] = value
            # re-store the root binding; it lands in the innermost frame
            env.set(root.name, env.get(root.name))
            return
        raise PtipyError(Failure('AssignmentError', 'only variables can be modified'))

    def describe_target(self, target: Node) -> str:
        if isinstance(target, Var):
            return target.name
        if isinstance(target, Index):
            return f"{self.describe_target(target.target)}[...]"
        return '<expr>'

    def call_function(self, name: str, arg_nodes: List[Node], env: Environment) -> Any:
        func = env.get_function(name)
        if isinstance(func, BuiltinFunction):
            args = [self.evaluate(arg, env) for arg in arg_nodes]
            # Check arity; None means the builtin validates its own arguments
            if func.arity is not None and len(args) != func.arity:
                raise PtipyError(Failure('ArityError', f"{func.name} expects {func.arity} argument{'s' if func.arity != 1 else ''}, got {len(args)}"))
            return func.fn(args)
        if isinstance(func, FunctionValue):
            if len(arg_nodes) != func.arity:
                raise PtipyError(Failure('ArityError', f"function {func.name} takes {func.arity} argument{'s' if func.arity != 1 else ''}, got {len(arg_nodes)}"))
            if self.max_depth is not None and env.depth >= self.max_depth:
                raise FatalError(f'maximum call depth of {self.max_depth} exceeded in {func.name}')
            # Arguments are evaluated in the caller's scope
            frame = {}
            for param, arg in zip(func.params, arg_nodes):
                frame[param] = self.evaluate(arg, env)
            if self.debug_level >= 1:
                self.debug(f"call {func.name}({', '.join(to_string(v, True) for v in frame.values())})")
            env.push_frame(frame)
            try:
                res = self.execute(func.body, env)
            finally:
                env.pop_frame()
            ret_val = res.value if isinstance(res, ReturnSignal) else NONE
            if self.debug_level >= 1:
                self.debug(f"return {func.name} -> {to_string(ret_val, True)}")
            return ret_val
        raise PtipyError(Failure('TypeError', f'{func!r} is not callable'))

    def is_truthy(self, value: Any) -> bool:
        # False, 0, '' and [] are falsy; everything else, None included, is truthy
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            return len(value) > 0
        if isinstance(value, ListVal):
            return len(value.items) > 0
        return True

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in ('==', '!='):
            eq = self.equal_values(a, b)
            return eq if op == '==' else not eq
        if op not in BINARY_OPERATORS:
            raise PtipyError(Failure('TypeError', f'unknown operator {op}'))
        expected, table = BINARY_OPERATORS[op]
        impl = table.get((type_name(a), type_name(b)))
        if impl is None:
            raise PtipyError(Failure('TypeError', f'operator {op} must be applied to {expected}, got {type_name(a)} and {type_name(b)}'))
        return impl(a, b)

    def equal_values(self, a: Any, b: Any) -> bool:
        # Deep equality; values of different variants are never equal
        if type_name(a) != type_name(b):
            return False
        if isinstance(a, ListVal):
            if len(a.items) != len(b.items):
                return False
            return all(self.equal_values(x, y) for x, y in zip(a.items, b.items))
        if isinstance(a, NoneVal):
            return True
        return a == b


def run_program(program: Program, debug_level: int = 0, out: Optional[TextIO] = None) -> Interpreter:
    """Convenience function to run a program AST, returning the interpreter instance."""
    interpreter = Interpreter(debug_level=debug_level, out=out)
    interpreter.run(program)
    return interpreter


def run_file(file_path: str, debug_level: int = 0, out: Optional[TextIO] = None) -> Interpreter:
    """Load a JSON-serialized program and run it, returning the interpreter instance."""
    program = load_program(file_path)
    interpreter = Interpreter(debug_level=debug_level, out=out)
    interpreter.run(program)
    return interpreter

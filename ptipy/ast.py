"""Abstract Syntax Tree (AST) definitions for ptipy programs.

The AST classes defined in this module are the input contract of the
interpreter. A parser (not part of this package) builds them, or they are
loaded from JSON with :mod:`ptipy.ast_json`. Every statement and expression
node carries a :class:`Position` so that runtime failures can point back to
the source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class Position:
    line: int
    column: int
    filename: str = '<input>'

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


# Position used for nodes built without source information
NOWHERE = Position(0, 0, '<unknown>')


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]  # FuncDef or statements, in source order


@dataclass
class FuncDef(Node):
    name: str
    params: List[str]
    body: Node
    pos: Position = NOWHERE


###############################################################################
# Statements
###############################################################################

@dataclass
class Block(Node):
    statements: List[Node]
    pos: Position = NOWHERE


@dataclass
class If(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None
    pos: Position = NOWHERE


@dataclass
class While(Node):
    condition: Node
    body: Node
    pos: Position = NOWHERE


@dataclass
class For(Node):
    var: str
    iterable: Node
    body: Node
    pos: Position = NOWHERE


@dataclass
class Return(Node):
    value: Optional[Node]
    pos: Position = NOWHERE


@dataclass
class Assign(Node):
    target: Node  # Var or Index
    value: Node
    pos: Position = NOWHERE


@dataclass
class ExprStmt(Node):
    expr: Node
    pos: Position = NOWHERE


###############################################################################
# Expressions
###############################################################################

@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'int', 'bool', 'str' or 'None'
    pos: Position = NOWHERE


@dataclass
class Var(Node):
    name: str
    pos: Position = NOWHERE


@dataclass
class Index(Node):
    target: Node
    index: Node
    pos: Position = NOWHERE


@dataclass
class UnaryOp(Node):
    op: str  # '-' or 'not'
    operand: Node
    pos: Position = NOWHERE


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node
    pos: Position = NOWHERE


@dataclass
class ListLit(Node):
    elements: List[Node]
    pos: Position = NOWHERE


@dataclass
class Call(Node):
    name: str
    args: List[Node]
    pos: Position = NOWHERE


@dataclass
class Comprehension(Node):
    expr: Node
    var: str
    iterable: Node
    condition: Optional[Node] = None
    pos: Position = NOWHERE

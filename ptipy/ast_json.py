"""JSON serialization/deserialization for the ptipy AST.

This module converts between AST dataclasses and plain Python dict/list
structures suitable for JSON encoding, so that a program parsed elsewhere
can be handed to the interpreter as a file. Each node is an object with a
``"type"`` key naming the node class. Statement and expression nodes may
carry ``"pos": {"line": ..., "column": ...}`` (and optionally ``"file"``);
a missing position decodes to :data:`~ptipy.ast.NOWHERE`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from .ast import (
    Position,
    NOWHERE,
    Program,
    FuncDef,
    Block,
    If,
    While,
    For,
    Return,
    Assign,
    ExprStmt,
    Literal,
    Var,
    Index,
    UnaryOp,
    BinaryOp,
    ListLit,
    Call,
    Comprehension,
)
from .errors import AstFormatError
from .types import is_int

# literal_type -> check on the JSON value
LITERAL_CHECKS = {
    "int": is_int,
    "bool": lambda v: isinstance(v, bool),
    "str": lambda v: isinstance(v, str),
    "None": lambda v: v is None,
}


def pos_to_obj(pos: Position) -> Any:
    if pos == NOWHERE:
        return None
    return {"line": pos.line, "column": pos.column, "file": pos.filename}


def pos_from_obj(o: Any, filename: str) -> Position:
    if o is None:
        return NOWHERE
    if not isinstance(o, dict):
        raise AstFormatError(f"invalid position: {o!r}")
    return Position(int(o["line"]), int(o["column"]), o.get("file", filename))


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, FuncDef):
        obj = {"type": "FuncDef", "name": node.name, "params": list(node.params), "body": ast_to_obj(node.body)}
    elif isinstance(node, Block):
        obj = {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    elif isinstance(node, If):
        obj = {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    elif isinstance(node, While):
        obj = {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    elif isinstance(node, For):
        obj = {"type": "For", "var": node.var, "iterable": ast_to_obj(node.iterable), "body": ast_to_obj(node.body)}
    elif isinstance(node, Return):
        obj = {"type": "Return", "value": ast_to_obj(node.value)}
    elif isinstance(node, Assign):
        obj = {"type": "Assign", "target": ast_to_obj(node.target), "value": ast_to_obj(node.value)}
    elif isinstance(node, ExprStmt):
        obj = {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    elif isinstance(node, Literal):
        obj = {"type": "Literal", "value": node.value, "literal_type": node.literal_type}
    elif isinstance(node, Var):
        obj = {"type": "Var", "name": node.name}
    elif isinstance(node, Index):
        obj = {"type": "Index", "target": ast_to_obj(node.target), "index": ast_to_obj(node.index)}
    elif isinstance(node, UnaryOp):
        obj = {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    elif isinstance(node, BinaryOp):
        obj = {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    elif isinstance(node, ListLit):
        obj = {"type": "ListLit", "elements": [ast_to_obj(e) for e in node.elements]}
    elif isinstance(node, Call):
        obj = {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}
    elif isinstance(node, Comprehension):
        obj = {
            "type": "Comprehension",
            "expr": ast_to_obj(node.expr),
            "var": node.var,
            "iterable": ast_to_obj(node.iterable),
            "condition": ast_to_obj(node.condition),
        }
    else:
        raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")

    pos = pos_to_obj(node.pos)
    if pos is not None:
        obj["pos"] = pos
    return obj


def ast_from_obj(obj: Any, filename: str = '<input>') -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise AstFormatError(f"Invalid AST object: {obj!r}")
    try:
        return _node_from_obj(obj, filename)
    except (KeyError, TypeError, ValueError) as e:
        if isinstance(e, AstFormatError):
            raise
        raise AstFormatError(f"malformed {obj.get('type', 'AST')} node: {e!r}") from e


def _node_from_obj(obj: Dict[str, Any], filename: str) -> Any:
    def sub(o: Any) -> Any:
        return ast_from_obj(o, filename)

    t = obj.get("type")
    if t == "Program":
        return Program(body=[sub(n) for n in obj["body"]])

    pos = pos_from_obj(obj.get("pos"), filename)
    if t == "FuncDef":
        return FuncDef(name=obj["name"], params=list(obj["params"]), body=sub(obj["body"]), pos=pos)
    if t == "Block":
        return Block(statements=[sub(s) for s in obj["statements"]], pos=pos)
    if t == "If":
        return If(
            condition=sub(obj["condition"]),
            then_branch=sub(obj["then_branch"]),
            else_branch=sub(obj.get("else_branch")),
            pos=pos,
        )
    if t == "While":
        return While(condition=sub(obj["condition"]), body=sub(obj["body"]), pos=pos)
    if t == "For":
        return For(var=obj["var"], iterable=sub(obj["iterable"]), body=sub(obj["body"]), pos=pos)
    if t == "Return":
        return Return(value=sub(obj.get("value")), pos=pos)
    if t == "Assign":
        return Assign(target=sub(obj["target"]), value=sub(obj["value"]), pos=pos)
    if t == "ExprStmt":
        return ExprStmt(expr=sub(obj["expr"]), pos=pos)
    if t == "Literal":
        literal_type = obj["literal_type"]
        if literal_type not in LITERAL_CHECKS:
            raise AstFormatError(f"unknown literal type: {literal_type!r}")
        value = obj.get("value")
        if not LITERAL_CHECKS[literal_type](value):
            raise AstFormatError(f"{literal_type} literal has value {value!r}")
        return Literal(value=value, literal_type=literal_type, pos=pos)
    if t == "Var":
        return Var(name=obj["name"], pos=pos)
    if t == "Index":
        return Index(target=sub(obj["target"]), index=sub(obj["index"]), pos=pos)
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=sub(obj["operand"]), pos=pos)
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=sub(obj["left"]), right=sub(obj["right"]), pos=pos)
    if t == "ListLit":
        return ListLit(elements=[sub(e) for e in obj["elements"]], pos=pos)
    if t == "Call":
        return Call(name=obj["name"], args=[sub(a) for a in obj["args"]], pos=pos)
    if t == "Comprehension":
        return Comprehension(
            expr=sub(obj["expr"]),
            var=obj["var"],
            iterable=sub(obj["iterable"]),
            condition=sub(obj.get("condition")),
            pos=pos,
        )

    raise AstFormatError(f"Unknown AST node type: {t}")


def load_program(path: Union[str, Path]) -> Program:
    """Read a JSON file holding a serialized Program."""
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise AstFormatError(f"{path}: invalid JSON: {e}") from e
    program = ast_from_obj(data, str(path))
    if not isinstance(program, Program):
        raise AstFormatError(f"{path}: top-level node must be a Program")
    return program

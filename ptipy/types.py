"""Runtime value model for ptipy.

Integers, booleans and strings are represented by the corresponding Python
objects. The remaining variants have dedicated classes:

* :class:`NoneVal` -- the unit value, available as the :data:`NONE` constant.
* :class:`ListVal` -- a mutable list shared by reference. Two bindings hold
  the same list exactly when they hold the same ``ListVal`` object, so a
  mutation through one binding is visible through every other.
* :class:`RangeVal` -- a lazily described arithmetic progression that is
  materialized on demand.

Helpers in this module name and render values for the interpreter and the
builtins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Set


class NoneVal:
    """Marker object for the ptipy `None` value."""
    def __repr__(self) -> str:
        return 'None'


NONE = NoneVal()


@dataclass(eq=False)
class ListVal:
    """Handle on a mutable list of values.

    Equality is identity: structural comparison is the interpreter's job
    (see ``Interpreter.equal_values``).
    """
    items: List[Any]

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"ListVal({self.items!r})"


@dataclass(frozen=True)
class RangeVal:
    """An arithmetic progression with Python `range` semantics.

    ``stop`` is exclusive and ``step`` is never zero (the `range` builtin
    rejects it).
    """
    start: int
    stop: int
    step: int = 1

    def as_range(self) -> range:
        return range(self.start, self.stop, self.step)

    def __len__(self) -> int:
        return len(self.as_range())

    def __iter__(self) -> Iterator[int]:
        return iter(self.as_range())

    def materialize(self) -> ListVal:
        return ListVal(list(self.as_range()))


def is_int(value: Any) -> bool:
    # bool is a subclass of int; they are distinct variants here
    return isinstance(value, int) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the ptipy type name of a runtime value, as `type()` reports it."""
    if isinstance(value, bool):
        return 'bool'
    if isinstance(value, int):
        return 'int'
    if isinstance(value, str):
        return 'str'
    if isinstance(value, NoneVal):
        return 'NoneType'
    if isinstance(value, RangeVal):
        return 'range'
    if isinstance(value, ListVal):
        return 'list'
    raise TypeError(f"not a ptipy value: {value!r}")


def to_string(value: Any, escape: bool = False, _active: Optional[Set[int]] = None) -> str:
    """Render a value the way `print` shows it.

    With ``escape`` set, strings are wrapped in single quotes. List elements
    are always rendered escaped, so ``['a', 1]`` prints as such while a bare
    ``'a'`` prints as ``a``. A list that contains itself renders the inner
    occurrence as ``[...]``.
    """
    if isinstance(value, bool):
        return 'True' if value else 'False'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return f"'{value}'" if escape else value
    if isinstance(value, NoneVal):
        return 'None'
    if isinstance(value, RangeVal):
        return f"range({value.start}, {value.stop}, {value.step})"
    if isinstance(value, ListVal):
        active = _active if _active is not None else set()
        if id(value) in active:
            return '[...]'
        active.add(id(value))
        try:
            return '[' + ', '.join(to_string(item, True, active) for item in value.items) + ']'
        finally:
            active.discard(id(value))
    return str(value)

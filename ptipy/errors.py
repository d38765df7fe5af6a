from dataclasses import dataclass
from typing import Optional

from ptipy.ast import Position


@dataclass
class Failure:
    """A runtime failure: its category, a message and where it happened.

    ``kind`` is one of 'TypeError', 'NameError', 'ArityError', 'IndexError',
    'ZeroDivisionError', 'AssignmentError', 'ValueError' or 'ReturnError'.
    """
    kind: str
    message: str
    pos: Optional[Position] = None

    def format(self) -> str:
        if self.pos is None:
            return f"{self.kind}: {self.message}"
        return f"{self.pos}: {self.kind}: {self.message}"


class PtipyError(Exception):
    """Exception type used to propagate ptipy runtime failures."""
    def __init__(self, err: Failure):
        super().__init__(err.message)
        self.err = err

    def __str__(self) -> str:
        return self.err.format()


class FatalError(Exception):
    """Non-recoverable failure of the host, e.g. call stack exhaustion."""


class AstFormatError(ValueError):
    """Raised when serialized AST data does not describe a valid program."""

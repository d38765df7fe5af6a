# ptipy language package
# This package provides a tree-walking interpreter for a small Python subset.
from .interpreter import run_program, run_file, Interpreter
from .errors import PtipyError, FatalError, AstFormatError

__all__ = [
    'run_program',
    'run_file',
    'Interpreter',
    'PtipyError',
    'FatalError',
    'AstFormatError',
]

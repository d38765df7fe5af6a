"""CLI entry point for the ptipy interpreter.

Usage:
    python -m ptipy [-v|-vv|-vvv] [--debug-file FILE] [--max-depth N]
                    [--recursion-limit N] <program.json>

The program file holds a JSON-serialized AST (see ``ptipy.ast_json``).

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Where debug traces go (default: debug.txt)
  --max-depth   Fail once more than N user function calls are active
  --recursion-limit
                Host stack frames allowed while running (default: 20000)

Exit status: 0 on success, 1 for usage errors or an unreadable file, 2 for a
malformed AST, 3 for a runtime error and 4 for any other (fatal) error.
"""

import argparse
import sys
from pathlib import Path

from .ast_json import load_program
from .errors import AstFormatError, FatalError, PtipyError
from .interpreter import DEFAULT_RECURSION_LIMIT, Interpreter

EXIT_USAGE = 1
EXIT_SYNTAX = 2
EXIT_RUNTIME = 3
EXIT_UNKNOWN = 4


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='ptipy', description="ptipy language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='file receiving debug traces')
    parser.add_argument('--max-depth', type=int, default=None, help='maximum number of active function calls')
    parser.add_argument('--recursion-limit', type=int, default=DEFAULT_RECURSION_LIMIT,
                        help='host recursion limit while the program runs')
    parser.add_argument('program', help='program AST file (.json) to execute')
    args = parser.parse_args(argv)

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    try:
        ast_program = load_program(program_file)
    except AstFormatError as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(EXIT_SYNTAX)
    except OSError as e:
        print(f"Error: cannot read {program_file}: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    interpreter = Interpreter(debug_level=args.v, debug_file=args.debug_file, max_depth=args.max_depth,
                              recursion_limit=args.recursion_limit)
    try:
        interpreter.run(ast_program)
    except PtipyError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(EXIT_RUNTIME)
    except FatalError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(EXIT_UNKNOWN)
    except Exception as e:
        print(f"Unknown error: {e!r}", file=sys.stderr)
        sys.exit(EXIT_UNKNOWN)


if __name__ == '__main__':
    main()

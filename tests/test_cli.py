import json
from pathlib import Path

import pytest

from ptipy.__main__ import main, EXIT_RUNTIME, EXIT_SYNTAX, EXIT_UNKNOWN, EXIT_USAGE

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def write_program(path, body):
    path.write_text(json.dumps({"type": "Program", "body": body}))
    return path


def test_runs_program(capsys):
    main([str(EXAMPLES / 'program_2.json')])
    assert capsys.readouterr().out.splitlines() == ['120', '3628800']


def test_runtime_error_exit_status(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(EXAMPLES / 'program_5.json')])
    assert excinfo.value.code == EXIT_RUNTIME
    captured = capsys.readouterr()
    assert captured.out == '1\n'
    assert 'program_5.json:2:5: ZeroDivisionError: division by zero' in captured.err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.json')])
    assert excinfo.value.code == EXIT_USAGE
    assert 'not found' in capsys.readouterr().err


def test_malformed_ast(tmp_path, capsys):
    path = tmp_path / 'bad.json'
    path.write_text('{"type": "Program", "body": [{"type": "Mystery"}]}')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_SYNTAX
    assert 'Mystery' in capsys.readouterr().err


def test_max_depth_exceeded_is_fatal(tmp_path, capsys):
    path = write_program(tmp_path / 'loop.json', [
        {"type": "FuncDef", "name": "f", "params": [],
         "body": {"type": "Return", "value": {"type": "Call", "name": "f", "args": []}}},
        {"type": "ExprStmt", "expr": {"type": "Call", "name": "f", "args": []}},
    ])
    with pytest.raises(SystemExit) as excinfo:
        main(['--max-depth', '20', str(path)])
    assert excinfo.value.code == EXIT_UNKNOWN
    assert 'Fatal error' in capsys.readouterr().err


def test_debug_trace_written_to_file(tmp_path, capsys):
    trace = tmp_path / 'trace.txt'
    main(['-vv', '--debug-file', str(trace), str(EXAMPLES / 'program_2.json')])
    assert capsys.readouterr().out.splitlines() == ['120', '3628800']
    lines = trace.read_text().splitlines()
    assert lines[0].startswith('run program')
    assert 'define function fact(n)' in lines
    assert 'call fact(5)' in lines
    assert 'return fact -> 120' in lines
    assert lines[-1] == 'end of program'


def test_mistyped_literal_is_malformed_ast(tmp_path, capsys):
    path = write_program(tmp_path / 'float.json', [
        {"type": "ExprStmt", "expr": {"type": "Call", "name": "print",
                                      "args": [{"type": "Literal", "value": 1.5, "literal_type": "int"}]}},
    ])
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == EXIT_SYNTAX
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'int literal has value 1.5' in captured.err


def test_recursion_limit_option(tmp_path, capsys):
    path = write_program(tmp_path / 'deep.json', [
        {"type": "FuncDef", "name": "down", "params": ["n"],
         "body": {"type": "If",
                  "condition": {"type": "BinaryOp", "op": "==", "left": {"type": "Var", "name": "n"},
                                "right": {"type": "Literal", "value": 0, "literal_type": "int"}},
                  "then_branch": {"type": "Return", "value": {"type": "Literal", "value": 0, "literal_type": "int"}},
                  "else_branch": {"type": "Return", "value": {"type": "Call", "name": "down", "args": [
                      {"type": "BinaryOp", "op": "-", "left": {"type": "Var", "name": "n"},
                       "right": {"type": "Literal", "value": 1, "literal_type": "int"}}]}}}},
        {"type": "ExprStmt", "expr": {"type": "Call", "name": "print", "args": [
            {"type": "Call", "name": "down", "args": [{"type": "Literal", "value": 2000, "literal_type": "int"}]}]}},
    ])
    main(['--recursion-limit', '40000', str(path)])
    assert capsys.readouterr().out == '0\n'

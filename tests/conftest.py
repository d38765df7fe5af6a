import io

import pytest

from ptipy.ast import Program
from ptipy.interpreter import Interpreter


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def interp(out):
    return Interpreter(out=out)


@pytest.fixture
def run(interp, out):
    """Run global statements on the fixture interpreter and return the printed lines."""
    def _run(*body):
        interp.run(Program(list(body)))
        return out.getvalue().splitlines()
    return _run

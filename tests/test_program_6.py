from pathlib import Path

from lbasic.interpreter import compile_program, Interpreter
from lbasic.registry import FunctionSetRegistry

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_branching(capsys):
    with open(EXAMPLES / 'program_6.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = compile_program(source)
    interp = Interpreter(FunctionSetRegistry())
    interp.run(program)
    out = capsys.readouterr().out.strip().split('\n')
    assert out == ['1', '2', 'fizz', '4', '5', 'done']

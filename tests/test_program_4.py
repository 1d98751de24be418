from pathlib import Path

from lbasic.interpreter import compile_program, Interpreter
from lbasic.registry import FunctionSetRegistry

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_4_subroutines(capsys):
    with open(EXAMPLES / 'program_4.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = compile_program(source)
    interp = Interpreter(FunctionSetRegistry())
    interp.run(program)
    out = capsys.readouterr().out.strip().split('\n')
    assert out == ['3 squared is 9', '7 squared is 49']
    assert interp.env.call_stack == []
    assert interp.error is None

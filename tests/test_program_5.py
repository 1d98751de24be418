from pathlib import Path

from lbasic.interpreter import compile_program, Interpreter
from lbasic.registry import FunctionSetRegistry

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_two_dimensional_array(capsys):
    with open(EXAMPLES / 'program_5.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = compile_program(source)
    interp = Interpreter(FunctionSetRegistry())
    interp.run(program)
    out = capsys.readouterr().out.strip().split('\n')
    assert out == ['6', '9']
    table = interp.env.get_array('T')
    assert table.dimension == 2
    assert len(table.cells) == 9
    assert table.cells['2,1'] == 2

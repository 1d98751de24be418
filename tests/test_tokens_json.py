import json
from pathlib import Path

import pytest

from lbasic.interpreter import compile_program
from lbasic.tokens import Token, STATIC, NUM
from lbasic.tokens_json import program_to_obj, program_from_obj, token_from_obj, token_to_obj

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_token_objects():
    assert token_to_obj(Token(STATIC, 'PRINT')) == {'kind': 'STATIC', 'value': 'PRINT'}
    assert token_from_obj({'kind': 'NUM', 'value': 10}) == Token(NUM, '10')
    with pytest.raises(ValueError):
        token_from_obj({'kind': 'KEYWORD', 'value': 'PRINT'})


def test_program_survives_json():
    with open(EXAMPLES / 'program_4.bas', 'r', encoding='utf-8') as f:
        program = compile_program(f.read())
    data = json.loads(json.dumps(program_to_obj(program)))
    assert data['type'] == 'Program'
    assert data['lines'][0]['number'] == 10
    restored = program_from_obj(data)
    assert restored.numbers == program.numbers
    assert restored.lines == program.lines


@pytest.mark.parametrize('obj', [
    {'type': 'Module', 'lines': []},
    {'type': 'Program', 'lines': [{'number': -1, 'tokens': []}]},
    {'type': 'Program', 'lines': [{'number': '10', 'tokens': []}]},
    [],
])
def test_invalid_programs(obj):
    with pytest.raises(ValueError):
        program_from_obj(obj)

import pytest

from lbasic.errors import BasicError
from lbasic.evaluator import evaluate_tokens, to_infix
from lbasic.lexer import tokenize
from lbasic.tokens import Token, NUM, OPERATOR
from lbasic.types import parse_number, to_string


def ev(text):
    return evaluate_tokens(tokenize(text))


@pytest.mark.parametrize('text, expected', [
    ('42', 42),
    ('1 + 2 * 3', 7),
    ('(1 + 2) * 3', 9),
    ('10 - 2 - 3', 5),
    ('8 / 2 / 2', 2),
    ('7 / 2', 3.5),
    ('1.5 + 1.5', 3),
    ('- 3 + 5', 2),
])
def test_arithmetic(text, expected):
    result = ev(text)
    assert result == expected
    assert type(result) is type(expected)


def test_negative_value_tokens():
    tokens = [Token(NUM, '-2'), Token(OPERATOR, 'TIMES'), Token(NUM, '3')]
    assert to_infix(tokens) == '(-2) * 3'
    assert evaluate_tokens(tokens) == -6


def test_division_by_zero():
    with pytest.raises(BasicError) as exc:
        ev('1 / 0')
    assert exc.value.name == 'ArithmeticError'


def test_non_arithmetic_runs_are_not_infix():
    assert to_infix(tokenize('"a" + 1')) is None


@pytest.mark.parametrize('text, expected', [
    ('"a" + "b"', 'ab'),
    ('"a" - "b"', 'ab'),
    ('"n=" + 5', 'n=5'),
    ('"x" + TRUE', 'xTRUE'),
    ('"solo"', 'solo'),
])
def test_string_concatenation(text, expected):
    assert ev(text) == expected


@pytest.mark.parametrize('text', ['"a" * "b"', '"a" "b"', '(1 + 2'])
def test_string_eval_errors(text):
    with pytest.raises(BasicError) as exc:
        ev(text)
    assert exc.value.name == 'StringEvalError'


def test_empty_expression():
    assert evaluate_tokens([]) == ''


def test_number_text_has_no_exponent():
    assert to_string(1e-05) == '0.00001'
    assert to_string(-0.25) == '-0.25'
    assert parse_number('1e-05') == 1e-05
    assert evaluate_tokens([Token(NUM, to_string(1e-05)), Token(OPERATOR, 'TIMES'), Token(NUM, '2')]) == 2e-05

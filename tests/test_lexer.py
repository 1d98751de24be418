import pytest

from lbasic.errors import BasicError
from lbasic.lexer import tokenize
from lbasic.tokens import Token, STATIC, VAR, VAR_ARRAY, NUM, STR, OPERATOR, RELATIONAL, BOOLEAN


def kinds(tokens):
    return [t.kind for t in tokens]


def test_print_string():
    assert tokenize('PRINT "Hello World!"') == [Token(STATIC, 'PRINT'), Token(STR, 'Hello World!')]


def test_let_with_arithmetic():
    assert tokenize('LET A = 1.5 + B') == [
        Token(STATIC, 'LET'),
        Token(VAR, 'A'),
        Token(OPERATOR, 'EQ'),
        Token(NUM, '1.5'),
        Token(OPERATOR, 'PLUS'),
        Token(VAR, 'B'),
    ]


def test_if_line():
    assert tokenize('IF X <> 3 THEN GOTO 10') == [
        Token(STATIC, 'IF'),
        Token(VAR, 'X'),
        Token(RELATIONAL, 'NEQ'),
        Token(NUM, '3'),
        Token(STATIC, 'THEN'),
        Token(STATIC, 'GOTO'),
        Token(NUM, '10'),
    ]


@pytest.mark.parametrize('text, tag', [
    ('A<B', 'LT'),
    ('A<=B', 'LTEQ'),
    ('A>B', 'GT'),
    ('A>=B', 'GTEQ'),
    ('A==B', 'EQEQ'),
    ('A<>B', 'NEQ'),
])
def test_relational_operators_end_variables(text, tag):
    assert tokenize(text) == [Token(VAR, 'A'), Token(RELATIONAL, tag), Token(VAR, 'B')]


def test_keyword_needs_whitespace_after_it():
    assert tokenize('PRINTX') == [Token(VAR, 'PRINTX')]
    assert tokenize('TOTAL = 1') == [Token(VAR, 'TOTAL'), Token(OPERATOR, 'EQ'), Token(NUM, '1')]
    assert tokenize('END') == [Token(STATIC, 'END')]


def test_array_access():
    tokens = tokenize('A[1][I] = 3')
    assert tokens[0] == Token(VAR_ARRAY, 'A')
    assert kinds(tokens) == [VAR_ARRAY, OPERATOR, NUM, OPERATOR, OPERATOR, VAR, OPERATOR, OPERATOR, NUM]
    assert tokens[5] == Token(VAR, 'I')


def test_rem_swallows_the_rest_of_the_line():
    assert tokenize('REM anything "goes here') == [Token(STATIC, 'REM')]
    # a longer word starting with REM is a variable
    assert tokenize('REMARK = 1')[0] == Token(VAR, 'REMARK')


def test_booleans():
    assert tokenize('PRINT TRUE') == [Token(STATIC, 'PRINT'), Token(BOOLEAN, 'TRUE')]
    assert tokenize('X = FALSEHOOD')[2] == Token(VAR, 'FALSEHOOD')


def test_namespaced_variable():
    assert tokenize('NS@X=1') == [Token(VAR, 'NS@X'), Token(OPERATOR, 'EQ'), Token(NUM, '1')]


def test_punctuation():
    assert tokenize('INPUT "n" ; N') == [
        Token(STATIC, 'INPUT'), Token(STR, 'n'), Token(OPERATOR, 'SEMICOLON'), Token(VAR, 'N'),
    ]
    assert tokenize('ARRAY T, 2') == [
        Token(STATIC, 'ARRAY'), Token(VAR, 'T'), Token(OPERATOR, 'COMMA'), Token(NUM, '2'),
    ]
    assert kinds(tokenize('(1 + 2) * 3 / 4 - 5')) == [OPERATOR, NUM, OPERATOR, NUM, OPERATOR,
                                                     OPERATOR, NUM, OPERATOR, NUM, OPERATOR, NUM]


def test_empty_line():
    assert tokenize('') == []
    assert tokenize('   ') == []


def test_unterminated_string():
    with pytest.raises(BasicError) as exc:
        tokenize('PRINT "oops', '20')
    assert exc.value.name == 'LexError'
    assert exc.value.err.message == 'unterminated string row: 20'


@pytest.mark.parametrize('text', ['PRINT 3.', 'PRINT 1.2.3', 'PRINT 10A'])
def test_malformed_numbers(text):
    with pytest.raises(BasicError) as exc:
        tokenize(text, '30')
    assert exc.value.name == 'LexError'
    assert exc.value.err.message == 'could not parse number row: 30'

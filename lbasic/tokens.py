"""Token definitions for the line-numbered BASIC dialect.

A source line is lexed into a flat sequence of `Token` objects. Each token
has a `kind` (one of the constants below) and a `value` holding the literal
text: the keyword name, the variable name, the digits of a number, the body
of a string literal or the symbolic name of an operator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


STATIC = 'STATIC'
VAR = 'VAR'
VAR_ARRAY = 'VAR_ARRAY'
NUM = 'NUM'
STR = 'STR'
OPERATOR = 'OPERATOR'
RELATIONAL = 'RELATIONAL'
BOOLEAN = 'BOOLEAN'

TOKEN_KINDS = (STATIC, VAR, VAR_ARRAY, NUM, STR, OPERATOR, RELATIONAL, BOOLEAN)

KEYWORDS = frozenset([
    'PRINT', 'LET', 'GOTO', 'ARRAY', 'INPUT', 'END', 'IF', 'THEN', 'ELSE', 'FOR', 'TO',
    'STEP', 'NEXT', 'GOSUB', 'NAMESPACE', 'LOAD', 'IMPORT', 'AS', 'RETURN', 'PLOT',
    'DISPLAY', 'DRAW', 'TEXT', 'PAUSE', 'EXPORT', 'CLS', 'CLT', 'CLC', 'REM',
])

BOOLEANS = frozenset(['TRUE', 'FALSE'])

# Single character operators and punctuation.
OPERATORS: Dict[str, str] = {
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'TIMES',
    '/': 'SLASH',
    ',': 'COMMA',
    ';': 'SEMICOLON',
    '(': 'LPAREN',
    ')': 'RPAREN',
    '[': 'LBRACKET',
    ']': 'RBRACKET',
}

# Operator tags that may appear in an arithmetic expression, with their infix text.
ARITHMETIC: Dict[str, str] = {
    'PLUS': '+',
    'MINUS': '-',
    'TIMES': '*',
    'SLASH': '/',
    'LPAREN': '(',
    'RPAREN': ')',
}

# Assignment operator produced by a bare '='.
EQ = 'EQ'


@dataclass(frozen=True)
class Token:
    kind: str
    value: str

    def is_static(self, keyword: str) -> bool:
        return self.kind == STATIC and self.value == keyword

    def is_operator(self, tag: str) -> bool:
        return self.kind == OPERATOR and self.value == tag

    def __repr__(self) -> str:
        return f"{self.kind}({self.value!r})"


def find_static(tokens: List[Token], keyword: str, start: int = 0) -> int:
    """Return the index of the first STATIC `keyword` at or after `start`, or -1."""
    for i in range(start, len(tokens)):
        if tokens[i].is_static(keyword):
            return i
    return -1


def find_operator(tokens: List[Token], tag: str, start: int = 0) -> int:
    for i in range(start, len(tokens)):
        if tokens[i].is_operator(tag):
            return i
    return -1

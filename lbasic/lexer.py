"""Lexer for the line-numbered BASIC dialect.

`tokenize` scans one line of source text left to right, one character at a
time. A string literal runs from `"` to the next `"`; a number is a run of
digits with an optional decimal part; everything else accumulates into a
word until a lookahead character decides what the word is. Keywords and
booleans must be followed by whitespace or the end of the line, a word
followed directly by `[` names an array, and any other word becomes a
variable once a terminator follows it. There is no backtracking.
"""

from __future__ import annotations

from typing import List, Optional

from .errors import fail
from .tokens import (
    Token, STATIC, VAR, VAR_ARRAY, NUM, STR, OPERATOR, RELATIONAL, BOOLEAN,
    KEYWORDS, BOOLEANS, OPERATORS, EQ,
)


WHITESPACE = frozenset(' \t\n\r')
DIGITS = frozenset('0123456789')

# Characters that close a variable name.
VAR_TERMINATORS = (WHITESPACE | frozenset(OPERATORS) | frozenset('=<>')) - {'['}


def _word_ends(text: str, i: int) -> bool:
    return i >= len(text) or text[i] in WHITESPACE


def _scan_number(text: str, start: int, row: Optional[str]) -> int:
    """Return the index just past the number starting at `start`."""
    length = len(text)
    i = start
    while i < length and text[i] in DIGITS:
        i += 1
    if i < length and text[i] == '.':
        j = i + 1
        while j < length and text[j] in DIGITS:
            j += 1
        if j == i + 1:
            raise fail('LexError', f'could not parse number row: {row}')
        i = j
    # a digit run glued to a word or a second decimal point
    if i < length and (text[i].isalpha() or text[i] in '._@$'):
        raise fail('LexError', f'could not parse number row: {row}')
    return i


def tokenize(text: str, row: Optional[str] = None) -> List[Token]:
    """Convert one line of command text into tokens.

    `row` is the line key used in error messages. Raises a `LexError`
    `BasicError` for a malformed number or an unterminated string.
    """
    tokens: List[Token] = []
    word = ''
    i = 0
    length = len(text)
    while i < length:
        c = text[i]
        if not word:
            if c in WHITESPACE:
                i += 1
                continue
            if c == '"':
                end = text.find('"', i + 1)
                if end < 0:
                    raise fail('LexError', f'unterminated string row: {row}')
                tokens.append(Token(STR, text[i + 1:end]))
                i = end + 1
                continue
            if c in DIGITS:
                end = _scan_number(text, i, row)
                tokens.append(Token(NUM, text[i:end]))
                i = end
                continue
            nxt = text[i + 1] if i + 1 < length else ''
            if c == '=':
                if nxt == '=':
                    tokens.append(Token(RELATIONAL, 'EQEQ'))
                    i += 2
                else:
                    tokens.append(Token(OPERATOR, EQ))
                    i += 1
                continue
            if c == '<':
                if nxt == '=':
                    tokens.append(Token(RELATIONAL, 'LTEQ'))
                    i += 2
                elif nxt == '>':
                    tokens.append(Token(RELATIONAL, 'NEQ'))
                    i += 2
                else:
                    tokens.append(Token(RELATIONAL, 'LT'))
                    i += 1
                continue
            if c == '>':
                if nxt == '=':
                    tokens.append(Token(RELATIONAL, 'GTEQ'))
                    i += 2
                else:
                    tokens.append(Token(RELATIONAL, 'GT'))
                    i += 1
                continue
            if c in OPERATORS:
                tokens.append(Token(OPERATOR, OPERATORS[c]))
                i += 1
                continue
        word += c
        i += 1
        if word == 'REM' and _word_ends(text, i):
            # comment: the rest of the line is ignored
            tokens.append(Token(STATIC, 'REM'))
            return tokens
        if word in BOOLEANS and _word_ends(text, i):
            tokens.append(Token(BOOLEAN, word))
            word = ''
        elif word in KEYWORDS and _word_ends(text, i):
            tokens.append(Token(STATIC, word))
            word = ''
        elif i < length and text[i] == '[':
            tokens.append(Token(VAR_ARRAY, word))
            word = ''
        elif i >= length or text[i] in VAR_TERMINATORS:
            tokens.append(Token(VAR, word))
            word = ''
    return tokens

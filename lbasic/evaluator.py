"""Expression evaluation over translated token runs.

Evaluation works on tokens whose variables have already been replaced by
their values (see `Environment.translate`). Two rules are tried in order:

1. **Arithmetic**: if every token is a number or one of `+ - * / ( )`, the
   tokens are joined into an infix expression and evaluated with a Lark
   grammar. `*` and `/` bind tighter than `+` and `-`; operators of equal
   precedence associate to the left. Division by zero is an
   `ArithmeticError`.

2. **String**: otherwise the tokens must alternate value (string, number or
   boolean) and a `+` or `-` separator. The values are concatenated in
   order. The separator's sign is not applied, so `"a" - "b"` is `"ab"`.
"""

from __future__ import annotations

from typing import List, Optional, Union

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError, VisitError

from .errors import BasicError, fail
from .tokens import Token, NUM, STR, BOOLEAN, OPERATOR, ARITHMETIC
from .types import Value, normalize_number, parse_number


ARITHMETIC_GRAMMAR = r"""
    ?start: sum

    ?sum: product
        | sum "+" product   -> add
        | sum "-" product   -> sub

    ?product: unary
        | product "*" unary -> mul
        | product "/" unary -> div

    ?unary: atom
        | "-" unary         -> neg
        | "+" unary

    ?atom: NUMBER           -> number
        | "(" sum ")"

    %import common.NUMBER
    %import common.WS_INLINE
    %ignore WS_INLINE
"""


ARITHMETIC_PARSER = Lark(
    ARITHMETIC_GRAMMAR,
    parser='lalr',
    maybe_placeholders=False,
)


@v_args(inline=True)
class ArithmeticTransformer(Transformer):
    """Folds an arithmetic parse tree into a number."""

    def number(self, token):
        return parse_number(str(token))

    def add(self, a, b):
        return a + b

    def sub(self, a, b):
        return a - b

    def mul(self, a, b):
        return a * b

    def div(self, a, b):
        if b == 0:
            raise fail('ArithmeticError', 'division by zero')
        return normalize_number(a / b)

    def neg(self, a):
        return -a


def to_infix(tokens: List[Token]) -> Optional[str]:
    """Join an arithmetic token run into infix text, or None if it is not one."""
    parts: List[str] = []
    for token in tokens:
        if token.kind == NUM:
            # negative values come back from variables; keep them atomic
            if token.value.startswith('-'):
                parts.append(f"({token.value})")
            else:
                parts.append(token.value)
        elif token.kind == OPERATOR and token.value in ARITHMETIC:
            parts.append(ARITHMETIC[token.value])
        else:
            return None
    return ' '.join(parts)


def evaluate_arithmetic(tokens: List[Token]) -> Optional[Union[int, float]]:
    """Evaluate an arithmetic token run.

    Returns None when the run is not arithmetic or does not parse, so the
    caller can fall back to string evaluation.
    """
    infix = to_infix(tokens)
    if not infix:
        return None
    try:
        tree = ARITHMETIC_PARSER.parse(infix)
    except LarkError:
        return None
    try:
        result = ArithmeticTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, BasicError):
            raise e.orig_exc
        raise fail('ArithmeticError', f'could not evaluate {infix!r}: {e.orig_exc}')
    return normalize_number(result)


def evaluate_string(tokens: List[Token]) -> str:
    """Concatenate an alternating value/separator token run."""
    out: List[str] = []
    for i, token in enumerate(tokens):
        if i % 2 == 0:
            if token.kind in (STR, NUM, BOOLEAN):
                out.append(str(token.value))
            else:
                raise fail('StringEvalError', f'cannot evaluate {tokens!r}')
        elif not (token.is_operator('PLUS') or token.is_operator('MINUS')):
            raise fail('StringEvalError', f'cannot evaluate {tokens!r}')
    return ''.join(out)


def evaluate_tokens(tokens: List[Token]) -> Value:
    """Evaluate an already translated token run, numerically first."""
    result = evaluate_arithmetic(tokens)
    if result is not None:
        return result
    return evaluate_string(tokens)

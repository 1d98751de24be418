from typing import Any, Dict, List, Optional, Sequence, Tuple

from lbasic.errors import fail
from lbasic.evaluator import evaluate_tokens
from lbasic.tokens import Token, VAR, VAR_ARRAY, NUM, STR, RELATIONAL, EQ
from lbasic.types import (
    ArrayVal, LoopFrame, Value, infer_value, is_number, parse_number, to_string,
)


class Environment:
    """Runtime state for one function set: variables, arrays, namespace and stacks.

    Names are qualified with the active namespace (`NS@NAME`) on every
    access unless they already contain `@`.
    """
    MAX_LOOP_COUNT = 100_000

    def __init__(self, name: str):
        self.name = name
        self.variables: Dict[str, Value] = {}
        self.arrays: Dict[str, ArrayVal] = {}
        self.namespace = ''
        self.call_stack: List[int] = []
        self.loop_stack: List[LoopFrame] = []
        self.max_loop_count = self.MAX_LOOP_COUNT

    def resolve(self, name: str) -> str:
        if '@' in name:
            return name
        if self.namespace:
            return f"{self.namespace}@{name}"
        return name

    # Variables

    def get_variable(self, name: str) -> Value:
        qualified = self.resolve(name)
        if qualified in self.variables:
            return self.variables[qualified]
        raise fail('VariableNotDeclared', f'variable {qualified} is not declared')

    def set_variable(self, name: str, value: Any, raw: bool = False):
        """Store `value`; unless `raw`, numeric-looking text becomes a number."""
        qualified = self.resolve(name)
        # a qualified name denotes one variable or one array, never both
        self.arrays.pop(qualified, None)
        self.variables[qualified] = to_string(value) if raw else infer_value(value)

    def delete_variable(self, name: str):
        self.variables.pop(self.resolve(name), None)

    # Arrays

    def get_array(self, name: str) -> ArrayVal:
        qualified = self.resolve(name)
        if qualified in self.arrays:
            return self.arrays[qualified]
        raise fail('ArrayNotDeclared', f'array {qualified} is not declared')

    def create_array(self, name: str, dimension: Any = 1) -> ArrayVal:
        try:
            dimension = int(to_string(dimension))
        except ValueError:
            raise fail('ArraySyntaxError', f'array dimension must be an integer, got {dimension!r}')
        if dimension < 1:
            raise fail('ArraySyntaxError', f'array dimension must be at least 1, got {dimension}')
        qualified = self.resolve(name)
        self.variables.pop(qualified, None)
        array = ArrayVal(qualified, dimension)
        self.arrays[qualified] = array
        return array

    def check_arity(self, array: ArrayVal, count: int):
        if count > array.dimension:
            raise fail('ArrayArityError',
                       f'too many keys for array {array.name}: {count} given, dimension {array.dimension}')
        if count < array.dimension:
            raise fail('ArrayArityError',
                       f'too few keys for array {array.name}: {count} given, dimension {array.dimension}')

    def update_array_cell(self, name: str, index: Sequence[Any], value: Any):
        array = self.get_array(name)
        self.check_arity(array, len(index))
        array.cells[self.cell_key(index)] = infer_value(value)

    def get_array_cell(self, name: str, index: Sequence[Any]) -> Value:
        array = self.get_array(name)
        self.check_arity(array, len(index))
        # cells that were never written read as zero
        return array.cells.get(self.cell_key(index), 0)

    @staticmethod
    def cell_key(index: Sequence[Any]) -> str:
        return ','.join(to_string(i) for i in index)

    def read_indices(self, tokens: Sequence[Token]) -> Tuple[List[Value], int]:
        """Evaluate the bracketed indices at the start of `tokens`.

        Returns the index values and the number of tokens they span. Index
        expressions may themselves contain array reads.
        """
        indices: List[Value] = []
        expr: List[Token] = []
        depth = 0
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token.is_operator('LBRACKET'):
                if depth > 0:
                    expr.append(token)
                depth += 1
            elif token.is_operator('RBRACKET'):
                if depth == 0:
                    raise fail('ArraySyntaxError', f'unexpected ] in {list(tokens)!r}')
                depth -= 1
                if depth > 0:
                    expr.append(token)
                else:
                    if not expr:
                        raise fail('ArraySyntaxError', f'empty array index in {list(tokens)!r}')
                    indices.append(self.evaluate(expr))
                    expr = []
                    if i + 1 >= len(tokens) or not tokens[i + 1].is_operator('LBRACKET'):
                        return indices, i + 1
            elif depth > 0:
                expr.append(token)
            else:
                raise fail('ArraySyntaxError', f'array syntax error in {list(tokens)!r}')
            i += 1
        if depth > 0:
            raise fail('ArraySyntaxError', f'missing ] in {list(tokens)!r}')
        return indices, i

    # Evaluation

    def translate(self, tokens: Sequence[Token]) -> List[Token]:
        """Replace variable and array reads with value tokens."""
        out: List[Token] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token.kind == VAR:
                out.append(self.value_token(self.get_variable(token.value)))
            elif token.kind == VAR_ARRAY:
                indices, consumed = self.read_indices(tokens[i + 1:])
                out.append(self.value_token(self.get_array_cell(token.value, indices)))
                i += consumed
            else:
                out.append(token)
            i += 1
        return out

    @staticmethod
    def value_token(value: Value) -> Token:
        if is_number(value):
            return Token(NUM, to_string(value))
        return Token(STR, to_string(value))

    def evaluate(self, tokens: Sequence[Token]) -> Value:
        return evaluate_tokens(self.translate(tokens))

    def compare(self, tokens: Sequence[Token]) -> bool:
        """Evaluate a relational condition such as `A + 1 < 10`.

        Raises a `ComparisonError` when there is no relational operator; any
        evaluator failure on either side propagates.
        """
        op_index: Optional[int] = None
        for i, token in enumerate(tokens):
            if token.kind == RELATIONAL:
                op_index = i
                break
        if op_index is None:
            # classic BASIC: a bare '=' in a condition compares for equality
            for i, token in enumerate(tokens):
                if token.is_operator(EQ):
                    op_index = i
                    break
        if op_index is None:
            raise fail('ComparisonError', f'no relational operator in {list(tokens)!r}')
        op = tokens[op_index].value
        left = self.evaluate(tokens[:op_index])
        right = self.evaluate(tokens[op_index + 1:])
        if is_number(left) and is_number(right):
            a: Any = parse_number(to_string(left))
            b: Any = parse_number(to_string(right))
        else:
            a = to_string(left)
            b = to_string(right)
        if op in ('EQEQ', EQ):
            return a == b
        if op == 'NEQ':
            return a != b
        if op == 'LT':
            return a < b
        if op == 'LTEQ':
            return a <= b
        if op == 'GT':
            return a > b
        if op == 'GTEQ':
            return a >= b
        raise fail('ComparisonError', f'unknown relational operator {op}')

    # Stacks

    def push_call(self, position: int):
        self.call_stack.append(position)

    def pop_call(self) -> Optional[int]:
        if not self.call_stack:
            return None
        return self.call_stack.pop()

    def push_loop(self, frame: LoopFrame):
        self.loop_stack.append(frame)

    def top_loop(self) -> LoopFrame:
        if not self.loop_stack:
            raise fail('ForLoopMismatch', 'NEXT without FOR')
        return self.loop_stack[-1]

    def pop_loop(self) -> LoopFrame:
        if not self.loop_stack:
            raise fail('ForLoopMismatch', 'NEXT without FOR')
        return self.loop_stack.pop()

"""Runtime value types for the BASIC interpreter.

Values are plain Python `int`, `float` and `str` objects. Whether a value
is a number or text is decided once, when it is written to a variable or an
array cell (`infer_value`), and the Python type carries that tag from then
on. This module also defines the array record, the FOR/NEXT loop frame and
the small result objects the control-flow engine uses to tell its caller
what should happen after a line has run.
"""

from __future__ import annotations

import re
from decimal import Decimal
from dataclasses import dataclass, field
from typing import Any, Dict, Union


Value = Union[int, float, str]

NUMBER_RE = re.compile(r'^-?(0|[1-9][0-9]*)(\.[0-9]+)?$')


@dataclass
class ErrorVal:
    """Describes an interpreter error: a taxonomy name and a message."""
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


@dataclass
class ArrayVal:
    """A declared array.

    `dimension` fixes how many bracketed indices every access must carry.
    Cells are keyed by the comma-joined text of the evaluated indices, so
    `A[1][2]` lives under the key `"1,2"`.
    """
    name: str
    dimension: int
    cells: Dict[str, Value] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Array({self.name!r}, dim={self.dimension}, {self.cells!r})"


@dataclass
class LoopFrame:
    """Bookkeeping for one active FOR loop."""
    var: str
    goal: Value
    step: Value
    anchor: int
    count: int = 0


# Control-flow results returned by the engine for each executed line.

@dataclass(frozen=True)
class Continue:
    """Proceed with the next line."""


@dataclass(frozen=True)
class JumpTo:
    """Jump to a line number; resolved by the top-level engine."""
    line_number: Value


@dataclass(frozen=True)
class ResumeAt:
    """Resume at an already resolved program position."""
    position: int


@dataclass(frozen=True)
class Halt:
    """Stop the program."""


CONTINUE = Continue()
HALT = Halt()

Flow = Union[Continue, JumpTo, ResumeAt, Halt]


def is_number(value: Any) -> bool:
    """True if `value` is a number or text shaped like one."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return NUMBER_RE.match(value) is not None
    return False


def parse_number(text: str) -> Union[int, float]:
    if '.' in text or 'e' in text or 'E' in text:
        return float(text)
    return int(text)


def normalize_number(value: Union[int, float]) -> Union[int, float]:
    """Collapse integral floats to ints, so 4 / 2 prints as 2."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def infer_value(raw: Any) -> Value:
    """Tag a value at the write boundary: numeric-looking text becomes a number."""
    if isinstance(raw, bool):
        return 'TRUE' if raw else 'FALSE'
    if isinstance(raw, (int, float)):
        return normalize_number(raw)
    text = to_string(raw)
    if NUMBER_RE.match(text):
        return parse_number(text)
    return text


def to_string(value: Any) -> str:
    """Convert a value to the text PRINT shows."""
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # fixed-point text, so small values stay readable by NUMBER_RE and the lexer
        return format(Decimal(repr(value)), 'f')
    if value is None:
        return ''
    return str(value)


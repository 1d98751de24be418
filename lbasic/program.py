"""Program model: the ordered table of numbered lines.

Source text is split into `(line-number, command-text)` pairs, lines that
do not start with a non-negative integer are dropped, every remaining
command is tokenized, and the lines are ordered by ascending numeric line
number. If a number repeats, the last definition wins. During execution
lines are addressed by position (0-based index), so every jump target has to
be translated with `position_of`.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .lexer import tokenize
from .tokens import Token


LINE_NUMBER_RE = re.compile(r'^[0-9]+$')


def split_source(source: str) -> List[Tuple[str, str]]:
    """Split source text into raw `(line-number text, command text)` pairs.

    Leading whitespace is trimmed; the line number ends at the first
    whitespace character. Blank lines are skipped, other lines are returned
    whether or not their first word is a number.
    """
    raw_lines: List[Tuple[str, str]] = []
    for line in source.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        parts = stripped.split(None, 1)
        number = parts[0]
        command = parts[1] if len(parts) > 1 else ''
        raw_lines.append((number, command))
    return raw_lines


class Program:
    """An ordered, read-only sequence of tokenized lines."""

    def __init__(self, lines: Optional[Iterable[Tuple[int, List[Token]]]] = None):
        table: Dict[int, List[Token]] = {}
        for number, tokens in lines or []:
            table[int(number)] = list(tokens)
        self.numbers: List[int] = sorted(table)
        self.lines: List[List[Token]] = [table[n] for n in self.numbers]
        self._positions: Dict[int, int] = {n: i for i, n in enumerate(self.numbers)}

    @classmethod
    def build(cls, raw_lines: Iterable[Tuple[str, str]]) -> 'Program':
        """Tokenize raw lines into a Program.

        Lines whose number is not a non-negative integer are silently
        dropped. A lexing failure raises a `LexError` `BasicError`.
        """
        table: Dict[int, List[Token]] = {}
        for number_text, command in raw_lines:
            number_text = number_text.strip()
            if not LINE_NUMBER_RE.match(number_text):
                continue
            table[int(number_text)] = tokenize(command, number_text)
        return cls(table.items())

    @classmethod
    def from_source(cls, source: str) -> 'Program':
        return cls.build(split_source(source))

    @classmethod
    def single_line(cls, number: int, tokens: List[Token]) -> 'Program':
        """A one-line program, used for the body of an IF statement."""
        return cls([(number, tokens)])

    def position_of(self, line_number: Any) -> Optional[int]:
        try:
            key = int(line_number)
        except (TypeError, ValueError):
            return None
        if isinstance(line_number, float) and line_number != key:
            return None
        return self._positions.get(key)

    def line_at(self, position: int) -> List[Token]:
        return self.lines[position]

    def number_at(self, position: int) -> int:
        return self.numbers[position]

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Tuple[int, List[Token]]]:
        return iter(zip(self.numbers, self.lines))

    def __repr__(self) -> str:
        return f"Program({len(self)} lines)"

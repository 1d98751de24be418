"""JSON serialization/deserialization for tokenized programs.

This module converts between `Program` objects and plain Python dict/list
structures suitable for JSON encoding, so a program can be tokenized once
(`--emit-tokens`) and executed later (`--tokens`).
"""

from __future__ import annotations

from typing import Any, Dict, List

from .program import Program
from .tokens import Token, TOKEN_KINDS


def token_to_obj(token: Token) -> Dict[str, Any]:
    return {"kind": token.kind, "value": token.value}


def token_from_obj(obj: Dict[str, Any]) -> Token:
    if not isinstance(obj, dict):
        raise TypeError("Invalid token object")
    kind = obj.get("kind")
    if kind not in TOKEN_KINDS:
        raise ValueError(f"Unknown token kind: {kind}")
    return Token(kind, str(obj["value"]))


def program_to_obj(program: Program) -> Dict[str, Any]:
    return {
        "type": "Program",
        "lines": [
            {"number": number, "tokens": [token_to_obj(t) for t in tokens]}
            for number, tokens in program
        ],
    }


def program_from_obj(obj: Any) -> Program:
    if not isinstance(obj, dict) or obj.get("type") != "Program":
        raise ValueError("Invalid token program object")
    lines: List[Any] = []
    for line in obj["lines"]:
        number = line["number"]
        if not isinstance(number, int) or isinstance(number, bool) or number < 0:
            raise ValueError(f"Invalid line number: {number!r}")
        lines.append((number, [token_from_obj(t) for t in line["tokens"]]))
    return Program(lines)

# lbasic package
# This package provides a lexer, program model and interpreter for a
# line-numbered BASIC dialect.
from .errors import BasicError
from .interpreter import run_program, compile_program, Interpreter
from .program import Program
from .registry import FunctionSetRegistry

__all__ = [
    'run_program',
    'compile_program',
    'Interpreter',
    'Program',
    'FunctionSetRegistry',
    'BasicError',
]

"""Control-flow engine for the line-numbered BASIC dialect.

The `Interpreter` walks a `Program` by position. Each line is dispatched on
its first token: a keyword selects a command, a leading array or variable
name is an assignment. A command returns a flow result (see `lbasic.types`)
that tells the loop to continue, jump to a line number, resume at a known
position or halt.

The body of an `IF` runs in a *child* interpreter that shares the parent's
`Environment` through the function-set registry and sees only a one-line
program. A child never jumps by itself: GOTO, GOSUB, RETURN, NEXT and END
inside the body are handed back to the parent, and ultimately to the
top-level interpreter, which owns the positions of the whole program.

Errors are caught by the dispatch loop of the engine they occur in and
reported through the output collaborator (briefly in `pro` mode, with the
traceback in `dev` mode). A top-level error stops the run; an error inside
an IF body stops only that child, and the parent goes on with the next line.
"""

from __future__ import annotations

import json
import traceback
from typing import Any, Callable, Dict, List, Optional, Union

from .environment import Environment
from .errors import BasicError, fail
from .program import Program
from .registry import FunctionSetRegistry
from .std.io import ConsoleIO
from .tokens import Token, STATIC, VAR, VAR_ARRAY, EQ, find_static, find_operator
from .tokens_json import program_to_obj
from .types import (
    ArrayVal, ErrorVal, LoopFrame, Flow, Continue, JumpTo, ResumeAt, Halt, CONTINUE, HALT,
    Value, is_number, parse_number, to_string,
)


MODES = ('dev', 'pro')


class Interpreter:
    """Executes a tokenized program against a runtime environment.

    A top-level interpreter (`is_new=True`) creates an `Environment` named
    `name` and registers it; a child (`is_new=False`) looks the environment
    up by name and runs a single IF body. `origin` is the parent's position
    for a child, used wherever a command records "the current line".
    """
    def __init__(self, registry: FunctionSetRegistry, name: str = 'main', mode: str = 'pro',
                 is_new: bool = True, io: Optional[ConsoleIO] = None, origin: Optional[int] = None,
                 debug_level: int = 0, debug_file: str = 'debug.txt', debug_fp: Any = None):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        self.registry = registry
        self.mode = mode
        self.is_new = is_new
        self.io = io if io is not None else ConsoleIO()
        self.origin = origin
        self.row: Optional[int] = None
        self.error: Optional[ErrorVal] = None
        self.debug_level = debug_level
        # child and module interpreters write to their parent's trace file
        self.owns_debug_fp = debug_fp is None and debug_level > 0
        if debug_fp is not None:
            self.debug_fp = debug_fp
        else:
            self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None
        if is_new:
            self.env = Environment(name)
            self.registry.register(self.env)
        else:
            env = self.registry.lookup(name)
            if env is None:
                raise fail('RuntimeError', f'no function set named {name}')
            self.env = env
        self.commands: Dict[str, Callable[[List[Token], int], Flow]] = {
            'REM': self.exec_rem,
            'PRINT': self.exec_print,
            'LET': self.exec_let,
            'ARRAY': self.exec_array,
            'INPUT': self.exec_input,
            'END': self.exec_end,
            'GOTO': self.exec_goto,
            'GOSUB': self.exec_gosub,
            'RETURN': self.exec_return,
            'NAMESPACE': self.exec_namespace,
            'LOAD': self.exec_load,
            'IMPORT': self.exec_import,
            'EXPORT': self.exec_export,
            'PAUSE': self.exec_pause,
            'IF': self.exec_if,
            'FOR': self.exec_for,
            'NEXT': self.exec_next,
        }

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def close(self):
        if self.owns_debug_fp and self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program, start: int = 0) -> Flow:
        """Run a whole program from `start`; the entry point for top-level use."""
        self.debug(f"run {self.env.name}: {len(program)} lines, mode {self.mode}")
        if self.debug_level >= 2:
            self.debug("tokens: " + json.dumps(program_to_obj(program)))
        try:
            return self.interpret(program, start)
        finally:
            if self.debug_level >= 2:
                self.debug("variables: " + json.dumps(self.env.variables))
                self.debug("arrays: " + json.dumps(
                    {name: {'dimension': a.dimension, 'cells': a.cells} for name, a in self.env.arrays.items()}))
            self.close()

    def interpret(self, program: Program, start: int = 0) -> Flow:
        position = start
        while position < len(program):
            tokens = program.line_at(position)
            row = program.number_at(position)
            self.row = row
            try:
                flow = self.execute_line(tokens, position, row)
                if not self.is_new and not isinstance(flow, Continue):
                    return flow
                if isinstance(flow, Halt):
                    return flow
                if isinstance(flow, JumpTo):
                    position = self.resolve_jump(program, flow.line_number)
                    continue
                if isinstance(flow, ResumeAt):
                    position = flow.position
                    continue
            except Exception as e:
                self.report(e, tokens, row)
                # a failing IF body ends only its own engine
                return HALT if self.is_new else CONTINUE
            position += 1
        return CONTINUE

    def resolve_jump(self, program: Program, line_number: Value) -> int:
        position = program.position_of(line_number)
        if position is None:
            raise fail('UndefinedLine', f'line {to_string(line_number)} does not exist')
        return position

    def report(self, exc: BaseException, tokens: List[Token], row: Optional[int]):
        if isinstance(exc, BasicError):
            err = exc.err
        else:
            err = ErrorVal('InternalError', f'{type(exc).__name__}: {exc}')
        self.error = err
        where = f" row({row})" if row is not None else ""
        self.debug(f"error{where}: {err.name}: {err.message}")
        if self.mode == 'dev':
            trace = ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            self.io.write(f"An exception occurred: {err.name}: {err.message}{where}\n"
                          f"tokens: {tokens!r}\n{trace}")
        else:
            self.io.write(f"Error: {err.name}: {err.message}{where}\n")

    def here(self, position: int) -> int:
        return self.origin if self.origin is not None else position

    def execute_line(self, tokens: List[Token], position: int, row: int) -> Flow:
        if not tokens:
            raise fail('SyntaxError', f'line {row} has no tokens')
        if self.debug_level >= 3:
            self.debug(f"{row}: {tokens!r}")
        head = tokens[0]
        if head.kind == STATIC:
            command = self.commands.get(head.value)
            if command is None:
                raise fail('UndefinedToken', f'undefined token {head!r}')
            return command(tokens, position)
        if head.kind == VAR_ARRAY:
            return self.assign_array(tokens)
        if head.kind == VAR:
            if len(tokens) < 2 or not tokens[1].is_operator(EQ):
                raise fail('TypeError', f'{head.value} is not followed by =')
            self.env.set_variable(head.value, self.env.evaluate(tokens[2:]))
            return CONTINUE
        raise fail('SyntaxError', f'a line cannot start with {head!r}')

    def assign_array(self, tokens: List[Token]) -> Flow:
        name = tokens[0].value
        array = self.env.get_array(name)
        indices, consumed = self.env.read_indices(tokens[1:])
        self.env.check_arity(array, len(indices))
        end = 1 + consumed
        if end >= len(tokens) or not tokens[end].is_operator(EQ):
            raise fail('LetError', f'missing = in assignment to {name}')
        self.env.update_array_cell(name, indices, self.env.evaluate(tokens[end + 1:]))
        return CONTINUE

    def number(self, value: Value, what: str) -> Union[int, float]:
        if not is_number(value):
            raise fail('TypeError', f'{what} must be a number, got {to_string(value)!r}')
        return parse_number(to_string(value))

    # Commands

    def exec_rem(self, tokens: List[Token], position: int) -> Flow:
        return CONTINUE

    def exec_print(self, tokens: List[Token], position: int) -> Flow:
        value = self.env.evaluate(tokens[1:])
        self.io.write(to_string(value) + '\n')
        return CONTINUE

    def exec_let(self, tokens: List[Token], position: int) -> Flow:
        if len(tokens) < 2 or tokens[1].kind not in (VAR, VAR_ARRAY):
            raise fail('LetError', 'LET needs a variable name')
        if tokens[1].kind == VAR_ARRAY:
            return self.assign_array(tokens[1:])
        if len(tokens) < 3 or not tokens[2].is_operator(EQ):
            raise fail('LetError', f'missing = after LET {tokens[1].value}')
        self.env.set_variable(tokens[1].value, self.env.evaluate(tokens[3:]))
        return CONTINUE

    def exec_array(self, tokens: List[Token], position: int) -> Flow:
        if len(tokens) < 2 or tokens[1].kind != VAR:
            raise fail('ArraySyntaxError', 'ARRAY needs an array name')
        dimension: Value = 1
        if len(tokens) > 2:
            if not tokens[2].is_operator('COMMA'):
                raise fail('ArraySyntaxError', f'expected , after ARRAY {tokens[1].value}')
            dimension = self.env.evaluate(tokens[3:])
        self.env.create_array(tokens[1].value, dimension)
        return CONTINUE

    def exec_input(self, tokens: List[Token], position: int) -> Flow:
        rest = tokens[1:]
        split = find_operator(rest, 'SEMICOLON')
        if split < 0:
            prompt_tokens, target = [], rest
        else:
            prompt_tokens, target = rest[:split], rest[split + 1:]
        if len(target) != 1 or target[0].kind != VAR:
            raise fail('SyntaxError', 'INPUT needs a single variable after ;')
        prompt = to_string(self.env.evaluate(prompt_tokens)) if prompt_tokens else ''
        self.env.set_variable(target[0].value, self.io.request_input(prompt), raw=True)
        return CONTINUE

    def exec_end(self, tokens: List[Token], position: int) -> Flow:
        self.debug(f"the script was terminated (position {self.here(position)})")
        return HALT

    def exec_goto(self, tokens: List[Token], position: int) -> Flow:
        return JumpTo(self.env.evaluate(tokens[1:]))

    def exec_gosub(self, tokens: List[Token], position: int) -> Flow:
        target = self.env.evaluate(tokens[1:])
        self.env.push_call(self.here(position))
        return JumpTo(target)

    def exec_return(self, tokens: List[Token], position: int) -> Flow:
        origin = self.env.pop_call()
        if origin is None:
            return CONTINUE
        return ResumeAt(origin + 1)

    def exec_namespace(self, tokens: List[Token], position: int) -> Flow:
        self.env.namespace = to_string(self.env.evaluate(tokens[1:]))
        return CONTINUE

    def exec_load(self, tokens: List[Token], position: int) -> Flow:
        if len(tokens) < 2:
            raise fail('SyntaxError', 'LOAD needs a name')
        name = tokens[1].value
        if name in ('NOW', 'MS'):
            self.env.set_variable(name, self.io.now_millis())
        elif name == 'SEC':
            self.env.set_variable(name, self.io.now_millis() // 1000)
        else:
            self.debug(f"LOAD: nothing to load for {name}")
        return CONTINUE

    def exec_import(self, tokens: List[Token], position: int) -> Flow:
        as_index = find_static(tokens, 'AS')
        if as_index < 0:
            raise fail('SyntaxError', 'IMPORT needs AS <name>')
        target = tokens[as_index + 1:]
        if len(target) != 1 or target[0].kind != VAR:
            raise fail('SyntaxError', 'IMPORT needs a single name after AS')
        path = to_string(self.env.evaluate(tokens[1:as_index]))
        self.import_module(path, target[0].value)
        return CONTINUE

    def import_module(self, path: str, alias: str):
        """Run a module program and copy its state in under `alias@`.

        The module gets its own registry and environment. A module that
        cannot be loaded is skipped.
        """
        try:
            source = self.io.load_module(path)
        except OSError as e:
            self.debug(f"import {path} failed: {e}")
            return
        if source is None:
            self.debug(f"import {path}: module not found")
            return
        try:
            program = Program.from_source(source)
        except BasicError as e:
            self.debug(f"import {path} failed: {e}")
            return
        module = Interpreter(FunctionSetRegistry(), alias, self.mode, io=self.io,
                             debug_level=self.debug_level, debug_fp=self.debug_fp)
        module.run(program)
        for name, value in module.env.variables.items():
            self.env.set_variable(f"{alias}@{name}", value)
        for name, array in module.env.arrays.items():
            qualified = f"{alias}@{name}"
            self.env.arrays[qualified] = ArrayVal(qualified, array.dimension, dict(array.cells))

    def exec_export(self, tokens: List[Token], position: int) -> Flow:
        if len(tokens) < 2 or tokens[1].kind != VAR:
            raise fail('SyntaxError', 'EXPORT needs a variable name')
        name = tokens[1].value
        self.io.export(self.env.resolve(name), self.env.get_variable(name))
        return CONTINUE

    def exec_pause(self, tokens: List[Token], position: int) -> Flow:
        seconds = self.number(self.env.evaluate(tokens[1:]), 'PAUSE duration')
        self.io.delay(seconds)
        return CONTINUE

    def exec_if(self, tokens: List[Token], position: int) -> Flow:
        then_index = find_static(tokens, 'THEN')
        if then_index < 0:
            raise fail('SyntaxError', 'IF without THEN')
        else_index = find_static(tokens, 'ELSE', then_index + 1)
        condition = tokens[1:then_index]
        if else_index < 0:
            body, alternative = tokens[then_index + 1:], None
        else:
            body, alternative = tokens[then_index + 1:else_index], tokens[else_index + 1:]
        if self.condition_holds(condition):
            return self.run_block(body, position)
        if alternative is not None:
            return self.run_block(alternative, position)
        return CONTINUE

    def condition_holds(self, condition: List[Token]) -> bool:
        try:
            return self.env.compare(condition)
        except BasicError as e:
            self.debug(f"error evaluating condition {condition!r}: {e}")
            return False

    def run_block(self, body: List[Token], position: int) -> Flow:
        """Run an IF body in a child interpreter and return its flow unresolved."""
        child = Interpreter(self.registry, self.env.name, self.mode, is_new=False, io=self.io,
                            origin=self.here(position), debug_level=self.debug_level,
                            debug_fp=self.debug_fp)
        flow = child.interpret(Program.single_line(self.row, body))
        if child.error is not None:
            self.error = child.error
        return flow

    def exec_for(self, tokens: List[Token], position: int) -> Flow:
        to_index = find_static(tokens, 'TO')
        if to_index < 0:
            raise fail('SyntaxError', 'FOR without TO')
        if len(tokens) < 3 or tokens[1].kind != VAR:
            raise fail('SyntaxError', 'FOR needs a loop variable')
        if not tokens[2].is_operator(EQ):
            raise fail('LetError', 'missing = in FOR loop')
        var = tokens[1].value
        self.env.set_variable(var, self.env.evaluate(tokens[3:to_index]))
        step_index = find_static(tokens, 'STEP', to_index + 1)
        if step_index < 0:
            goal_tokens = tokens[to_index + 1:]
            step: Union[int, float] = 1
        else:
            goal_tokens = tokens[to_index + 1:step_index]
            step = self.number(self.env.evaluate(tokens[step_index + 1:]), 'STEP')
        goal = self.number(self.env.evaluate(goal_tokens), 'FOR goal')
        self.env.push_loop(LoopFrame(var, goal, step, self.here(position)))
        return CONTINUE

    def exec_next(self, tokens: List[Token], position: int) -> Flow:
        if len(tokens) < 2 or tokens[1].kind != VAR:
            raise fail('SyntaxError', 'NEXT needs a loop variable')
        frame = self.env.top_loop()
        if frame.var != tokens[1].value:
            raise fail('ForLoopMismatch', f'NEXT {tokens[1].value} does not match FOR {frame.var}')
        frame.count += 1
        if frame.count > self.env.max_loop_count:
            raise fail('RunawayLoop', f'loop over {frame.var} exceeded {self.env.max_loop_count} iterations')
        following = self.number(self.env.get_variable(frame.var), 'loop variable') + frame.step
        if (frame.step >= 0 and following > frame.goal) or (frame.step < 0 and following < frame.goal):
            self.env.pop_loop()
            self.env.delete_variable(frame.var)
            return CONTINUE
        self.env.set_variable(frame.var, following)
        return ResumeAt(frame.anchor + 1)


def compile_program(source: str) -> Program:
    """Lex and order BASIC source text into a Program."""
    return Program.from_source(source)


def run_program(source: str, runtime_name: str = 'main', mode: str = 'pro',
                debug: Union[bool, int] = False, initial_variables: Optional[Dict[str, Any]] = None,
                io: Optional[ConsoleIO] = None, debug_file: str = 'debug.txt') -> str:
    """Compile and run BASIC source, returning the text it wrote.

    `debug` is either a flag (True traces tokens and final state) or a
    debug level. `initial_variables` are set before the first line runs.
    """
    if io is None:
        io = ConsoleIO(echo=False)
    if isinstance(debug, bool):
        debug_level = 2 if debug else 0
    else:
        debug_level = debug
    start = len(io.transcript)
    interpreter = Interpreter(FunctionSetRegistry(), runtime_name, mode, io=io,
                              debug_level=debug_level, debug_file=debug_file)
    try:
        program = compile_program(source)
    except BasicError as e:
        interpreter.report(e, [], None)
        interpreter.close()
        return ''.join(io.transcript[start:])
    for name, value in (initial_variables or {}).items():
        interpreter.env.set_variable(name, value)
    interpreter.run(program)
    return ''.join(io.transcript[start:])

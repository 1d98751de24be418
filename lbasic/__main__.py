"""CLI entry point for the BASIC interpreter.

Usage:
    python -m lbasic [-v|-vv|-vvv] [--mode dev|pro] [--name NAME] [--set NAME=VALUE ...] <program_file>
    python -m lbasic [-v...] --emit-tokens <program_file>
    python -m lbasic [-v...] --tokens <tokens_json_file>

Options:
  -v              Increase debug verbosity (can be repeated)
  --mode          `dev` reports errors with a traceback, `pro` with one line
  --name          Name of the function set the program runs in
  --set           Pre-set a variable before the program starts
  --emit-tokens   Tokenize the given .bas file and write a tokens JSON file
  --tokens        Execute a previously emitted tokens JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Dict

from .errors import BasicError
from .interpreter import Interpreter, compile_program
from .registry import FunctionSetRegistry
from .std.io import ConsoleIO
from .tokens_json import program_to_obj, program_from_obj


def parse_assignments(items: list[str], parser: argparse.ArgumentParser) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for item in items:
        name, sep, value = item.partition('=')
        if not sep or not name:
            parser.error(f'--set expects NAME=VALUE, got {item!r}')
        variables[name] = value
    return variables


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Line-numbered BASIC interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--mode', choices=['dev', 'pro'], default='pro', help='error reporting mode')
    parser.add_argument('--name', default='main', help='function set name')
    parser.add_argument('--set', action='append', default=[], metavar='NAME=VALUE',
                        help='pre-set a variable (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-tokens', metavar='BAS_FILE', help='emit tokens JSON for the given .bas file')
    group.add_argument('--tokens', metavar='TOKENS_JSON_FILE', help='execute tokens from a JSON file')
    parser.add_argument('program', nargs='?', help='BASIC program file (.bas) to execute')
    args = parser.parse_args(argv)
    variables = parse_assignments(args.set, parser)

    # Emit tokens mode
    if args.emit_tokens:
        program_file = Path(args.emit_tokens)
        if not program_file.exists():
            print(f"Error: file {program_file} not found", file=sys.stderr)
            sys.exit(1)
        with open(program_file, 'r', encoding='utf-8') as f:
            source = f.read()
        try:
            program = compile_program(source)
        except BasicError as e:
            print(f"Error: {e.err.name}: {e.err.message}", file=sys.stderr)
            sys.exit(1)
        obj = program_to_obj(program)
        out_path = program_file.with_name(program_file.name + '.tokens.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from tokens JSON
    if args.tokens:
        tokens_path = Path(args.tokens)
        if not tokens_path.exists():
            print(f"Error: file {tokens_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(tokens_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        program = program_from_obj(data)
        base_dir = tokens_path.parent
    else:
        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --emit-tokens/--tokens')
        program_file = Path(args.program)
        if not program_file.exists():
            print(f"Error: file {program_file} not found", file=sys.stderr)
            sys.exit(1)
        with open(program_file, 'r', encoding='utf-8') as f:
            source = f.read()
        try:
            program = compile_program(source)
        except BasicError as e:
            print(f"Error: {e.err.name}: {e.err.message}", file=sys.stderr)
            sys.exit(1)
        base_dir = program_file.parent

    io = ConsoleIO(base_dir=str(base_dir))
    interpreter = Interpreter(FunctionSetRegistry(), args.name, args.mode, io=io, debug_level=args.v)
    for name, value in variables.items():
        interpreter.env.set_variable(name, value)
    interpreter.run(program)
    if interpreter.error is not None:
        sys.exit(1)


if __name__ == '__main__':
    main()

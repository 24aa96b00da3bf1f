"""Lox CLI: run .lox scripts, dump their AST, or start a REPL."""

from __future__ import annotations

import sys

from .environment import Environment
from .errors import (
    EXIT_DATA,
    EXIT_NO_INPUT,
    EXIT_OK,
    EXIT_PARSE,
    EXIT_RUNTIME,
    EXIT_USAGE,
)
from .parse import ParseError, Parser
from .printer import program_to_sexpr
from .runtime import run
from .stdlib import make_stdlib
from .tokens import TokenizeError, tokenize


USAGE: str = """\
pylox [OPTIONS] [SCRIPT]

Run a Lox script, or start an interactive prompt when no script is given.

Options:
  --ast    Print the parsed program as S-expressions instead of running it
  --help   Show this help message
"""

PROMPT: str = "> "


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    dump_ast = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return EXIT_OK
        elif arg == "--ast":
            dump_ast = True
            i += 1
        elif arg.startswith("-"):
            print("pylox: unknown flag '" + arg + "'", file=sys.stderr)
            print(USAGE, end="", file=sys.stderr)
            return EXIT_USAGE
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("pylox: unexpected argument '" + arg + "'", file=sys.stderr)
            print(USAGE, end="", file=sys.stderr)
            return EXIT_USAGE

    if filepath == "":
        return repl(dump_ast)

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("pylox: " + filepath + ": No such file or directory", file=sys.stderr)
        return EXIT_NO_INPUT
    except OSError as e:
        print("pylox: " + filepath + ": " + str(e), file=sys.stderr)
        return EXIT_NO_INPUT
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("pylox: " + filepath + ": invalid utf-8", file=sys.stderr)
        return EXIT_DATA

    if dump_ast:
        return print_ast(source)
    return run(source)


def print_ast(source: str) -> int:
    """Print each parsed statement as an S-expression; report errors instead."""
    try:
        results = Parser(tokenize(source)).parse()
    except TokenizeError as e:
        print(str(e), file=sys.stderr)
        return e.exit_code
    except RecursionError:
        print("RuntimeError: Stack overflow.", file=sys.stderr)
        return EXIT_RUNTIME
    errors = [r for r in results if isinstance(r, ParseError)]
    if errors:
        for e in errors:
            print(str(e), file=sys.stderr)
        return EXIT_PARSE
    program = [r for r in results if not isinstance(r, ParseError)]
    if program:
        print(program_to_sexpr(program))
    return EXIT_OK


def repl(dump_ast: bool = False) -> int:
    """Read-eval-print loop; one environment lives across all lines."""
    env = Environment(make_stdlib())
    while True:
        print(PROMPT, end="", flush=True)
        line = sys.stdin.readline()
        if line == "":
            print()
            return EXIT_OK
        if line.strip() == "":
            continue
        if dump_ast:
            print_ast(line)
        else:
            run(line, env)


if __name__ == "__main__":
    sys.exit(main())

"""Lox interpreter: public API."""

from __future__ import annotations

from .ast import Stmt
from .environment import Environment as Environment
from .parse import ParseError as ParseError, Parser
from .printer import program_to_sexpr, to_sexpr as to_sexpr
from .runtime import run as run
from .stdlib import make_stdlib as make_stdlib
from .tokens import TokenizeError as TokenizeError, tokenize as tokenize


def parse(source: str) -> list[Stmt | ParseError]:
    """Parse Lox source into one entry per statement, or per syntax error.

    Lexical errors raise `TokenizeError`; syntax errors are returned in place.
    """
    tokens = tokenize(source)
    return Parser(tokens).parse()


def dump(source: str) -> str:
    """Parse Lox source and render it as S-expressions, one line per statement."""
    program = [r for r in parse(source) if isinstance(r, Stmt)]
    return program_to_sexpr(program)

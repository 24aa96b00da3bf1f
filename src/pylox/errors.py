"""Lox diagnostics: one exception class per error category."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import Pos


EXIT_OK = 0
EXIT_USAGE = 64
EXIT_DATA = 65
EXIT_NO_INPUT = 66
EXIT_PARSE = 67
EXIT_RUNTIME = 70
EXIT_VALUE = 71
EXIT_NAME = 72
EXIT_ARGUMENT = 73
EXIT_COMPILER_BUG = 75


class LoxError(Exception):
    """Base error for scanning, parsing and evaluation."""

    label: str = "Error"
    exit_code: int = EXIT_RUNTIME

    def __init__(self, msg: str, pos: Pos | None = None):
        self.msg: str = msg
        self.pos: Pos | None = pos
        super().__init__(self.render())

    def where(self) -> str:
        return ""

    def render(self) -> str:
        prefix = "" if self.pos is None else f"[line {self.pos.line}] "
        return f"{prefix}{self.label}{self.where()}: {self.msg}"


class LoxRuntimeError(LoxError):
    """Malformed expression reached evaluation (bad unary operand, etc.)."""

    label = "RuntimeError"
    exit_code = EXIT_RUNTIME

    def __init__(self, expr: object, msg: str, pos: Pos | None = None):
        self.expr = expr
        if pos is None:
            pos = getattr(expr, "pos", None)
        super().__init__(msg, pos)


class LoxValueError(LoxError):
    """Operand of the wrong runtime type."""

    label = "ValueError"
    exit_code = EXIT_VALUE

    def __init__(self, value: object, msg: str, pos: Pos | None = None):
        self.value = value
        super().__init__(msg, pos)


class LoxNameError(LoxError):
    """Undefined variable or property."""

    label = "NameError"
    exit_code = EXIT_NAME

    def __init__(self, name: str, msg: str, pos: Pos | None = None):
        self.name: str = name
        super().__init__(msg, pos)


class ArgumentError(LoxError):
    """Arity mismatch at a call site."""

    label = "ArgumentError"
    exit_code = EXIT_ARGUMENT

    def __init__(self, call: object, msg: str, pos: Pos | None = None):
        self.call = call
        if pos is None:
            pos = getattr(call, "pos", None)
        super().__init__(msg, pos)


class CompilerBug(LoxError):
    """An interpreter invariant was violated; a defect in pylox itself."""

    label = "CompilerBug"
    exit_code = EXIT_COMPILER_BUG

    def __init__(self, node: object, msg: str, pos: Pos | None = None):
        self.node = node
        if pos is None:
            pos = getattr(node, "pos", None)
        super().__init__(msg, pos)

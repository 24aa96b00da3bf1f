"""Lox AST: parse-time node definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tokens import Token
    from .values import Value


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class Expr:
    """Base for all expressions."""

    pos: Pos


@dataclass(frozen=True)
class Literal(Expr):
    """Number, string, true, false, nil."""

    value: Value


@dataclass(frozen=True)
class Unary(Expr):
    """-x, !x."""

    op: Token
    right: Expr


@dataclass(frozen=True)
class Binary(Expr):
    """Arithmetic, comparison and equality operators."""

    left: Expr
    op: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    """a and b, a or b."""

    left: Expr
    op: Token
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    """( expr )."""

    expr: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    """name = value."""

    name: Token
    value: Expr


@dataclass(frozen=True)
class Call(Expr):
    """callee(args). paren is the closing ')' for diagnostics."""

    callee: Expr
    paren: Token
    args: list[Expr]


@dataclass(frozen=True)
class Get(Expr):
    """obj.name."""

    obj: Expr
    name: Token


@dataclass(frozen=True)
class Set(Expr):
    """obj.name = value."""

    obj: Expr
    name: Token
    value: Expr


@dataclass(frozen=True)
class This(Expr):
    keyword: Token


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True)
class Stmt:
    """Base for all statements."""

    pos: Pos


@dataclass(frozen=True)
class ExpressionStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class PrintStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class VarStmt(Stmt):
    """var name = initializer; initializer is None when omitted."""

    name: Token
    initializer: Expr | None


@dataclass(frozen=True)
class BlockStmt(Stmt):
    stmts: list[Stmt]


@dataclass(frozen=True)
class IfStmt(Stmt):
    cond: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True)
class WhileStmt(Stmt):
    """while (cond) body. Also the target of for-loop desugaring."""

    cond: Expr
    body: Stmt


@dataclass(frozen=True)
class FunctionStmt(Stmt):
    """fun name(params) { body }, and class methods."""

    name: Token
    params: list[Token]
    body: list[Stmt]


@dataclass(frozen=True)
class ClassStmt(Stmt):
    """class Name { methods }."""

    name: Token
    methods: list[FunctionStmt]


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    """return value; value is None for a bare return."""

    keyword: Token
    value: Expr | None

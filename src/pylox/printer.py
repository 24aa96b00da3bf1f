"""Lox AST printer: renders statements and expressions as S-expressions.

Total over the node types in `pylox/ast.py`; a new node type needs a case
here too. Used by `pylox --ast` and the parser tests.
"""

from __future__ import annotations

from .ast import (
    Assign,
    Binary,
    BlockStmt,
    Call,
    ClassStmt,
    Expr,
    ExpressionStmt,
    FunctionStmt,
    Get,
    Grouping,
    IfStmt,
    Literal,
    Logical,
    PrintStmt,
    ReturnStmt,
    Set,
    Stmt,
    This,
    Unary,
    VarStmt,
    Variable,
    WhileStmt,
)
from .values import VFloat, VString


def to_sexpr(node: Stmt | Expr) -> str:
    """Render one statement or expression as a single-line S-expression."""
    printer = _Printer()
    if isinstance(node, Stmt):
        return printer.render_stmt(node)
    return printer.render_expr(node)


def program_to_sexpr(program: list[Stmt]) -> str:
    """One line per top-level statement."""
    printer = _Printer()
    return "\n".join(printer.render_stmt(st) for st in program)


class _Printer:
    def render_stmt(self, st: Stmt) -> str:
        if isinstance(st, ExpressionStmt):
            return self._form(";", self.render_expr(st.expr))
        if isinstance(st, PrintStmt):
            return self._form("print", self.render_expr(st.expr))
        if isinstance(st, VarStmt):
            if st.initializer is None:
                return self._form("var", st.name.lexeme)
            return self._form("var", st.name.lexeme, self.render_expr(st.initializer))
        if isinstance(st, BlockStmt):
            return self._form("block", *[self.render_stmt(s) for s in st.stmts])
        if isinstance(st, IfStmt):
            parts = [self.render_expr(st.cond), self.render_stmt(st.then_branch)]
            if st.else_branch is not None:
                parts.append(self.render_stmt(st.else_branch))
            return self._form("if", *parts)
        if isinstance(st, WhileStmt):
            return self._form(
                "while", self.render_expr(st.cond), self.render_stmt(st.body)
            )
        if isinstance(st, FunctionStmt):
            return self._render_function(st)
        if isinstance(st, ClassStmt):
            methods = [self._render_function(m) for m in st.methods]
            return self._form("class", st.name.lexeme, *methods)
        if isinstance(st, ReturnStmt):
            if st.value is None:
                return "(return)"
            return self._form("return", self.render_expr(st.value))
        raise NotImplementedError(f"render_stmt: {type(st).__name__}")

    def _render_function(self, fn: FunctionStmt) -> str:
        params = "(" + " ".join(p.lexeme for p in fn.params) + ")"
        body = [self.render_stmt(s) for s in fn.body]
        return self._form("fun", fn.name.lexeme, params, *body)

    def render_expr(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            value = expr.value
            if isinstance(value, VString):
                return '"' + value.value + '"'
            if isinstance(value, VFloat):
                return repr(value.value)
            return value.to_string()
        if isinstance(expr, Grouping):
            return self._form("group", self.render_expr(expr.expr))
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, This):
            return "this"
        if isinstance(expr, Assign):
            return self._form("=", expr.name.lexeme, self.render_expr(expr.value))
        if isinstance(expr, Unary):
            return self._form(expr.op.lexeme, self.render_expr(expr.right))
        if isinstance(expr, (Binary, Logical)):
            return self._form(
                expr.op.lexeme, self.render_expr(expr.left), self.render_expr(expr.right)
            )
        if isinstance(expr, Call):
            args = [self.render_expr(a) for a in expr.args]
            return self._form("call", self.render_expr(expr.callee), *args)
        if isinstance(expr, Get):
            return self._form("get", self.render_expr(expr.obj), expr.name.lexeme)
        if isinstance(expr, Set):
            return self._form(
                "set",
                self.render_expr(expr.obj),
                expr.name.lexeme,
                self.render_expr(expr.value),
            )
        raise NotImplementedError(f"render_expr: {type(expr).__name__}")

    def _form(self, head: str, *parts: str) -> str:
        if not parts:
            return "(" + head + ")"
        return "(" + head + " " + " ".join(parts) + ")"

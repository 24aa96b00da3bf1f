"""Lox runtime: evaluate a parsed program against an Environment.

Statements return either None (carry on) or a `Returned` wrapper holding the
value of a `return`. Every statement-list runner stops at the first
`Returned` and hands it upward unchanged, which is how a return threads out
of nested blocks and loops to the enclosing call.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import TextIO

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
    Pos,
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
from .environment import Environment
from .errors import (
    EXIT_OK,
    EXIT_PARSE,
    EXIT_RUNTIME,
    ArgumentError,
    CompilerBug,
    LoxError,
    LoxRuntimeError,
    LoxValueError,
)
from .parse import ParseError, Parser
from .stdlib import make_stdlib
from .tokens import INT_MAX, INT_MIN, TokenizeError, tokenize
from .values import (
    Value,
    VBool,
    VCallable,
    VClass,
    VClosure,
    VFloat,
    VInstance,
    VInt,
    VNative,
    VNil,
    VString,
)


# ============================================================
# Control flow
# ============================================================


@dataclass
class Returned:
    """Result of a statement that executed `return`."""

    value: Value


# ============================================================
# Program entry
# ============================================================


def run(
    source: str,
    env: Environment | None = None,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Scan, parse and evaluate `source`; return a process exit status.

    A program with any syntax error is never evaluated, even partially.
    Passing the same `env` across calls threads state between them (REPL).
    """
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    if env is None:
        env = Environment(make_stdlib())
    try:
        tokens = tokenize(source)
    except TokenizeError as e:
        print(str(e), file=err)
        return e.exit_code
    try:
        results = Parser(tokens).parse()
    except RecursionError:
        print("RuntimeError: Stack overflow.", file=err)
        return EXIT_RUNTIME
    errors = [r for r in results if isinstance(r, ParseError)]
    if errors:
        for e in errors:
            print(str(e), file=err)
        return EXIT_PARSE
    program = [r for r in results if isinstance(r, Stmt)]
    interpreter = Interpreter(out)
    try:
        interpreter.execute_program(program, env)
    except LoxError as e:
        print(str(e), file=err)
        return e.exit_code
    except RecursionError:
        print("RuntimeError: Stack overflow.", file=err)
        return EXIT_RUNTIME
    return EXIT_OK


# ============================================================
# Evaluation
# ============================================================


def is_truthy(value: Value, pos: Pos | None = None) -> bool:
    if isinstance(value, VBool):
        return value.value
    if isinstance(value, VNil):
        return False
    raise LoxValueError(
        value, f"Expected a boolean or nil, got {value.type_name()}.", pos
    )


def values_equal(a: Value, b: Value) -> bool:
    """Same-type values compare by value; numbers promote; other mixes are unequal."""
    if isinstance(a, (VInt, VFloat)) and isinstance(b, (VInt, VFloat)):
        return a.value == b.value
    if type(a) is not type(b):
        return False
    if isinstance(a, VNil):
        return True
    if isinstance(a, (VBool, VString)):
        return a.value == b.value  # type: ignore[attr-defined]
    return a is b


def _checked_int(value: int, pos: Pos) -> VInt:
    """Int results stay within the signed 64-bit range of Int literals."""
    if value > INT_MAX or value < INT_MIN:
        raise LoxValueError(value, "Integer overflow.", pos)
    return VInt(value)


def _int_divmod_trunc(a: int, b: int) -> tuple[int, int]:
    if b == 0:
        raise ZeroDivisionError
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    r = a - q * b
    return (q, r)


def _float_div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _float_mod(a: float, b: float) -> float:
    if b == 0.0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


class Interpreter:
    def __init__(self, stdout: TextIO):
        self.stdout = stdout

    # ---- Statements --------------------------------------------------------

    def execute_program(self, program: list[Stmt], env: Environment) -> None:
        """Run top-level statements; a top-level `return` ends the run."""
        self.execute_stmts(program, env)

    def execute_stmts(self, stmts: list[Stmt], env: Environment) -> Returned | None:
        for st in stmts:
            result = self.execute(st, env)
            if result is not None:
                return result
        return None

    def execute_block(self, stmts: list[Stmt], env: Environment) -> Returned | None:
        block_env = env.enter_block()
        try:
            return self.execute_stmts(stmts, block_env)
        finally:
            env.merge(block_env)

    def execute(self, st: Stmt, env: Environment) -> Returned | None:
        if isinstance(st, ExpressionStmt):
            self.evaluate(st.expr, env)
            return None

        if isinstance(st, PrintStmt):
            value = self.evaluate(st.expr, env)
            print(value.to_string(), file=self.stdout)
            return None

        if isinstance(st, VarStmt):
            value: Value = VNil()
            if st.initializer is not None:
                value = self.evaluate(st.initializer, env)
            self._declare(env, st.name.lexeme, value)
            return None

        if isinstance(st, BlockStmt):
            return self.execute_block(st.stmts, env)

        if isinstance(st, IfStmt):
            if is_truthy(self.evaluate(st.cond, env), st.cond.pos):
                return self.execute(st.then_branch, env)
            if st.else_branch is not None:
                return self.execute(st.else_branch, env)
            return None

        if isinstance(st, WhileStmt):
            while is_truthy(self.evaluate(st.cond, env), st.cond.pos):
                result = self.execute(st.body, env)
                if result is not None:
                    return result
            return None

        if isinstance(st, FunctionStmt):
            closure = self._make_closure(st, env)
            if not env.at_top_level:
                # Local functions see themselves through their own snapshot.
                closure.env.define(st.name.lexeme, closure)
            self._declare(env, st.name.lexeme, closure)
            return None

        if isinstance(st, ClassStmt):
            methods: dict[str, VClosure] = {}
            for method in st.methods:
                methods[method.name.lexeme] = self._make_closure(method, env)
            klass = VClass(st.name.lexeme, methods)
            if not env.at_top_level:
                for closure in methods.values():
                    closure.env.define(st.name.lexeme, klass)
            self._declare(env, st.name.lexeme, klass)
            return None

        if isinstance(st, ReturnStmt):
            if st.value is None:
                return Returned(VNil())
            return Returned(self.evaluate(st.value, env))

        raise CompilerBug(st, f"Unsupported statement {type(st).__name__}.")

    def _declare(self, env: Environment, name: str, value: Value) -> None:
        if env.at_top_level:
            env.define_global(name, value)
        else:
            env.define(name, value)

    def _make_closure(self, decl: FunctionStmt, env: Environment) -> VClosure:
        return VClosure(decl.name.lexeme, decl.params, decl.body, env.enter_block())

    # ---- Expressions -------------------------------------------------------

    def evaluate(self, expr: Expr, env: Environment) -> Value:
        if isinstance(expr, Literal):
            return expr.value

        if isinstance(expr, Grouping):
            return self.evaluate(expr.expr, env)

        if isinstance(expr, Variable):
            return env.get(expr.name)

        if isinstance(expr, This):
            return env.get(expr.keyword)

        if isinstance(expr, Assign):
            value = self.evaluate(expr.value, env)
            env.assign(expr.name, value)
            return VNil()

        if isinstance(expr, Unary):
            return self._eval_unary(expr, env)

        if isinstance(expr, Binary):
            left = self.evaluate(expr.left, env)
            right = self.evaluate(expr.right, env)
            return self._eval_binary(expr, left, right)

        if isinstance(expr, Logical):
            return self._eval_logical(expr, env)

        if isinstance(expr, Call):
            return self._eval_call(expr, env)

        if isinstance(expr, Get):
            obj = self.evaluate(expr.obj, env)
            if not isinstance(obj, VInstance):
                raise LoxValueError(
                    obj,
                    "Only instances have properties.",
                    expr.name.pos,
                )
            return obj.get(expr.name)

        if isinstance(expr, Set):
            obj = self.evaluate(expr.obj, env)
            if not isinstance(obj, VInstance):
                raise LoxValueError(
                    obj,
                    "Only instances have fields.",
                    expr.name.pos,
                )
            obj.set(expr.name, self.evaluate(expr.value, env))
            return VNil()

        raise CompilerBug(expr, f"Unsupported expression {type(expr).__name__}.")

    def _eval_unary(self, expr: Unary, env: Environment) -> Value:
        operand = self.evaluate(expr.right, env)
        op = expr.op.lexeme
        if op == "-":
            if isinstance(operand, VInt):
                return _checked_int(-operand.value, expr.op.pos)
            if isinstance(operand, VFloat):
                return VFloat(-operand.value)
            raise LoxRuntimeError(
                expr, f"Negation operator cannot be used on {operand.type_name()}."
            )
        if op == "!":
            if isinstance(operand, VBool):
                return VBool(not operand.value)
            raise LoxRuntimeError(
                expr, f"Not operator cannot be used on {operand.type_name()}."
            )
        raise CompilerBug(expr, f"Unary operator built with token '{op}'.")

    def _eval_logical(self, expr: Logical, env: Environment) -> Value:
        op = expr.op.lexeme
        if op not in ("and", "or"):
            raise CompilerBug(expr, f"Logical operator built with token '{op}'.")
        left = is_truthy(self.evaluate(expr.left, env), expr.left.pos)
        if op == "or" and left:
            return VBool(True)
        if op == "and" and not left:
            return VBool(False)
        return VBool(is_truthy(self.evaluate(expr.right, env), expr.right.pos))

    def _eval_binary(self, expr: Binary, left: Value, right: Value) -> Value:
        op = expr.op.lexeme
        pos = expr.op.pos

        if op == "==":
            return VBool(values_equal(left, right))
        if op == "!=":
            return VBool(not values_equal(left, right))

        if op in ("<", "<=", ">", ">="):
            for operand in (left, right):
                if isinstance(operand, VNil):
                    raise LoxValueError(
                        operand, "You cannot compare a value to a keyword.", pos
                    )
            a, b = self._numeric_operands(left, right, pos)
            return VBool(_cmp(op, a, b))

        if op == "+":
            if isinstance(left, VString) or isinstance(right, VString):
                return self._concat(left, right, pos)
            return self._arith(op, left, right, pos)

        if op in ("-", "*", "/", "%"):
            return self._arith(op, left, right, pos)

        raise CompilerBug(expr, f"Binary operator built with token '{op}'.")

    def _numeric_operands(
        self, left: Value, right: Value, pos: Pos
    ) -> tuple[int | float, int | float]:
        if not isinstance(left, (VInt, VFloat)):
            raise LoxValueError(
                left, "Operand must be a number.", pos
            )
        if not isinstance(right, (VInt, VFloat)):
            raise LoxValueError(
                right, "Operand must be a number.", pos
            )
        return left.value, right.value

    def _concat(self, left: Value, right: Value, pos: Pos) -> Value:
        for operand in (left, right):
            if not isinstance(operand, (VString, VInt, VFloat, VBool)):
                raise LoxValueError(
                    operand, f"Cannot concatenate {operand.type_name()}.", pos
                )
        return VString(left.to_string() + right.to_string())

    def _arith(self, op: str, left: Value, right: Value, pos: Pos) -> Value:
        a, b = self._numeric_operands(left, right, pos)
        if isinstance(left, VInt) and isinstance(right, VInt):
            if op == "+":
                return _checked_int(left.value + right.value, pos)
            if op == "-":
                return _checked_int(left.value - right.value, pos)
            if op == "*":
                return _checked_int(left.value * right.value, pos)
            try:
                q, r = _int_divmod_trunc(left.value, right.value)
            except ZeroDivisionError:
                raise LoxValueError(right, "Division by zero.", pos) from None
            return _checked_int(q if op == "/" else r, pos)
        fa = float(a)
        fb = float(b)
        if op == "+":
            return VFloat(fa + fb)
        if op == "-":
            return VFloat(fa - fb)
        if op == "*":
            return VFloat(fa * fb)
        if op == "/":
            return VFloat(_float_div(fa, fb))
        return VFloat(_float_mod(fa, fb))

    # ---- Calls -------------------------------------------------------------

    def _eval_call(self, call: Call, env: Environment) -> Value:
        callee = self.evaluate(call.callee, env)

        if isinstance(callee, VCallable):
            if callee.arity() != len(call.args):
                raise ArgumentError(
                    call,
                    f"Expected {callee.arity()} arguments but got {len(call.args)}.",
                    call.paren.pos,
                )
            args = [self.evaluate(a, env) for a in call.args]
            if isinstance(callee, VNative):
                return callee.fn(args)
            if isinstance(callee, VClosure):
                return self.call_closure(callee, args, env)
            raise CompilerBug(call, f"Unknown callable {type(callee).__name__}.")

        if isinstance(callee, VClass):
            if call.args:
                raise ArgumentError(
                    call,
                    f"Expected 0 arguments but got {len(call.args)}.",
                    call.paren.pos,
                )
            return VInstance(callee)

        raise LoxValueError(
            callee,
            "Can only call functions and classes.",
            call.paren.pos,
        )

    def call_closure(
        self, closure: VClosure, args: list[Value], env: Environment
    ) -> Value:
        call_env = Environment.for_call(closure, args, env.globals)
        result = self.execute_stmts(closure.body, call_env)
        if result is None:
            return VNil()
        return result.value


def _cmp(op: str, a: object, b: object) -> bool:
    if op == "<":
        return a < b  # type: ignore[operator]
    if op == "<=":
        return a <= b  # type: ignore[operator]
    if op == ">":
        return a > b  # type: ignore[operator]
    if op == ">=":
        return a >= b  # type: ignore[operator]
    raise AssertionError(op)

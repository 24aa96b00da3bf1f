"""Lox parser: recursive descent, one method per grammar production.

Errors never escape `Parser.parse()`. A failed declaration is recorded,
the parser resynchronizes at the next statement boundary, and parsing goes
on, so one pass reports every independent syntax problem in source order.
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
from .errors import EXIT_PARSE, CompilerBug, LoxError
from .tokens import TK_EOF, TK_FLOAT, TK_IDENT, TK_INT, TK_STRING, Token
from .values import VBool, VNil

MAX_ARGS = 255

# Statement keywords the parser resynchronizes on after an error.
SYNC_KEYWORDS: set[str] = {
    "class",
    "fun",
    "var",
    "for",
    "if",
    "while",
    "print",
    "return",
}

EQUALITY_OPS: set[str] = {"==", "!="}
COMPARISON_OPS: set[str] = {"<", "<=", ">", ">="}
TERM_OPS: set[str] = {"+", "-"}
FACTOR_OPS: set[str] = {"*", "/", "%"}


class ParseError(LoxError):
    """Parse error anchored at the offending token."""

    label = "ParseError"
    exit_code = EXIT_PARSE

    def __init__(self, token: Token, msg: str):
        self.token: Token = token
        super().__init__(msg, token.pos)

    def where(self) -> str:
        if self.token.type == TK_EOF:
            return " at end"
        return " at '" + self.token.lexeme + "'"


class Parser:
    """Recursive descent parser for Lox."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self._reported: list[ParseError] = []

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.type != TK_STRING and tok.lexeme == value

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_end(self) -> bool:
        return self.at_type(TK_EOF)

    def match(self, *values: str) -> bool:
        for value in values:
            if self.at(value):
                self.advance()
                return True
        return False

    def expect(self, value: str, msg: str) -> Token:
        if self.at(value):
            return self.advance()
        raise self.error(msg)

    def expect_ident(self, msg: str) -> Token:
        if self.at_type(TK_IDENT):
            return self.advance()
        raise self.error(msg)

    def error(self, msg: str, tok: Token | None = None) -> ParseError:
        return ParseError(tok if tok is not None else self.current(), msg)

    def report(self, err: ParseError) -> None:
        """Record an error without unwinding the current production."""
        self._reported.append(err)

    def synchronize(self) -> None:
        """Skip to just past a ';' or just before a statement keyword."""
        while not self.at_end():
            tok = self.current()
            if tok.type == tok.lexeme and tok.lexeme in SYNC_KEYWORDS:
                return
            self.advance()
            if tok.lexeme == ";" and tok.type != TK_STRING:
                return

    # ── Top Level ────────────────────────────────────────────

    def parse(self) -> list[Stmt | ParseError]:
        """One entry per top-level statement; errors precede their statement."""
        results: list[Stmt | ParseError] = []
        while not self.at_end():
            stmt = self.declaration()
            results.extend(self._reported)
            self._reported = []
            if stmt is not None:
                results.append(stmt)
        return results

    def declaration(self) -> Stmt | None:
        start = self.pos
        try:
            if self.match("class"):
                return self.class_declaration()
            if self.match("fun"):
                return self.function("function")
            if self.match("var"):
                return self.var_declaration()
            return self.statement()
        except ParseError as e:
            self.report(e)
            self.synchronize()
            if self.pos == start:
                self.advance()
            return None

    def class_declaration(self) -> ClassStmt:
        keyword = self.previous()
        name = self.expect_ident("Expect class name.")
        if self.at("<"):
            raise self.error("Superclasses are not supported.")
        self.expect("{", "Expect '{' before class body.")
        methods: list[FunctionStmt] = []
        while not self.at("}") and not self.at_end():
            methods.append(self.function("method"))
        self.expect("}", "Expect '}' after class body.")
        return ClassStmt(keyword.pos, name, methods)

    def function(self, kind: str) -> FunctionStmt:
        name = self.expect_ident("Expect " + kind + " name.")
        self.expect("(", "Expect '(' after " + kind + " name.")
        params: list[Token] = []
        if not self.at(")"):
            params.append(self.expect_ident("Expect parameter name."))
            while self.match(","):
                if len(params) >= MAX_ARGS:
                    self.report(
                        self.error(
                            "Can't have more than " + str(MAX_ARGS) + " parameters."
                        )
                    )
                params.append(self.expect_ident("Expect parameter name."))
        self.expect(")", "Expect ')' after parameters.")
        self.expect("{", "Expect '{' before " + kind + " body.")
        body = self.block()
        return FunctionStmt(name.pos, name, params, body)

    def var_declaration(self) -> VarStmt:
        keyword = self.previous()
        name = self.expect_ident("Expect variable name.")
        initializer: Expr | None = None
        if self.match("="):
            initializer = self.expression()
        self.expect(";", "Expect ';' after variable declaration.")
        return VarStmt(keyword.pos, name, initializer)

    # ── Statements ───────────────────────────────────────────

    def statement(self) -> Stmt:
        if self.match("for"):
            return self.for_statement()
        if self.match("if"):
            return self.if_statement()
        if self.match("print"):
            return self.print_statement()
        if self.match("return"):
            return self.return_statement()
        if self.match("while"):
            return self.while_statement()
        if self.at("{"):
            pos = self.advance().pos
            return BlockStmt(pos, self.block())
        return self.expression_statement()

    def block(self) -> list[Stmt]:
        """Declarations up to the matching '}' (the '{' is already consumed)."""
        stmts: list[Stmt] = []
        while not self.at("}") and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                stmts.append(stmt)
        self.expect("}", "Expect '}' after block.")
        return stmts

    def for_statement(self) -> Stmt:
        """for (init; cond; incr) body  =>  { init; while (cond) { body; incr; } }"""
        pos = self.previous().pos
        self.expect("(", "Expect '(' after 'for'.")
        initializer: Stmt | None
        if self.match(";"):
            initializer = None
        elif self.match("var"):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        cond: Expr | None = None
        if not self.at(";"):
            cond = self.expression()
        self.expect(";", "Expect ';' after loop condition.")

        increment: Expr | None = None
        if not self.at(")"):
            increment = self.expression()
        self.expect(")", "Expect ')' after for clauses.")
        body = self.statement()

        loop_body: list[Stmt] = [body]
        if increment is not None:
            loop_body.append(ExpressionStmt(increment.pos, increment))
        if cond is None:
            cond = Literal(pos, VBool(True))
        loop = WhileStmt(pos, cond, BlockStmt(body.pos, loop_body))
        outer: list[Stmt] = []
        if initializer is not None:
            outer.append(initializer)
        outer.append(loop)
        return BlockStmt(pos, outer)

    def if_statement(self) -> IfStmt:
        pos = self.previous().pos
        self.expect("(", "Expect '(' after 'if'.")
        cond = self.expression()
        self.expect(")", "Expect ')' after if condition.")
        then_branch = self.statement()
        else_branch: Stmt | None = None
        if self.match("else"):
            else_branch = self.statement()
        return IfStmt(pos, cond, then_branch, else_branch)

    def print_statement(self) -> PrintStmt:
        pos = self.previous().pos
        value = self.expression()
        self.expect(";", "Expect ';' after value.")
        return PrintStmt(pos, value)

    def return_statement(self) -> ReturnStmt:
        keyword = self.previous()
        value: Expr | None = None
        if not self.at(";"):
            value = self.expression()
        self.expect(";", "Expect ';' after return value.")
        return ReturnStmt(keyword.pos, keyword, value)

    def while_statement(self) -> WhileStmt:
        pos = self.previous().pos
        self.expect("(", "Expect '(' after 'while'.")
        cond = self.expression()
        self.expect(")", "Expect ')' after condition.")
        body = self.statement()
        return WhileStmt(pos, cond, body)

    def expression_statement(self) -> ExpressionStmt:
        expr = self.expression()
        self.expect(";", "Expect ';' after expression.")
        return ExpressionStmt(expr.pos, expr)

    # ── Expressions ──────────────────────────────────────────

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        """Assignment = ( Call '.' )? IDENT '=' Assignment | LogicOr"""
        expr = self.logic_or()
        if self.at("="):
            equals = self.advance()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.pos, expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.pos, expr.obj, expr.name, value)
            self.report(self.error("Invalid assignment target.", equals))
        return expr

    def logic_or(self) -> Expr:
        """LogicOr = LogicAnd ( 'or' LogicAnd )*"""
        left = self.logic_and()
        while self.at("or"):
            op = self.advance()
            right = self.logic_and()
            left = Logical(left.pos, left, op, right)
        return left

    def logic_and(self) -> Expr:
        """LogicAnd = Equality ( 'and' Equality )*"""
        left = self.equality()
        while self.at("and"):
            op = self.advance()
            right = self.equality()
            left = Logical(left.pos, left, op, right)
        return left

    def equality(self) -> Expr:
        """Equality = Comparison ( ( '==' | '!=' ) Comparison )*"""
        left = self.comparison()
        while self._at_op(EQUALITY_OPS):
            op = self.advance()
            right = self.comparison()
            left = Binary(left.pos, left, op, right)
        return left

    def comparison(self) -> Expr:
        """Comparison = Term ( ( '<' | '<=' | '>' | '>=' ) Term )*"""
        left = self.term()
        while self._at_op(COMPARISON_OPS):
            op = self.advance()
            right = self.term()
            left = Binary(left.pos, left, op, right)
        return left

    def term(self) -> Expr:
        """Term = Factor ( ( '+' | '-' ) Factor )*"""
        left = self.factor()
        while self._at_op(TERM_OPS):
            op = self.advance()
            right = self.factor()
            left = Binary(left.pos, left, op, right)
        return left

    def factor(self) -> Expr:
        """Factor = Unary ( ( '*' | '/' | '%' ) Unary )*"""
        left = self.unary()
        while self._at_op(FACTOR_OPS):
            op = self.advance()
            right = self.unary()
            left = Binary(left.pos, left, op, right)
        return left

    def unary(self) -> Expr:
        """Unary = ( '!' | '-' ) Unary | Call"""
        if self.at("!") or self.at("-"):
            op = self.advance()
            right = self.unary()
            return Unary(op.pos, op, right)
        return self.call()

    def call(self) -> Expr:
        """Call = Primary ( '(' Args? ')' | '.' IDENT )*"""
        expr = self.primary()
        while True:
            if self.match("("):
                expr = self.finish_call(expr)
            elif self.match("."):
                name = self.expect_ident("Expect property name after '.'.")
                expr = Get(expr.pos, expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        args: list[Expr] = []
        if not self.at(")"):
            args.append(self.expression())
            while self.match(","):
                if len(args) >= MAX_ARGS:
                    self.report(
                        self.error(
                            "Can't have more than " + str(MAX_ARGS) + " arguments."
                        )
                    )
                args.append(self.expression())
        paren = self.expect(")", "Expect ')' after arguments.")
        return Call(callee.pos, callee, paren, args)

    def primary(self) -> Expr:
        tok = self.current()
        pos = tok.pos

        # Literals
        if tok.type in (TK_INT, TK_FLOAT, TK_STRING):
            self.advance()
            if tok.literal is None:
                raise CompilerBug(
                    tok, "Literal token " + repr(tok.lexeme) + " has no value."
                )
            return Literal(pos, tok.literal)
        if tok.type == "true":
            self.advance()
            return Literal(pos, VBool(True))
        if tok.type == "false":
            self.advance()
            return Literal(pos, VBool(False))
        if tok.type == "nil":
            self.advance()
            return Literal(pos, VNil())

        if tok.type == "this":
            self.advance()
            return This(pos, tok)
        if tok.type == "super":
            raise self.error("Superclasses are not supported.")

        if tok.type == TK_IDENT:
            self.advance()
            return Variable(pos, tok)

        if self.at("("):
            self.advance()
            inner = self.expression()
            self.expect(")", "Expect ')' after expression.")
            return Grouping(pos, inner)

        raise self.error("Expect expression.")

    def _at_op(self, ops: set[str]) -> bool:
        tok = self.current()
        return tok.type != TK_STRING and tok.lexeme in ops

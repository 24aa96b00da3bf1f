"""Lox tokenizer: lexes source into a flat token list."""

from __future__ import annotations

import math

from .ast import Pos
from .errors import EXIT_DATA, LoxError
from .values import Value, VFloat, VInt, VString


# Token type constants
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "and",
    "class",
    "else",
    "false",
    "for",
    "fun",
    "if",
    "nil",
    "or",
    "print",
    "return",
    "super",
    "this",
    "true",
    "var",
    "while",
}

# Two-character operators, checked before single characters
MULTI_OPS: list[str] = [
    "!=",
    "==",
    "<=",
    ">=",
]

SINGLE_OPS: set[str] = {
    "(",
    ")",
    "{",
    "}",
    ",",
    ".",
    "-",
    "+",
    ";",
    "*",
    "/",
    "%",
    "!",
    "=",
    "<",
    ">",
}

INT_MAX = 2**63 - 1
INT_MIN = -(2**63)


class TokenizeError(LoxError):
    """Error during tokenization."""

    label = "SyntaxError"
    exit_code = EXIT_DATA

    def __init__(self, msg: str, line: int, col: int):
        self.line: int = line
        self.col: int = col
        super().__init__(msg, Pos(line, col))


class Token:
    """A token with type, lexeme, optional literal value, and position."""

    def __init__(
        self,
        type_: str,
        lexeme: str,
        line: int,
        col: int,
        literal: Value | None = None,
    ):
        self.type: str = type_
        self.lexeme: str = lexeme
        self.line: int = line
        self.col: int = col
        self.literal: Value | None = literal

    @property
    def pos(self) -> Pos:
        return Pos(self.line, self.col)

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.lexeme)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize Lox source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Number: int or float
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            is_float = False
            if pos + 1 < length and source[pos] == "." and _is_digit(source[pos + 1]):
                is_float = True
                pos += 1
                col += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
                    col += 1
            raw = source[start_pos:pos]
            if is_float:
                fval = float(raw)
                if math.isinf(fval):
                    raise TokenizeError(
                        "Float literal too large.", start_line, start_col
                    )
                tokens.append(
                    Token(TK_FLOAT, raw, start_line, start_col, VFloat(fval))
                )
            else:
                ival = int(raw)
                if ival > INT_MAX:
                    raise TokenizeError(
                        "Integer literal larger than " + str(INT_MAX) + ".",
                        start_line,
                        start_col,
                    )
                tokens.append(Token(TK_INT, raw, start_line, start_col, VInt(ival)))
            continue

        # String literal: "...", may span lines, no escapes
        if c == '"':
            pos += 1
            col += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    line += 1
                    col = 1
                else:
                    col += 1
                pos += 1
            if pos >= length:
                raise TokenizeError("Unterminated string.", start_line, start_col)
            pos += 1  # skip closing "
            col += 1
            raw = source[start_pos:pos]
            tokens.append(
                Token(TK_STRING, raw, start_line, start_col, VString(raw[1:-1]))
            )
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        # Two-character operators
        two = source[pos : pos + 2]
        if two in MULTI_OPS:
            tokens.append(Token(TK_OP, two, start_line, start_col))
            pos += 2
            col += 2
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("Unexpected character: " + repr(c), line, col)

    tokens.append(Token(TK_EOF, "", line, col))
    return tokens

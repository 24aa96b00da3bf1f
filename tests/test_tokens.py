"""Scanner tests."""

import pytest

from pylox.tokens import (
    TK_EOF,
    TK_FLOAT,
    TK_IDENT,
    TK_INT,
    TK_OP,
    TK_STRING,
    TokenizeError,
    tokenize,
)
from pylox.values import VFloat, VInt, VString


def kinds(source: str) -> list[tuple[str, str]]:
    return [(t.type, t.lexeme) for t in tokenize(source)]


def test_empty_source_is_just_eof():
    tokens = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].type == TK_EOF


def test_operators_prefer_two_characters():
    assert kinds("!= == <= >= ! = < >") == [
        (TK_OP, "!="),
        (TK_OP, "=="),
        (TK_OP, "<="),
        (TK_OP, ">="),
        (TK_OP, "!"),
        (TK_OP, "="),
        (TK_OP, "<"),
        (TK_OP, ">"),
        (TK_EOF, ""),
    ]


def test_keywords_use_their_own_kind():
    tokens = tokenize("var classy = nil;")
    assert tokens[0].type == "var"
    assert tokens[1].type == TK_IDENT
    assert tokens[1].lexeme == "classy"
    assert tokens[3].type == "nil"


def test_number_literals():
    tokens = tokenize("12 3.5 7.")
    assert tokens[0].type == TK_INT
    assert tokens[0].literal == VInt(12)
    assert tokens[1].type == TK_FLOAT
    assert tokens[1].literal == VFloat(3.5)
    # A trailing dot is not part of the number.
    assert (tokens[2].type, tokens[2].lexeme) == (TK_INT, "7")
    assert (tokens[3].type, tokens[3].lexeme) == (TK_OP, ".")


def test_string_literal_strips_quotes():
    tokens = tokenize('"hi there"')
    assert tokens[0].type == TK_STRING
    assert tokens[0].lexeme == '"hi there"'
    assert tokens[0].literal == VString("hi there")


def test_multiline_string_advances_line():
    tokens = tokenize('"a\nb" x')
    assert tokens[0].literal == VString("a\nb")
    assert tokens[0].line == 1
    assert tokens[1].line == 2


def test_comments_and_positions():
    tokens = tokenize("// nothing here\n  print 1;")
    assert tokens[0].type == "print"
    assert (tokens[0].line, tokens[0].col) == (2, 3)
    assert tokens[1].pos.col == 9


def test_unterminated_string():
    with pytest.raises(TokenizeError, match="Unterminated string."):
        tokenize('print "oops;')


def test_unexpected_character():
    with pytest.raises(TokenizeError) as exc:
        tokenize("1 # 2")
    assert exc.value.line == 1
    assert exc.value.col == 3
    assert "Unexpected character: '#'" in str(exc.value)


def test_integer_overflow():
    tokenize("9223372036854775807")
    with pytest.raises(TokenizeError, match="Integer literal larger than"):
        tokenize("9223372036854775808")


def test_float_overflow():
    with pytest.raises(TokenizeError, match="Float literal too large."):
        tokenize("1" + "0" * 400 + ".0")

"""Snapshot-and-merge environment tests."""

import pytest

from pylox.environment import Environment
from pylox.errors import CompilerBug, LoxNameError
from pylox.stdlib import make_stdlib
from pylox.values import VClosure, VInt, VNative


def test_stdlib_is_visible_as_globals(ident):
    env = Environment(make_stdlib())
    assert isinstance(env.get(ident("clock")), VNative)
    assert env.at_top_level


def test_stdlib_table_is_copied():
    stdlib = make_stdlib()
    env = Environment(stdlib)
    env.define_global("x", VInt(1))
    assert "x" not in stdlib


def test_missing_name(ident):
    env = Environment(make_stdlib())
    with pytest.raises(LoxNameError, match="Undefined variable 'y'."):
        env.get(ident("y"))
    with pytest.raises(LoxNameError, match="Undefined variable 'y'."):
        env.assign(ident("y"), VInt(1))


def test_define_global_outside_top_level_is_a_bug():
    block = Environment(make_stdlib()).enter_block()
    with pytest.raises(CompilerBug):
        block.define_global("x", VInt(1))


def test_block_shares_globals_and_copies_locals():
    env = Environment(make_stdlib())
    outer = env.enter_block()
    outer.define("a", VInt(1))
    inner = outer.enter_block()
    assert inner.globals is env.globals
    assert inner.locals is not outer.locals
    assert inner.locals == {"a": VInt(1)}


def test_block_assignment_merges_into_parent(ident):
    outer = Environment(make_stdlib()).enter_block()
    outer.define("x", VInt(1))
    inner = outer.enter_block()
    inner.assign(ident("x"), VInt(2))
    assert outer.get(ident("x")) == VInt(1)
    assert inner.assignments == {"x": VInt(2)}
    outer.merge(inner)
    assert outer.get(ident("x")) == VInt(2)
    assert inner.assignments == {}
    # declared in outer, so it stops here
    assert outer.assignments == {}


def test_shadowed_declaration_does_not_propagate(ident):
    outer = Environment(make_stdlib()).enter_block()
    outer.define("x", VInt(1))
    inner = outer.enter_block()
    inner.define("x", VInt(9))
    inner.assign(ident("x"), VInt(10))
    outer.merge(inner)
    assert outer.get(ident("x")) == VInt(1)


def test_mutation_bubbles_through_nested_blocks(ident):
    env = Environment(make_stdlib())
    env.define_global("g", VInt(0))
    b1 = env.enter_block()
    b2 = b1.enter_block()
    b2.assign(ident("g"), VInt(3))
    # globals-only names are shadowed inside a block until it exits
    assert env.globals["g"] == VInt(0)
    b1.merge(b2)
    assert b1.assignments == {"g": VInt(3)}
    env.merge(b1)
    assert env.globals["g"] == VInt(3)
    assert "g" not in env.locals


def test_top_level_assignment_writes_globals(ident):
    env = Environment(make_stdlib())
    env.define_global("g", VInt(0))
    env.assign(ident("g"), VInt(5))
    assert env.globals["g"] == VInt(5)
    assert env.assignments == {}


def test_call_environment(ident):
    env = Environment(make_stdlib())
    snapshot = env.enter_block()
    snapshot.define("captured", VInt(7))
    closure = VClosure("f", [ident("a"), ident("b")], [], snapshot)
    call_env = Environment.for_call(closure, [VInt(1), VInt(2)], env.globals)
    assert call_env.is_call
    assert not call_env.at_top_level
    assert call_env.globals is env.globals
    assert call_env.get(ident("captured")) == VInt(7)
    assert call_env.get(ident("b")) == VInt(2)
    call_env.assign(ident("captured"), VInt(8))
    assert snapshot.get(ident("captured")) == VInt(7)

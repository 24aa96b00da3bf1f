"""Value model and object model tests."""

import math

import pytest

from pylox.ast import Pos
from pylox.environment import Environment
from pylox.errors import LoxNameError
from pylox.stdlib import make_stdlib
from pylox.values import (
    VBool,
    VClass,
    VClosure,
    VFloat,
    VInstance,
    VInt,
    VNative,
    VNil,
    VString,
    format_float,
)


def make_closure(name: str) -> VClosure:
    return VClosure(name, [], [], Environment(make_stdlib()).enter_block())


def test_display_forms():
    assert VNil().to_string() == "nil"
    assert VBool(True).to_string() == "true"
    assert VInt(-4).to_string() == "-4"
    assert VString("raw").to_string() == "raw"
    assert make_closure("f").to_string() == "<fn f>"
    assert VNative("clock", 0, lambda args: VNil()).to_string() == "<native fn clock>"
    klass = VClass("Point", {})
    assert klass.to_string() == "Point"
    assert VInstance(klass).to_string() == "Instance of Point"


@pytest.mark.parametrize(
    "value,text",
    [
        (3.0, "3"),
        (2.5, "2.5"),
        (-0.0, "-0"),
        (1e21, "1000000000000000000000"),
        (math.inf, "inf"),
        (-math.inf, "-inf"),
        (math.nan, "NaN"),
    ],
)
def test_format_float(value, text):
    assert format_float(value) == text
    assert VFloat(value).to_string() == text


def test_type_names():
    assert VInt(1).type_name() == "int"
    assert VFloat(1.0).type_name() == "float"
    assert make_closure("f").type_name() == "function"
    assert VInstance(VClass("A", {})).type_name() == "instance"


def test_native_arity():
    clock = make_stdlib()["clock"]
    assert isinstance(clock, VNative)
    assert clock.arity() == 0
    assert isinstance(clock.fn([]), VFloat)


def test_instance_fields_shadow_methods(ident):
    method = make_closure("m")
    inst = VInstance(VClass("A", {"m": method}))
    bound = inst.get(ident("m"))
    assert isinstance(bound, VClosure)
    assert bound is not method
    inst.set(ident("m"), VInt(1))
    assert inst.get(ident("m")) == VInt(1)


def test_method_access_binds_fresh_each_time(ident):
    inst = VInstance(VClass("A", {"m": make_closure("m")}))
    first = inst.get(ident("m"))
    second = inst.get(ident("m"))
    assert first is not second
    assert first.env.get(ident("this")) is inst
    assert second.env.get(ident("this")) is inst


def test_bind_leaves_method_environment_alone(ident):
    method = make_closure("m")
    method.bind(VInstance(VClass("A", {"m": method})))
    assert "this" not in method.env.locals


def test_undefined_property(ident):
    inst = VInstance(VClass("A", {}))
    with pytest.raises(LoxNameError, match="Undefined property 'nope'.") as exc:
        inst.get(ident("nope", line=4))
    assert exc.value.pos == Pos(4, 1)


def test_instances_share_class_but_not_fields(ident):
    klass = VClass("A", {})
    a = VInstance(klass)
    b = VInstance(klass)
    a.set(ident("x"), VInt(1))
    assert a.klass is b.klass
    assert "x" not in b.fields

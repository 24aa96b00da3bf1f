"""Lox runtime values and the object model (callables, classes, instances)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from .errors import LoxNameError

if TYPE_CHECKING:
    from .ast import Stmt
    from .environment import Environment
    from .tokens import Token


class Value:
    """A runtime value with a concrete type tag."""

    def type_name(self) -> str:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass
class VNil(Value):
    def type_name(self) -> str:
        return "nil"

    def to_string(self) -> str:
        return "nil"


@dataclass
class VBool(Value):
    value: bool

    def type_name(self) -> str:
        return "bool"

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class VInt(Value):
    value: int

    def type_name(self) -> str:
        return "int"

    def to_string(self) -> str:
        return str(self.value)


@dataclass
class VFloat(Value):
    value: float

    def type_name(self) -> str:
        return "float"

    def to_string(self) -> str:
        return format_float(self.value)


@dataclass
class VString(Value):
    value: str

    def type_name(self) -> str:
        return "string"

    def to_string(self) -> str:
        return self.value


def format_float(x: float) -> str:
    """Integral floats print without a fractional part: 3.0 -> "3"."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    if x.is_integer():
        if x == 0 and math.copysign(1.0, x) < 0:
            return "-0"
        return str(int(x))
    return repr(x)


# ============================================================
# Callables
# ============================================================


class VCallable(Value):
    """Anything that can appear left of a call's parentheses, except classes."""

    name: str

    def arity(self) -> int:
        raise NotImplementedError

    def type_name(self) -> str:
        return "function"


@dataclass(eq=False)
class VNative(VCallable):
    """A host function with a fixed arity."""

    name: str
    arity_count: int
    fn: Callable[[list[Value]], Value]

    def arity(self) -> int:
        return self.arity_count

    def to_string(self) -> str:
        return f"<native fn {self.name}>"


@dataclass(eq=False)
class VClosure(VCallable):
    """A user function bundled with a snapshot of its defining environment."""

    name: str
    params: list[Token]
    body: list[Stmt]
    env: Environment

    def arity(self) -> int:
        return len(self.params)

    def bind(self, instance: VInstance) -> VClosure:
        """Return a new closure whose environment also defines `this`."""
        env = self.env.enter_block()
        env.define("this", instance)
        return VClosure(self.name, self.params, self.body, env)

    def to_string(self) -> str:
        return f"<fn {self.name}>"


# ============================================================
# Classes and instances
# ============================================================


@dataclass(eq=False)
class VClass(Value):
    """Class descriptor, shared by reference between all its instances."""

    name: str
    methods: dict[str, VClosure]

    def find_method(self, name: str) -> VClosure | None:
        return self.methods.get(name)

    def type_name(self) -> str:
        return "class"

    def to_string(self) -> str:
        return self.name


@dataclass(eq=False)
class VInstance(Value):
    klass: VClass
    fields: dict[str, Value] = field(default_factory=dict)

    def get(self, name: Token) -> Value:
        """Fields shadow methods; each method access yields a fresh binding."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxNameError(
            name.lexeme, f"Undefined property '{name.lexeme}'.", name.pos
        )

    def set(self, name: Token, value: Value) -> None:
        self.fields[name.lexeme] = value

    def type_name(self) -> str:
        return "instance"

    def to_string(self) -> str:
        return f"Instance of {self.klass.name}"

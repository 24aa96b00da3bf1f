"""Lox environments: two-tier bindings with snapshot-and-merge block scopes.

There is no chain of parent environments. Entering a block copies the
enclosing locals into a fresh block environment; writes to names the block
did not declare are recorded as pending assignments, and the parent merges
them back when the block exits. A block parent re-records what it did not
declare itself, so a mutation travels outward through any number of nested
blocks until it reaches the nearest function or global scope. Names declared
inside a block shadow the outer binding and never propagate.

The globals table is created once from the standard library and shared by
every environment derived from it, so a function body always observes the
call site's current globals.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from .errors import CompilerBug, LoxNameError

if TYPE_CHECKING:
    from .tokens import Token
    from .values import Value, VClosure


class Environment:
    def __init__(
        self,
        stdlib: Mapping[str, Value] | None = None,
        *,
        globals_table: dict[str, Value] | None = None,
        locals_table: dict[str, Value] | None = None,
        is_block: bool = False,
        is_call: bool = False,
    ):
        if globals_table is None:
            globals_table = dict(stdlib) if stdlib is not None else {}
        self.globals: dict[str, Value] = globals_table
        self.locals: dict[str, Value] = (
            locals_table if locals_table is not None else {}
        )
        self.is_block: bool = is_block
        self.is_call: bool = is_call
        self.declared_here: set[str] = set()
        self.assignments: dict[str, Value] = {}

    @property
    def at_top_level(self) -> bool:
        return not self.is_block and not self.is_call

    # ---- Derived environments ----------------------------------------------

    def enter_block(self) -> Environment:
        """Clone this scope into a fresh block environment."""
        return Environment(
            globals_table=self.globals,
            locals_table=dict(self.locals),
            is_block=True,
        )

    @classmethod
    def for_call(
        cls,
        closure: VClosure,
        args: list[Value],
        globals_table: dict[str, Value],
    ) -> Environment:
        """Captured snapshot + parameters, against the caller's globals."""
        locals_table = dict(closure.env.locals)
        for param, arg in zip(closure.params, args):
            locals_table[param.lexeme] = arg
        return cls(globals_table=globals_table, locals_table=locals_table, is_call=True)

    # ---- Bindings ----------------------------------------------------------

    def define(self, name: str, value: Value) -> None:
        self.locals[name] = value
        if self.is_block:
            self.declared_here.add(name)

    def define_global(self, name: str, value: Value) -> None:
        if not self.at_top_level:
            raise CompilerBug(
                name, f"Global '{name}' defined outside the top-level scope."
            )
        self.globals[name] = value

    def get(self, name: Token) -> Value:
        key = name.lexeme
        if key in self.locals:
            return self.locals[key]
        if key in self.globals:
            return self.globals[key]
        raise LoxNameError(key, f"Undefined variable '{key}'.", name.pos)

    def assign(self, name: Token, value: Value) -> None:
        key = name.lexeme
        if key in self.locals:
            self.locals[key] = value
        elif key in self.globals:
            if self.is_block:
                # Shadow locally; the merge on block exit writes it through.
                self.locals[key] = value
            else:
                self.globals[key] = value
        else:
            raise LoxNameError(key, f"Undefined variable '{key}'.", name.pos)
        if self.is_block and key not in self.declared_here:
            self.assignments[key] = value

    def merge(self, block: Environment) -> None:
        """Apply a finished block's pending assignments to this scope."""
        for key, value in block.assignments.items():
            if self.is_block or key in self.locals:
                self.locals[key] = value
            else:
                self.globals[key] = value
            if self.is_block and key not in self.declared_here:
                self.assignments[key] = value
        block.assignments.clear()

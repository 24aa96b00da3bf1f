"""Lox standard library: the native bindings every global scope starts with."""

from __future__ import annotations

import time

from .values import Value, VFloat, VNative


def _clock(args: list[Value]) -> Value:
    """Current wall-clock time in milliseconds."""
    return VFloat(float(time.time_ns() // 1_000_000))


def make_stdlib() -> dict[str, Value]:
    return {
        "clock": VNative("clock", 0, _clock),
    }

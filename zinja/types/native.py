"""Function values.

A callable marked with @native follows the registry calling convention
fn(env, args, kwargs). Any other callable found in a template context is
host Python code and is called as fn(*args, **kwargs).
"""

from __future__ import annotations

from zinja import JinjaValue, NativeFn
from zinja.types.macro import MacroValue


def native(fn: NativeFn) -> NativeFn:
    fn._zinja_native = True
    return fn


def is_native(value: JinjaValue) -> bool:
    return getattr(value, "_zinja_native", False) is True


def is_function(value: JinjaValue) -> bool:
    return callable(value) and not isinstance(value, MacroValue)

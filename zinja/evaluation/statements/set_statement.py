"""{% set %}: plain, tuple and member assignment.

Object values are never mutated in place. `ns.attr = value` builds a new
object and writes it back to the scope that defines `ns`, so namespace
updates made inside loops and macros are seen by the enclosing template.
"""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja import JinjaValue
from zinja.errors import JinjaRuntimeError, JinjaTypeError
from zinja.types.environment import Environment
from zinja.types.nodes import Expr, Identifier, Member, Set, TupleLiteral
from zinja.types.signal import Signal
from zinja.types.value import type_name

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def set_statement(node: Set, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    if node.value is not None:
        value = interpreter.evaluate(node.value, env)
    else:
        value = interpreter.render_block(node.body, env)
    assign(node.target, value, env, interpreter)
    return Signal.NORMAL


def assign(target: Expr, value: JinjaValue, env: Environment, interpreter: Interpreter) -> None:
    match target:
        case Identifier(name=name):
            env.define(name, value)
        case TupleLiteral(items=items):
            if not isinstance(value, list):
                raise JinjaTypeError(f"Cannot unpack {type_name(value)} into {len(items)} names")
            if len(value) != len(items):
                raise JinjaRuntimeError(f"Expected {len(items)} values to unpack, got {len(value)}")
            for item, element in zip(items, value):
                env.define(item.name, element)
        case Member(object=obj, key=key, computed=computed):
            _assign_member(obj, key, computed, value, env, interpreter)
        case _:
            raise JinjaRuntimeError(f"Cannot assign to {type(target).__name__}")


def _assign_member(
    obj: Expr, key_expr: Expr, computed: bool, value: JinjaValue, env: Environment, interpreter: Interpreter
) -> None:
    key = interpreter.evaluate(key_expr, env) if computed else key_expr.value
    if not isinstance(key, str):
        raise JinjaTypeError(f"Object keys must be strings, not {type_name(key)}")
    container = interpreter.evaluate(obj, env)
    if not isinstance(container, dict):
        raise JinjaTypeError(f"Cannot set attribute {key!r} on {type_name(container)}")
    _write_back(obj, {**container, key: value}, env, interpreter)


def _write_back(target: Expr, value: JinjaValue, env: Environment, interpreter: Interpreter) -> None:
    match target:
        case Identifier(name=name):
            env.set_in_chain(name, value)
        case Member(object=obj, key=key, computed=computed):
            _assign_member(obj, key, computed, value, env, interpreter)
        case _:
            raise JinjaRuntimeError(f"Cannot assign through {type(target).__name__}")

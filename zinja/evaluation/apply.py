"""Application engine for zinja.

Centralizes how values are called from templates:
- MacroValue: parameters bound by zinja.types.bind, body rendered to a string.
- native functions (@native): called as fn(env, args, kwargs).
- host callables from the render context: called as fn(*args, **kwargs),
  the result normalised into a template value.

Filter and test dispatch live here as well: a function bound in scope under
the filter or test name shadows the registry entry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from zinja import JinjaValue
from zinja.errors import JinjaNameError, JinjaTypeError
from zinja.types.bind import bind_macro_arguments
from zinja.types.environment import Environment
from zinja.types.macro import MacroValue
from zinja.types.native import is_function, is_native
from zinja.types.undefined import Undefined
from zinja.types.value import from_python, is_truthy, type_name

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter

logger = logging.getLogger(__name__)


def call_function(
    fn: Callable,
    args: list[JinjaValue],
    kwargs: dict[str, JinjaValue],
    env: Environment,
) -> JinjaValue:
    if is_native(fn):
        return fn(env, args, kwargs)
    return from_python(fn(*args, **kwargs))


def call_macro(
    macro: MacroValue,
    args: list[JinjaValue],
    kwargs: dict[str, JinjaValue],
    env: Environment,
    interpreter: Interpreter,
) -> str:
    """Render `macro` in a fresh child of the call-site scope `env`."""
    local_env = bind_macro_arguments(macro, args, kwargs, env, interpreter.evaluate)
    return interpreter.render_block(macro.body, local_env)


def call_value(
    callee: JinjaValue,
    args: list[JinjaValue],
    kwargs: dict[str, JinjaValue],
    env: Environment,
    interpreter: Interpreter,
) -> JinjaValue:
    """Call either a macro or a function value."""
    if isinstance(callee, MacroValue):
        return call_macro(callee, args, kwargs, env, interpreter)
    elif is_function(callee):
        return call_function(callee, args, kwargs, env)
    else:
        raise JinjaTypeError(f"Cannot call {type_name(callee)} value")


def _resolve(kind: str, name: str, table: dict[str, Callable], env: Environment) -> Callable:
    bound = env.lookup(name)
    if bound is not Undefined and is_function(bound):
        if name in table:
            logger.debug("%s %r overridden by a function in scope", kind, name)
        return bound
    fn = table.get(name)
    if fn is None:
        raise JinjaNameError(f"Unknown {kind} '{name}'")
    return fn


def resolve_filter(name: str, env: Environment) -> Callable:
    return _resolve("filter", name, env.registry.filters, env)


def resolve_test(name: str, env: Environment) -> Callable:
    return _resolve("test", name, env.registry.tests, env)


def apply_filter(
    name: str,
    value: JinjaValue,
    args: list[JinjaValue],
    kwargs: dict[str, JinjaValue],
    env: Environment,
) -> JinjaValue:
    return call_function(resolve_filter(name, env), [value, *args], kwargs, env)


def apply_test(
    name: str,
    value: JinjaValue,
    args: list[JinjaValue],
    kwargs: dict[str, JinjaValue],
    env: Environment,
) -> bool:
    return is_truthy(call_function(resolve_test(name, env), [value, *args], kwargs, env))

from __future__ import annotations

from typing import Mapping, Sequence

from zinja import JinjaValue, EvaluatorFn
from zinja.errors import JinjaArityError
from zinja.types.environment import Environment
from zinja.types.macro import MacroValue
from zinja.types.undefined import Undefined


def resolve_call_arguments(
    args: Sequence[JinjaValue],
    kwargs: Mapping[str, JinjaValue],
    parameters: Sequence[str],
    defaults: Mapping[str, JinjaValue] | None = None,
    name: str = "function",
) -> dict[str, JinjaValue]:
    """Merge positional and keyword arguments against an ordered parameter list.

    Raises JinjaArityError when an argument is supplied twice, a keyword is
    not a parameter, too many positional arguments are given, or a parameter
    without a default is left unbound.
    """
    defaults = defaults or {}
    if len(args) > len(parameters):
        raise JinjaArityError(
            f"{name}() takes at most {len(parameters)} positional argument(s) ({len(args)} given)"
        )
    bound: dict[str, JinjaValue] = dict(zip(parameters, args))
    for key, value in kwargs.items():
        if key not in parameters:
            raise JinjaArityError(f"{name}() got an unexpected keyword argument '{key}'")
        if key in bound:
            raise JinjaArityError(f"{name}() got multiple values for argument '{key}'")
        bound[key] = value
    for parameter in parameters:
        if parameter in bound:
            continue
        if parameter not in defaults:
            raise JinjaArityError(f"{name}() missing required argument '{parameter}'")
        bound[parameter] = defaults[parameter]
    return bound


def bind_macro_arguments(
    macro: MacroValue,
    args: Sequence[JinjaValue],
    kwargs: Mapping[str, JinjaValue],
    call_env: Environment,
    evaluate_fn: EvaluatorFn,
) -> Environment:
    """
    Single source of truth for macro parameter binding.

    Order:
    - default-value expressions, evaluated in the macro's defining scope
    - positional arguments by position; extras are collected in `varargs`
    - keyword arguments by name, overwriting; unknown names go to `kwargs`

    Returns a new Environment whose parent is the call-site scope. A
    `caller` visible at the call site is forwarded into it.
    """
    local_env = Environment(parent=call_env)

    caller = call_env.lookup("caller")
    if caller is not Undefined:
        local_env.define("caller", caller)

    for parameter in macro.params:
        if parameter in macro.defaults:
            local_env.define(parameter, evaluate_fn(macro.defaults[parameter], macro.env))

    for parameter, value in zip(macro.params, args):
        local_env.define(parameter, value)
    varargs = list(args[len(macro.params):])

    extra: dict[str, JinjaValue] = {}
    for key, value in kwargs.items():
        if key in macro.params:
            local_env.define(key, value)
        else:
            extra[key] = value

    missing = [p for p in macro.params if p not in local_env.variables]
    if missing:
        raise JinjaArityError(
            f"Macro '{macro.name}' missing {len(missing)} required argument(s): {missing}"
        )

    if "varargs" not in macro.params:
        local_env.define("varargs", varargs)
    if "kwargs" not in macro.params:
        local_env.define("kwargs", extra)
    return local_env

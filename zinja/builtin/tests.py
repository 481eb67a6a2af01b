"""Built-in tests used by `value is name(args)`.

Tests are called as fn(env, args, kwargs) with the tested value first and
return a boolean.
"""

from __future__ import annotations

from zinja import JinjaValue
from zinja.errors import JinjaRuntimeError, JinjaTypeError
from zinja.types.bind import resolve_call_arguments
from zinja.types.environment import Environment
from zinja.types.macro import MacroValue
from zinja.types.native import is_function
from zinja.types.undefined import Undefined
from zinja.types.value import (
    compare, contains, equivalent, is_integer, is_number, strictly_equal, type_name,
)


def _arguments(name: str, args, kwargs, parameters: tuple[str, ...], **defaults) -> list[JinjaValue]:
    bound = resolve_call_arguments(args, kwargs, parameters, defaults, name=name)
    return [bound[p] for p in parameters]


def _predicate(name: str, check):
    """Single-argument test from a plain predicate."""
    def test(env: Environment, args, kwargs) -> bool:
        (value,) = _arguments(name, args, kwargs, ("value",))
        return check(value)
    test.__name__ = f"test_{name}"
    return test


def _comparison(name: str, check):
    def test(env: Environment, args, kwargs) -> bool:
        value, other = _arguments(name, args, kwargs, ("value", "other"))
        return check(value, other)
    test.__name__ = f"test_{name}"
    return test


def _integer_argument(name: str, value: JinjaValue) -> int:
    if not is_integer(value):
        raise JinjaTypeError(f"Test '{name}' expects an integer, not {type_name(value)}")
    return value


def test_even(env: Environment, args, kwargs) -> bool:
    (value,) = _arguments("even", args, kwargs, ("value",))
    return _integer_argument("even", value) % 2 == 0


def test_odd(env: Environment, args, kwargs) -> bool:
    (value,) = _arguments("odd", args, kwargs, ("value",))
    return _integer_argument("odd", value) % 2 == 1


def test_divisibleby(env: Environment, args, kwargs) -> bool:
    value, num = _arguments("divisibleby", args, kwargs, ("value", "num"))
    num = _integer_argument("divisibleby", num)
    if num == 0:
        raise JinjaRuntimeError("divisibleby: division by zero")
    return _integer_argument("divisibleby", value) % num == 0


def test_sameas(env: Environment, args, kwargs) -> bool:
    """Identity for containers, strict equality for scalars."""
    value, other = _arguments("sameas", args, kwargs, ("value", "other"))
    if isinstance(value, (list, dict)):
        return value is other
    return strictly_equal(value, other)


def test_filter(env: Environment, args, kwargs) -> bool:
    (value,) = _arguments("filter", args, kwargs, ("value",))
    return isinstance(value, str) and (value in env.registry.filters or is_function(env.lookup(value)))


def test_test(env: Environment, args, kwargs) -> bool:
    (value,) = _arguments("test", args, kwargs, ("value",))
    return isinstance(value, str) and (value in env.registry.tests or is_function(env.lookup(value)))


def _is_lower(value: JinjaValue) -> bool:
    return isinstance(value, str) and value.islower()


def _is_upper(value: JinjaValue) -> bool:
    return isinstance(value, str) and value.isupper()


test_eq = _comparison("eq", equivalent)
test_ne = _comparison("ne", lambda a, b: not equivalent(a, b))
test_gt = _comparison("gt", lambda a, b: compare(">", a, b))
test_ge = _comparison("ge", lambda a, b: compare(">=", a, b))
test_lt = _comparison("lt", lambda a, b: compare("<", a, b))
test_le = _comparison("le", lambda a, b: compare("<=", a, b))
test_in = _comparison("in", lambda a, b: contains(b, a))


def register(registry) -> None:
    """Register all builtin tests into the given registry."""
    table = {
        "defined": _predicate("defined", lambda v: v is not Undefined),
        "undefined": _predicate("undefined", lambda v: v is Undefined),
        "none": _predicate("none", lambda v: v is None),
        "boolean": _predicate("boolean", lambda v: isinstance(v, bool)),
        "true": _predicate("true", lambda v: v is True),
        "false": _predicate("false", lambda v: v is False),
        "number": _predicate("number", is_number),
        "integer": _predicate("integer", is_integer),
        "float": _predicate("float", lambda v: isinstance(v, float)),
        "string": _predicate("string", lambda v: isinstance(v, str)),
        "mapping": _predicate("mapping", lambda v: isinstance(v, dict)),
        "iterable": _predicate("iterable", lambda v: isinstance(v, (list, dict, str))),
        "sequence": _predicate("sequence", lambda v: isinstance(v, (list, dict, str))),
        "callable": _predicate("callable", lambda v: isinstance(v, MacroValue) or is_function(v)),
        "lower": _predicate("lower", _is_lower),
        "upper": _predicate("upper", _is_upper),
        "escaped": _predicate("escaped", lambda v: False),
        "even": test_even,
        "odd": test_odd,
        "divisibleby": test_divisibleby,
        "sameas": test_sameas,
        "filter": test_filter,
        "test": test_test,
        "in": test_in,
        "eq": test_eq,
        "equalto": test_eq,
        "==": test_eq,
        "ne": test_ne,
        "!=": test_ne,
        "gt": test_gt,
        "greaterthan": test_gt,
        ">": test_gt,
        "ge": test_ge,
        ">=": test_ge,
        "lt": test_lt,
        "lessthan": test_lt,
        "<": test_lt,
        "le": test_le,
        "<=": test_le,
    }
    for name, fn in table.items():
        registry.register_test(name, fn)

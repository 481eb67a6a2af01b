"""Operations over template values.

Template values are carried by plain Python objects:

    None            null
    Undefined       undefined (see zinja.types.undefined)
    bool            boolean (matched before int)
    int, float      numbers
    str             string
    list            array
    dict            object with str keys, insertion ordered
    MacroValue      macro
    callable        function

Every operation here matches over those cases explicitly; values from the
host are normalised with `from_python` before they enter a render.
"""

from __future__ import annotations

import json
import math
import operator
from collections.abc import Mapping

from zinja import JinjaValue
from zinja.errors import JinjaRuntimeError, JinjaTypeError
from zinja.types.macro import MacroValue
from zinja.types.native import is_function
from zinja.types.undefined import Undefined, UndefinedType


def type_name(value: JinjaValue) -> str:
    match value:
        case None:
            return "null"
        case UndefinedType():
            return "undefined"
        case bool():
            return "boolean"
        case int():
            return "integer"
        case float():
            return "float"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
        case MacroValue():
            return "macro"
        case _ if is_function(value):
            return "function"
        case _:
            return type(value).__name__


def is_number(value: JinjaValue) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: JinjaValue) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_truthy(value: JinjaValue) -> bool:
    match value:
        case None | UndefinedType():
            return False
        case bool():
            return value
        case int() | float():
            return value != 0
        case str() | list() | dict():
            return len(value) > 0
        case _:
            return True


# --- conversion ---

def from_python(value: JinjaValue) -> JinjaValue:
    """Normalise host data into template values (tuples become lists)."""
    match value:
        case None | UndefinedType() | bool() | int() | float() | str() | MacroValue():
            return value
        case Mapping():
            return {str(k): from_python(v) for k, v in value.items()}
        case list() | tuple():
            return [from_python(v) for v in value]
        case _ if is_function(value):
            return value
        case _:
            raise JinjaTypeError(f"Cannot use {type(value).__name__} as a template value")


def to_string(value: JinjaValue) -> str:
    """Text a value renders as in template output."""
    match value:
        case str():
            return value
        case None | UndefinedType():
            return ""
        case bool():
            return "true" if value else "false"
        case int() | float():
            return str(value)
        case list() | dict():
            return to_repr(value)
        case MacroValue():
            return str(value)
        case _ if is_function(value):
            return "[Function]"
        case _:
            return str(value)


def to_repr(value: JinjaValue) -> str:
    """Python-like representation used for values nested in containers."""
    match value:
        case str():
            return repr(value)
        case None:
            return "none"
        case list():
            return "[" + ", ".join(to_repr(v) for v in value) + "]"
        case dict():
            return "{" + ", ".join(f"{k!r}: {to_repr(v)}" for k, v in value.items()) + "}"
        case _:
            return to_string(value)


def _jsonable(value: JinjaValue) -> JinjaValue:
    match value:
        case None | UndefinedType():
            return None
        case bool() | int() | float() | str():
            return value
        case list():
            return [_jsonable(v) for v in value]
        case dict():
            return {k: _jsonable(v) for k, v in value.items()}
        case _:
            raise JinjaTypeError(f"Cannot serialize {type_name(value)} to JSON")


def to_json(value: JinjaValue, indent: int | None = None) -> str:
    return json.dumps(_jsonable(value), indent=indent, ensure_ascii=False)


def to_list(value: JinjaValue) -> list[JinjaValue]:
    """Elements a value yields when iterated: keys of objects, characters of strings."""
    match value:
        case list():
            return list(value)
        case dict():
            return list(value.keys())
        case str():
            return list(value)
        case UndefinedType():
            return []
        case _:
            raise JinjaTypeError(f"Cannot iterate over {type_name(value)}")


# --- arithmetic ---

def _numeric(a: JinjaValue, b: JinjaValue) -> bool:
    return is_number(a) and is_number(b)


def _unsupported(op: str, a: JinjaValue, b: JinjaValue) -> JinjaTypeError:
    return JinjaTypeError(f"Unsupported operand types for {op}: {type_name(a)} and {type_name(b)}")


def add(a: JinjaValue, b: JinjaValue) -> JinjaValue:
    if _numeric(a, b):
        return a + b
    if isinstance(a, str) or isinstance(b, str):
        return to_string(a) + to_string(b)
    if isinstance(a, list) and isinstance(b, list):
        return a + b
    raise _unsupported("+", a, b)


def subtract(a: JinjaValue, b: JinjaValue) -> JinjaValue:
    if _numeric(a, b):
        return a - b
    raise _unsupported("-", a, b)


def multiply(a: JinjaValue, b: JinjaValue) -> JinjaValue:
    if _numeric(a, b):
        return a * b
    if isinstance(a, str) and is_integer(b):
        return a * b
    if is_integer(a) and isinstance(b, str):
        return b * a
    raise _unsupported("*", a, b)


def divide(a: JinjaValue, b: JinjaValue) -> float:
    if not _numeric(a, b):
        raise _unsupported("/", a, b)
    if b == 0:
        raise JinjaRuntimeError("Division by zero")
    return a / b


def floor_divide(a: JinjaValue, b: JinjaValue) -> int:
    if not _numeric(a, b):
        raise _unsupported("//", a, b)
    if b == 0:
        raise JinjaRuntimeError("Division by zero")
    if is_integer(a) and is_integer(b):
        return a // b
    quotient = a / b
    if not math.isfinite(quotient):
        raise JinjaRuntimeError(f"Cannot floor {quotient}")
    return math.floor(quotient)


def modulo(a: JinjaValue, b: JinjaValue) -> int:
    if not (is_integer(a) and is_integer(b)):
        raise _unsupported("%", a, b)
    if b == 0:
        raise JinjaRuntimeError("Modulo by zero")
    return a % b


def power(a: JinjaValue, b: JinjaValue) -> JinjaValue:
    if not _numeric(a, b):
        raise _unsupported("**", a, b)
    if is_integer(a) and is_integer(b) and b >= 0:
        return a ** b
    try:
        return math.pow(a, b)
    except (ValueError, OverflowError) as exc:
        raise JinjaRuntimeError(f"Cannot raise {a} to the power {b}") from exc


def negate(a: JinjaValue) -> JinjaValue:
    if is_number(a):
        return -a
    raise JinjaTypeError(f"Unsupported operand type for unary -: {type_name(a)}")


def positive(a: JinjaValue) -> JinjaValue:
    if is_number(a):
        return a
    raise JinjaTypeError(f"Unsupported operand type for unary +: {type_name(a)}")


def concatenate(a: JinjaValue, b: JinjaValue) -> str:
    return to_string(a) + to_string(b)


# --- comparison ---

_COMPARATORS = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def compare(op: str, a: JinjaValue, b: JinjaValue) -> bool:
    if _numeric(a, b) or (isinstance(a, str) and isinstance(b, str)):
        return _COMPARATORS[op](a, b)
    raise JinjaTypeError(f"Cannot compare {type_name(a)} with {type_name(b)} using {op}")


def equivalent(a: JinjaValue, b: JinjaValue) -> bool:
    """Equality used by == : numbers compare across int and float, object keys compare in order."""
    if _numeric(a, b):
        return a == b
    match a:
        case bool():
            return isinstance(b, bool) and a == b
        case str():
            return isinstance(b, str) and a == b
        case None:
            return b is None
        case UndefinedType():
            return b is Undefined
        case list():
            return (
                isinstance(b, list)
                and len(a) == len(b)
                and all(equivalent(x, y) for x, y in zip(a, b))
            )
        case dict():
            return (
                isinstance(b, dict)
                and len(a) == len(b)
                and all(ka == kb and equivalent(va, vb) for (ka, va), (kb, vb) in zip(a.items(), b.items()))
            )
        case MacroValue():
            return a is b
        case _:
            return False


def strictly_equal(a: JinjaValue, b: JinjaValue) -> bool:
    """Structural, type-strict equality: 1 and 1.0 differ."""
    if type(a) is not type(b):
        return False
    match a:
        case list():
            return len(a) == len(b) and all(strictly_equal(x, y) for x, y in zip(a, b))
        case dict():
            return len(a) == len(b) and all(
                ka == kb and strictly_equal(va, vb) for (ka, va), (kb, vb) in zip(a.items(), b.items())
            )
        case MacroValue():
            return a is b
        case _ if is_function(a):
            return False
        case _:
            return a == b


def contains(haystack: JinjaValue, needle: JinjaValue) -> bool:
    """Semantics of `needle in haystack`."""
    match haystack:
        case None | UndefinedType():
            return False
        case list():
            return any(strictly_equal(needle, item) for item in haystack)
        case str():
            return isinstance(needle, str) and needle in haystack
        case dict():
            return isinstance(needle, str) and needle in haystack
        case _:
            raise JinjaTypeError(f"Cannot test membership in {type_name(haystack)}")


# --- indexing ---

def get_item(value: JinjaValue, key: JinjaValue) -> JinjaValue:
    """value[key]; misses yield Undefined."""
    match value:
        case list() | str():
            if is_integer(key):
                index = key + len(value) if key < 0 else key
                if 0 <= index < len(value):
                    return value[index]
            return Undefined
        case dict():
            if isinstance(key, str):
                return value.get(key, Undefined)
            return Undefined
        case _:
            return Undefined


def slice_value(
    value: JinjaValue,
    start: JinjaValue = None,
    stop: JinjaValue = None,
    step: JinjaValue = None,
) -> JinjaValue:
    bounds = [None if b is Undefined else b for b in (start, stop, step)]
    for bound in bounds:
        if bound is not None and not is_integer(bound):
            raise JinjaTypeError(f"Slice indices must be integers or none, not {type_name(bound)}")
    start, stop, step = bounds
    if step == 0:
        raise JinjaRuntimeError("Slice step cannot be zero")
    match value:
        case list() | str():
            return value[start:stop:step]
        case UndefinedType():
            return Undefined
        case _:
            raise JinjaTypeError(f"Cannot slice {type_name(value)}")

"""Attribute access on template values.

`value.name` on a string or object resolves to a bound method when `name`
is one of the methods below; objects then fall back to their keys. Every
other attribute access yields Undefined.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from zinja import JinjaValue
from zinja.errors import JinjaRuntimeError, JinjaTypeError
from zinja.types.bind import resolve_call_arguments
from zinja.types.native import native
from zinja.types.undefined import Undefined
from zinja.types.value import is_integer, type_name


def _arguments(name: str, args, kwargs, parameters: tuple[str, ...], **defaults) -> list[JinjaValue]:
    bound = resolve_call_arguments(args, kwargs, parameters, defaults, name=name)
    return [bound[p] for p in parameters]


def _require_str(method: str, value: JinjaValue, allow_none: bool = False) -> None:
    if allow_none and value is None:
        return
    if not isinstance(value, str):
        raise JinjaTypeError(f"{method}() expects a string argument, not {type_name(value)}")


# --- string methods: (subject, env, args, kwargs) ---

def _simple(transform: Callable[[str], str], name: str):
    def method(subject: str, env, args, kwargs) -> str:
        _arguments(name, args, kwargs, ())
        return transform(subject)
    return method


def _strip(name: str):
    def method(subject: str, env, args, kwargs) -> str:
        (chars,) = _arguments(name, args, kwargs, ("chars",), chars=None)
        _require_str(name, chars, allow_none=True)
        return getattr(subject, name)(chars)
    return method


def str_split(subject: str, env, args, kwargs) -> list[str]:
    sep, maxsplit = _arguments("split", args, kwargs, ("sep", "maxsplit"), sep=None, maxsplit=-1)
    _require_str("split", sep, allow_none=True)
    if sep == "":
        raise JinjaRuntimeError("split() separator must not be empty")
    if not is_integer(maxsplit):
        raise JinjaTypeError("split() maxsplit must be an integer")
    return subject.split(sep, maxsplit)


def str_replace(subject: str, env, args, kwargs) -> str:
    old, new, count = _arguments("replace", args, kwargs, ("old", "new", "count"), count=-1)
    _require_str("replace", old)
    _require_str("replace", new)
    if not is_integer(count):
        raise JinjaTypeError(f"replace() count must be an integer, not {type_name(count)}")
    return subject.replace(old, new, count)


def _affix(name: str):
    def method(subject: str, env, args, kwargs) -> bool:
        (affix,) = _arguments(name, args, kwargs, ("affix",))
        if isinstance(affix, list):
            for item in affix:
                _require_str(name, item)
            affix = tuple(affix)
        else:
            _require_str(name, affix)
        return getattr(subject, name)(affix)
    return method


STRING_METHODS: dict[str, Callable] = {
    "upper": _simple(str.upper, "upper"),
    "lower": _simple(str.lower, "lower"),
    "title": _simple(str.title, "title"),
    "capitalize": _simple(str.capitalize, "capitalize"),
    "strip": _strip("strip"),
    "lstrip": _strip("lstrip"),
    "rstrip": _strip("rstrip"),
    "split": str_split,
    "replace": str_replace,
    "startswith": _affix("startswith"),
    "endswith": _affix("endswith"),
}


# --- object methods ---

def obj_items(subject: dict, env, args, kwargs) -> list[list[JinjaValue]]:
    _arguments("items", args, kwargs, ())
    return [[key, value] for key, value in subject.items()]


def obj_keys(subject: dict, env, args, kwargs) -> list[str]:
    _arguments("keys", args, kwargs, ())
    return list(subject.keys())


def obj_values(subject: dict, env, args, kwargs) -> list[JinjaValue]:
    _arguments("values", args, kwargs, ())
    return list(subject.values())


def obj_get(subject: dict, env, args, kwargs) -> JinjaValue:
    key, default = _arguments("get", args, kwargs, ("key", "default"), default=None)
    if not isinstance(key, str):
        return default
    return subject.get(key, default)


OBJECT_METHODS: dict[str, Callable] = {
    "items": obj_items,
    "keys": obj_keys,
    "values": obj_values,
    "get": obj_get,
}


def get_attribute(value: JinjaValue, name: str) -> JinjaValue:
    """Non-computed member access: value.name"""
    match value:
        case str():
            method = STRING_METHODS.get(name)
            return native(partial(method, value)) if method else Undefined
        case dict():
            method = OBJECT_METHODS.get(name)
            if method is not None:
                return native(partial(method, value))
            return value.get(name, Undefined)
        case _:
            return Undefined

"""Built-in global functions: range, namespace, dict, cycler, joiner,
raise_exception and lipsum.

cycler() and joiner() create helpers that own their state behind a lock,
so a helper handed to several renders stays consistent.
"""

from __future__ import annotations

import random
import threading

from zinja import JinjaValue
from zinja.errors import JinjaArityError, JinjaRuntimeError, JinjaTypeError, TemplateException
from zinja.types.bind import resolve_call_arguments
from zinja.types.environment import Environment
from zinja.types.native import native
from zinja.types.undefined import Undefined
from zinja.types.value import is_integer, to_string, type_name


def range_(env: Environment, args, kwargs) -> list[int]:
    """range(stop) or range(start, stop[, step])"""
    if kwargs:
        raise JinjaArityError("range() takes no keyword arguments")
    if not 1 <= len(args) <= 3:
        raise JinjaArityError(f"range() expects 1 to 3 arguments, got {len(args)}")
    for arg in args:
        if not is_integer(arg):
            raise JinjaTypeError(f"range() arguments must be integers, not {type_name(arg)}")
    if len(args) == 3 and args[2] == 0:
        raise JinjaRuntimeError("range() step must not be zero")
    return list(range(*args))


def _object_from(name: str, args, kwargs) -> dict[str, JinjaValue]:
    if len(args) > 1:
        raise JinjaArityError(f"{name}() takes at most one positional argument")
    result: dict[str, JinjaValue] = {}
    if args:
        if not isinstance(args[0], dict):
            raise JinjaTypeError(f"{name}() positional argument must be an object, not {type_name(args[0])}")
        result.update(args[0])
    result.update(kwargs)
    return result


def namespace(env: Environment, args, kwargs) -> dict[str, JinjaValue]:
    """An object whose attributes can be reassigned with {% set ns.attr = ... %}."""
    return _object_from("namespace", args, kwargs)


def dict_(env: Environment, args, kwargs) -> dict[str, JinjaValue]:
    return _object_from("dict", args, kwargs)


def raise_exception(env: Environment, args, kwargs) -> JinjaValue:
    bound = resolve_call_arguments(args, kwargs, ("message",), {"message": "Template raised an exception"},
                                   name="raise_exception")
    raise TemplateException(to_string(bound["message"]))


class Cycler:
    """Steps through a fixed list of values, wrapping around."""

    def __init__(self, items: list[JinjaValue]):
        self.items = items
        self.position = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> JinjaValue:
        with self._lock:
            return self.items[self.position]

    def next(self) -> JinjaValue:
        with self._lock:
            value = self.items[self.position]
            self.position = (self.position + 1) % len(self.items)
            return value

    def reset(self) -> None:
        with self._lock:
            self.position = 0

    def as_object(self) -> dict[str, JinjaValue]:
        @native
        def next_(env, args, kwargs):
            return self.next()

        @native
        def reset(env, args, kwargs):
            self.reset()
            return Undefined

        # `current` is captured when the object is built
        return {"next": next_, "reset": reset, "current": self.current}


def cycler(env: Environment, args, kwargs) -> dict[str, JinjaValue]:
    if kwargs:
        raise JinjaArityError("cycler() takes no keyword arguments")
    if not args:
        raise JinjaArityError("cycler() requires at least one value")
    return Cycler(list(args)).as_object()


class Joiner:
    """Returns "" the first time it is called and the separator afterwards."""

    def __init__(self, sep: str):
        self.sep = sep
        self.used = False
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            if not self.used:
                self.used = True
                return ""
            return self.sep


def joiner(env: Environment, args, kwargs):
    bound = resolve_call_arguments(args, kwargs, ("sep",), {"sep": ", "}, name="joiner")
    join = Joiner(to_string(bound["sep"]))

    @native
    def call(env, args, kwargs):
        return join()

    return call


LOREM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud "
    "exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute irure "
    "in reprehenderit voluptate velit esse cillum eu fugiat nulla pariatur excepteur "
    "sint occaecat cupidatat non proident sunt culpa qui officia deserunt mollit anim "
    "id est laborum"
).split()


def lipsum(env: Environment, args, kwargs) -> str:
    """n paragraphs of lorem ipsum, between min and max words each."""
    bound = resolve_call_arguments(
        args, kwargs, ("n", "html", "min", "max"),
        {"n": 5, "html": True, "min": 20, "max": 100}, name="lipsum",
    )
    n, html, low, high = bound["n"], bound["html"], bound["min"], bound["max"]
    for name in ("n", "min", "max"):
        if not is_integer(bound[name]) or bound[name] < 0:
            raise JinjaTypeError(f"lipsum() {name} must be a non-negative integer")
    if low > high:
        raise JinjaRuntimeError("lipsum() min must not exceed max")

    paragraphs = []
    for _ in range(n):
        words = [random.choice(LOREM_WORDS) for _ in range(random.randint(low, high))]
        text = " ".join(words)
        if text:
            text = text[0].upper() + text[1:] + "."
        paragraphs.append(text)
    if html:
        return "\n".join(f"<p>{p}</p>" for p in paragraphs)
    return "\n\n".join(paragraphs)


def register(registry) -> None:
    """Register all builtin globals into the given registry."""
    table = {
        "range": range_,
        "namespace": namespace,
        "dict": dict_,
        "cycler": cycler,
        "joiner": joiner,
        "raise_exception": raise_exception,
        "lipsum": lipsum,
    }
    for name, fn in table.items():
        registry.register_global(name, native(fn))

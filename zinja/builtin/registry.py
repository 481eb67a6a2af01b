"""Filter, test and global tables consulted by the interpreter.

A Registry is an explicit object: the root Environment of a render carries
one and every child scope shares it. `default_registry()` builds a fresh
table of the built-in catalogue; stateful globals (cycler, joiner) are
factories, so a registry holds no per-render state.
"""

from __future__ import annotations

from typing import Callable

from zinja import JinjaValue
from zinja.types.native import native


class Registry:
    __slots__ = ("filters", "tests", "globals")

    def __init__(
        self,
        filters: dict[str, Callable] | None = None,
        tests: dict[str, Callable] | None = None,
        globals: dict[str, JinjaValue] | None = None,
    ):
        self.filters: dict[str, Callable] = dict(filters or {})
        self.tests: dict[str, Callable] = dict(tests or {})
        self.globals: dict[str, JinjaValue] = dict(globals or {})

    def register_filter(self, name: str, fn: Callable, *, native_call: bool = True) -> None:
        """Add a filter. With native_call=False, fn is called as fn(value, *args, **kwargs)."""
        self.filters[name] = native(fn) if native_call else fn

    def register_test(self, name: str, fn: Callable, *, native_call: bool = True) -> None:
        self.tests[name] = native(fn) if native_call else fn

    def register_global(self, name: str, value: JinjaValue) -> None:
        self.globals[name] = value

    def copy(self) -> Registry:
        return Registry(self.filters, self.tests, self.globals)

    def __repr__(self) -> str:
        return (
            f"<Registry filters={len(self.filters)} tests={len(self.tests)} "
            f"globals={len(self.globals)}>"
        )


def default_registry() -> Registry:
    """A new Registry populated with the built-in filters, tests and globals."""
    from zinja.builtin import filters, global_functions, tests

    registry = Registry()
    filters.register(registry)
    tests.register(registry)
    global_functions.register(registry)
    return registry

"""Runtime scopes for zinja.

An Environment maps names to template values and links to a parent scope.
Lookups walk the chain towards the root and never fail: a miss yields the
Undefined sentinel. The root scope carries the Registry of filters, tests
and globals; child scopes share their parent's registry.
"""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING, Mapping, Optional

from zinja import JinjaValue
from zinja.types.undefined import Undefined

if TYPE_CHECKING:
    from zinja.builtin.registry import Registry


class Environment:
    """Chained mapping from names to template values."""

    __slots__ = ("variables", "parent", "registry")

    def __init__(
        self,
        parent: Optional[Environment] = None,
        variables: Mapping[str, JinjaValue] | None = None,
        registry: Registry | None = None,
    ):
        self.variables: dict[str, JinjaValue] = dict(variables) if variables else {}
        self.parent: Environment | None = parent
        if registry is None and parent is not None:
            registry = parent.registry
        if registry is None:
            from zinja.builtin.registry import default_registry
            registry = default_registry()
        self.registry: Registry = registry

    def child(self, variables: Mapping[str, JinjaValue] | None = None) -> Environment:
        return Environment(parent=self, variables=variables)

    def define(self, name: str, value: JinjaValue) -> None:
        """Bind `name` in this scope, shadowing any outer binding."""
        self.variables[name] = value

    def update(self, mapping: Mapping[str, JinjaValue]) -> None:
        """Bulk-define a mapping of name -> value in the current scope."""
        self.variables.update(mapping)

    def find(self, name: str) -> Optional[Environment]:
        """Find the nearest environment in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.variables:
                return env
            env = env.parent
        return None

    def lookup(self, name: str) -> JinjaValue:
        """Value bound to `name` in the chain, or Undefined."""
        env = self.find(name)
        if env is None:
            return Undefined
        return env.variables[name]

    def set_in_chain(self, name: str, value: JinjaValue) -> None:
        """Overwrite `name` in the scope that defines it.

        When no scope binds the name, a local binding is created.
        """
        env = self.find(name)
        if env is None:
            env = self
        env.variables[name] = value

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    def _write_vars(self, buffer: StringIO) -> None:
        buffer.write("{")
        buffer.write(", ".join(f"{k}: {v!r}" for k, v in self.variables.items()))
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_vars(buffer)
            if self.parent is not None:
                buffer.write(" -> ...")
            return buffer.getvalue()

    def __repr__(self) -> str:
        with StringIO() as buffer:
            buffer.write("<Environment chain: ")
            env: Optional[Environment] = self
            first = True
            while env is not None:
                if not first:
                    buffer.write(" -> ")
                env._write_vars(buffer)
                first = False
                env = env.parent
            buffer.write(">")
            return buffer.getvalue()

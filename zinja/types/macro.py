"""Macro values produced by {% macro %} definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from zinja.types.nodes import Expr, Node

if TYPE_CHECKING:
    from zinja.types.environment import Environment


class MacroValue:
    """A named, parameterised block of template nodes.

    Calling a macro renders its body in a fresh child of the call-site
    scope. `env` is the scope the macro was defined in and is only used to
    evaluate default-value expressions.
    """

    __slots__ = ("name", "params", "defaults", "body", "env")

    def __init__(
        self,
        name: str,
        params: tuple[str, ...],
        defaults: dict[str, Expr],
        body: tuple[Node, ...],
        env: Environment,
    ):
        self.name = name
        self.params = params
        self.defaults = defaults
        self.body = body
        self.env = env

    def __str__(self) -> str:
        return f"[Macro {self.name}]"

    def __repr__(self) -> str:
        return f"<MacroValue {self.name}({', '.join(self.params)})>"

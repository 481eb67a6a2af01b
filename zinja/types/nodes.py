"""Abstract syntax tree for zinja templates.

Every node is a frozen, slotted dataclass so a parsed template can be shared
across renders and threads. Child sequences are tuples.

An expression node placed directly in a body is an output node: the
interpreter stringifies its value into the rendered text.
"""

from __future__ import annotations

from dataclasses import dataclass


class Node:
    __slots__ = ()


class Expr(Node):
    __slots__ = ()


class Stmt(Node):
    __slots__ = ()


# -- passthrough -------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Text(Node):
    value: str


@dataclass(frozen=True, slots=True)
class Comment(Node):
    value: str


# -- literals ----------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StringLiteral(Expr):
    value: str


@dataclass(frozen=True, slots=True)
class IntegerLiteral(Expr):
    value: int


@dataclass(frozen=True, slots=True)
class FloatLiteral(Expr):
    value: float


@dataclass(frozen=True, slots=True)
class BooleanLiteral(Expr):
    value: bool


@dataclass(frozen=True, slots=True)
class NullLiteral(Expr):
    pass


@dataclass(frozen=True, slots=True)
class ArrayLiteral(Expr):
    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class TupleLiteral(Expr):
    """Parenthesised or bare comma sequence: (a, b) or a, b"""
    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class ObjectLiteral(Expr):
    pairs: tuple[tuple[str, Expr], ...]


# -- expressions -------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Identifier(Expr):
    name: str


@dataclass(frozen=True, slots=True)
class Unary(Expr):
    """Prefix operator: "not", "-", "+" or the "*" unpack."""
    op: str
    operand: Expr


@dataclass(frozen=True, slots=True)
class Binary(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Ternary(Expr):
    """value if test else alternate; a missing alternate yields none."""
    value: Expr
    test: Expr
    alternate: Expr | None = None


@dataclass(frozen=True, slots=True)
class Call(Expr):
    callee: Expr
    args: tuple[Expr, ...] = ()
    kwargs: tuple[tuple[str, Expr], ...] = ()
    dyn_kwargs: Expr | None = None


@dataclass(frozen=True, slots=True)
class Member(Expr):
    """obj.name (computed=False, key is a StringLiteral) or obj[key]."""
    object: Expr
    key: Expr
    computed: bool = False


@dataclass(frozen=True, slots=True)
class Slice(Expr):
    object: Expr
    start: Expr | None = None
    stop: Expr | None = None
    step: Expr | None = None


@dataclass(frozen=True, slots=True)
class FilterExpr(Expr):
    operand: Expr
    name: str
    args: tuple[Expr, ...] = ()
    kwargs: tuple[tuple[str, Expr], ...] = ()
    dyn_kwargs: Expr | None = None


@dataclass(frozen=True, slots=True)
class TestExpr(Expr):
    __test__ = False  # not a pytest class

    operand: Expr
    name: str
    args: tuple[Expr, ...] = ()
    kwargs: tuple[tuple[str, Expr], ...] = ()
    negated: bool = False


# -- statements --------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Program(Stmt):
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class Set(Stmt):
    """{% set target = value %} or the block form capturing body."""
    target: Expr
    value: Expr | None = None
    body: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class If(Stmt):
    test: Expr
    body: tuple[Node, ...]
    alternate: tuple[Node, ...] = ()


@dataclass(frozen=True, slots=True)
class For(Stmt):
    target: Expr
    iterable: Expr
    body: tuple[Node, ...]
    else_body: tuple[Node, ...] = ()
    condition: Expr | None = None


@dataclass(frozen=True, slots=True)
class Macro(Stmt):
    name: str
    params: tuple[str, ...]
    defaults: tuple[tuple[str, Expr], ...]
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class Break(Stmt):
    pass


@dataclass(frozen=True, slots=True)
class Continue(Stmt):
    pass


@dataclass(frozen=True, slots=True)
class CallBlock(Stmt):
    """{% call(params) callee(args) %}body{% endcall %}"""
    callee: Expr
    caller_params: tuple[str, ...] | None
    body: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class FilterBlock(Stmt):
    filter: Expr
    body: tuple[Node, ...]

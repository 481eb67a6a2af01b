"""Core evaluator for zinja.

`evaluate` computes the value of an expression node; `execute` runs one
body node, writing output into a StringIO buffer and returning a Signal.
Statements dispatch through the STATEMENTS registry.
"""

from __future__ import annotations

from functools import partial
from io import StringIO
from typing import TYPE_CHECKING, Sequence

from zinja import JinjaValue
from zinja.builtin.members import get_attribute
from zinja.errors import JinjaArityError, JinjaRuntimeError, JinjaTypeError
from zinja.evaluation.apply import apply_filter, apply_test, call_value
from zinja.evaluation.statements import STATEMENTS
from zinja.types import value as v
from zinja.types.environment import Environment
from zinja.types.nodes import (
    ArrayLiteral, Binary, BooleanLiteral, Call, Comment, Expr, FilterExpr,
    FloatLiteral, Identifier, IntegerLiteral, Member, Node, NullLiteral,
    ObjectLiteral, Slice, StringLiteral, Ternary, TestExpr, Text,
    TupleLiteral, Unary,
)
from zinja.types.signal import Signal
from zinja.types.undefined import Undefined

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


BINARY_OPERATORS = {
    "+": v.add,
    "-": v.subtract,
    "*": v.multiply,
    "/": v.divide,
    "//": v.floor_divide,
    "%": v.modulo,
    "**": v.power,
    "~": v.concatenate,
    "==": v.equivalent,
    "!=": lambda a, b: not v.equivalent(a, b),
    "<": partial(v.compare, "<"),
    "<=": partial(v.compare, "<="),
    ">": partial(v.compare, ">"),
    ">=": partial(v.compare, ">="),
    "in": lambda a, b: v.contains(b, a),
    "not in": lambda a, b: not v.contains(b, a),
}


def evaluate(expr: Expr, env: Environment, interpreter: Interpreter) -> JinjaValue:
    match expr:
        case (StringLiteral(value=value) | IntegerLiteral(value=value)
              | FloatLiteral(value=value) | BooleanLiteral(value=value)):
            return value
        case NullLiteral():
            return None
        case ArrayLiteral(items=items) | TupleLiteral(items=items):
            return evaluate_items(items, env, interpreter)
        case ObjectLiteral(pairs=pairs):
            return {key: evaluate(item, env, interpreter) for key, item in pairs}
        case Identifier(name=name):
            found = env.lookup(name)
            if found is Undefined:
                # globals sit behind every scope, so context names shadow them
                return env.registry.globals.get(name, Undefined)
            return found
        case Unary(op=op, operand=operand):
            return _evaluate_unary(op, operand, env, interpreter)
        case Binary(op=op, left=left, right=right):
            return _evaluate_binary(op, left, right, env, interpreter)
        case Ternary(value=value, test=test, alternate=alternate):
            if v.is_truthy(evaluate(test, env, interpreter)):
                return evaluate(value, env, interpreter)
            if alternate is None:
                return None
            return evaluate(alternate, env, interpreter)
        case Call(callee=callee, args=args, kwargs=kwargs, dyn_kwargs=dyn_kwargs):
            fn = evaluate(callee, env, interpreter)
            if fn is Undefined and isinstance(callee, Identifier):
                raise JinjaTypeError(f"'{callee.name}' is undefined and cannot be called")
            positional, keywords = evaluate_arguments(args, kwargs, dyn_kwargs, env, interpreter)
            return call_value(fn, positional, keywords, env, interpreter)
        case Member(object=obj, key=key, computed=computed):
            target = evaluate(obj, env, interpreter)
            if computed:
                return v.get_item(target, evaluate(key, env, interpreter))
            return get_attribute(target, key.value)
        case Slice(object=obj, start=start, stop=stop, step=step):
            target = evaluate(obj, env, interpreter)
            bounds = [None if b is None else evaluate(b, env, interpreter) for b in (start, stop, step)]
            return v.slice_value(target, *bounds)
        case FilterExpr(operand=operand, name=name, args=args, kwargs=kwargs, dyn_kwargs=dyn_kwargs):
            subject = evaluate(operand, env, interpreter)
            positional, keywords = evaluate_arguments(args, kwargs, dyn_kwargs, env, interpreter)
            return apply_filter(name, subject, positional, keywords, env)
        case TestExpr(operand=operand, name=name, args=args, kwargs=kwargs, negated=negated):
            subject = evaluate(operand, env, interpreter)
            positional, keywords = evaluate_arguments(args, kwargs, None, env, interpreter)
            result = apply_test(name, subject, positional, keywords, env)
            return not result if negated else result
        case _:
            raise JinjaRuntimeError(f"Cannot evaluate {type(expr).__name__} node")


def _evaluate_unary(op: str, operand: Expr, env: Environment, interpreter: Interpreter) -> JinjaValue:
    match op:
        case "not":
            return not v.is_truthy(evaluate(operand, env, interpreter))
        case "-":
            return v.negate(evaluate(operand, env, interpreter))
        case "+":
            return v.positive(evaluate(operand, env, interpreter))
        case "*":
            raise JinjaRuntimeError("Unpacking with * is only allowed in argument lists and arrays")
        case _:
            raise JinjaRuntimeError(f"Unknown unary operator {op!r}")


def _evaluate_binary(op: str, left: Expr, right: Expr, env: Environment, interpreter: Interpreter) -> JinjaValue:
    # and/or short-circuit and yield an operand, not a boolean
    if op == "and":
        lhs = evaluate(left, env, interpreter)
        return evaluate(right, env, interpreter) if v.is_truthy(lhs) else lhs
    if op == "or":
        lhs = evaluate(left, env, interpreter)
        return lhs if v.is_truthy(lhs) else evaluate(right, env, interpreter)
    operator = BINARY_OPERATORS.get(op)
    if operator is None:
        raise JinjaRuntimeError(f"Unknown binary operator {op!r}")
    return operator(evaluate(left, env, interpreter), evaluate(right, env, interpreter))


def evaluate_items(items: Sequence[Expr], env: Environment, interpreter: Interpreter) -> list[JinjaValue]:
    """Evaluate a sequence of expressions, expanding *unpack entries."""
    values: list[JinjaValue] = []
    for item in items:
        if isinstance(item, Unary) and item.op == "*":
            values.extend(v.to_list(evaluate(item.operand, env, interpreter)))
        else:
            values.append(evaluate(item, env, interpreter))
    return values


def evaluate_arguments(
    args: Sequence[Expr],
    kwargs: Sequence[tuple[str, Expr]],
    dyn_kwargs: Expr | None,
    env: Environment,
    interpreter: Interpreter,
) -> tuple[list[JinjaValue], dict[str, JinjaValue]]:
    positional = evaluate_items(args, env, interpreter)
    keywords = {name: evaluate(expr, env, interpreter) for name, expr in kwargs}
    if dyn_kwargs is not None:
        extra = evaluate(dyn_kwargs, env, interpreter)
        if not isinstance(extra, dict):
            raise JinjaTypeError(f"** argument must be an object, not {v.type_name(extra)}")
        for name, value in extra.items():
            if name in keywords:
                raise JinjaArityError(f"Got multiple values for keyword argument '{name}'")
            keywords[name] = value
    return positional, keywords


def execute(node: Node, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    match node:
        case Text(value=value):
            out.write(value)
            return Signal.NORMAL
        case Comment():
            return Signal.NORMAL
        case Expr():
            out.write(v.to_string(evaluate(node, env, interpreter)))
            return Signal.NORMAL
        case _:
            handler = STATEMENTS.get(type(node))
            if handler is None:
                raise JinjaRuntimeError(f"Cannot execute {type(node).__name__} node")
            return handler(node, env, out, interpreter)


def execute_block(nodes: Sequence[Node], env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    """Run nodes in order; a break/continue signal stops the block and is returned."""
    for node in nodes:
        signal = execute(node, env, out, interpreter)
        if signal is not Signal.NORMAL:
            return signal
    return Signal.NORMAL

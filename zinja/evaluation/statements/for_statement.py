"""{% for %} loops, the implicit `loop` object, and loop control."""

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja import JinjaValue
from zinja.errors import JinjaArityError, JinjaTypeError
from zinja.types.environment import Environment
from zinja.types.native import native
from zinja.types.nodes import Break, Continue, Expr, For, Identifier, TupleLiteral
from zinja.types.signal import Signal
from zinja.types.undefined import Undefined, UndefinedType
from zinja.types.value import is_truthy, type_name

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def _candidates(iterable: JinjaValue, unpacking: bool) -> list[JinjaValue]:
    match iterable:
        case list():
            return list(iterable)
        case dict():
            if unpacking:
                return [[key, value] for key, value in iterable.items()]
            return list(iterable.keys())
        case str():
            return list(iterable)
        case UndefinedType():
            return []
        case _:
            raise JinjaTypeError(f"Cannot iterate over {type_name(iterable)}")


def _bind_target(target: Expr, item: JinjaValue, scope: Environment) -> None:
    if isinstance(target, Identifier):
        scope.define(target.name, item)
        return
    names = [t.name for t in target.items]
    if not isinstance(item, list):
        raise JinjaTypeError(f"Cannot unpack {type_name(item)} into {len(names)} loop variables")
    for index, name in enumerate(names):
        # missing positions are left undefined
        scope.define(name, item[index] if index < len(item) else Undefined)


def loop_object(index: int, items: list[JinjaValue]) -> dict[str, JinjaValue]:
    length = len(items)

    @native
    def cycle(env, args, kwargs):
        if not args:
            raise JinjaArityError("loop.cycle() requires at least one argument")
        return args[index % len(args)]

    return {
        "index": index + 1,
        "index0": index,
        "first": index == 0,
        "last": index == length - 1,
        "length": length,
        "revindex": length - index,
        "revindex0": length - index - 1,
        "previtem": items[index - 1] if index > 0 else Undefined,
        "nextitem": items[index + 1] if index < length - 1 else Undefined,
        "cycle": cycle,
    }


def for_statement(node: For, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    iterable = interpreter.evaluate(node.iterable, env)
    candidates = _candidates(iterable, isinstance(node.target, TupleLiteral))
    scope = env.child()

    # the loop filter runs before admission: rejected items do not count
    if node.condition is None:
        admitted = candidates
    else:
        admitted = []
        for item in candidates:
            _bind_target(node.target, item, scope)
            if is_truthy(interpreter.evaluate(node.condition, scope)):
                admitted.append(item)

    if not admitted:
        return interpreter.execute_block(node.else_body, env, out)

    for index, item in enumerate(admitted):
        _bind_target(node.target, item, scope)
        scope.define("loop", loop_object(index, admitted))
        signal = interpreter.execute_block(node.body, scope, out)
        if signal is Signal.BREAK:
            break
    return Signal.NORMAL


def break_statement(node: Break, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    return Signal.BREAK


def continue_statement(node: Continue, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    return Signal.CONTINUE

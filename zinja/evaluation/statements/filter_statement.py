from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja import JinjaValue
from zinja.errors import JinjaRuntimeError
from zinja.evaluation.apply import apply_filter
from zinja.types.environment import Environment
from zinja.types.nodes import Call, Expr, FilterBlock, FilterExpr, Identifier
from zinja.types.signal import Signal
from zinja.types.value import to_string

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def _apply_block_filter(expr: Expr, value: JinjaValue, env: Environment, interpreter: Interpreter) -> JinjaValue:
    match expr:
        case Identifier(name=name):
            return apply_filter(name, value, [], {}, env)
        case Call(callee=Identifier(name=name), args=args, kwargs=kwargs, dyn_kwargs=dyn_kwargs):
            positional, keywords = interpreter.evaluate_arguments(args, kwargs, dyn_kwargs, env)
            return apply_filter(name, value, positional, keywords, env)
        case FilterExpr(operand=operand, name=name, args=args, kwargs=kwargs, dyn_kwargs=dyn_kwargs):
            inner = _apply_block_filter(operand, value, env, interpreter)
            positional, keywords = interpreter.evaluate_arguments(args, kwargs, dyn_kwargs, env)
            return apply_filter(name, inner, positional, keywords, env)
        case _:
            raise JinjaRuntimeError(f"Invalid filter in filter block: {type(expr).__name__}")


def filter_block_statement(node: FilterBlock, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    body = interpreter.render_block(node.body, env)
    out.write(to_string(_apply_block_filter(node.filter, body, env, interpreter)))
    return Signal.NORMAL

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja.types.bind import resolve_call_arguments
from zinja.types.environment import Environment
from zinja.types.macro import MacroValue
from zinja.types.native import native
from zinja.types.nodes import Call, CallBlock, Macro
from zinja.types.signal import Signal
from zinja.types.undefined import Undefined
from zinja.types.value import to_string
from zinja.evaluation.apply import call_value

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def macro_statement(node: Macro, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    env.define(node.name, MacroValue(node.name, node.params, dict(node.defaults), node.body, env))
    return Signal.NORMAL


def call_block_statement(node: CallBlock, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    """{% call(params) callee(args) %}body{% endcall %}

    The body becomes a `caller` function rendered in a child of the scope
    the call block appears in; the callee runs where `caller` is visible.
    """
    params = node.caller_params or ()

    @native
    def caller(call_env, args, kwargs):
        bound = resolve_call_arguments(args, kwargs, params, {p: Undefined for p in params}, name="caller")
        return interpreter.render_block(node.body, env.child(bound))

    call_env = env.child({"caller": caller})
    if isinstance(node.callee, Call):
        fn = interpreter.evaluate(node.callee.callee, call_env)
        args, kwargs = interpreter.evaluate_arguments(
            node.callee.args, node.callee.kwargs, node.callee.dyn_kwargs, call_env
        )
    else:
        fn = interpreter.evaluate(node.callee, call_env)
        args, kwargs = [], {}
    out.write(to_string(call_value(fn, args, kwargs, call_env, interpreter)))
    return Signal.NORMAL

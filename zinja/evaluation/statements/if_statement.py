from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja.types.environment import Environment
from zinja.types.nodes import If
from zinja.types.signal import Signal
from zinja.types.value import is_truthy

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def if_statement(node: If, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    # no new scope: assignments in either branch land in `env`
    if is_truthy(interpreter.evaluate(node.test, env)):
        return interpreter.execute_block(node.body, env, out)
    return interpreter.execute_block(node.alternate, env, out)

from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from zinja.types.environment import Environment
from zinja.types.nodes import Program
from zinja.types.signal import Signal

if TYPE_CHECKING:
    from zinja.interpreter import Interpreter


def program_statement(node: Program, env: Environment, out: StringIO, interpreter: Interpreter) -> Signal:
    return interpreter.execute_block(node.body, env, out)

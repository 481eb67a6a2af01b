from __future__ import annotations

from io import StringIO
from typing import Sequence

from zinja import JinjaValue
from zinja.builtin.registry import Registry, default_registry
from zinja.errors import JinjaRuntimeError
from zinja.evaluation.evaluator import evaluate, evaluate_arguments, execute, execute_block
from zinja.types.environment import Environment
from zinja.types.nodes import Expr, Node
from zinja.types.signal import Signal


class Interpreter:
    """
    Walks a parsed template and renders it to text.

    Holds the Registry used for root scopes it creates; scopes passed in
    carry their own registry.
    """

    def __init__(self, registry: Registry | None = None):
        self.registry: Registry = registry if registry is not None else default_registry()

    def new_environment(self, variables=None) -> Environment:
        return Environment(variables=variables, registry=self.registry)

    def interpret(self, nodes: Sequence[Node], env: Environment | None = None) -> str:
        """Render `nodes` in `env` (a fresh root scope when omitted)."""
        if env is None:
            env = self.new_environment()
        return self.render_block(nodes, env)

    def evaluate(self, expr: Expr, env: Environment) -> JinjaValue:
        return evaluate(expr, env, self)

    def evaluate_arguments(self, args, kwargs, dyn_kwargs, env: Environment):
        return evaluate_arguments(args, kwargs, dyn_kwargs, env, self)

    def execute(self, node: Node, env: Environment, out: StringIO) -> Signal:
        return execute(node, env, out, self)

    def execute_block(self, nodes: Sequence[Node], env: Environment, out: StringIO) -> Signal:
        return execute_block(nodes, env, out, self)

    def render_block(self, nodes: Sequence[Node], env: Environment) -> str:
        """Render nodes to a string; loop control may not escape the block."""
        with StringIO() as out:
            signal = self.execute_block(nodes, env, out)
            if signal is not Signal.NORMAL:
                raise JinjaRuntimeError(f"'{signal.value}' outside of a loop")
            return out.getvalue()

"""Compile/render entry points.

    >>> from zinja.template import Template
    >>> Template("Hello {{ name }}!").render({"name": "World"})
    'Hello World!'

A Template is compiled once (lex + parse) and holds an immutable node
tree, so one instance may be rendered concurrently from several threads.
Each render gets its own scope chain.
"""

from __future__ import annotations

import logging
from typing import Any

from zinja import Context
from zinja.builtin.registry import Registry
from zinja.config import TemplateOptions, resolve_options
from zinja.errors import JinjaRuntimeError
from zinja.interpreter import Interpreter
from zinja.reader.lexer import tokenize
from zinja.reader.parser import parse
from zinja.types.environment import Environment
from zinja.types.nodes import Program
from zinja.types.value import from_python

logger = logging.getLogger(__name__)


class Template:
    """A compiled template."""

    __slots__ = ("source", "options", "program")

    def __init__(self, source: str, options: TemplateOptions | None = None):
        self.source = source
        self.options = options if options is not None else resolve_options()
        tokens = tokenize(source, self.options)
        self.program = Program(tuple(parse(tokens)))
        logger.debug(
            "compiled template: %d chars, %d tokens, %d top-level nodes",
            len(source), len(tokens), len(self.program.body),
        )

    def render(
        self,
        context: Context | None = None,
        environment: Environment | None = None,
        **kwargs: Any,
    ) -> str:
        """Render with `context` (plus keyword arguments) layered over `environment`.

        Context names shadow names bound in `environment`, which in turn shadow
        the registry globals. Raises JinjaRuntimeError subclasses on failure.
        """
        variables = dict(context or {})
        variables.update(kwargs)
        if environment is None:
            environment = Environment()
        scope = environment.child({name: from_python(value) for name, value in variables.items()})
        interpreter = Interpreter(environment.registry)
        logger.debug("rendering template with %d context variables", len(variables))
        try:
            return interpreter.interpret((self.program,), scope)
        except RecursionError as exc:
            raise JinjaRuntimeError("Maximum recursion depth exceeded while rendering") from exc

    def __repr__(self) -> str:
        preview = self.source if len(self.source) <= 40 else self.source[:37] + "..."
        return f"<Template {preview!r}>"


def compile_template(
    source: str,
    *,
    trim_blocks: bool | None = None,
    lstrip_blocks: bool | None = None,
) -> Template:
    """Lex and parse `source`; unset options fall back to ZINJA_* environment variables."""
    return Template(source, resolve_options(trim_blocks, lstrip_blocks))


def render(
    template: Template | str,
    context: Context | None = None,
    environment: Environment | None = None,
) -> str:
    if isinstance(template, str):
        template = compile_template(template)
    return template.render(context, environment)


def environment_with(registry: Registry, variables: Context | None = None) -> Environment:
    """A root scope bound to `registry`, for rendering with custom filters or globals."""
    return Environment(
        variables={name: from_python(value) for name, value in (variables or {}).items()},
        registry=registry,
    )

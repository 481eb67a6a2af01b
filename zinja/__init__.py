# Core type aliases for zinja's data model.
# Template values are plain Python values (None, bool, int, float, str, list,
# dict with str keys, callables) plus the Undefined sentinel and MacroValue.
#
# Naming guidance:
# - JinjaValue: a runtime value flowing through the interpreter.
# - Context:    the mapping of names supplied by the host at render time.

from typing import Any, Callable, Mapping

# Runtime value alias
JinjaValue = Any
# Host supplied render data
Context = Mapping[str, Any]

# Native function type: fn(env, args, kwargs) -> JinjaValue
NativeFn = Callable[..., JinjaValue]

# Evaluator function type: passed into binding helpers to evaluate default expressions
EvaluatorFn = Callable[..., JinjaValue]

from timeit import timeit

from zinja.template import Template
from zinja.types.environment import Environment


def time_compile(source: str, rounds: int) -> float:
    """Time lexing and parsing only."""
    Template(source)
    return timeit(lambda: Template(source), number=rounds)


def time_render(source: str, context: dict, rounds: int) -> float:
    """Time rendering of a template compiled once up front."""
    template = Template(source)
    # Warmup
    template.render(context)
    return timeit(lambda: template.render(context), number=rounds)


# Scope chain lookups (no template involved)

def bench_lookup_chain(n_envs: int = 1000, n_lookups: int = 10000) -> float:
    root = Environment()
    root.define("answer", 42)
    env = root
    for _ in range(n_envs):
        env = env.child()
    for _ in range(1000):
        env.lookup("answer")
    return timeit(lambda: env.lookup("answer"), number=n_lookups)


SIMPLE_CODE = "Hello {{ name|title }}!"

LOOP_CODE = r"""
<ul>
{%- for user in users if user.active %}
  <li class="{{ loop.cycle('odd', 'even') }}">{{ loop.index }}. {{ user.name|e }}</li>
{%- else %}
  <li>nobody</li>
{%- endfor %}
</ul>
"""

MACRO_CODE = r"""
{%- macro field(name, value='', type='text') -%}
<input type="{{ type }}" name="{{ name }}" value="{{ value|e }}">
{%- endmacro -%}
{% for i in range(50) %}{{ field('f' ~ i, i) }}{% endfor %}
"""

CHAT_CODE = r"""
{%- for message in messages -%}
{%- if message.role == 'system' -%}<<SYS>>{{ message.content|trim }}<</SYS>>
{%- elif message.role == 'user' -%}[INST] {{ message.content|trim }} [/INST]
{%- else -%}{{ message.content|trim }}
{%- endif -%}
{%- endfor -%}
{%- if add_generation_prompt %}[ASSISTANT]{% endif -%}
"""

CONTEXTS = {
    "simple": {"name": "world"},
    "loop": {"users": [{"name": f"user <{i}>", "active": i % 3 != 0} for i in range(100)]},
    "macro": {},
    "chat": {
        "messages": [
            {"role": "system", "content": " be brief "},
            *({"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(20)),
        ],
        "add_generation_prompt": True,
    },
}


def _print_row(name: str, code: str, context: dict, rounds: int) -> None:
    tcompile = time_compile(code, rounds)
    trender = time_render(code, context, rounds)
    print(f"Benchmark: {name}")
    print(f"  compile: {tcompile:.6f}s  |  render: {trender:.6f}s  [rounds={rounds}]")


if __name__ == "__main__":
    print("Benchmark: environment lookup chain (pure Python env lookup)")
    print(f"  time: {bench_lookup_chain():.6f}s")

    _print_row("simple substitution", SIMPLE_CODE, CONTEXTS["simple"], rounds=20000)
    _print_row("filtered loop", LOOP_CODE, CONTEXTS["loop"], rounds=500)
    _print_row("macro calls", MACRO_CODE, CONTEXTS["macro"], rounds=500)
    _print_row("chat template", CHAT_CODE, CONTEXTS["chat"], rounds=1000)

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given, strategies as st

from zinja import errors
from zinja.builtin.registry import default_registry
from zinja.config import TemplateOptions, flag_from_env, resolve_options
from zinja.template import Template, compile_template, environment_with, render
from zinja.types.nodes import Program


# -------------------------------
# Template API
# -------------------------------

def test_template_compiles_once_and_renders_many_times():
    template = Template("Hello {{ name }}!")
    assert isinstance(template.program, Program)
    assert template.render({"name": "World"}) == "Hello World!"
    assert template.render(name="Ann") == "Hello Ann!"
    assert template.render() == "Hello !"


def test_keyword_arguments_override_context():
    template = Template("{{ a }}{{ b }}")
    assert template.render({"a": 1, "b": 2}, b=3) == "13"


def test_render_accepts_source_text():
    assert render("{{ 1 + 1 }}") == "2"
    assert render(compile_template("{{ x }}"), {"x": "y"}) == "y"


def test_render_does_not_mutate_context():
    context = {"items": [3, 1, 2]}
    render("{% set items = items|sort %}{{ items }}", context)
    assert context == {"items": [3, 1, 2]}


def test_render_with_environment_layers_scopes():
    base = environment_with(default_registry(), {"site": "zinja", "name": "base"})
    template = Template("{{ site }}/{{ name }}")
    assert template.render({"name": "page"}, base) == "zinja/page"
    assert template.render(environment=base) == "zinja/base"


def test_render_with_custom_registry():
    registry = default_registry()
    registry.register_filter("shout", lambda value: value.upper() + "!", native_call=False)
    registry.register_global("version", "1.0")
    env = environment_with(registry)
    assert Template("{{ 'hi'|shout }} v{{ version }}").render(environment=env) == "HI! v1.0"


def test_registry_copy_is_independent():
    registry = default_registry()
    copy = registry.copy()
    copy.register_test("always", lambda value: True, native_call=False)
    assert "always" in copy.tests
    assert "always" not in registry.tests


def test_template_repr():
    assert repr(Template("{{ x }}")) == "<Template '{{ x }}'>"
    assert repr(Template("x" * 50)).endswith("...'>")


def test_rendering_is_deterministic():
    template = Template("{% for k, v in data|dictsort %}{{ k }}={{ v }} {% endfor %}")
    context = {"data": {"b": 2, "a": 1, "c": [1, 2]}}
    assert template.render(context) == template.render(context) == "a=1 b=2 c=[1, 2] "


def test_concurrent_renders_share_a_template():
    template = Template("{% set ns = namespace(total=0) %}{% for i in range(n) %}"
                        "{% set ns.total = ns.total + i %}{% endfor %}{{ ns.total }}")
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda n: template.render(n=n), range(50)))
    assert results == [str(sum(range(n))) for n in range(50)]


def test_runaway_recursion_is_reported():
    with pytest.raises(errors.JinjaRuntimeError):
        render("{% macro f() %}{{ f() }}{% endmacro %}{{ f() }}")


@pytest.mark.parametrize(
    "source,error",
    [
        ("{{ 'open", errors.JinjaLexError),
        ("{% if x %}", errors.JinjaSyntaxError),
        ("{{ " + "(" * 3000 + "1" + ")" * 3000 + " }}", errors.JinjaSyntaxError),
        ("{% for x in y %}" * 1500 + "{% endfor %}" * 1500, errors.JinjaSyntaxError),
    ],
)
def test_compile_errors(source, error):
    with pytest.raises(error):
        Template(source)


def test_unsupported_context_value():
    with pytest.raises(errors.JinjaTypeError):
        render("{{ x }}", {"x": object()})


def test_compile_and_render_are_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="zinja"):
        Template("{{ x }}").render(x=1)
    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("compiled template") for m in messages)
    assert any(m.startswith("rendering template") for m in messages)


def test_filter_override_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="zinja.evaluation.apply"):
        render("{{ 'x'|upper }}", {"upper": lambda s: s})
    assert any("overridden" in record.getMessage() for record in caplog.records)


# -------------------------------
# Configuration
# -------------------------------

@pytest.mark.parametrize(
    "raw,expected",
    [("1", True), ("true", True), ("YES", True), (" on ", True), ("0", False), ("off", False), ("", False)],
)
def test_flag_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("ZINJA_TEST_FLAG", raw)
    assert flag_from_env("ZINJA_TEST_FLAG", False) is expected


def test_flag_default_when_unset(monkeypatch):
    monkeypatch.delenv("ZINJA_TEST_FLAG", raising=False)
    assert flag_from_env("ZINJA_TEST_FLAG", True) is True


def test_options_from_environment(monkeypatch):
    monkeypatch.setenv("ZINJA_TRIM_BLOCKS", "1")
    monkeypatch.setenv("ZINJA_LSTRIP_BLOCKS", "yes")
    assert resolve_options() == TemplateOptions(trim_blocks=True, lstrip_blocks=True)
    assert compile_template("  {% if true %}\nx{% endif %}").render() == "x"


def test_explicit_options_win(monkeypatch):
    monkeypatch.setenv("ZINJA_TRIM_BLOCKS", "1")
    assert resolve_options(trim_blocks=False).trim_blocks is False
    assert compile_template("{% if true %}\nx{% endif %}", trim_blocks=False).render() == "\nx"


def test_default_options():
    assert resolve_options() == TemplateOptions()
    assert Template("{% if true %}\nx{% endif %}").options == TemplateOptions()


# -------------------------------
# Hypothesis tests
# -------------------------------

@given(st.text(max_size=100).filter(lambda s: "{" not in s and "}" not in s))
def test_plain_text_renders_unchanged(text):
    assert render(text) == text


@given(st.lists(st.integers(min_value=-1000, max_value=1000), max_size=20))
def test_loop_output_matches_python(xs):
    template = Template("{% for x in xs %}{{ x * 2 }},{% endfor %}")
    expected = "".join(f"{x * 2}," for x in xs)
    assert template.render(xs=xs) == expected
    assert template.render(xs=xs) == expected


@given(st.text(alphabet="abcXYZ -_", max_size=30))
def test_string_filters_match_python(text):
    context = {"s": text}
    assert render("{{ s|upper }}", context) == text.upper()
    assert render("{{ s|length }}", context) == str(len(text))
    assert render("{{ s|reverse }}", context) == text[::-1]


@given(st.integers(min_value=-10**6, max_value=10**6), st.integers(min_value=-10**6, max_value=10**6))
def test_integer_arithmetic_matches_python(a, b):
    context = {"a": a, "b": b}
    assert render("{{ a + b }}|{{ a - b }}|{{ a * b }}", context) == f"{a + b}|{a - b}|{a * b}"
    if b != 0:
        assert render("{{ a // b }}|{{ a % b }}", context) == f"{a // b}|{a % b}"

import pytest

from zinja import errors
from zinja.builtin.filters import resolve_attribute
from zinja.builtin.registry import default_registry
from zinja.types.undefined import Undefined

USERS = [
    {"name": "ann", "city": "X", "age": 31, "active": True},
    {"name": "bob", "city": "Y", "age": 17, "active": False},
    {"name": "cy", "city": "x", "age": 45, "active": True},
]


# -------------------------------
# Filters
# -------------------------------

@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ 'hello'|upper }}", "HELLO"),
        ("{{ 'HeLLo'|lower }}", "hello"),
        ("{{ 'hello world'|title }}", "Hello World"),
        ("{{ 'hELLO'|capitalize }}", "Hello"),
        ("{{ '  x  '|trim }}", "x"),
        ("{{ '--x--'|trim('-') }}", "x"),
        ("{{ 'a-b-c'|replace('-', '+') }}", "a+b+c"),
        ("{{ 'a-b-c'|replace('-', '+', 1) }}", "a+b-c"),
        ("{{ 'abc'|center(7) }}", "  abc  "),
        ("{{ 'a\\nb'|indent(2) }}", "a\n  b"),
        ("{{ 'a\\n\\nb'|indent(2, true) }}", "  a\n\n  b"),
        ("{{ 'hello world'|truncate(8, leeway=0) }}", "hello..."),
        ("{{ 'hello world'|truncate(9, true, '!', 0) }}", "hello wo!"),
        ("{{ 'short'|truncate(10) }}", "short"),
        ("{{ 'hello world foo'|wordcount }}", "3"),
        ("{{ '<p>Hi <b>there</b></p>'|striptags }}", "Hi there"),
        ("{{ 'a<b>&\"'|escape }}", "a&lt;b&gt;&amp;&#34;"),
        ("{{ \"'\"|e }}", "&#39;"),
        ("{{ '<b>'|safe }}", "<b>"),
        ("{{ 5|string ~ 'x' }}", "5x"),
        ("{{ '%s-%d'|format('a', 3) }}", "a-3"),
        ("{{ '%(x)s!'|format(x='hi') }}", "hi!"),
    ],
)
def test_string_filters(render, source, expected):
    assert render(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ -3|abs }}", "3"),
        ("{{ '42'|int + 1 }}", "43"),
        ("{{ 'x'|int }}", "0"),
        ("{{ 'x'|int(7) }}", "7"),
        ("{{ '3.7'|int }}", "3"),
        ("{{ 'ff'|int(base=16) }}", "255"),
        ("{{ 3.9|int }}", "3"),
        ("{{ '2.5'|float }}", "2.5"),
        ("{{ 'nope'|float }}", "0.0"),
        ("{{ 3|float }}", "3.0"),
        ("{{ 3.14159|round(2) }}", "3.14"),
        ("{{ 2.5|round }}", "2.0"),
        ("{{ 2.1|round(method='ceil') }}", "3.0"),
        ("{{ 2.9|round(method='floor') }}", "2.0"),
    ],
)
def test_number_filters(render, source, expected):
    assert render(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ [1, 2, 3]|length }}", "3"),
        ("{{ 'abc'|count }}", "3"),
        ("{{ {'a': 1}|length }}", "1"),
        ("{{ missing|length }}", "0"),
        ("{{ [1, 2, 3]|join('-') }}", "1-2-3"),
        ("{{ [1, 2]|join }}", "12"),
        ("{{ users|join(', ', attribute='name') }}", "ann, bob, cy"),
        ("{{ [3, 1, 2]|sort }}", "[1, 2, 3]"),
        ("{{ [3, 1, 2]|sort(reverse=true) }}", "[3, 2, 1]"),
        ("{{ ['b', 'A', 'c']|sort }}", "['A', 'b', 'c']"),
        ("{{ ['b', 'A', 'c']|sort(case_sensitive=true) }}", "['A', 'b', 'c']"),
        ("{{ users|sort(attribute='age')|map(attribute='name')|join }}", "bobanncy"),
        ("{{ [1, 2, 3]|first }}", "1"),
        ("{{ [1, 2, 3]|last }}", "3"),
        ("{{ []|first }}", ""),
        ("{{ 'abc'|first }}", "a"),
        ("{{ [1, 2, 3]|reverse }}", "[3, 2, 1]"),
        ("{{ 'abc'|reverse }}", "cba"),
        ("{{ 'abc'|list }}", "['a', 'b', 'c']"),
        ("{{ [1, 2, 2, 1]|unique }}", "[1, 2]"),
        ("{{ ['a', 'A', 'b']|unique }}", "['a', 'b']"),
        ("{{ [1, 2, 3]|sum }}", "6"),
        ("{{ [1, 2]|sum(start=10) }}", "13"),
        ("{{ users|sum(attribute='age') }}", "93"),
        ("{{ [1, 5, 3]|max }}", "5"),
        ("{{ [1, 5, 3]|min }}", "1"),
        ("{{ users|max(attribute='age')|attr('name') }}", "cy"),
        ("{{ []|max }}", ""),
        ("{{ {'b': 2, 'a': 1}|dictsort }}", "[['a', 1], ['b', 2]]"),
        ("{{ {'a': 2, 'b': 1}|dictsort(by='value') }}", "[['b', 1], ['a', 2]]"),
        ("{{ {'a': 1}|items }}", "[['a', 1]]"),
        ("{{ [1, 2, 3, 4, 5]|batch(2) }}", "[[1, 2], [3, 4], [5]]"),
        ("{{ [1, 2, 3, 4, 5]|batch(2, 0) }}", "[[1, 2], [3, 4], [5, 0]]"),
        ("{{ [1, 2, 3, 4, 5]|slice(2) }}", "[[1, 2, 3], [4, 5]]"),
        ("{{ [1, 2, 3, 4]|slice(3, 0) }}", "[[1, 2], [3, 0], [4, 0]]"),
    ],
)
def test_sequence_filters(render, source, expected):
    assert render(source, {"users": USERS}) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ missing|default('fallback') }}", "fallback"),
        ("{{ missing|d('fallback') }}", "fallback"),
        ("{{ ''|default('fallback') }}", ""),
        ("{{ ''|default('fallback', true) }}", "fallback"),
        ("{{ none|default('x') }}", ""),
        ("{{ 0|default(5, boolean=true) }}", "5"),
    ],
)
def test_default(render, source, expected):
    assert render(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ users|map(attribute='name')|join(', ') }}", "ann, bob, cy"),
        ("{{ users|map(attribute='zip', default='-')|join }}", "---"),
        ("{{ ['a', 'b']|map('upper')|join }}", "AB"),
        ("{{ ['a-b', 'c']|map('replace', '-', '+')|join(',') }}", "a+b,c"),
        ("{{ [1, 2, 3, 4]|select('even') }}", "[2, 4]"),
        ("{{ [1, 2, 3, 4]|reject('even') }}", "[1, 3]"),
        ("{{ [0, 1, '', 'a']|select }}", "[1, 'a']"),
        ("{{ [1, 5, 10]|select('gt', 4) }}", "[5, 10]"),
        ("{{ [1, 5, 10]|select('divisibleby', 5) }}", "[5, 10]"),
        ("{{ users|selectattr('active')|map(attribute='name')|join }}", "anncy"),
        ("{{ users|rejectattr('active')|map(attribute='name')|join }}", "bob"),
        ("{{ users|selectattr('age', 'ge', 18)|length }}", "2"),
        ("{{ users|selectattr('city', 'eq', 'X')|map(attribute='name')|join }}", "ann"),
    ],
)
def test_map_and_select(render, source, expected):
    assert render(source, {"users": USERS}) == expected


def test_groupby(render):
    source = (
        "{% for city, people in users|groupby('city') %}"
        "{{ city }}:{{ people|map(attribute='name')|join(',') }};"
        "{% endfor %}"
    )
    assert render(source, {"users": USERS}) == "X:ann,cy;Y:bob;"


def test_groupby_case_sensitive(render):
    source = (
        "{% for group in users|groupby('city', case_sensitive=true) %}"
        "{{ group[0] }}{{ group[1]|length }} "
        "{% endfor %}"
    )
    assert render(source, {"users": USERS}) == "X1 Y1 x1 "


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ {'a': [1, 'x']}|tojson }}", '{"a": [1, "x"]}'),
        ("{{ {'a': 1}|tojson(indent=2) }}", '{\n  "a": 1\n}'),
        ("{{ [none, true]|tojson }}", "[null, true]"),
        ("{{ 'é'|tojson }}", '"é"'),
    ],
)
def test_tojson(render, source, expected):
    assert render(source) == expected


def test_attr_and_random(render):
    assert render("{{ user|attr('name') }}", {"user": {"name": "Ann"}}) == "Ann"
    assert render("{{ 'abc'|attr('upper') is callable }}") == "true"
    assert render("{{ [1, 2, 3]|random in [1, 2, 3] }}") == "true"
    assert render("{{ []|random }}") == ""


@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ 'aaa bbb ccc'|wordwrap(7) }}", "aaa bbb\nccc"),
        ("{{ 'a b\\nc d'|wordwrap(3, wrapstring='|') }}", "a b|c d"),
        ("{{ 'abcdefgh'|wordwrap(3) }}", "abc\ndef\ngh"),
        ("{{ 'abcdefgh'|wordwrap(3, false) }}", "abcdefgh"),
        ("{{ 1|filesizeformat }}", "1 Byte"),
        ("{{ 300|filesizeformat }}", "300 Bytes"),
        ("{{ 1000|filesizeformat }}", "1.0 kB"),
        ("{{ 1500000|filesizeformat }}", "1.5 MB"),
        ("{{ 2048|filesizeformat(true) }}", "2.0 KiB"),
        ("{{ '2000'|filesizeformat }}", "2.0 kB"),
        ("{{ {'class': 'a', 'id': none, 'title': '<x>'}|xmlattr }}", ' class="a" title="&lt;x&gt;"'),
        ("{{ {'a': 1, 'b': missing}|xmlattr(false) }}", 'a="1"'),
        ("{{ {}|xmlattr }}", ""),
        ("{{ 'a b/c&d'|urlencode }}", "a%20b/c%26d"),
        ("{{ {'q': 'a b', 'n': 1}|urlencode }}", "q=a%20b&n=1"),
        ("{{ [['k', 'v w']]|urlencode }}", "k=v%20w"),
        ("{{ 42|urlencode }}", "42"),
        ("{{ [1, 'a']|pprint }}", '[\n  1,\n  "a"\n]'),
        ("{{ {'a': [1]}|pprint }}", '{\n  "a": [\n    1\n  ]\n}'),
        ("{{ []|pprint }}", "[]"),
        ("{{ '<a href=\"x\">'|forceescape }}", "&lt;a href=&#34;x&#34;&gt;"),
        ("{{ 'see https://x.org/a, ok'|urlize }}", 'see <a href="https://x.org/a">https://x.org/a</a>, ok'),
        (
            "{{ 'http://x.org'|urlize(nofollow=true, target='_blank') }}",
            '<a href="http://x.org" rel="nofollow" target="_blank">http://x.org</a>',
        ),
        ("{{ 'http://example.com/long'|urlize(10) }}", '<a href="http://example.com/long">http://exa...</a>'),
        ("{{ 'ftp://x.org www'|urlize }}", "ftp://x.org www"),
    ],
)
def test_text_formatting_filters(render, source, expected):
    assert render(source) == expected


@pytest.mark.parametrize(
    "source,error",
    [
        ("{{ 'a'|abs }}", errors.JinjaTypeError),
        ("{{ 5|length }}", errors.JinjaTypeError),
        ("{{ 5|items }}", errors.JinjaTypeError),
        ("{{ [1]|batch(0) }}", errors.JinjaRuntimeError),
        ("{{ [1]|slice(0) }}", errors.JinjaRuntimeError),
        ("{{ 'x'|round }}", errors.JinjaTypeError),
        ("{{ 1.5|round(method='up') }}", errors.JinjaRuntimeError),
        ("{{ [1, 'a']|sort }}", errors.JinjaTypeError),
        ("{{ 'x'|upper(1) }}", errors.JinjaArityError),
        ("{{ 'x'|replace(old='a') }}", errors.JinjaArityError),
        ("{{ '%d'|format('x') }}", errors.JinjaRuntimeError),
        ("{{ [1]|map }}", errors.JinjaTypeError),
        ("{{ {'a': 1}|dictsort(by='both') }}", errors.JinjaRuntimeError),
        ("{{ 'x'|center('a') }}", errors.JinjaTypeError),
        ("{{ 1.5|round('a') }}", errors.JinjaTypeError),
        ("{{ '10'|int(base='x') }}", errors.JinjaTypeError),
        ("{{ '10'|int(base=99) }}", errors.JinjaRuntimeError),
        ("{{ 'a'|indent(none) }}", errors.JinjaTypeError),
        ("{{ 'ab'|trim(1) }}", errors.JinjaTypeError),
        ("{{ 'abc'|replace('a', 'b', 'x') }}", errors.JinjaTypeError),
        ("{{ 'abc'|truncate('x') }}", errors.JinjaTypeError),
        ("{{ 'abc'|truncate(2, end=1) }}", errors.JinjaTypeError),
        ("{{ 'abc'.replace('a', 'b', 'x') }}", errors.JinjaTypeError),
        ("{{ 'x'|filesizeformat }}", errors.JinjaTypeError),
        ("{{ 5|xmlattr }}", errors.JinjaTypeError),
        ("{{ {'a b': 1}|xmlattr }}", errors.JinjaRuntimeError),
        ("{{ 'a'|wordwrap(0) }}", errors.JinjaRuntimeError),
        ("{{ [1]|urlencode }}", errors.JinjaTypeError),
    ],
)
def test_filter_errors(render, source, error):
    with pytest.raises(error):
        render(source)


def test_context_function_overrides_filter(render):
    assert render("{{ 'x'|upper }}", {"upper": lambda s: "custom:" + s}) == "custom:x"


def test_non_function_does_not_override_filter(render):
    assert render("{{ 'x'|upper }}", {"upper": "not a function"}) == "X"


@pytest.mark.parametrize(
    "item,attribute,expected",
    [
        ({"a": {"b": 1}}, "a.b", 1),
        ({"a": [5, 6]}, "a.1", 6),
        ([7, 8], 0, 7),
        ({"a": 1}, "missing", Undefined),
        (None, "a", Undefined),
    ],
)
def test_resolve_attribute(item, attribute, expected):
    assert resolve_attribute(item, attribute) == expected


# -------------------------------
# Tests
# -------------------------------

@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ 4 is even }}", "true"),
        ("{{ 3 is odd }}", "true"),
        ("{{ 3 is not even }}", "true"),
        ("{{ 9 is divisibleby 3 }}", "true"),
        ("{{ 9 is divisibleby(2) }}", "false"),
        ("{{ none is none }}", "true"),
        ("{{ 0 is none }}", "false"),
        ("{{ 'a' is string }}", "true"),
        ("{{ 1 is number }}", "true"),
        ("{{ true is number }}", "false"),
        ("{{ 1.5 is float }}", "true"),
        ("{{ 1 is integer }}", "true"),
        ("{{ 1.0 is integer }}", "false"),
        ("{{ true is boolean }}", "true"),
        ("{{ 1 is boolean }}", "false"),
        ("{{ true is true }}", "true"),
        ("{{ 1 is true }}", "false"),
        ("{{ false is false }}", "true"),
        ("{{ [1] is iterable }}", "true"),
        ("{{ 1 is iterable }}", "false"),
        ("{{ {} is mapping }}", "true"),
        ("{{ [] is mapping }}", "false"),
        ("{{ 'abc' is sequence }}", "true"),
        ("{{ 'abc' is lower }}", "true"),
        ("{{ 'ABC' is upper }}", "true"),
        ("{{ 'Abc' is upper }}", "false"),
        ("{{ 1 is eq 1.0 }}", "true"),
        ("{{ 1 is equalto 2 }}", "false"),
        ("{{ 2 is ne 3 }}", "true"),
        ("{{ 2 is gt 1 }}", "true"),
        ("{{ 2 is greaterthan 3 }}", "false"),
        ("{{ 2 is ge(2) }}", "true"),
        ("{{ 2 is lt 3 }}", "true"),
        ("{{ 2 is lessthan 1 }}", "false"),
        ("{{ 2 is le 1 }}", "false"),
        ("{{ 2 is in [1, 2] }}", "true"),
        ("{{ 'z' is in 'abc' }}", "false"),
        ("{{ none is sameas none }}", "true"),
        ("{{ 1 is sameas 1.0 }}", "false"),
        ("{{ 'upper' is filter }}", "true"),
        ("{{ 'nope' is filter }}", "false"),
        ("{{ 'even' is test }}", "true"),
        ("{{ range is callable }}", "true"),
        ("{{ 'x' is callable }}", "false"),
        ("{{ 'x' is escaped }}", "false"),
        ("{{ missing is defined }}", "false"),
    ],
)
def test_builtin_tests(render, source, expected):
    assert render(source) == expected


def test_sameas_uses_identity_for_containers(render):
    assert render("{{ [1] is sameas [1] }}") == "false"
    assert render("{% set a = [1] %}{% set b = a %}{{ a is sameas b }}") == "true"


def test_context_function_overrides_test(render):
    assert render("{{ 3 is even }}", {"even": lambda value: True}) == "true"


@pytest.mark.parametrize(
    "source,error",
    [
        ("{{ 'a' is even }}", errors.JinjaTypeError),
        ("{{ 3 is divisibleby 0 }}", errors.JinjaRuntimeError),
        ("{{ 3 is divisibleby }}", errors.JinjaArityError),
        ("{{ 'a' < 1 }}", errors.JinjaTypeError),
    ],
)
def test_test_errors(render, source, error):
    with pytest.raises(error):
        render(source)


# -------------------------------
# Globals
# -------------------------------

@pytest.mark.parametrize(
    "source,expected",
    [
        ("{{ range(3) }}", "[0, 1, 2]"),
        ("{{ range(1, 7, 2) }}", "[1, 3, 5]"),
        ("{{ range(3, 0, -1) }}", "[3, 2, 1]"),
        ("{{ dict(a=1, b=2) }}", "{'a': 1, 'b': 2}"),
        ("{{ dict({'a': 1}, b=2) }}", "{'a': 1, 'b': 2}"),
        ("{{ namespace(x=1).x }}", "1"),
        ("{% set c = cycler('a', 'b') %}{{ c.next() }}{{ c.next() }}{{ c.next() }}", "aba"),
        ("{% set c = cycler('a', 'b') %}{{ c.current }}{{ c.next() }}{{ c.next() }}{{ c.reset() }}{{ c.next() }}",
         "aaba"),
        ("{% set pipe = joiner('|') %}{% for x in [1, 2, 3] %}{{ pipe() }}{{ x }}{% endfor %}", "1|2|3"),
        ("{% set comma = joiner() %}{{ comma() }}a{{ comma() }}b", "a, b"),
        ("{{ lipsum(1, false, 5, 5)|wordcount }}", "5"),
        ("{{ lipsum(2, min=3, max=3)|striptags|wordcount }}", "6"),
    ],
)
def test_globals(render, source, expected):
    assert render(source) == expected


def test_context_shadows_globals(render):
    assert render("{{ range(2) }}", {"range": lambda n: "mine"}) == "mine"


@pytest.mark.parametrize(
    "source,error",
    [
        ("{{ range(1, 5, 0) }}", errors.JinjaRuntimeError),
        ("{{ range() }}", errors.JinjaArityError),
        ("{{ range('a') }}", errors.JinjaTypeError),
        ("{{ cycler() }}", errors.JinjaArityError),
        ("{{ dict(1) }}", errors.JinjaTypeError),
        ("{{ lipsum(1, min=5, max=2) }}", errors.JinjaRuntimeError),
        ("{{ raise_exception() }}", errors.TemplateException),
    ],
)
def test_global_errors(render, source, error):
    with pytest.raises(error):
        render(source)


def test_default_registry_catalogue():
    registry = default_registry()
    for name in (
        "abs", "batch", "default", "groupby", "join", "map", "selectattr", "tojson", "wordcount",
        "forceescape", "wordwrap", "filesizeformat", "xmlattr", "urlencode", "pprint", "urlize",
    ):
        assert name in registry.filters
    for name in ("defined", "divisibleby", "eq", "==", "sameas", "iterable"):
        assert name in registry.tests
    for name in ("range", "namespace", "dict", "cycler", "joiner", "raise_exception", "lipsum"):
        assert name in registry.globals
    assert default_registry() is not registry

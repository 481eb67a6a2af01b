"""Built-in filters.

Every filter is called as fn(env, args, kwargs) with the filtered value as
the first positional argument. `register` installs them into a Registry.
"""

from __future__ import annotations

import math
import random as _random
import re
import textwrap
from functools import cmp_to_key
from typing import Callable
from urllib.parse import quote, urlsplit

from zinja import JinjaValue
from zinja.builtin.members import get_attribute
from zinja.errors import JinjaRuntimeError, JinjaTypeError
from zinja.evaluation.apply import apply_filter, apply_test
from zinja.types.bind import resolve_call_arguments
from zinja.types.environment import Environment
from zinja.types.undefined import Undefined, UndefinedType
from zinja.types.value import (
    compare, equivalent, get_item, is_integer, is_number, is_truthy, to_json,
    to_list, to_repr, to_string, type_name, add,
)


def _arguments(name: str, args, kwargs, parameters: tuple[str, ...], **defaults) -> list[JinjaValue]:
    bound = resolve_call_arguments(args, kwargs, parameters, defaults, name=name)
    return [bound[p] for p in parameters]


def _subject(name: str, args) -> JinjaValue:
    if not args:
        raise JinjaTypeError(f"Filter '{name}' requires a value")
    return args[0]


def _require_int(name: str, parameter: str, value: JinjaValue) -> int:
    if not is_integer(value):
        raise JinjaTypeError(f"{name}: '{parameter}' must be an integer, not {type_name(value)}")
    return value


def _require_str(name: str, parameter: str, value: JinjaValue, allow_none: bool = False) -> str | None:
    if allow_none and value is None:
        return value
    if not isinstance(value, str):
        raise JinjaTypeError(f"{name}: '{parameter}' must be a string, not {type_name(value)}")
    return value


def resolve_attribute(item: JinjaValue, attribute: JinjaValue) -> JinjaValue:
    """Look up a dotted attribute path such as "user.name" or "items.0"."""
    if is_integer(attribute):
        return get_item(item, attribute)
    for part in str(attribute).split("."):
        if part.isdigit():
            item = get_item(item, int(part))
        elif isinstance(item, dict):
            item = get_item(item, part)
        else:
            item = get_attribute(item, part)
    return item


def _compare_keys(a: JinjaValue, b: JinjaValue) -> int:
    if equivalent(a, b):
        return 0
    return -1 if compare("<", a, b) else 1


def _sort_key(case_sensitive: bool, attribute: JinjaValue = None) -> Callable:
    def key(item):
        value = resolve_attribute(item, attribute) if attribute is not None else item
        if not case_sensitive and isinstance(value, str):
            value = value.lower()
        return value
    return key


def _sorted(items: list, key: Callable, reverse: bool = False) -> list:
    keyed = [(key(item), item) for item in items]
    keyed.sort(key=cmp_to_key(lambda a, b: _compare_keys(a[0], b[0])), reverse=reverse)
    return [item for _, item in keyed]


# -------------------------------
# Strings
# -------------------------------

def upper(env: Environment, args, kwargs) -> str:
    """Uppercase the string form of the value."""
    (value,) = _arguments("upper", args, kwargs, ("value",))
    return to_string(value).upper()


def lower(env: Environment, args, kwargs) -> str:
    (value,) = _arguments("lower", args, kwargs, ("value",))
    return to_string(value).lower()


def capitalize(env: Environment, args, kwargs) -> str:
    """First character uppercase, the rest lowercase."""
    (value,) = _arguments("capitalize", args, kwargs, ("value",))
    return to_string(value).capitalize()


def title(env: Environment, args, kwargs) -> str:
    (value,) = _arguments("title", args, kwargs, ("value",))
    return to_string(value).title()


def trim(env: Environment, args, kwargs) -> str:
    value, chars = _arguments("trim", args, kwargs, ("value", "chars"), chars=None)
    return to_string(value).strip(_require_str("trim", "chars", chars, allow_none=True))


def replace(env: Environment, args, kwargs) -> str:
    value, old, new, count = _arguments("replace", args, kwargs, ("value", "old", "new", "count"), count=None)
    count = -1 if count is None else _require_int("replace", "count", count)
    return to_string(value).replace(to_string(old), to_string(new), count)


def center(env: Environment, args, kwargs) -> str:
    value, width = _arguments("center", args, kwargs, ("value", "width"), width=80)
    return to_string(value).center(_require_int("center", "width", width))


def indent(env: Environment, args, kwargs) -> str:
    """Indent every line but the first; blank lines stay empty unless blank=true."""
    value, width, first, blank = _arguments(
        "indent", args, kwargs, ("value", "width", "first", "blank"), width=4, first=False, blank=False
    )
    prefix = width if isinstance(width, str) else " " * _require_int("indent", "width", width)
    lines = to_string(value).split("\n")
    result = []
    for index, line in enumerate(lines):
        if index == 0 and not first:
            result.append(line)
        elif line or blank:
            result.append(prefix + line)
        else:
            result.append(line)
    return "\n".join(result)


def truncate(env: Environment, args, kwargs) -> str:
    value, length, killwords, end, leeway = _arguments(
        "truncate", args, kwargs, ("value", "length", "killwords", "end", "leeway"),
        length=255, killwords=False, end="...", leeway=5,
    )
    length = _require_int("truncate", "length", length)
    leeway = _require_int("truncate", "leeway", leeway)
    end = _require_str("truncate", "end", end)
    text = to_string(value)
    if len(text) <= length + leeway:
        return text
    keep = max(length - len(end), 0)
    if killwords:
        return text[:keep] + end
    result = text[:keep].rsplit(" ", 1)[0]
    return result + end


def wordcount(env: Environment, args, kwargs) -> int:
    (value,) = _arguments("wordcount", args, kwargs, ("value",))
    return len(re.findall(r"\w+", to_string(value)))


_STRIPTAGS_RE = re.compile(r"(<!--.*?-->|<[^>]*>)", re.DOTALL)


def striptags(env: Environment, args, kwargs) -> str:
    """Remove markup tags and collapse whitespace."""
    (value,) = _arguments("striptags", args, kwargs, ("value",))
    return " ".join(_STRIPTAGS_RE.sub("", to_string(value)).split())


_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&#34;",
    "'": "&#39;",
}


def _escape_text(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


def escape(env: Environment, args, kwargs) -> str:
    (value,) = _arguments("escape", args, kwargs, ("value",))
    return _escape_text(to_string(value))


def safe(env: Environment, args, kwargs) -> JinjaValue:
    # no autoescaping: values pass through untouched
    (value,) = _arguments("safe", args, kwargs, ("value",))
    return value


def string(env: Environment, args, kwargs) -> str:
    (value,) = _arguments("string", args, kwargs, ("value",))
    return to_string(value)


def format_(env: Environment, args, kwargs) -> str:
    """printf-style formatting: {{ "%s-%d"|format("a", 1) }}"""
    value = to_string(_subject("format", args))
    params = tuple(args[1:])
    try:
        return value % (kwargs if kwargs and not params else params)
    except (TypeError, ValueError, KeyError) as exc:
        raise JinjaRuntimeError(f"format: {exc}") from exc


def tojson(env: Environment, args, kwargs) -> str:
    value, indent_ = _arguments("tojson", args, kwargs, ("value", "indent"), indent=None)
    if indent_ is not None and not is_integer(indent_):
        raise JinjaTypeError("tojson indent must be an integer")
    return to_json(value, indent_)


def wordwrap(env: Environment, args, kwargs) -> str:
    """Wrap each line of text at `width` columns."""
    value, width, break_long_words, wrapstring, break_on_hyphens = _arguments(
        "wordwrap", args, kwargs, ("value", "width", "break_long_words", "wrapstring", "break_on_hyphens"),
        width=79, break_long_words=True, wrapstring="\n", break_on_hyphens=True,
    )
    width = _require_int("wordwrap", "width", width)
    if width < 1:
        raise JinjaRuntimeError("wordwrap: 'width' must be positive")
    wrapstring = _require_str("wordwrap", "wrapstring", wrapstring)
    return wrapstring.join(
        wrapstring.join(
            textwrap.wrap(
                line,
                width=width,
                expand_tabs=False,
                replace_whitespace=False,
                break_long_words=is_truthy(break_long_words),
                break_on_hyphens=is_truthy(break_on_hyphens),
            )
        )
        for line in to_string(value).splitlines()
    )


_DECIMAL_SIZES = ("kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
_BINARY_SIZES = ("KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB")


def filesizeformat(env: Environment, args, kwargs) -> str:
    """Human readable size: 1000-based units, or 1024-based with binary=true."""
    value, binary = _arguments("filesizeformat", args, kwargs, ("value", "binary"), binary=False)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            raise JinjaTypeError(f"filesizeformat expects a number, not {value!r}") from None
    if not is_number(value):
        raise JinjaTypeError(f"filesizeformat expects a number, not {type_name(value)}")
    size = float(value)
    base = 1024 if is_truthy(binary) else 1000
    prefixes = _BINARY_SIZES if is_truthy(binary) else _DECIMAL_SIZES
    if size == 1:
        return "1 Byte"
    if size < base:
        return f"{int(size)} Bytes"
    for index, prefix in enumerate(prefixes):
        unit = base ** (index + 2)
        if size < unit:
            break
    return f"{base * size / unit:.1f} {prefix}"


_XMLATTR_INVALID = re.compile(r"[\s/>=]")


def xmlattr(env: Environment, args, kwargs) -> str:
    """Render an object as XML/HTML attributes, skipping none and undefined values."""
    value, autospace = _arguments("xmlattr", args, kwargs, ("value", "autospace"), autospace=True)
    if not isinstance(value, dict):
        raise JinjaTypeError(f"xmlattr expects an object, not {type_name(value)}")
    parts = []
    for key, item in value.items():
        if item is None or item is Undefined:
            continue
        if _XMLATTR_INVALID.search(key):
            raise JinjaRuntimeError(f"Invalid character in attribute name: {key!r}")
        parts.append(f'{_escape_text(key)}="{_escape_text(to_string(item))}"')
    result = " ".join(parts)
    if result and is_truthy(autospace):
        result = " " + result
    return result


def urlencode(env: Environment, args, kwargs) -> str:
    """Percent-encode a string, or an object / list of pairs as a query string."""
    (value,) = _arguments("urlencode", args, kwargs, ("value",))
    match value:
        case str():
            return quote(value, safe="/")
        case dict():
            pairs = list(value.items())
        case list():
            pairs = []
            for pair in value:
                if not isinstance(pair, list) or len(pair) != 2:
                    raise JinjaTypeError("urlencode expects a list of [key, value] pairs")
                pairs.append(pair)
        case _:
            return quote(to_string(value), safe="/")
    return "&".join(f"{quote(to_string(k), safe='')}={quote(to_string(v), safe='')}" for k, v in pairs)


def _pretty(value: JinjaValue, depth: int = 0) -> str:
    pad = "  " * depth
    match value:
        case list() if value:
            inner = ",\n".join(f"{pad}  {_pretty(item, depth + 1)}" for item in value)
            return f"[\n{inner}\n{pad}]"
        case dict() if value:
            inner = ",\n".join(f'{pad}  "{key}": {_pretty(item, depth + 1)}' for key, item in value.items())
            return f"{{\n{inner}\n{pad}}}"
        case str():
            return f'"{value}"'
        case _:
            return to_repr(value)


def pprint(env: Environment, args, kwargs) -> str:
    """Multi-line, indented rendering of a value for debugging."""
    (value,) = _arguments("pprint", args, kwargs, ("value",))
    return _pretty(value)


_URL_CANDIDATE = re.compile(r"\S+")
_URL_TRAILING = ".,:;!?)'\""


def urlize(env: Environment, args, kwargs) -> str:
    """Turn http(s) URLs in plain text into <a> links."""
    value, trim_url_limit, nofollow, target, rel = _arguments(
        "urlize", args, kwargs, ("value", "trim_url_limit", "nofollow", "target", "rel"),
        trim_url_limit=None, nofollow=False, target=None, rel=None,
    )
    if trim_url_limit is not None:
        trim_url_limit = _require_int("urlize", "trim_url_limit", trim_url_limit)
    target = _require_str("urlize", "target", target, allow_none=True)
    rel = _require_str("urlize", "rel", rel, allow_none=True)

    rel_values = rel.split() if rel else []
    if is_truthy(nofollow) and "nofollow" not in rel_values:
        rel_values.append("nofollow")
    attributes = ""
    if rel_values:
        attributes += f' rel="{_escape_text(" ".join(rel_values))}"'
    if target:
        attributes += f' target="{_escape_text(target)}"'

    def link(match: re.Match) -> str:
        word = match.group(0)
        url = word.rstrip(_URL_TRAILING)
        trailing = word[len(url):]
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return word
        shown = url
        if trim_url_limit is not None and len(url) > trim_url_limit:
            shown = url[:trim_url_limit] + "..."
        return f'<a href="{_escape_text(url)}"{attributes}>{_escape_text(shown)}</a>{trailing}'

    return _URL_CANDIDATE.sub(link, to_string(value))


# -------------------------------
# Numbers
# -------------------------------

def abs_(env: Environment, args, kwargs) -> JinjaValue:
    (value,) = _arguments("abs", args, kwargs, ("value",))
    if not is_number(value):
        raise JinjaTypeError(f"abs expects a number, not {type_name(value)}")
    return abs(value)


def int_(env: Environment, args, kwargs) -> int:
    """Convert to int; unparsable values give `default`."""
    value, default, base = _arguments("int", args, kwargs, ("value", "default", "base"), default=0, base=10)
    base = _require_int("int", "base", base)
    if base != 0 and not 2 <= base <= 36:
        raise JinjaRuntimeError("int: 'base' must be 0 or between 2 and 36")
    match value:
        case bool():
            return int(value)
        case int():
            return value
        case float():
            return int(value) if math.isfinite(value) else default
        case str():
            try:
                return int(value.strip(), base)
            except ValueError:
                try:
                    return int(float(value))
                except (ValueError, OverflowError):
                    return default
        case _:
            return default


def float_(env: Environment, args, kwargs) -> float:
    value, default = _arguments("float", args, kwargs, ("value", "default"), default=0.0)
    match value:
        case bool() | int() | float():
            return float(value)
        case str():
            try:
                return float(value)
            except ValueError:
                return default
        case _:
            return default


def round_(env: Environment, args, kwargs) -> float:
    value, precision, method = _arguments(
        "round", args, kwargs, ("value", "precision", "method"), precision=0, method="common"
    )
    if not is_number(value):
        raise JinjaTypeError(f"round expects a number, not {type_name(value)}")
    precision = _require_int("round", "precision", precision)
    if not math.isfinite(value):
        return float(value)
    if method == "common":
        return float(round(value, precision))
    if method not in ("ceil", "floor"):
        raise JinjaRuntimeError("round method must be 'common', 'ceil' or 'floor'")
    scale = 10 ** precision
    func = math.ceil if method == "ceil" else math.floor
    return func(value * scale) / scale


# -------------------------------
# Sequences
# -------------------------------

def length(env: Environment, args, kwargs) -> int:
    (value,) = _arguments("length", args, kwargs, ("value",))
    match value:
        case str() | list() | dict():
            return len(value)
        case UndefinedType():
            return 0
        case _:
            raise JinjaTypeError(f"Object of type {type_name(value)} has no length")


def first(env: Environment, args, kwargs) -> JinjaValue:
    (value,) = _arguments("first", args, kwargs, ("value",))
    items = to_list(value)
    return items[0] if items else Undefined


def last(env: Environment, args, kwargs) -> JinjaValue:
    (value,) = _arguments("last", args, kwargs, ("value",))
    items = to_list(value)
    return items[-1] if items else Undefined


def random(env: Environment, args, kwargs) -> JinjaValue:
    (value,) = _arguments("random", args, kwargs, ("value",))
    items = to_list(value)
    return _random.choice(items) if items else Undefined


def reverse(env: Environment, args, kwargs) -> JinjaValue:
    (value,) = _arguments("reverse", args, kwargs, ("value",))
    if isinstance(value, str):
        return value[::-1]
    return to_list(value)[::-1]


def list_(env: Environment, args, kwargs) -> list:
    (value,) = _arguments("list", args, kwargs, ("value",))
    return to_list(value)


def items(env: Environment, args, kwargs) -> list:
    (value,) = _arguments("items", args, kwargs, ("value",))
    match value:
        case dict():
            return [[key, item] for key, item in value.items()]
        case UndefinedType():
            return []
        case _:
            raise JinjaTypeError(f"items expects an object, not {type_name(value)}")


def join(env: Environment, args, kwargs) -> str:
    value, separator, attribute = _arguments(
        "join", args, kwargs, ("value", "d", "attribute"), d="", attribute=None
    )
    elements = to_list(value)
    if attribute is not None:
        elements = [resolve_attribute(item, attribute) for item in elements]
    return to_string(separator).join(to_string(item) for item in elements)


def default(env: Environment, args, kwargs) -> JinjaValue:
    """The fallback when the value is undefined, or falsy with boolean=true."""
    value, default_value, boolean = _arguments(
        "default", args, kwargs, ("value", "default_value", "boolean"), default_value="", boolean=False
    )
    if value is Undefined or (boolean and not is_truthy(value)):
        return default_value
    return value


def sort(env: Environment, args, kwargs) -> list:
    value, reverse_, case_sensitive, attribute = _arguments(
        "sort", args, kwargs, ("value", "reverse", "case_sensitive", "attribute"),
        reverse=False, case_sensitive=False, attribute=None,
    )
    return _sorted(to_list(value), _sort_key(case_sensitive, attribute), reverse_)


def dictsort(env: Environment, args, kwargs) -> list:
    """Sort an object's pairs by key (by="key") or by value (by="value")."""
    value, case_sensitive, by, reverse_ = _arguments(
        "dictsort", args, kwargs, ("value", "case_sensitive", "by", "reverse"),
        case_sensitive=False, by="key", reverse=False,
    )
    if not isinstance(value, dict):
        raise JinjaTypeError(f"dictsort expects an object, not {type_name(value)}")
    if by not in ("key", "value"):
        raise JinjaRuntimeError("dictsort: 'by' must be 'key' or 'value'")
    position = 0 if by == "key" else 1
    pairs = [[key, item] for key, item in value.items()]
    return _sorted(pairs, _sort_key(case_sensitive, position), reverse_)


def unique(env: Environment, args, kwargs) -> list:
    value, case_sensitive, attribute = _arguments(
        "unique", args, kwargs, ("value", "case_sensitive", "attribute"), case_sensitive=False, attribute=None
    )
    key = _sort_key(case_sensitive, attribute)
    seen: list[JinjaValue] = []
    result = []
    for item in to_list(value):
        marker = key(item)
        if any(equivalent(marker, other) for other in seen):
            continue
        seen.append(marker)
        result.append(item)
    return result


def _extreme(name: str, pick_larger: bool):
    def extreme(env: Environment, args, kwargs) -> JinjaValue:
        value, case_sensitive, attribute = _arguments(
            name, args, kwargs, ("value", "case_sensitive", "attribute"), case_sensitive=False, attribute=None
        )
        elements = to_list(value)
        if not elements:
            return Undefined
        ordered = _sorted(elements, _sort_key(case_sensitive, attribute))
        return ordered[-1] if pick_larger else ordered[0]
    return extreme


max_ = _extreme("max", True)
min_ = _extreme("min", False)


def sum_(env: Environment, args, kwargs) -> JinjaValue:
    value, attribute, start = _arguments("sum", args, kwargs, ("value", "attribute", "start"), attribute=None, start=0)
    total = start
    for item in to_list(value):
        total = add(total, resolve_attribute(item, attribute) if attribute is not None else item)
    return total


def batch(env: Environment, args, kwargs) -> list:
    """Split into lists of `linecount` items, padding the last with fill_with."""
    value, linecount, fill_with = _arguments(
        "batch", args, kwargs, ("value", "linecount", "fill_with"), fill_with=None
    )
    if not is_integer(linecount) or linecount < 1:
        raise JinjaRuntimeError("batch linecount must be a positive integer")
    elements = to_list(value)
    result = [elements[i:i + linecount] for i in range(0, len(elements), linecount)]
    if result and fill_with is not None:
        result[-1].extend([fill_with] * (linecount - len(result[-1])))
    return result


def slice_(env: Environment, args, kwargs) -> list:
    """Distribute items over `slices` columns, padding short ones with fill_with."""
    value, slices, fill_with = _arguments("slice", args, kwargs, ("value", "slices", "fill_with"), fill_with=None)
    if not is_integer(slices) or slices < 1:
        raise JinjaRuntimeError("slice count must be a positive integer")
    elements = to_list(value)
    per_slice, extra = divmod(len(elements), slices)
    result = []
    offset = 0
    for index in range(slices):
        start = offset + index * per_slice
        if index < extra:
            offset += 1
        end = offset + (index + 1) * per_slice
        column = elements[start:end]
        if fill_with is not None and index >= extra:
            column.append(fill_with)
        result.append(column)
    return result


def groupby(env: Environment, args, kwargs) -> list:
    """Group items by an attribute: a list of [grouper, items] pairs sorted by grouper."""
    value, attribute, default_value, case_sensitive = _arguments(
        "groupby", args, kwargs, ("value", "attribute", "default", "case_sensitive"),
        default=None, case_sensitive=False,
    )

    def grouper(item):
        found = resolve_attribute(item, attribute)
        if found is Undefined and default_value is not None:
            return default_value
        return found

    key = _sort_key(case_sensitive)
    groups: list[list[JinjaValue]] = []
    last_key: JinjaValue = Undefined
    # the reported grouper is taken from the first item of each group
    for item in _sorted(to_list(value), lambda item: key(grouper(item))):
        current = key(grouper(item))
        if groups and equivalent(last_key, current):
            groups[-1][1].append(item)
        else:
            groups.append([grouper(item), [item]])
            last_key = current
    return groups


def attr(env: Environment, args, kwargs) -> JinjaValue:
    value, name = _arguments("attr", args, kwargs, ("value", "name"))
    if isinstance(value, dict) and isinstance(name, str):
        return get_item(value, name)
    return get_attribute(value, to_string(name))


def map_(env: Environment, args, kwargs) -> list:
    """Apply a filter to each item, or pick an attribute with attribute=..."""
    elements = to_list(_subject("map", args))
    if "attribute" in kwargs:
        options = dict(kwargs)
        attribute = options.pop("attribute")
        fallback = options.pop("default", Undefined)
        if options or len(args) > 1:
            raise JinjaTypeError("map(attribute=...) accepts only 'default' besides the attribute")
        result = []
        for item in elements:
            found = resolve_attribute(item, attribute)
            result.append(fallback if found is Undefined else found)
        return result
    if len(args) < 2:
        raise JinjaTypeError("map requires a filter name or attribute=...")
    name = args[1]
    if not isinstance(name, str):
        raise JinjaTypeError("map filter name must be a string")
    return [apply_filter(name, item, list(args[2:]), kwargs, env) for item in elements]


def _select(name: str, keep: bool, by_attribute: bool):
    def select(env: Environment, args, kwargs) -> list:
        elements = to_list(_subject(name, args))
        rest = list(args[1:])
        attribute = None
        if by_attribute:
            if not rest:
                raise JinjaTypeError(f"{name} requires an attribute name")
            attribute = rest.pop(0)
        test_name = rest.pop(0) if rest else None

        result = []
        for item in elements:
            subject = resolve_attribute(item, attribute) if by_attribute else item
            if test_name is None:
                passed = is_truthy(subject)
            else:
                passed = apply_test(to_string(test_name), subject, rest, kwargs, env)
            if passed == keep:
                result.append(item)
        return result
    return select


select = _select("select", True, False)
reject = _select("reject", False, False)
selectattr = _select("selectattr", True, True)
rejectattr = _select("rejectattr", False, True)


def register(registry) -> None:
    """Register all builtin filters into the given registry."""
    table = {
        "abs": abs_,
        "attr": attr,
        "batch": batch,
        "capitalize": capitalize,
        "center": center,
        "count": length,
        "d": default,
        "default": default,
        "dictsort": dictsort,
        "e": escape,
        "escape": escape,
        "filesizeformat": filesizeformat,
        "first": first,
        "float": float_,
        "forceescape": escape,
        "format": format_,
        "groupby": groupby,
        "indent": indent,
        "int": int_,
        "items": items,
        "join": join,
        "last": last,
        "length": length,
        "list": list_,
        "lower": lower,
        "map": map_,
        "max": max_,
        "min": min_,
        "pprint": pprint,
        "random": random,
        "reject": reject,
        "rejectattr": rejectattr,
        "replace": replace,
        "reverse": reverse,
        "round": round_,
        "safe": safe,
        "select": select,
        "selectattr": selectattr,
        "slice": slice_,
        "sort": sort,
        "string": string,
        "striptags": striptags,
        "sum": sum_,
        "title": title,
        "tojson": tojson,
        "trim": trim,
        "truncate": truncate,
        "unique": unique,
        "upper": upper,
        "urlencode": urlencode,
        "urlize": urlize,
        "wordcount": wordcount,
        "wordwrap": wordwrap,
        "xmlattr": xmlattr,
    }
    for name, fn in table.items():
        registry.register_filter(name, fn)

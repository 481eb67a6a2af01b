"""
  Template lexer

- `preprocess` applies the whitespace options and the "-" tag markers
- `tokenize` scans in two modes:
    - text: everything up to the next "{{", "{%" or "{#"
    - tag:  expression/statement tokens, whitespace skipped
- comments "{# ... #}" become a single comment token
- only a "}}" at brace depth zero closes an expression tag
- the token list always ends with an EOF token
"""

from __future__ import annotations

import re

from zinja.config import TemplateOptions
from zinja.errors import JinjaLexError
from zinja.types.token import KEYWORDS, OPERATORS, Token, TokenKind


TAG_TOKEN_RE = re.compile(
    r"(?P<string>\"(?:\\.|[^\\\"])*\"|'(?:\\.|[^\\'])*')"  # quoted strings
    r"|(?P<number>(?<!\.)\d+(?:\.\d+)?|\d+)"  # 12, 1.5; after a dot only an integer index
    r"|(?P<name>[^\W\d]\w*)",  # identifiers and keywords
    re.DOTALL,
)

TAG_OPEN_RE = re.compile(r"\{[{%#]")
WHITESPACE_RE = re.compile(r"\s+")

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

# (pattern, replacement) pairs for the "-" whitespace markers
_WHITESPACE_CONTROL = (
    (re.compile(r"-%\}\s*"), "%}"),
    (re.compile(r"\s*\{%-"), "{%"),
    (re.compile(r"-\}\}\s*"), "}}"),
    (re.compile(r"\s*\{\{-"), "{{"),
    (re.compile(r"-#\}\s*"), "#}"),
    (re.compile(r"\s*\{#-"), "{#"),
)


def preprocess(source: str, options: TemplateOptions | None = None) -> str:
    """Apply lstrip_blocks, trim_blocks and the "-" markers to raw source."""
    options = options or TemplateOptions()
    if options.lstrip_blocks:
        source = re.sub(r"(?m)^[ \t]+(?=\{[%#])", "", source)
    if options.trim_blocks:
        source = re.sub(r"([%#]\})\n", r"\1", source)
    for pattern, replacement in _WHITESPACE_CONTROL:
        source = pattern.sub(replacement, source)
    return source


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: ESCAPES.get(m.group(1), m.group(1)), body)


def tokenize(source: str, options: TemplateOptions | None = None) -> list[Token]:
    """Split template source into tokens; raises JinjaLexError."""
    source = preprocess(source, options)
    tokens: list[Token] = []
    pos = 0
    n = len(source)
    closing: TokenKind | None = None  # set while inside a tag
    depth = 0

    while pos < n:
        if closing is None:
            if source.startswith("{#", pos):
                end = source.find("#}", pos + 2)
                if end == -1:
                    raise JinjaLexError("Unclosed comment", pos)
                tokens.append(Token(TokenKind.COMMENT, source[pos + 2:end], pos))
                pos = end + 2
            elif source.startswith("{{", pos):
                tokens.append(Token(TokenKind.OPEN_EXPRESSION, "{{", pos))
                closing, depth = TokenKind.CLOSE_EXPRESSION, 0
                pos += 2
            elif source.startswith("{%", pos):
                tokens.append(Token(TokenKind.OPEN_STATEMENT, "{%", pos))
                closing, depth = TokenKind.CLOSE_STATEMENT, 0
                pos += 2
            else:
                match = TAG_OPEN_RE.search(source, pos)
                end = match.start() if match else n
                tokens.append(Token(TokenKind.TEXT, source[pos:end], pos))
                pos = end
            continue

        match = WHITESPACE_RE.match(source, pos)
        if match:
            pos = match.end()
            continue

        if closing is TokenKind.CLOSE_EXPRESSION and depth == 0 and source.startswith("}}", pos):
            tokens.append(Token(TokenKind.CLOSE_EXPRESSION, "}}", pos))
            closing = None
            pos += 2
            continue
        if closing is TokenKind.CLOSE_STATEMENT and source.startswith("%}", pos):
            tokens.append(Token(TokenKind.CLOSE_STATEMENT, "%}", pos))
            closing = None
            pos += 2
            continue

        match = TAG_TOKEN_RE.match(source, pos)
        if match:
            if match.group("string") is not None:
                tokens.append(Token(TokenKind.STRING, _unescape(match.group("string")[1:-1]), pos))
            elif match.group("number") is not None:
                tokens.append(Token(TokenKind.NUMBER, match.group("number"), pos))
            else:
                name = match.group("name")
                tokens.append(Token(KEYWORDS.get(name, TokenKind.IDENTIFIER), name, pos))
            pos = match.end()
            continue

        current_char = source[pos]
        if current_char in "\"'":
            raise JinjaLexError("Unclosed string", pos)

        for spelling, kind in OPERATORS:
            if source.startswith(spelling, pos):
                if kind is TokenKind.LBRACE:
                    depth += 1
                elif kind is TokenKind.RBRACE:
                    depth = max(depth - 1, 0)
                tokens.append(Token(kind, spelling, pos))
                pos += len(spelling)
                break
        else:
            raise JinjaLexError(f"Unexpected character {current_char!r}", pos)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens

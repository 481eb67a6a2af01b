from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class TokenKind(Enum):
    TEXT = "text"
    COMMENT = "comment"
    OPEN_EXPRESSION = "{{"
    CLOSE_EXPRESSION = "}}"
    OPEN_STATEMENT = "{%"
    CLOSE_STATEMENT = "%}"

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    IDENTIFIER = "identifier"

    IF = "if"
    ELSE = "else"
    ELIF = "elif"
    ENDIF = "endif"
    FOR = "for"
    ENDFOR = "endfor"
    IN = "in"
    NOT = "not"
    AND = "and"
    OR = "or"
    IS = "is"
    SET = "set"
    ENDSET = "endset"
    MACRO = "macro"
    ENDMACRO = "endmacro"
    BREAK = "break"
    CONTINUE = "continue"
    CALL = "call"
    ENDCALL = "endcall"
    FILTER = "filter"
    ENDFILTER = "endfilter"

    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    FLOOR_DIVIDE = "//"
    POWER = "**"
    MODULO = "%"
    CONCAT = "~"
    EQUALS = "=="
    NOT_EQUALS = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    ASSIGN = "="
    PIPE = "|"

    DOT = "."
    COMMA = ","
    COLON = ":"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"

    EOF = "eof"


KEYWORDS: dict[str, TokenKind] = {
    kind.value: kind
    for kind in (
        TokenKind.IF, TokenKind.ELSE, TokenKind.ELIF, TokenKind.ENDIF,
        TokenKind.FOR, TokenKind.ENDFOR, TokenKind.IN, TokenKind.NOT,
        TokenKind.AND, TokenKind.OR, TokenKind.IS, TokenKind.SET,
        TokenKind.ENDSET, TokenKind.MACRO, TokenKind.ENDMACRO,
        TokenKind.BREAK, TokenKind.CONTINUE, TokenKind.CALL,
        TokenKind.ENDCALL, TokenKind.FILTER, TokenKind.ENDFILTER,
    )
}
KEYWORDS.update({name: TokenKind.BOOLEAN for name in ("true", "false", "True", "False")})
KEYWORDS.update({name: TokenKind.NULL for name in ("null", "none", "None")})

# Operators and punctuation, longest spelling first.
OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("**", TokenKind.POWER),
    ("//", TokenKind.FLOOR_DIVIDE),
    ("==", TokenKind.EQUALS),
    ("!=", TokenKind.NOT_EQUALS),
    ("<=", TokenKind.LESS_EQUAL),
    (">=", TokenKind.GREATER_EQUAL),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("*", TokenKind.MULTIPLY),
    ("/", TokenKind.DIVIDE),
    ("%", TokenKind.MODULO),
    ("~", TokenKind.CONCAT),
    ("<", TokenKind.LESS),
    (">", TokenKind.GREATER),
    ("=", TokenKind.ASSIGN),
    ("|", TokenKind.PIPE),
    (".", TokenKind.DOT),
    (",", TokenKind.COMMA),
    (":", TokenKind.COLON),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
    ("[", TokenKind.LBRACKET),
    ("]", TokenKind.RBRACKET),
    ("{", TokenKind.LBRACE),
    ("}", TokenKind.RBRACE),
)

# Tokens that may be used as a name after "." and as a test name after "is".
NAME_KINDS = frozenset({TokenKind.IDENTIFIER, TokenKind.BOOLEAN, TokenKind.NULL, *KEYWORDS.values()})


class Token(NamedTuple):
    kind: TokenKind
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.kind.name}, {self.value!r}, {self.position})"

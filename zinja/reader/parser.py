"""
  Recursive-descent parser for zinja templates

Consumes the token list produced by `tokenize` and builds the node tree in
zinja.types.nodes. Expression precedence, lowest first:

    ternary      x if test else y
    or
    and
    not
    comparison   == != < <= > >= in, not in, is [not] test
    term         + -
    concat       ~ and implicit adjacency
    filter       |name(args)
    factor       * / // %
    exponent     **
    unary        - + *unpack
    postfix      .name .0 [index] [a:b:c] (args)
    primary
"""

from __future__ import annotations

from typing import Iterable

from zinja.errors import JinjaSyntaxError
from zinja.types.nodes import (
    ArrayLiteral, Binary, BooleanLiteral, Break, Call, CallBlock, Comment,
    Continue, Expr, FilterBlock, FilterExpr, FloatLiteral, For, Identifier,
    If, IntegerLiteral, Macro, Member, Node, NullLiteral, ObjectLiteral, Set,
    Slice, StringLiteral, Ternary, TestExpr, Text, TupleLiteral, Unary,
)
from zinja.types.token import NAME_KINDS, Token, TokenKind

K = TokenKind

COMPARISON_OPS = {
    K.EQUALS: "==",
    K.NOT_EQUALS: "!=",
    K.LESS: "<",
    K.LESS_EQUAL: "<=",
    K.GREATER: ">",
    K.GREATER_EQUAL: ">=",
}

FACTOR_OPS = {
    K.MULTIPLY: "*",
    K.DIVIDE: "/",
    K.FLOOR_DIVIDE: "//",
    K.MODULO: "%",
}

# A following token of one of these kinds concatenates implicitly: {{ "a" name }}
IMPLICIT_CONCAT_STARTERS = frozenset({
    K.STRING, K.IDENTIFIER, K.NUMBER, K.BOOLEAN, K.LPAREN, K.LBRACKET, K.LBRACE,
})

# Tokens that may start a bare test argument: {{ x is divisibleby 3 }}
TEST_ARGUMENT_STARTERS = frozenset({
    K.STRING, K.IDENTIFIER, K.NUMBER, K.BOOLEAN, K.NULL, K.LBRACKET, K.LBRACE,
})


def _describe(token: Token) -> str:
    if token.kind is K.EOF:
        return "end of template"
    return repr(token.value)


def _merge_text(nodes: Iterable[Node]) -> list[Node]:
    """Coalesce adjacent Text nodes and drop empty ones."""
    merged: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            if not node.value:
                continue
            if merged and isinstance(merged[-1], Text):
                merged[-1] = Text(merged[-1].value + node.value)
                continue
        merged.append(node)
    return merged


class Parser:
    """Token stream with one parse method per grammar rule."""

    def __init__(self, tokens: Iterable[Token]):
        self.tokens: list[Token] = list(tokens)
        if not self.tokens or self.tokens[-1].kind is not K.EOF:
            end = self.tokens[-1].position if self.tokens else 0
            self.tokens.append(Token(K.EOF, "", end))
        self.pos = 0
        # break/continue are only valid inside a for body of the same block
        self._loop_depth = 0

    # --- stream helpers ---

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind is not K.EOF:
            self.pos += 1
        return token

    def check(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.check(*kinds):
            return self.advance()
        return None

    def expect(self, kind: TokenKind) -> Token:
        token = self.peek()
        if token.kind is not kind:
            raise JinjaSyntaxError(f"Expected {kind.value!r}, got {_describe(token)}", token.position)
        return self.advance()

    def error(self, message: str, token: Token | None = None) -> JinjaSyntaxError:
        token = token or self.peek()
        return JinjaSyntaxError(message, token.position)

    # --- template structure ---

    def parse(self) -> list[Node]:
        body = []
        while not self.check(K.EOF):
            body.append(self.parse_node())
        return _merge_text(body)

    def parse_node(self) -> Node:
        token = self.peek()
        match token.kind:
            case K.TEXT:
                self.advance()
                return Text(token.value)
            case K.COMMENT:
                self.advance()
                return Comment(token.value)
            case K.OPEN_EXPRESSION:
                self.advance()
                expr = self.parse_expression()
                self.expect(K.CLOSE_EXPRESSION)
                return expr
            case K.OPEN_STATEMENT:
                return self.parse_statement()
            case _:
                raise self.error(f"Unexpected token {_describe(token)}", token)

    def parse_body(self, *terminators: TokenKind) -> tuple[Node, ...]:
        """Nodes up to (not including) a "{%" followed by one of `terminators`."""
        body = []
        while True:
            if self.check(K.EOF):
                expected = " or ".join(repr(t.value) for t in terminators)
                raise self.error(f"Unexpected end of template, expected {expected}")
            if self.check(K.OPEN_STATEMENT) and self.peek(1).kind in terminators:
                break
            body.append(self.parse_node())
        return tuple(_merge_text(body))

    def _parse_isolated_body(self, *terminators: TokenKind) -> tuple[Node, ...]:
        # macro, call, set and filter bodies are not part of an enclosing loop
        saved, self._loop_depth = self._loop_depth, 0
        try:
            return self.parse_body(*terminators)
        finally:
            self._loop_depth = saved

    def _expect_end(self, kind: TokenKind) -> None:
        self.expect(K.OPEN_STATEMENT)
        self.expect(kind)
        self.expect(K.CLOSE_STATEMENT)

    # --- statements ---

    def parse_statement(self) -> Node:
        self.expect(K.OPEN_STATEMENT)
        token = self.advance()
        match token.kind:
            case K.IF:
                return self.parse_if()
            case K.FOR:
                return self.parse_for()
            case K.SET:
                return self.parse_set()
            case K.MACRO:
                return self.parse_macro()
            case K.CALL:
                return self.parse_call_block()
            case K.FILTER:
                return self.parse_filter_block()
            case K.BREAK | K.CONTINUE:
                if self._loop_depth == 0:
                    raise self.error(f"'{token.value}' outside of a loop", token)
                self.expect(K.CLOSE_STATEMENT)
                return Break() if token.kind is K.BREAK else Continue()
            case K.IDENTIFIER:
                raise self.error(f"Unknown statement {token.value!r}", token)
            case _:
                raise self.error(f"Unexpected {_describe(token)} at start of statement", token)

    def parse_if(self) -> If:
        test = self.parse_expression()
        self.expect(K.CLOSE_STATEMENT)
        body = self.parse_body(K.ELIF, K.ELSE, K.ENDIF)
        self.expect(K.OPEN_STATEMENT)
        if self.match(K.ELIF):
            # the nested if consumes the shared endif
            return If(test, body, (self.parse_if(),))
        if self.match(K.ELSE):
            self.expect(K.CLOSE_STATEMENT)
            alternate = self.parse_body(K.ENDIF)
            self._expect_end(K.ENDIF)
            return If(test, body, alternate)
        self.expect(K.ENDIF)
        self.expect(K.CLOSE_STATEMENT)
        return If(test, body)

    def parse_for(self) -> For:
        target = self.parse_loop_target()
        self.expect(K.IN)
        # no ternary here: a trailing "if" is the loop filter
        iterable = self.parse_or()
        condition = self.parse_expression() if self.match(K.IF) else None
        self.expect(K.CLOSE_STATEMENT)

        self._loop_depth += 1
        try:
            body = self.parse_body(K.ELSE, K.ENDFOR)
        finally:
            self._loop_depth -= 1

        else_body: tuple[Node, ...] = ()
        self.expect(K.OPEN_STATEMENT)
        if self.match(K.ELSE):
            self.expect(K.CLOSE_STATEMENT)
            else_body = self.parse_body(K.ENDFOR)
            self.expect(K.OPEN_STATEMENT)
        self.expect(K.ENDFOR)
        self.expect(K.CLOSE_STATEMENT)
        return For(target, iterable, body, else_body, condition)

    def parse_loop_target(self) -> Expr:
        parenthesised = self.match(K.LPAREN) is not None
        names = [Identifier(self.expect(K.IDENTIFIER).value)]
        while self.match(K.COMMA):
            if parenthesised and self.check(K.RPAREN):
                break
            names.append(Identifier(self.expect(K.IDENTIFIER).value))
        if parenthesised:
            self.expect(K.RPAREN)
        if len(names) == 1 and not parenthesised:
            return names[0]
        return TupleLiteral(tuple(names))

    def parse_set(self) -> Set:
        target = self.parse_assignment_target()
        if self.match(K.ASSIGN):
            value = self.parse_expression_sequence()
            self.expect(K.CLOSE_STATEMENT)
            return Set(target, value)
        self.expect(K.CLOSE_STATEMENT)
        body = self._parse_isolated_body(K.ENDSET)
        self._expect_end(K.ENDSET)
        return Set(target, None, body)

    def parse_assignment_target(self) -> Expr:
        start = self.peek()
        targets = [self.parse_postfix(self.parse_primary())]
        while self.match(K.COMMA):
            targets.append(self.parse_postfix(self.parse_primary()))
        for target in targets:
            if isinstance(target, Identifier):
                continue
            if isinstance(target, Member) and len(targets) == 1:
                continue
            raise self.error("Invalid assignment target", start)
        if len(targets) == 1:
            return targets[0]
        return TupleLiteral(tuple(targets))

    def parse_macro(self) -> Macro:
        name = self.expect(K.IDENTIFIER).value
        self.expect(K.LPAREN)
        params: list[str] = []
        defaults: list[tuple[str, Expr]] = []
        while not self.check(K.RPAREN):
            token = self.expect(K.IDENTIFIER)
            if token.value in params:
                raise self.error(f"Duplicate parameter {token.value!r} in macro {name!r}", token)
            params.append(token.value)
            if self.match(K.ASSIGN):
                defaults.append((token.value, self.parse_expression()))
            if not self.match(K.COMMA):
                break
        self.expect(K.RPAREN)
        self.expect(K.CLOSE_STATEMENT)
        body = self._parse_isolated_body(K.ENDMACRO)
        self.expect(K.OPEN_STATEMENT)
        self.expect(K.ENDMACRO)
        self.match(K.IDENTIFIER)  # {% endmacro name %}
        self.expect(K.CLOSE_STATEMENT)
        return Macro(name, tuple(params), tuple(defaults), body)

    def parse_call_block(self) -> CallBlock:
        caller_params: tuple[str, ...] | None = None
        if self.match(K.LPAREN):
            names: list[str] = []
            while not self.check(K.RPAREN):
                names.append(self.expect(K.IDENTIFIER).value)
                if not self.match(K.COMMA):
                    break
            self.expect(K.RPAREN)
            caller_params = tuple(names)
        callee = self.parse_expression()
        self.expect(K.CLOSE_STATEMENT)
        body = self._parse_isolated_body(K.ENDCALL)
        self._expect_end(K.ENDCALL)
        return CallBlock(callee, caller_params, body)

    def parse_filter_block(self) -> FilterBlock:
        filter_expr: Expr = Identifier(self.expect(K.IDENTIFIER).value)
        if self.check(K.LPAREN):
            args, kwargs, dyn_kwargs = self.parse_arguments()
            filter_expr = Call(filter_expr, args, kwargs, dyn_kwargs)
        while self.match(K.PIPE):
            filter_expr = self.parse_filter_tail(filter_expr)
        self.expect(K.CLOSE_STATEMENT)
        body = self._parse_isolated_body(K.ENDFILTER)
        self._expect_end(K.ENDFILTER)
        return FilterBlock(filter_expr, body)

    # --- expressions ---

    def parse_expression_sequence(self) -> Expr:
        """expr or a bare tuple: a, b, c"""
        first = self.parse_expression()
        if not self.check(K.COMMA):
            return first
        items = [first]
        while self.match(K.COMMA):
            if self.check(K.CLOSE_STATEMENT):
                break
            items.append(self.parse_expression())
        return TupleLiteral(tuple(items))

    def parse_expression(self) -> Expr:
        value = self.parse_or()
        if self.match(K.IF):
            test = self.parse_or()
            alternate = self.parse_expression() if self.match(K.ELSE) else None
            return Ternary(value, test, alternate)
        return value

    def parse_or(self) -> Expr:
        left = self.parse_and()
        while self.match(K.OR):
            left = Binary("or", left, self.parse_and())
        return left

    def parse_and(self) -> Expr:
        left = self.parse_not()
        while self.match(K.AND):
            left = Binary("and", left, self.parse_not())
        return left

    def parse_not(self) -> Expr:
        if self.match(K.NOT):
            return Unary("not", self.parse_not())
        return self.parse_comparison()

    def parse_comparison(self) -> Expr:
        left = self.parse_term()
        while True:
            kind = self.peek().kind
            if kind in COMPARISON_OPS:
                self.advance()
                left = Binary(COMPARISON_OPS[kind], left, self.parse_term())
            elif kind is K.IN:
                self.advance()
                left = Binary("in", left, self.parse_term())
            elif kind is K.NOT and self.peek(1).kind is K.IN:
                self.advance()
                self.advance()
                left = Binary("not in", left, self.parse_term())
            elif kind is K.IS:
                self.advance()
                left = self.parse_test(left)
            else:
                return left

    def parse_test(self, operand: Expr) -> TestExpr:
        negated = self.match(K.NOT) is not None
        token = self.advance()
        if token.kind not in NAME_KINDS:
            raise self.error(f"Expected test name, got {_describe(token)}", token)
        if token.kind is K.NULL:
            name = "none"
        elif token.kind is K.BOOLEAN:
            name = token.value.lower()
        else:
            name = token.value

        if self.check(K.LPAREN):
            paren = self.peek()
            args, kwargs, dyn_kwargs = self.parse_arguments()
            if dyn_kwargs is not None:
                raise self.error("Keyword unpacking is not supported in test arguments", paren)
            return TestExpr(operand, name, args, kwargs, negated)
        if self.check(*TEST_ARGUMENT_STARTERS):
            return TestExpr(operand, name, (self.parse_postfix(self.parse_primary()),), (), negated)
        return TestExpr(operand, name, (), (), negated)

    def parse_term(self) -> Expr:
        left = self.parse_concat()
        while self.check(K.PLUS, K.MINUS):
            op = self.advance().value
            left = Binary(op, left, self.parse_concat())
        return left

    def parse_concat(self) -> Expr:
        left = self.parse_filter()
        while True:
            if self.match(K.CONCAT):
                left = Binary("~", left, self.parse_filter())
            elif self.check(*IMPLICIT_CONCAT_STARTERS):
                left = Binary("~", left, self.parse_filter())
            else:
                return left

    def parse_filter(self) -> Expr:
        operand = self.parse_factor()
        while self.match(K.PIPE):
            operand = self.parse_filter_tail(operand)
        return operand

    def parse_filter_tail(self, operand: Expr) -> FilterExpr:
        name = self.expect(K.IDENTIFIER).value
        if self.check(K.LPAREN):
            args, kwargs, dyn_kwargs = self.parse_arguments()
            return FilterExpr(operand, name, args, kwargs, dyn_kwargs)
        return FilterExpr(operand, name)

    def parse_factor(self) -> Expr:
        left = self.parse_exponent()
        while self.peek().kind in FACTOR_OPS:
            op = FACTOR_OPS[self.advance().kind]
            left = Binary(op, left, self.parse_exponent())
        return left

    def parse_exponent(self) -> Expr:
        left = self.parse_unary()
        while self.match(K.POWER):
            left = Binary("**", left, self.parse_unary())
        return left

    def parse_unary(self) -> Expr:
        token = self.match(K.MINUS, K.PLUS, K.MULTIPLY)
        if token is not None:
            return Unary(token.value, self.parse_unary())
        return self.parse_postfix(self.parse_primary())

    def parse_postfix(self, expr: Expr) -> Expr:
        while True:
            if self.match(K.DOT):
                token = self.advance()
                if token.kind is K.NUMBER and token.value.isdigit():
                    expr = Member(expr, IntegerLiteral(int(token.value)), computed=True)
                elif token.kind in NAME_KINDS:
                    expr = Member(expr, StringLiteral(token.value))
                else:
                    raise self.error(f"Expected attribute name, got {_describe(token)}", token)
            elif self.match(K.LBRACKET):
                expr = self.parse_subscript(expr)
            elif self.check(K.LPAREN):
                args, kwargs, dyn_kwargs = self.parse_arguments()
                expr = Call(expr, args, kwargs, dyn_kwargs)
            else:
                return expr

    def parse_subscript(self, obj: Expr) -> Expr:
        open_token = self.tokens[self.pos - 1]
        start = stop = step = None
        is_slice = False
        if not self.check(K.COLON):
            start = self.parse_expression()
        if self.match(K.COLON):
            is_slice = True
            if not self.check(K.COLON, K.RBRACKET):
                stop = self.parse_expression()
            if self.match(K.COLON) and not self.check(K.RBRACKET):
                step = self.parse_expression()
        self.expect(K.RBRACKET)
        if is_slice:
            return Slice(obj, start, stop, step)
        if start is None:
            raise self.error("Expected index expression", open_token)
        return Member(obj, start, computed=True)

    def parse_arguments(self) -> tuple[tuple[Expr, ...], tuple[tuple[str, Expr], ...], Expr | None]:
        """(args) shared by calls, filters and tests."""
        self.expect(K.LPAREN)
        args: list[Expr] = []
        kwargs: list[tuple[str, Expr]] = []
        dyn_kwargs: Expr | None = None
        unpacked = False
        while not self.check(K.RPAREN):
            token = self.peek()
            if self.match(K.POWER):
                if dyn_kwargs is not None:
                    raise self.error("Only one **kwargs unpack is allowed", token)
                dyn_kwargs = self.parse_expression()
            elif self.check(K.IDENTIFIER) and self.peek(1).kind is K.ASSIGN:
                name = self.advance().value
                self.advance()
                if any(name == existing for existing, _ in kwargs):
                    raise self.error(f"Duplicate keyword argument {name!r}", token)
                kwargs.append((name, self.parse_expression()))
            else:
                if kwargs or dyn_kwargs is not None:
                    raise self.error("Positional argument follows keyword argument", token)
                if self.match(K.MULTIPLY):
                    if unpacked:
                        raise self.error("Only one *args unpack is allowed", token)
                    unpacked = True
                    args.append(Unary("*", self.parse_expression()))
                else:
                    args.append(self.parse_expression())
            if not self.match(K.COMMA):
                break
        self.expect(K.RPAREN)
        return tuple(args), tuple(kwargs), dyn_kwargs

    def parse_primary(self) -> Expr:
        token = self.advance()
        match token.kind:
            case K.STRING:
                return StringLiteral(token.value)
            case K.NUMBER:
                if "." in token.value:
                    return FloatLiteral(float(token.value))
                return IntegerLiteral(int(token.value))
            case K.BOOLEAN:
                return BooleanLiteral(token.value in ("true", "True"))
            case K.NULL:
                return NullLiteral()
            case K.IDENTIFIER:
                return Identifier(token.value)
            case K.LPAREN:
                if self.match(K.RPAREN):
                    return TupleLiteral(())
                first = self.parse_expression()
                if self.match(K.RPAREN):
                    return first
                items = [first]
                while self.match(K.COMMA):
                    if self.check(K.RPAREN):
                        break
                    items.append(self.parse_expression())
                self.expect(K.RPAREN)
                return TupleLiteral(tuple(items))
            case K.LBRACKET:
                items = []
                while not self.check(K.RBRACKET):
                    items.append(self.parse_expression())
                    if not self.match(K.COMMA):
                        break
                self.expect(K.RBRACKET)
                return ArrayLiteral(tuple(items))
            case K.LBRACE:
                pairs: list[tuple[str, Expr]] = []
                while not self.check(K.RBRACE):
                    key = self.advance()
                    if key.kind is not K.STRING and key.kind not in NAME_KINDS:
                        raise self.error(f"Expected object key, got {_describe(key)}", key)
                    self.expect(K.COLON)
                    pairs.append((key.value, self.parse_expression()))
                    if not self.match(K.COMMA):
                        break
                self.expect(K.RBRACE)
                return ObjectLiteral(tuple(pairs))
            case _:
                raise self.error(f"Unexpected {_describe(token)} in expression", token)


def parse(tokens: Iterable[Token]) -> list[Node]:
    """Build the top-level node list; raises JinjaSyntaxError."""
    try:
        return Parser(tokens).parse()
    except RecursionError as exc:
        raise JinjaSyntaxError("Template nesting is too deep to parse") from exc

"""Recursive-descent parser for filter expressions.

Grammar, lowest to highest precedence::

    or         := and ('or' and)*
    and        := not ('and' not)*
    not        := 'not' not | primary
    primary    := '(' or ')' | comparison
    comparison := FIELD 'in' '(' value (',' value)* ')' | FIELD OPERATOR value
    value      := STRING | NUMBER

Field/operator/value compatibility is checked while parsing, so a returned
tree is always well-typed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Final

from .fields import FieldKind, FilterField, Operator
from .nodes import And, Comparison, FilterNode, FilterValue, In, Not, Or
from .tokenizer import Token, TokenizeError, TokenType, tokenize

MAX_DEPTH: Final[int] = 20
MAX_FILTER_LENGTH: Final[int] = 2000


class FilterParseError(ValueError):
    """Raised for any filter string that does not describe a valid expression."""

    def __init__(self, message: str, position: int | None = None) -> None:
        suffix = f" at position {position}" if position is not None else ""
        super().__init__(f"{message}{suffix}")
        self.message = message
        self.position = position


def parse_filter(text: str, *, max_length: int | None = MAX_FILTER_LENGTH) -> FilterNode:
    """Parse ``text`` into a filter tree or raise ``FilterParseError``."""

    if max_length is not None and len(text) > max_length:
        raise FilterParseError(f"Filter expression exceeds {max_length} characters")
    try:
        tokens = tokenize(text)
    except TokenizeError as exc:
        raise FilterParseError(exc.message, exc.position) from exc
    return _Parser(tokens).parse()


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    def parse(self) -> FilterNode:
        node = self._parse_or()
        token = self._current
        if token.type is not TokenType.EOF:
            raise FilterParseError(
                f"Unexpected token '{token.value}' after expression", token.position
            )
        return node

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        token = self._current
        if token.type is not token_type:
            raise FilterParseError(
                f"Expected {token_type} but got {token.type} '{token.value}'",
                token.position,
            )
        return self._advance()

    def _parse_or(self) -> FilterNode:
        left = self._parse_and()
        while self._current.type is TokenType.OR:
            self._advance()
            left = Or(left, self._parse_and())
        return left

    def _parse_and(self) -> FilterNode:
        left = self._parse_not()
        while self._current.type is TokenType.AND:
            self._advance()
            left = And(left, self._parse_not())
        return left

    def _parse_not(self) -> FilterNode:
        # 'not' chains are right-recursive in the grammar; unrolled here.
        negations = 0
        while self._current.type is TokenType.NOT:
            self._advance()
            negations += 1
        node = self._parse_primary()
        for _ in range(negations):
            node = Not(node)
        return node

    def _parse_primary(self) -> FilterNode:
        if self._current.type is not TokenType.LPAREN:
            return self._parse_comparison()

        self._advance()
        self._depth += 1
        if self._depth > MAX_DEPTH:
            raise FilterParseError(
                f"Expression too deeply nested (max {MAX_DEPTH} levels)",
                self._current.position,
            )
        node = self._parse_or()
        self._expect(TokenType.RPAREN)
        self._depth -= 1
        return node

    def _parse_comparison(self) -> FilterNode:
        field = FilterField(self._expect(TokenType.FIELD).value)

        if self._current.type is TokenType.IN:
            self._advance()
            self._expect(TokenType.LPAREN)
            values = [self._parse_value(field, self._current.position)]
            while self._current.type is TokenType.COMMA:
                self._advance()
                values.append(self._parse_value(field, self._current.position))
            self._expect(TokenType.RPAREN)
            return In(field, tuple(values))

        operator_token = self._expect(TokenType.OPERATOR)
        operator = Operator(operator_token.value)
        if operator.text_only and field.kind is FieldKind.NUMERIC:
            raise FilterParseError(
                f"Operator '{operator}' cannot be used with numeric field '{field}'",
                operator_token.position,
            )
        value = self._parse_value(field, operator_token.position)
        return Comparison(field, operator, value)

    def _parse_value(self, field: FilterField, error_position: int) -> FilterValue:
        token = self._current
        if token.type is TokenType.STRING:
            if field.kind is FieldKind.NUMERIC:
                raise FilterParseError(
                    f"Field '{field}' is numeric but got string value '{token.value}'",
                    token.position,
                )
            self._advance()
            return token.value
        if token.type is TokenType.NUMBER:
            if field.kind is FieldKind.TEXT:
                raise FilterParseError(
                    f"Field '{field}' is a text field but got numeric value {token.value}",
                    token.position,
                )
            self._advance()
            return Decimal(token.value)
        raise FilterParseError(
            f"Expected a value (string or number) but got {token.type} '{token.value}'",
            error_position,
        )

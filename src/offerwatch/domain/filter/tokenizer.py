"""Lexer for the listing filter language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .fields import FilterField, Operator


class TokenType(StrEnum):
    FIELD = "FIELD"
    OPERATOR = "OPERATOR"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    IN = "IN"
    STRING = "STRING"
    NUMBER = "NUMBER"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    COMMA = "COMMA"
    EOF = "EOF"


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: str
    position: int


class TokenizeError(ValueError):
    """Raised for input the lexer cannot turn into tokens."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at position {position}")
        self.message = message
        self.position = position


_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}

_KEYWORD_TYPES = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "in": TokenType.IN,
}

_FIELD_NAMES = frozenset(field.value for field in FilterField)
_OPERATOR_NAMES = frozenset(operator.value for operator in Operator)


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_identifier_char(char: str) -> bool:
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z")


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, always terminated by a single ``EOF`` token."""

    tokens: list[Token] = []
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]

        if char.isspace():
            pos += 1
            continue

        if char in _PUNCTUATION:
            tokens.append(Token(_PUNCTUATION[char], char, pos))
            pos += 1
            continue

        if char == "'":
            token, pos = _read_string(text, pos)
            tokens.append(token)
            continue

        if _is_digit(char) or (char == "-" and pos + 1 < length and _is_digit(text[pos + 1])):
            token, pos = _read_number(text, pos)
            tokens.append(token)
            continue

        if _is_identifier_char(char):
            token, pos = _read_word(text, pos)
            tokens.append(token)
            continue

        raise TokenizeError(f"Unexpected character '{char}'", pos)

    tokens.append(Token(TokenType.EOF, "", pos))
    return tokens


def _read_string(text: str, start: int) -> tuple[Token, int]:
    pos = start + 1
    chars: list[str] = []
    while pos < len(text) and text[pos] != "'":
        if text[pos] == "\\" and text.startswith("'", pos + 1):
            chars.append("'")
            pos += 2
            continue
        chars.append(text[pos])
        pos += 1
    if pos >= len(text):
        raise TokenizeError("Unterminated string literal", start)
    return Token(TokenType.STRING, "".join(chars), start), pos + 1


def _read_number(text: str, start: int) -> tuple[Token, int]:
    pos = start + 1 if text[start] == "-" else start
    while pos < len(text) and _is_digit(text[pos]):
        pos += 1
    if pos + 1 < len(text) and text[pos] == "." and _is_digit(text[pos + 1]):
        pos += 1
        while pos < len(text) and _is_digit(text[pos]):
            pos += 1
    return Token(TokenType.NUMBER, text[start:pos], start), pos


def _read_word(text: str, start: int) -> tuple[Token, int]:
    pos = start
    while pos < len(text) and _is_identifier_char(text[pos]):
        pos += 1
    word = text[start:pos]

    if word in _KEYWORD_TYPES:
        return Token(_KEYWORD_TYPES[word], word, start), pos
    if word in _OPERATOR_NAMES:
        return Token(TokenType.OPERATOR, word, start), pos
    if word in _FIELD_NAMES:
        return Token(TokenType.FIELD, word, start), pos

    expected = ", ".join(field.value for field in FilterField)
    raise TokenizeError(
        f"Unknown identifier '{word}'. Expected a field name ({expected}) or operator",
        start,
    )

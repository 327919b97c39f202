"""Filter and sort expression language for listing queries."""

from __future__ import annotations

from .fields import (
    NUMERIC_FIELDS,
    TEXT_FIELDS,
    TEXT_ONLY_OPERATORS,
    FieldKind,
    FilterField,
    Operator,
    SortDirection,
    SortField,
)
from .nodes import And, Comparison, FilterNode, FilterValue, In, Not, Or
from .parser import MAX_DEPTH, MAX_FILTER_LENGTH, FilterParseError, parse_filter
from .sort import (
    EmptySortError,
    InvalidSortDirectionError,
    SortClause,
    SortParseError,
    UnknownSortFieldError,
    parse_sort,
)
from .tokenizer import Token, TokenizeError, TokenType, tokenize
from .visitor import FilterVisitor, accept

__all__ = [
    "MAX_DEPTH",
    "MAX_FILTER_LENGTH",
    "NUMERIC_FIELDS",
    "TEXT_FIELDS",
    "TEXT_ONLY_OPERATORS",
    "And",
    "Comparison",
    "EmptySortError",
    "FieldKind",
    "FilterField",
    "FilterNode",
    "FilterParseError",
    "FilterValue",
    "FilterVisitor",
    "In",
    "InvalidSortDirectionError",
    "Not",
    "Operator",
    "Or",
    "SortClause",
    "SortDirection",
    "SortField",
    "SortParseError",
    "Token",
    "TokenType",
    "TokenizeError",
    "UnknownSortFieldError",
    "accept",
    "parse_filter",
    "parse_sort",
]

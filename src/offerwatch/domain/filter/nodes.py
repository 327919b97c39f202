"""Typed AST produced by the filter parser."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .fields import FilterField, Operator

type FilterValue = str | Decimal


@dataclass(frozen=True, slots=True)
class Comparison:
    field: FilterField
    operator: Operator
    value: FilterValue


@dataclass(frozen=True, slots=True)
class In:
    field: FilterField
    values: tuple[FilterValue, ...]


@dataclass(frozen=True, slots=True)
class And:
    left: FilterNode
    right: FilterNode


@dataclass(frozen=True, slots=True)
class Or:
    left: FilterNode
    right: FilterNode


@dataclass(frozen=True, slots=True)
class Not:
    operand: FilterNode


type FilterNode = Comparison | In | And | Or | Not

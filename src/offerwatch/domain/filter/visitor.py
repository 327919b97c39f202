"""Visitor port for turning filter trees into backend predicates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .nodes import And, Comparison, In, Not, Or

if TYPE_CHECKING:
    from .nodes import FilterNode


class FilterVisitor[TResult](Protocol):
    """Folds a filter tree bottom-up; one method per node variant."""

    def visit_comparison(self, node: Comparison) -> TResult: ...

    def visit_in(self, node: In) -> TResult: ...

    def visit_and(self, left: TResult, right: TResult) -> TResult: ...

    def visit_or(self, left: TResult, right: TResult) -> TResult: ...

    def visit_not(self, operand: TResult) -> TResult: ...


def accept[TResult](node: FilterNode, visitor: FilterVisitor[TResult]) -> TResult:
    """Dispatch ``node`` (and its children) to ``visitor``."""

    match node:
        case Comparison():
            return visitor.visit_comparison(node)
        case In():
            return visitor.visit_in(node)
        case And(left=left, right=right):
            return visitor.visit_and(accept(left, visitor), accept(right, visitor))
        case Or(left=left, right=right):
            return visitor.visit_or(accept(left, visitor), accept(right, visitor))
        case Not(operand=operand):
            return visitor.visit_not(accept(operand, visitor))

"""Translate filter trees and sort clauses into SQLAlchemy expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from sqlalchemy import and_, not_, or_

from offerwatch.domain.filter import (
    FilterField,
    Operator,
    SortDirection,
    SortField,
    accept,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.sql.base import ReadOnlyColumnCollection

    from offerwatch.domain.filter import Comparison, FilterNode, In, SortClause

SORT_COLUMNS: Final[dict[SortField, str]] = {
    **{SortField(field.value): field.attribute for field in FilterField},
    SortField.CREATED_AT: "created_at",
}

LIKE_ESCAPE: Final[str] = "\\"


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class SqlAlchemyFilterTranslator:
    """``FilterVisitor`` producing a boolean SQL expression over ``columns``.

    ``columns`` is any column collection exposing the listing attribute names,
    e.g. ``offer_version_table.c`` or a subquery's ``.c``.
    """

    def __init__(self, columns: ReadOnlyColumnCollection[str, ColumnElement[object]]) -> None:
        self._columns = columns

    def translate(self, node: FilterNode) -> ColumnElement[bool]:
        return accept(node, self)

    def visit_comparison(self, node: Comparison) -> ColumnElement[bool]:
        column = self._columns[node.field.attribute]
        value = node.value
        match node.operator:
            case Operator.EQ:
                return column == value
            case Operator.NE:
                return column != value
            case Operator.GT:
                return column > value
            case Operator.GE:
                return column >= value
            case Operator.LT:
                return column < value
            case Operator.LE:
                return column <= value
            case Operator.CONTAINS:
                return column.ilike(f"%{escape_like(str(value))}%", escape=LIKE_ESCAPE)
            case Operator.STARTSWITH:
                return column.ilike(f"{escape_like(str(value))}%", escape=LIKE_ESCAPE)
            case Operator.ENDSWITH:
                return column.ilike(f"%{escape_like(str(value))}", escape=LIKE_ESCAPE)

    def visit_in(self, node: In) -> ColumnElement[bool]:
        return self._columns[node.field.attribute].in_(node.values)

    def visit_and(
        self, left: ColumnElement[bool], right: ColumnElement[bool]
    ) -> ColumnElement[bool]:
        return and_(left, right)

    def visit_or(
        self, left: ColumnElement[bool], right: ColumnElement[bool]
    ) -> ColumnElement[bool]:
        return or_(left, right)

    def visit_not(self, operand: ColumnElement[bool]) -> ColumnElement[bool]:
        return not_(operand)


def order_by_clauses(
    columns: ReadOnlyColumnCollection[str, ColumnElement[object]],
    sort: Sequence[SortClause],
) -> list[ColumnElement[object]]:
    clauses: list[ColumnElement[object]] = []
    for clause in sort:
        column = columns[SORT_COLUMNS[clause.field]]
        clauses.append(column.desc() if clause.direction is SortDirection.DESC else column.asc())
    return clauses

"""Parser for ``field [asc|desc], ...`` sort expressions."""

from __future__ import annotations

from dataclasses import dataclass

from .fields import SortDirection, SortField

_VALID_FIELDS = ", ".join(field.value for field in SortField)


@dataclass(frozen=True, slots=True)
class SortClause:
    field: SortField
    direction: SortDirection = SortDirection.ASC


class SortParseError(ValueError):
    """Base class for invalid sort expressions."""


class EmptySortError(SortParseError):
    def __init__(self) -> None:
        super().__init__("Sort expression must contain at least one field")


class UnknownSortFieldError(SortParseError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Unknown sort field '{field}'. Valid fields: {_VALID_FIELDS}")
        self.field = field


class InvalidSortDirectionError(SortParseError):
    def __init__(self, direction: str) -> None:
        super().__init__(f"Invalid sort direction '{direction}'. Use 'asc' or 'desc'")
        self.direction = direction


def parse_sort(text: str) -> list[SortClause]:
    """Parse a sort expression into clauses in primary-to-secondary order.

    Blank segments (``"uf,,city"``) are skipped; repeated fields are kept as given.
    """

    clauses: list[SortClause] = []
    for segment in text.split(","):
        parts = segment.split()
        if not parts:
            continue
        if len(parts) > 2:
            raise SortParseError(f"Unexpected '{parts[2]}' in sort clause '{segment.strip()}'")

        name = parts[0]
        direction = parts[1] if len(parts) == 2 else SortDirection.ASC.value
        try:
            field = SortField(name)
        except ValueError as exc:
            raise UnknownSortFieldError(name) from exc
        try:
            clauses.append(SortClause(field, SortDirection(direction)))
        except ValueError as exc:
            raise InvalidSortDirectionError(direction) from exc

    if not clauses:
        raise EmptySortError
    return clauses

"""Static metadata for the filterable and sortable listing fields."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class FieldKind(StrEnum):
    TEXT = "text"
    NUMERIC = "numeric"


class FilterField(StrEnum):
    UF = "uf"
    CITY = "city"
    NEIGHBORHOOD = "neighborhood"
    ADDRESS = "address"
    DESCRIPTION = "description"
    PROPERTY_TYPE = "propertyType"
    SELLING_TYPE = "sellingType"
    ASKING_PRICE = "askingPrice"
    EVALUATION_PRICE = "evaluationPrice"
    DISCOUNT_PERCENT = "discountPercent"

    @property
    def kind(self) -> FieldKind:
        return FIELD_KINDS[self]

    @property
    def attribute(self) -> str:
        """Name of the matching ``Listing`` attribute."""

        return LISTING_ATTRIBUTES[self]


FIELD_KINDS: Final[dict[FilterField, FieldKind]] = {
    FilterField.UF: FieldKind.TEXT,
    FilterField.CITY: FieldKind.TEXT,
    FilterField.NEIGHBORHOOD: FieldKind.TEXT,
    FilterField.ADDRESS: FieldKind.TEXT,
    FilterField.DESCRIPTION: FieldKind.TEXT,
    FilterField.PROPERTY_TYPE: FieldKind.TEXT,
    FilterField.SELLING_TYPE: FieldKind.TEXT,
    FilterField.ASKING_PRICE: FieldKind.NUMERIC,
    FilterField.EVALUATION_PRICE: FieldKind.NUMERIC,
    FilterField.DISCOUNT_PERCENT: FieldKind.NUMERIC,
}

LISTING_ATTRIBUTES: Final[dict[FilterField, str]] = {
    FilterField.UF: "uf",
    FilterField.CITY: "city",
    FilterField.NEIGHBORHOOD: "neighborhood",
    FilterField.ADDRESS: "address",
    FilterField.DESCRIPTION: "description",
    FilterField.PROPERTY_TYPE: "property_type",
    FilterField.SELLING_TYPE: "selling_type",
    FilterField.ASKING_PRICE: "asking_price",
    FilterField.EVALUATION_PRICE: "evaluation_price",
    FilterField.DISCOUNT_PERCENT: "discount_percent",
}

TEXT_FIELDS: Final[frozenset[FilterField]] = frozenset(
    field for field, kind in FIELD_KINDS.items() if kind is FieldKind.TEXT
)
NUMERIC_FIELDS: Final[frozenset[FilterField]] = frozenset(
    field for field, kind in FIELD_KINDS.items() if kind is FieldKind.NUMERIC
)


class Operator(StrEnum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"

    @property
    def text_only(self) -> bool:
        return self in TEXT_ONLY_OPERATORS


TEXT_ONLY_OPERATORS: Final[frozenset[Operator]] = frozenset(
    {Operator.CONTAINS, Operator.STARTSWITH, Operator.ENDSWITH}
)


class SortField(StrEnum):
    UF = "uf"
    CITY = "city"
    NEIGHBORHOOD = "neighborhood"
    ADDRESS = "address"
    DESCRIPTION = "description"
    PROPERTY_TYPE = "propertyType"
    SELLING_TYPE = "sellingType"
    ASKING_PRICE = "askingPrice"
    EVALUATION_PRICE = "evaluationPrice"
    DISCOUNT_PERCENT = "discountPercent"
    CREATED_AT = "createdAt"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"

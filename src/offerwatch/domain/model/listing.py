"""Listing snapshots and the append-only version history built from them."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from collections.abc import Mapping

NUMERIC_ATTRIBUTES = ("asking_price", "evaluation_price", "discount_percent")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Coerce a numeric attribute to ``Decimal`` without binary float noise."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric listing attribute")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class Operation(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True, kw_only=True)
class Listing:
    """One externally-sourced auction offer as seen in a single snapshot.

    Equality compares every attribute; numeric attributes are ``Decimal`` so
    ``100000`` and ``100000.00`` compare equal.
    """

    source_id: str
    uf: str
    city: str
    neighborhood: str
    address: str
    description: str
    property_type: str
    selling_type: str
    asking_price: Decimal
    evaluation_price: Decimal
    discount_percent: Decimal
    offer_url: str = ""

    def __post_init__(self) -> None:
        if not self.source_id:
            raise ValueError("Listing requires a non-empty source_id")
        for name in NUMERIC_ATTRIBUTES:
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    def attributes(self) -> dict[str, object]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @classmethod
    def from_attributes(cls, values: Mapping[str, object]) -> Listing:
        names = {item.name for item in fields(cls)}
        return cls(**{name: values[name] for name in names if name in values})


@dataclass(frozen=True, slots=True, kw_only=True)
class OfferVersion:
    """A row of the version log: the listing as it was at ``version``."""

    listing: Listing
    version: int
    operation: Operation
    batch_id: UUID | None = None
    created_at: datetime | None = None

    @property
    def source_id(self) -> str:
        return self.listing.source_id

    @property
    def is_active(self) -> bool:
        return self.operation is not Operation.DELETE


@dataclass(kw_only=True, eq=False)
class IngestionBatch:
    """Provenance of one ingested snapshot file; every version row points at one."""

    file_name: str
    content_hash: str
    size_bytes: int
    download_url: str | None = None
    record_count: int | None = None
    received_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True, slots=True)
class Page[T]:
    items: tuple[T, ...]
    page: int
    page_size: int
    total: int

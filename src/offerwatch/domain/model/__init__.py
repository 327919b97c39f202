"""Domain model for listings and their version history."""

from __future__ import annotations

from .listing import (
    NUMERIC_ATTRIBUTES,
    IngestionBatch,
    Listing,
    OfferVersion,
    Operation,
    Page,
    to_decimal,
)

__all__ = [
    "NUMERIC_ATTRIBUTES",
    "IngestionBatch",
    "Listing",
    "OfferVersion",
    "Operation",
    "Page",
    "to_decimal",
]

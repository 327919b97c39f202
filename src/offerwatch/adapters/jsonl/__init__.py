"""JSONL snapshot adapter."""

from __future__ import annotations

from .parser import PayloadValidationError, parse_listings_jsonl
from .schema import ListingPayload

__all__ = ["ListingPayload", "PayloadValidationError", "parse_listings_jsonl"]

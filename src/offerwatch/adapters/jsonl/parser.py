"""Decode JSONL listing snapshots into domain listings."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import ListingPayload

if TYPE_CHECKING:
    from offerwatch.domain.model import Listing

log = logging.getLogger(__name__)


class PayloadValidationError(ValueError):
    """Raised when a snapshot line is not a valid listing."""

    def __init__(self, line_number: int, detail: str) -> None:
        super().__init__(f"Invalid listing on line {line_number}: {detail}")
        self.line_number = line_number
        self.detail = detail


def parse_listings_jsonl(content: bytes) -> list[Listing]:
    """Parse one JSON object per line; blank lines are ignored.

    Floats are decoded straight to ``Decimal`` so prices keep their written
    digits.
    """

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        line_number = content.count(b"\n", 0, exc.start) + 1
        raise PayloadValidationError(
            line_number, f"invalid UTF-8 at byte offset {exc.start}"
        ) from exc

    listings: list[Listing] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            payload = ListingPayload.model_validate(json.loads(line, parse_float=Decimal))
        except json.JSONDecodeError as exc:
            raise PayloadValidationError(line_number, exc.msg) from exc
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in exc.errors()
            )
            raise PayloadValidationError(line_number, details) from exc
        listings.append(payload.to_listing())
    log.debug("Parsed %d listings from %d bytes", len(listings), len(content))
    return listings

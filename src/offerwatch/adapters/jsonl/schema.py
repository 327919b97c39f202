"""Pydantic model of one listing line in a JSONL snapshot."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from offerwatch.domain.model import Listing


class ListingPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    source_id: str = Field(alias="id", min_length=1)
    uf: str = Field(min_length=1)
    city: str
    neighborhood: str
    address: str
    description: str
    property_type: str = Field(alias="propertyType", default="")
    selling_type: str = Field(alias="sellingType")
    asking_price: Decimal = Field(alias="askingPrice")
    evaluation_price: Decimal = Field(alias="evaluationPrice")
    discount_percent: Decimal = Field(alias="discountPercent")
    offer_url: str = Field(alias="offerUrl", default="")

    @field_validator("source_id", "city", "neighborhood", "address", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("uf", mode="before")
    @classmethod
    def _normalize_uf(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    def to_listing(self) -> Listing:
        return Listing.from_attributes(self.model_dump())

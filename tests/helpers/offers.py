"""Reusable fakes and builders for listing reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from offerwatch.domain.model import IngestionBatch, Listing, OfferVersion, Operation, Page
from offerwatch.domain.ports.unit_of_work import ListingRepositories
from offerwatch.domain.reconciliation import ExistingOffer

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from types import TracebackType
    from uuid import UUID

    from offerwatch.domain.filter import FilterNode, SortClause
    from offerwatch.domain.reconciliation import VersionEntry


def make_listing(
    source_id: str = "1000",
    *,
    uf: str = "SP",
    city: str = "SAO PAULO",
    asking_price: Decimal | int | str = "150000.00",
    **overrides: object,
) -> Listing:
    """Create a listing with plausible defaults for every attribute."""

    values: dict[str, object] = {
        "source_id": source_id,
        "uf": uf,
        "city": city,
        "neighborhood": "CENTRO",
        "address": f"RUA EXEMPLO, {source_id}",
        "description": "Apartamento, 2 quarto(s), 1 vaga(s) na garagem",
        "property_type": "Apartamento",
        "selling_type": "Venda Online",
        "asking_price": asking_price,
        "evaluation_price": "200000.00",
        "discount_percent": "25.00",
        "offer_url": f"https://example.test/offers/{source_id}",
    }
    values.update(overrides)
    return Listing.from_attributes(values)


class FakeOfferRepository:
    """In-memory version log implementing the offer repository port."""

    def __init__(self) -> None:
        self.versions: dict[str, list[OfferVersion]] = {}
        self.touched: dict[str, UUID] = {}
        self.calls: list[str] = []

    def seed(self, *listings: Listing, operation: Operation = Operation.INSERT) -> None:
        for listing in listings:
            history = self.versions.setdefault(listing.source_id, [])
            history.append(
                OfferVersion(listing=listing, version=len(history) + 1, operation=operation)
            )

    def latest(self, source_id: str) -> OfferVersion:
        return self.versions[source_id][-1]

    def find_existing_offers(self, offers: Sequence[Listing]) -> dict[str, ExistingOffer]:
        self.calls.append("find_existing_offers")
        found: dict[str, ExistingOffer] = {}
        for offer in offers:
            history = self.versions.get(offer.source_id)
            if not history:
                continue
            latest = history[-1]
            found[offer.source_id] = ExistingOffer(
                latest_version=latest.version,
                is_active=latest.is_active,
                changed=not latest.is_active or latest.listing != offer,
            )
        return found

    def insert_versions(self, entries: Sequence[VersionEntry], batch_id: UUID) -> None:
        self.calls.append("insert_versions")
        for entry in entries:
            self.versions.setdefault(entry.listing.source_id, []).append(
                OfferVersion(
                    listing=entry.listing,
                    version=entry.version,
                    operation=entry.operation,
                    batch_id=batch_id,
                )
            )
            self.touched[entry.listing.source_id] = batch_id

    def touch_offers(self, source_ids: Collection[str], batch_id: UUID) -> None:
        self.calls.append("touch_offers")
        for source_id in source_ids:
            self.touched[source_id] = batch_id

    def insert_delete_versions(
        self,
        partition_key: str,
        active_ids: Collection[str],
        batch_id: UUID,
    ) -> int:
        self.calls.append("insert_delete_versions")
        removed = 0
        for source_id, history in self.versions.items():
            latest = history[-1]
            if latest.listing.uf != partition_key or not latest.is_active:
                continue
            if source_id in active_ids:
                continue
            history.append(
                replace(
                    latest,
                    version=latest.version + 1,
                    operation=Operation.DELETE,
                    batch_id=batch_id,
                )
            )
            removed += 1
        return removed

    def list_current(
        self,
        *,
        filter_node: FilterNode | None = None,
        sort: Sequence[SortClause] = (),
        page: int = 1,
        page_size: int = 50,
        include_removed: bool = False,
    ) -> Page[OfferVersion]:
        _ = (filter_node, sort)
        current = [
            history[-1]
            for history in self.versions.values()
            if include_removed or history[-1].is_active
        ]
        start = (page - 1) * page_size
        return Page(
            items=tuple(current[start : start + page_size]),
            page=page,
            page_size=page_size,
            total=len(current),
        )

    def history(self, source_id: str) -> list[OfferVersion]:
        return list(self.versions.get(source_id, []))


class FakeIngestionBatchRepository:
    def __init__(self) -> None:
        self.batches: list[IngestionBatch] = []

    def add(self, batch: IngestionBatch) -> None:
        self.batches.append(batch)

    def find_by_content_hash(self, content_hash: str) -> IngestionBatch | None:
        matches = [batch for batch in self.batches if batch.content_hash == content_hash]
        completed = [batch for batch in matches if batch.completed_at is not None]
        if completed:
            return completed[-1]
        return matches[-1] if matches else None

    def mark_completed(self, batch_id: UUID, completed_at: datetime) -> None:
        for batch in self.batches:
            if batch.id == batch_id:
                batch.completed_at = completed_at


@dataclass
class FakeListingStore:
    """State shared by every ``FakeUnitOfWork`` created from one store."""

    offers: FakeOfferRepository = field(default_factory=FakeOfferRepository)
    batches: FakeIngestionBatchRepository = field(default_factory=FakeIngestionBatchRepository)
    commits: int = 0
    rollbacks: int = 0

    def unit_of_work(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)


class FakeUnitOfWork:
    def __init__(self, store: FakeListingStore) -> None:
        self.store = store
        self._repositories = ListingRepositories(
            offers=store.offers,
            queries=store.offers,
            batches=store.batches,
        )

    @property
    def repositories(self) -> ListingRepositories:
        return self._repositories

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.store.commits += 1

    def rollback(self) -> None:
        self.store.rollbacks += 1

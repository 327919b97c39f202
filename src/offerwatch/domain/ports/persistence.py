"""Ports for persisting and querying listing versions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime
    from uuid import UUID

    from offerwatch.domain.filter import FilterNode, SortClause
    from offerwatch.domain.model import IngestionBatch, Listing, OfferVersion, Page
    from offerwatch.domain.reconciliation.contracts import ExistingOffer, VersionEntry


class VersionConflictError(RuntimeError):
    """Raised when an appended ``(source_id, version)`` already exists.

    Signals a concurrent writer on the same partition; callers decide whether to
    re-run reconciliation.
    """

    def __init__(self, source_ids: Collection[str]) -> None:
        listed = ", ".join(sorted(source_ids)) or "<unknown>"
        super().__init__(f"Version conflict while appending versions for: {listed}")
        self.source_ids = frozenset(source_ids)


@runtime_checkable
class OfferRepository(Protocol):
    """Write-side contract used by the reconciliation engine.

    Every method must accept arbitrarily large collections; chunking to respect
    backing-store limits is the implementation's concern.
    """

    def find_existing_offers(self, offers: Sequence[Listing]) -> dict[str, ExistingOffer]: ...

    def insert_versions(self, entries: Sequence[VersionEntry], batch_id: UUID) -> None: ...

    def touch_offers(self, source_ids: Collection[str], batch_id: UUID) -> None: ...

    def insert_delete_versions(
        self,
        partition_key: str,
        active_ids: Collection[str],
        batch_id: UUID,
    ) -> int: ...


@runtime_checkable
class OfferQueryRepository(Protocol):
    """Read-side contract for current listings and their history."""

    def list_current(
        self,
        *,
        filter_node: FilterNode | None = None,
        sort: Sequence[SortClause] = (),
        page: int = 1,
        page_size: int = 50,
        include_removed: bool = False,
    ) -> Page[OfferVersion]: ...

    def history(self, source_id: str) -> list[OfferVersion]: ...


@runtime_checkable
class IngestionBatchRepository(Protocol):
    """Persistence contract for ingestion batch provenance."""

    def add(self, batch: IngestionBatch) -> None: ...

    def find_by_content_hash(self, content_hash: str) -> IngestionBatch | None: ...

    def mark_completed(self, batch_id: UUID, completed_at: datetime) -> None: ...

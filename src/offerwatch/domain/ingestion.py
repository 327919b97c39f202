"""Application service turning one listing snapshot into reconciled partitions."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING

from offerwatch.domain.model import IngestionBatch
from offerwatch.domain.reconciliation import ReconcileResult, reconcile_offers

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from offerwatch.domain.model import Listing
    from offerwatch.domain.ports.unit_of_work import ListingUnitOfWork
    from offerwatch.domain.reconciliation import ReconcileStep

type ListingParser = Callable[[bytes], Sequence[Listing]]
type PartitionProgressObserver = Callable[[str, ReconcileStep], None]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SnapshotMetadata:
    """Where a snapshot file came from."""

    file_name: str
    download_url: str | None = None


@dataclass(slots=True, kw_only=True)
class ProcessListingsResult:
    """Outcome of processing one snapshot file."""

    batch_id: UUID
    file_size: int
    total_offers: int
    results: dict[str, ReconcileResult] = field(default_factory=dict)
    duplicate: bool = False

    @property
    def partitions(self) -> int:
        return len(self.results)

    def totals(self) -> ReconcileResult:
        return ReconcileResult(
            created=sum(result.created for result in self.results.values()),
            updated=sum(result.updated for result in self.results.values()),
            skipped=sum(result.skipped for result in self.results.values()),
            removed=sum(result.removed for result in self.results.values()),
        )


def process_listings_file(
    content: bytes,
    metadata: SnapshotMetadata,
    *,
    parse_listings: ListingParser,
    unit_of_work_factory: Callable[[], ListingUnitOfWork],
    only_partition: str | None = None,
    on_progress: PartitionProgressObserver | None = None,
) -> ProcessListingsResult:
    """Record, parse and reconcile a snapshot, one partition (region code) at a time.

    A file whose content hash matches an already completed batch is not
    processed again. Each partition is committed on its own, so a failure
    leaves earlier partitions reconciled and the batch incomplete; re-running
    the same file then starts a fresh batch. A run restricted to
    ``only_partition`` never completes the batch, since the other partitions
    of the file are still unreconciled.
    """

    content_hash = hashlib.sha256(content).hexdigest()

    with unit_of_work_factory() as uow:
        previous = uow.repositories.batches.find_by_content_hash(content_hash)
        if previous is not None and previous.completed_at is not None:
            log.info(
                "Skipping %s: identical content already ingested in batch %s",
                metadata.file_name,
                previous.id,
            )
            return ProcessListingsResult(
                batch_id=previous.id,
                file_size=len(content),
                total_offers=previous.record_count or 0,
                duplicate=True,
            )

        offers = list(parse_listings(content))
        batch = IngestionBatch(
            file_name=metadata.file_name,
            download_url=metadata.download_url,
            content_hash=content_hash,
            size_bytes=len(content),
            record_count=len(offers),
        )
        batch_id = batch.id
        uow.repositories.batches.add(batch)
        uow.commit()

    partitions = _group_by_partition(offers)
    if only_partition is not None:
        partitions = {key: group for key, group in partitions.items() if key == only_partition}

    log.info(
        "Processing batch %s (%s): %d listings across %d partitions",
        batch_id,
        metadata.file_name,
        len(offers),
        len(partitions),
    )

    result = ProcessListingsResult(
        batch_id=batch_id,
        file_size=len(content),
        total_offers=len(offers),
    )
    for partition_key, group in partitions.items():
        observer = partial(on_progress, partition_key) if on_progress is not None else None
        with unit_of_work_factory() as uow:
            result.results[partition_key] = reconcile_offers(
                partition_key,
                group,
                uow.repositories.offers,
                batch_id,
                observer,
            )
            uow.commit()

    if only_partition is None:
        with unit_of_work_factory() as uow:
            uow.repositories.batches.mark_completed(batch_id, datetime.now(UTC))
            uow.commit()
    else:
        log.info(
            "Batch %s left incomplete: only partition %s was reconciled",
            batch_id,
            only_partition,
        )

    totals = result.totals()
    log.info(
        "Finished batch %s: created=%d, updated=%d, skipped=%d, removed=%d",
        batch_id,
        totals.created,
        totals.updated,
        totals.skipped,
        totals.removed,
    )
    return result


def _group_by_partition(offers: Sequence[Listing]) -> dict[str, list[Listing]]:
    partitions: dict[str, list[Listing]] = {}
    for offer in offers:
        partitions.setdefault(offer.uf, []).append(offer)
    return partitions

"""Reconciliation of an incoming listing batch against the version log.

For one partition key (region code) the engine classifies every incoming
listing as insert, update or touch, appends the resulting versions through an
``OfferRepository`` and finally appends delete versions for active listings
of the partition that are missing from the batch. The phases run strictly in
sequence: fetch, insert, update, touch, delete.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from offerwatch.domain.model import Operation

from .contracts import (
    ClassifiedStep,
    ClassifyingStep,
    InsertingStep,
    ReconcileResult,
    RemovingStep,
    TouchingStep,
    UpdatingStep,
    VersionEntry,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from offerwatch.domain.model import Listing
    from offerwatch.domain.ports.persistence import OfferRepository

    from .contracts import ProgressObserver, ReconcileStep

log = logging.getLogger(__name__)


class DuplicateSourceIdError(ValueError):
    """Raised when one batch carries the same SourceId more than once."""

    def __init__(self, partition_key: str, source_ids: Sequence[str]) -> None:
        shown = ", ".join(source_ids[:10])
        more = f" (+{len(source_ids) - 10} more)" if len(source_ids) > 10 else ""
        super().__init__(
            f"Batch for partition '{partition_key}' repeats source ids: {shown}{more}"
        )
        self.partition_key = partition_key
        self.source_ids = tuple(source_ids)


def reconcile_offers(
    partition_key: str,
    offers: Sequence[Listing],
    repository: OfferRepository,
    batch_id: UUID,
    on_progress: ProgressObserver | None = None,
) -> ReconcileResult:
    """Bring the version log of ``partition_key`` in line with ``offers``.

    Running twice with the same batch is a no-op the second time: every
    listing is classified as a touch and nothing is removed.
    """

    def emit(step: ReconcileStep) -> None:
        if on_progress is not None:
            on_progress(step)

    _reject_duplicates(partition_key, offers)
    active_ids = {offer.source_id for offer in offers}

    emit(ClassifyingStep(total=len(offers)))
    existing = repository.find_existing_offers(offers) if offers else {}

    inserts: list[VersionEntry] = []
    updates: list[VersionEntry] = []
    touches: list[str] = []
    for offer in offers:
        info = existing.get(offer.source_id)
        if info is None:
            inserts.append(VersionEntry(listing=offer, version=1, operation=Operation.INSERT))
        elif info.changed:
            updates.append(
                VersionEntry(
                    listing=offer,
                    version=info.latest_version + 1,
                    operation=Operation.UPDATE,
                )
            )
        else:
            touches.append(offer.source_id)

    emit(ClassifiedStep(created=len(inserts), updated=len(updates), skipped=len(touches)))
    log.debug(
        "Classified partition %s: insert=%d, update=%d, touch=%d",
        partition_key,
        len(inserts),
        len(updates),
        len(touches),
    )

    if inserts:
        emit(InsertingStep(count=len(inserts)))
        repository.insert_versions(inserts, batch_id)
    if updates:
        emit(UpdatingStep(count=len(updates)))
        repository.insert_versions(updates, batch_id)
    if touches:
        emit(TouchingStep(count=len(touches)))
        repository.touch_offers(touches, batch_id)

    emit(RemovingStep())
    if active_ids:
        removed = repository.insert_delete_versions(partition_key, active_ids, batch_id)
    else:
        log.warning(
            "Empty batch for partition %s; skipping removal of missing listings",
            partition_key,
        )
        removed = 0

    result = ReconcileResult(
        created=len(inserts),
        updated=len(updates),
        skipped=len(touches),
        removed=removed,
    )
    log.info(
        "Reconciled partition %s: created=%d, updated=%d, skipped=%d, removed=%d",
        partition_key,
        result.created,
        result.updated,
        result.skipped,
        result.removed,
    )
    return result


def _reject_duplicates(partition_key: str, offers: Sequence[Listing]) -> None:
    counts = Counter(offer.source_id for offer in offers)
    repeated = sorted(source_id for source_id, count in counts.items() if count > 1)
    if repeated:
        raise DuplicateSourceIdError(partition_key, repeated)

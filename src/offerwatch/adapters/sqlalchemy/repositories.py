"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, func, select, update
from sqlalchemy.exc import IntegrityError

from offerwatch.adapters.sqlalchemy.filter_translator import (
    SqlAlchemyFilterTranslator,
    order_by_clauses,
)
from offerwatch.adapters.sqlalchemy.mappings import (
    LISTING_COLUMNS,
    NUMERIC_SCALE,
    ingestion_batch_table,
    offer_sighting_table,
    offer_version_table,
)
from offerwatch.config.storage import DEFAULT_MAX_BIND_PARAMETERS
from offerwatch.domain.model import (
    NUMERIC_ATTRIBUTES,
    IngestionBatch,
    Listing,
    OfferVersion,
    Operation,
    Page,
)
from offerwatch.domain.ports.persistence import VersionConflictError
from offerwatch.domain.reconciliation import ExistingOffer

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator, Sequence
    from uuid import UUID

    from sqlalchemy import ColumnElement, Row, Select
    from sqlalchemy.orm import Session

    from offerwatch.domain.filter import FilterNode, SortClause
    from offerwatch.domain.reconciliation import VersionEntry

log = logging.getLogger(__name__)

_QUANTUM = Decimal(1).scaleb(-NUMERIC_SCALE)
_VERSION_ROW_WIDTH = len(offer_version_table.c)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _chunks[T](items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    step = max(size, 1)
    for start in range(0, len(items), step):
        yield items[start : start + step]


def _stored_form(listing: Listing) -> Listing:
    """Return ``listing`` with numbers rounded the way the numeric columns store them."""

    rounded = {
        name: cast(Decimal, getattr(listing, name)).quantize(_QUANTUM, rounding=ROUND_HALF_UP)
        for name in NUMERIC_ATTRIBUTES
    }
    return replace(listing, **rounded)


def _row_to_listing(row: Row[Any]) -> Listing:
    mapping = row._mapping  # noqa: SLF001
    return Listing.from_attributes({name: mapping[name] for name in LISTING_COLUMNS})


def _row_to_version(row: Row[Any]) -> OfferVersion:
    return OfferVersion(
        listing=_row_to_listing(row),
        version=row.version,
        operation=Operation(row.operation),
        batch_id=row.batch_id,
        created_at=row.created_at,
    )


def _latest_versions(*criteria: ColumnElement[bool]) -> Select[Any]:
    """Select the maximum-version row of every SourceId matching ``criteria``.

    The criteria restrict the grouped subquery, so a lookup aggregates only the
    history of the SourceIds it asks about.
    """

    latest = (
        select(
            offer_version_table.c.source_id,
            func.max(offer_version_table.c.version).label("version"),
        )
        .where(*criteria)
        .group_by(offer_version_table.c.source_id)
        .subquery("latest")
    )
    return select(offer_version_table).join(
        latest,
        and_(
            offer_version_table.c.source_id == latest.c.source_id,
            offer_version_table.c.version == latest.c.version,
        ),
    )


def _is_version_collision(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return (
        "uq_offer_version_source_version" in message
        or "offer_version.source_id, offer_version.version" in message
    )


class SqlAlchemyOfferRepository:
    """Append-only writes to the version log, chunked below the bind-parameter limit."""

    def __init__(
        self,
        session: Session,
        *,
        max_bind_parameters: int = DEFAULT_MAX_BIND_PARAMETERS,
    ) -> None:
        self.session = session
        self._max_bind_parameters = max_bind_parameters

    def find_existing_offers(self, offers: Sequence[Listing]) -> dict[str, ExistingOffer]:
        incoming = {offer.source_id: offer for offer in offers}
        found: dict[str, ExistingOffer] = {}
        for chunk in _chunks(list(incoming), self._max_bind_parameters):
            stmt = _latest_versions(offer_version_table.c.source_id.in_(chunk))
            for row in self.session.execute(stmt):
                is_active = Operation(row.operation) is not Operation.DELETE
                stored = _row_to_listing(row)
                changed = not is_active or stored != _stored_form(incoming[row.source_id])
                found[row.source_id] = ExistingOffer(
                    latest_version=row.version,
                    is_active=is_active,
                    changed=changed,
                )
        log.debug("Found %d of %d incoming offers in the version log", len(found), len(incoming))
        return found

    def insert_versions(self, entries: Sequence[VersionEntry], batch_id: UUID) -> None:
        if not entries:
            return
        now = _utcnow()
        rows = [
            self._version_row(entry.listing, entry.version, entry.operation, batch_id, now)
            for entry in entries
        ]
        self._append(rows)
        self._mark_seen([entry.listing.source_id for entry in entries], batch_id, now)

    def touch_offers(self, source_ids: Collection[str], batch_id: UUID) -> None:
        if not source_ids:
            return
        self._mark_seen(list(source_ids), batch_id, _utcnow())

    def insert_delete_versions(
        self,
        partition_key: str,
        active_ids: Collection[str],
        batch_id: UUID,
    ) -> int:
        active = set(active_ids)
        in_partition = offer_version_table.alias("in_partition")
        stmt = (
            _latest_versions(
                offer_version_table.c.source_id.in_(
                    select(in_partition.c.source_id).where(in_partition.c.uf == partition_key)
                )
            )
            .where(offer_version_table.c.uf == partition_key)
            .where(offer_version_table.c.operation != Operation.DELETE)
        )
        now = _utcnow()
        rows = [
            self._version_row(
                _row_to_listing(row), row.version + 1, Operation.DELETE, batch_id, now
            )
            for row in self.session.execute(stmt)
            if row.source_id not in active
        ]
        if rows:
            self._append(rows)
        return len(rows)

    def _version_row(
        self,
        listing: Listing,
        version: int,
        operation: Operation,
        batch_id: UUID,
        created_at: datetime,
    ) -> dict[str, object]:
        row: dict[str, object] = _stored_form(listing).attributes()
        row.update(
            version=version,
            operation=operation,
            batch_id=batch_id,
            created_at=created_at,
        )
        return row

    def _append(self, rows: list[dict[str, object]]) -> None:
        per_chunk = self._max_bind_parameters // _VERSION_ROW_WIDTH
        for chunk in _chunks(rows, per_chunk):
            try:
                self.session.execute(offer_version_table.insert(), list(chunk))
            except IntegrityError as exc:
                if not _is_version_collision(exc):
                    raise
                raise VersionConflictError(
                    [cast(str, row["source_id"]) for row in chunk]
                ) from exc
        log.debug("Appended %d version rows", len(rows))

    def _mark_seen(self, source_ids: list[str], batch_id: UUID, seen_at: datetime) -> None:
        table = offer_sighting_table
        # the UPDATE binds the chunk plus two values
        for chunk in _chunks(source_ids, self._max_bind_parameters - 2):
            known = set(
                self.session.execute(
                    select(table.c.source_id).where(table.c.source_id.in_(chunk))
                ).scalars()
            )
            if known:
                self.session.execute(
                    update(table)
                    .where(table.c.source_id.in_(known))
                    .values(last_seen_at=seen_at, batch_id=batch_id)
                )
            fresh = [
                {"source_id": source_id, "last_seen_at": seen_at, "batch_id": batch_id}
                for source_id in chunk
                if source_id not in known
            ]
            if fresh:
                self.session.execute(table.insert(), fresh)

    def last_seen(self, source_id: str) -> datetime | None:
        stmt = select(offer_sighting_table.c.last_seen_at).where(
            offer_sighting_table.c.source_id == source_id
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyOfferQueryRepository:
    """Read current listings and their history from the version log."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_current(
        self,
        *,
        filter_node: FilterNode | None = None,
        sort: Sequence[SortClause] = (),
        page: int = 1,
        page_size: int = 50,
        include_removed: bool = False,
    ) -> Page[OfferVersion]:
        if page < 1:
            raise ValueError("Page must be at least 1")
        if page_size < 1:
            raise ValueError("Page size must be at least 1")

        current = _latest_versions().subquery("current_offers")
        stmt = select(current)
        if not include_removed:
            stmt = stmt.where(current.c.operation != Operation.DELETE)
        if filter_node is not None:
            stmt = stmt.where(SqlAlchemyFilterTranslator(current.c).translate(filter_node))

        total = self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()
        ordered = stmt.order_by(*order_by_clauses(current.c, sort), current.c.source_id.asc())
        rows = self.session.execute(ordered.limit(page_size).offset((page - 1) * page_size))
        return Page(
            items=tuple(_row_to_version(row) for row in rows),
            page=page,
            page_size=page_size,
            total=total,
        )

    def history(self, source_id: str) -> list[OfferVersion]:
        stmt = (
            select(offer_version_table)
            .where(offer_version_table.c.source_id == source_id)
            .order_by(offer_version_table.c.version.asc())
        )
        return [_row_to_version(row) for row in self.session.execute(stmt)]


class SqlAlchemyIngestionBatchRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, batch: IngestionBatch) -> None:
        self.session.add(batch)

    def find_by_content_hash(self, content_hash: str) -> IngestionBatch | None:
        stmt = (
            select(IngestionBatch)
            .where(ingestion_batch_table.c.content_hash == content_hash)
            .order_by(
                ingestion_batch_table.c.completed_at.is_(None),
                ingestion_batch_table.c.received_at.desc(),
            )
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def mark_completed(self, batch_id: UUID, completed_at: datetime) -> None:
        self.session.execute(
            update(ingestion_batch_table)
            .where(ingestion_batch_table.c.id == batch_id)
            .values(completed_at=completed_at)
        )


if TYPE_CHECKING:
    from offerwatch.domain.ports.persistence import (
        IngestionBatchRepository,
        OfferQueryRepository,
        OfferRepository,
    )

    _session_stub = cast("Session", object())
    _offer_repo: OfferRepository = SqlAlchemyOfferRepository(_session_stub)
    _query_repo: OfferQueryRepository = SqlAlchemyOfferQueryRepository(_session_stub)
    _batch_repo: IngestionBatchRepository = SqlAlchemyIngestionBatchRepository(_session_stub)

"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from offerwatch.adapters.jsonl import parse_listings_jsonl
from offerwatch.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyListingUnitOfWork,
    is_started,
    startup,
)
from offerwatch.config import QueryConfig, get_query_config
from offerwatch.domain.filter import parse_filter, parse_sort
from offerwatch.domain.ingestion import (
    ProcessListingsResult,
    SnapshotMetadata,
    process_listings_file,
)
from offerwatch.domain.ports.unit_of_work import ListingUnitOfWork

if TYPE_CHECKING:
    from offerwatch.domain.ingestion import ListingParser, PartitionProgressObserver
    from offerwatch.domain.model import OfferVersion, Page

UnitOfWorkFactory = Callable[[], ListingUnitOfWork]

log = getLogger(__name__)


class QueryValidationError(ValueError):
    """Raised for paging arguments outside the configured limits."""


def _ensure_started(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyListingUnitOfWork


def ingest_listings_file(
    path: Path | str,
    *,
    download_url: str | None = None,
    only_partition: str | None = None,
    parse_listings: ListingParser = parse_listings_jsonl,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    on_progress: PartitionProgressObserver | None = None,
) -> ProcessListingsResult:
    """Ingest one listing snapshot file into the version log."""

    effective_uow = _ensure_started(unit_of_work_factory)
    file_path = Path(path)
    content = file_path.read_bytes()
    log.info("Ingesting %s (%d bytes)", file_path, len(content))

    return process_listings_file(
        content,
        SnapshotMetadata(file_name=file_path.name, download_url=download_url),
        parse_listings=parse_listings,
        unit_of_work_factory=effective_uow,
        only_partition=only_partition.strip().upper() if only_partition else None,
        on_progress=on_progress,
    )


def query_offers(
    *,
    filter_text: str | None = None,
    sort_text: str | None = None,
    page: int = 1,
    page_size: int | None = None,
    include_removed: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: QueryConfig | None = None,
) -> Page[OfferVersion]:
    """Return one page of current listings matching ``filter_text``.

    Filter and sort expressions are parsed before any database access, so
    ``FilterParseError`` and ``SortParseError`` surface without side effects.
    """

    settings = config or get_query_config()
    effective_page_size = settings.default_page_size if page_size is None else page_size
    if page < 1:
        raise QueryValidationError("Page must be at least 1")
    if not 1 <= effective_page_size <= settings.max_page_size:
        raise QueryValidationError(
            f"Page size must be between 1 and {settings.max_page_size}"
        )

    filter_node = (
        parse_filter(filter_text, max_length=settings.max_filter_length)
        if filter_text and filter_text.strip()
        else None
    )
    sort = parse_sort(sort_text if sort_text and sort_text.strip() else settings.default_sort)

    effective_uow = _ensure_started(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.queries.list_current(
            filter_node=filter_node,
            sort=sort,
            page=page,
            page_size=effective_page_size,
            include_removed=include_removed,
        )


def offer_history(
    source_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[OfferVersion]:
    """Return every stored version of ``source_id``, oldest first."""

    effective_uow = _ensure_started(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.queries.history(source_id)

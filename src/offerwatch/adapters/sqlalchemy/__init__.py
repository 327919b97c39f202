"""SQLAlchemy adapter package for offerwatch."""

from __future__ import annotations

from .filter_translator import SqlAlchemyFilterTranslator, order_by_clauses
from .mappings import (
    create_all_tables,
    ingestion_batch_table,
    mapper_registry,
    offer_sighting_table,
    offer_version_table,
    start_mappers,
)
from .repositories import (
    SqlAlchemyIngestionBatchRepository,
    SqlAlchemyOfferQueryRepository,
    SqlAlchemyOfferRepository,
)
from .unit_of_work import (
    SqlAlchemyListingUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyFilterTranslator",
    "SqlAlchemyIngestionBatchRepository",
    "SqlAlchemyListingUnitOfWork",
    "SqlAlchemyOfferQueryRepository",
    "SqlAlchemyOfferRepository",
    "StartupError",
    "create_all_tables",
    "ingestion_batch_table",
    "is_started",
    "mapper_registry",
    "offer_sighting_table",
    "offer_version_table",
    "order_by_clauses",
    "shutdown",
    "start_mappers",
    "startup",
]

"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    IngestionBatchRepository,
    OfferQueryRepository,
    OfferRepository,
    VersionConflictError,
)
from .unit_of_work import (
    ListingRepositories,
    ListingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "IngestionBatchRepository",
    "ListingRepositories",
    "ListingUnitOfWork",
    "OfferQueryRepository",
    "OfferRepository",
    "RepositoryCollection",
    "UnitOfWork",
    "VersionConflictError",
]

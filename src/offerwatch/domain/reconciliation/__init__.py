"""Reconciliation of incoming listing batches against the version log.

Flow for one partition key:
1) classify each incoming listing as insert, update or touch
2) append insert versions, then update versions, then advance last-seen markers
3) append delete versions for active listings absent from the batch
"""

from __future__ import annotations

from .contracts import (
    ClassifiedStep,
    ClassifyingStep,
    ExistingOffer,
    InsertingStep,
    ProgressObserver,
    ReconcileResult,
    ReconcileStep,
    ReconcileStepName,
    RemovingStep,
    TouchingStep,
    UpdatingStep,
    VersionEntry,
)
from .engine import DuplicateSourceIdError, reconcile_offers

__all__ = [
    "ClassifiedStep",
    "ClassifyingStep",
    "DuplicateSourceIdError",
    "ExistingOffer",
    "InsertingStep",
    "ProgressObserver",
    "ReconcileResult",
    "ReconcileStep",
    "ReconcileStepName",
    "RemovingStep",
    "TouchingStep",
    "UpdatingStep",
    "VersionEntry",
    "reconcile_offers",
]

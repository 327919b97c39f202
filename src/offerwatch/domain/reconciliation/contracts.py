"""Value types exchanged between the reconciliation engine and its callers.

This module intentionally holds only:
- the repository-facing records (``ExistingOffer``, ``VersionEntry``)
- the run summary (``ReconcileResult``)
- the progress step variants handed to observers
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from offerwatch.domain.model import Listing, Operation


@dataclass(frozen=True, slots=True, kw_only=True)
class ExistingOffer:
    """Latest stored state of one SourceId, relative to an incoming listing.

    ``changed`` is true when the listing is currently inactive or its stored
    snapshot differs from the incoming one.
    """

    latest_version: int
    is_active: bool
    changed: bool


@dataclass(frozen=True, slots=True, kw_only=True)
class VersionEntry:
    """A version row the engine asks the repository to append."""

    listing: Listing
    version: int
    operation: Operation


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconcileResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    removed: int = 0

    def to_event(self) -> dict[str, int]:
        return asdict(self)


class ReconcileStepName(StrEnum):
    CLASSIFYING = "classifying"
    CLASSIFIED = "classified"
    INSERTING = "inserting"
    UPDATING = "updating"
    TOUCHING = "touching"
    REMOVING = "removing"


@dataclass(frozen=True, slots=True, kw_only=True)
class _Step:
    def to_event(self) -> dict[str, object]:
        payload: dict[str, object] = asdict(self)
        payload["step"] = str(payload["step"])
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassifyingStep(_Step):
    total: int
    step: Literal[ReconcileStepName.CLASSIFYING] = ReconcileStepName.CLASSIFYING


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassifiedStep(_Step):
    created: int
    updated: int
    skipped: int
    step: Literal[ReconcileStepName.CLASSIFIED] = ReconcileStepName.CLASSIFIED


@dataclass(frozen=True, slots=True, kw_only=True)
class InsertingStep(_Step):
    count: int
    step: Literal[ReconcileStepName.INSERTING] = ReconcileStepName.INSERTING


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdatingStep(_Step):
    count: int
    step: Literal[ReconcileStepName.UPDATING] = ReconcileStepName.UPDATING


@dataclass(frozen=True, slots=True, kw_only=True)
class TouchingStep(_Step):
    count: int
    step: Literal[ReconcileStepName.TOUCHING] = ReconcileStepName.TOUCHING


@dataclass(frozen=True, slots=True, kw_only=True)
class RemovingStep(_Step):
    step: Literal[ReconcileStepName.REMOVING] = ReconcileStepName.REMOVING


type ReconcileStep = (
    ClassifyingStep | ClassifiedStep | InsertingStep | UpdatingStep | TouchingStep | RemovingStep
)
type ProgressObserver = Callable[[ReconcileStep], None]

from __future__ import annotations

from uuid import uuid4

import pytest

from offerwatch.domain.model import Operation
from offerwatch.domain.reconciliation import (
    ClassifiedStep,
    ClassifyingStep,
    DuplicateSourceIdError,
    InsertingStep,
    ReconcileResult,
    ReconcileStep,
    RemovingStep,
    TouchingStep,
    UpdatingStep,
    reconcile_offers,
)
from tests.helpers.offers import FakeOfferRepository, make_listing


def test_first_run_inserts_every_listing() -> None:
    repo = FakeOfferRepository()
    offers = [make_listing("1"), make_listing("2")]
    batch_id = uuid4()

    result = reconcile_offers("SP", offers, repo, batch_id)

    assert result == ReconcileResult(created=2, updated=0, skipped=0, removed=0)
    assert repo.latest("1").version == 1
    assert repo.latest("1").operation is Operation.INSERT
    assert repo.latest("2").batch_id == batch_id


def test_second_run_with_same_batch_only_touches() -> None:
    repo = FakeOfferRepository()
    offers = [make_listing("1"), make_listing("2"), make_listing("3")]

    first = reconcile_offers("SP", offers, repo, uuid4())
    second_batch = uuid4()
    second = reconcile_offers("SP", offers, repo, second_batch)

    assert first.created == 3
    assert second == ReconcileResult(created=0, updated=0, skipped=3, removed=0)
    assert all(len(history) == 1 for history in repo.versions.values())
    assert set(repo.touched.values()) == {second_batch}


def test_changed_numeric_attribute_appends_next_version() -> None:
    repo = FakeOfferRepository()
    reconcile_offers("SP", [make_listing("1"), make_listing("2")], repo, uuid4())

    changed = make_listing("1", asking_price="140000.00")
    result = reconcile_offers("SP", [changed, make_listing("2")], repo, uuid4())

    assert result == ReconcileResult(created=0, updated=1, skipped=1, removed=0)
    latest = repo.latest("1")
    assert latest.version == 2
    assert latest.operation is Operation.UPDATE
    assert latest.listing == changed


def test_equal_decimal_values_are_not_a_change() -> None:
    repo = FakeOfferRepository()
    repo.seed(make_listing("1", asking_price="150000"))

    result = reconcile_offers("SP", [make_listing("1", asking_price=150000)], repo, uuid4())

    assert result.skipped == 1
    assert result.updated == 0


def test_missing_listing_is_soft_deleted() -> None:
    repo = FakeOfferRepository()
    reconcile_offers("SP", [make_listing("1"), make_listing("2")], repo, uuid4())

    result = reconcile_offers("SP", [make_listing("1")], repo, uuid4())

    assert result.removed == 1
    removed = repo.latest("2")
    assert removed.operation is Operation.DELETE
    assert removed.version == 2
    assert [version.version for version in repo.history("2")] == [1, 2]


def test_removal_is_scoped_to_the_partition() -> None:
    repo = FakeOfferRepository()
    repo.seed(make_listing("rj-1", uf="RJ"))

    result = reconcile_offers("SP", [make_listing("sp-1")], repo, uuid4())

    assert result.removed == 0
    assert repo.latest("rj-1").is_active


def test_removed_listing_reappearing_is_an_update() -> None:
    repo = FakeOfferRepository()
    reconcile_offers("SP", [make_listing("1"), make_listing("2")], repo, uuid4())
    reconcile_offers("SP", [make_listing("1")], repo, uuid4())

    result = reconcile_offers("SP", [make_listing("1"), make_listing("2")], repo, uuid4())

    assert result == ReconcileResult(created=0, updated=1, skipped=1, removed=0)
    latest = repo.latest("2")
    assert latest.version == 3
    assert latest.operation is Operation.UPDATE


def test_already_removed_listing_is_not_removed_again() -> None:
    repo = FakeOfferRepository()
    reconcile_offers("SP", [make_listing("1"), make_listing("2")], repo, uuid4())
    reconcile_offers("SP", [make_listing("1")], repo, uuid4())

    result = reconcile_offers("SP", [make_listing("1")], repo, uuid4())

    assert result.removed == 0
    assert len(repo.history("2")) == 2


def test_empty_batch_skips_removal_sweep() -> None:
    repo = FakeOfferRepository()
    repo.seed(make_listing("1"))

    result = reconcile_offers("SP", [], repo, uuid4())

    assert result == ReconcileResult()
    assert repo.calls == []
    assert repo.latest("1").is_active


def test_duplicate_source_ids_rejected_before_io() -> None:
    repo = FakeOfferRepository()

    with pytest.raises(DuplicateSourceIdError) as excinfo:
        reconcile_offers(
            "SP",
            [make_listing("1"), make_listing("2"), make_listing("1", city="OTHER")],
            repo,
            uuid4(),
        )

    assert excinfo.value.source_ids == ("1",)
    assert excinfo.value.partition_key == "SP"
    assert repo.calls == []


def test_repository_calls_follow_phase_order() -> None:
    repo = FakeOfferRepository()
    repo.seed(make_listing("same"), make_listing("changed"), make_listing("gone"))

    reconcile_offers(
        "SP",
        [make_listing("new"), make_listing("same"), make_listing("changed", city="X")],
        repo,
        uuid4(),
    )

    assert repo.calls == [
        "find_existing_offers",
        "insert_versions",
        "insert_versions",
        "touch_offers",
        "insert_delete_versions",
    ]


def test_progress_steps_for_mixed_batch() -> None:
    repo = FakeOfferRepository()
    repo.seed(make_listing("same"), make_listing("changed"), make_listing("gone"))
    steps: list[ReconcileStep] = []

    reconcile_offers(
        "SP",
        [make_listing("new"), make_listing("same"), make_listing("changed", city="X")],
        repo,
        uuid4(),
        steps.append,
    )

    assert steps == [
        ClassifyingStep(total=3),
        ClassifiedStep(created=1, updated=1, skipped=1),
        InsertingStep(count=1),
        UpdatingStep(count=1),
        TouchingStep(count=1),
        RemovingStep(),
    ]


def test_progress_skips_empty_phases() -> None:
    steps: list[ReconcileStep] = []

    reconcile_offers("SP", [make_listing("1")], FakeOfferRepository(), uuid4(), steps.append)

    assert [step.to_event()["step"] for step in steps] == [
        "classifying",
        "classified",
        "inserting",
        "removing",
    ]


def test_progress_event_payloads() -> None:
    assert ClassifyingStep(total=4).to_event() == {"step": "classifying", "total": 4}
    assert ClassifiedStep(created=1, updated=2, skipped=3).to_event() == {
        "step": "classified",
        "created": 1,
        "updated": 2,
        "skipped": 3,
    }
    assert RemovingStep().to_event() == {"step": "removing"}
    assert ReconcileResult(created=1, removed=2).to_event() == {
        "created": 1,
        "updated": 0,
        "skipped": 0,
        "removed": 2,
    }

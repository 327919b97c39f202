from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session  # noqa: TC002

from offerwatch.adapters.sqlalchemy.filter_translator import (
    SqlAlchemyFilterTranslator,
    escape_like,
    order_by_clauses,
)
from offerwatch.adapters.sqlalchemy.mappings import offer_version_table
from offerwatch.adapters.sqlalchemy.repositories import SqlAlchemyOfferRepository
from offerwatch.domain.filter import parse_filter, parse_sort
from offerwatch.domain.model import Operation
from offerwatch.domain.reconciliation import VersionEntry
from tests.helpers.offers import make_listing


@pytest.fixture
def seeded_session(sqlite_session: Session) -> Session:
    listings = [
        make_listing("1", city="Sao Paulo", address="Rua 100% Livre", asking_price=120000),
        make_listing("2", city="SANTOS", address="Av. A_B", asking_price=80000),
        make_listing(
            "3", uf="RJ", city="Rio de Janeiro", address="Rua Sem Nome", asking_price=95000
        ),
        make_listing("4", city="Campinas", address="Rua C\\D", discount_percent="45.50"),
    ]
    SqlAlchemyOfferRepository(sqlite_session).insert_versions(
        [VersionEntry(listing=item, version=1, operation=Operation.INSERT) for item in listings],
        uuid4(),
    )
    return sqlite_session


def _ids(session: Session, text: str) -> set[str]:
    condition = SqlAlchemyFilterTranslator(offer_version_table.c).translate(parse_filter(text))
    stmt = select(offer_version_table.c.source_id).where(condition)
    return set(session.execute(stmt).scalars())


def test_escape_like_escapes_wildcards() -> None:
    assert escape_like("100%") == "100\\%"
    assert escape_like("a_b") == "a\\_b"
    assert escape_like("c\\d") == "c\\\\d"


def test_equality_and_ranges(seeded_session: Session) -> None:
    assert _ids(seeded_session, "uf eq 'RJ'") == {"3"}
    assert _ids(seeded_session, "uf ne 'RJ'") == {"1", "2", "4"}
    assert _ids(seeded_session, "askingPrice lt 100000") == {"2", "3"}
    assert _ids(seeded_session, "askingPrice le 95000") == {"2", "3"}
    assert _ids(seeded_session, "askingPrice gt 120000") == {"4"}
    assert _ids(seeded_session, "discountPercent ge 45.5") == {"4"}


def test_text_operators_are_case_insensitive(seeded_session: Session) -> None:
    assert _ids(seeded_session, "city contains 'SAO'") == {"1"}
    assert _ids(seeded_session, "city startswith 'sa'") == {"1", "2"}
    assert _ids(seeded_session, "city endswith 'NAS'") == {"4"}


def test_like_wildcards_match_literally(seeded_session: Session) -> None:
    assert _ids(seeded_session, "address contains '100%'") == {"1"}
    assert _ids(seeded_session, "address contains '%'") == {"1"}
    assert _ids(seeded_session, "address contains 'A_B'") == {"2"}
    assert _ids(seeded_session, "address contains '_'") == {"2"}
    assert _ids(seeded_session, "address contains 'C\\D'") == {"4"}


def test_in_and_boolean_composition(seeded_session: Session) -> None:
    assert _ids(seeded_session, "uf in ('RJ', 'MG')") == {"3"}
    assert _ids(seeded_session, "uf eq 'SP' and not city eq 'SANTOS'") == {"1", "4"}
    assert _ids(
        seeded_session, "uf eq 'RJ' or (askingPrice lt 100000 and city startswith 'S')"
    ) == {"2", "3"}


def test_order_by_clauses_follow_sort_order(seeded_session: Session) -> None:
    stmt = select(offer_version_table.c.source_id).order_by(
        *order_by_clauses(offer_version_table.c, parse_sort("uf desc, askingPrice asc"))
    )

    assert list(seeded_session.execute(stmt).scalars()) == ["2", "1", "4", "3"]

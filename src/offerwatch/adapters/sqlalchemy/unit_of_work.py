"""SQLAlchemy-backed unit of work for listing ingestion and queries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from offerwatch.adapters.sqlalchemy.mappings import start_mappers
from offerwatch.adapters.sqlalchemy.migrations import upgrade_head
from offerwatch.adapters.sqlalchemy.repositories import (
    SqlAlchemyIngestionBatchRepository,
    SqlAlchemyOfferQueryRepository,
    SqlAlchemyOfferRepository,
)
from offerwatch.config.storage import (
    DEFAULT_MAX_BIND_PARAMETERS,
    get_database_config,
    get_persistence_config,
)
from offerwatch.domain.ports.unit_of_work import ListingRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from offerwatch.config.storage import PersistenceConfig


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None
    max_bind_parameters: int = DEFAULT_MAX_BIND_PARAMETERS

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call offerwatch.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    persistence: PersistenceConfig | None = None,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    upgrade_head(engine=resolved_engine)

    _STATE.max_bind_parameters = (persistence or get_persistence_config()).max_bind_parameters
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.max_bind_parameters = DEFAULT_MAX_BIND_PARAMETERS


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyListingUnitOfWork(BaseSqlAlchemyUnitOfWork[ListingRepositories]):
    """Unit of work managing SQLAlchemy sessions for listing versions."""

    def _build_repositories(self, session: Session) -> ListingRepositories:
        return ListingRepositories(
            offers=SqlAlchemyOfferRepository(
                session, max_bind_parameters=_STATE.max_bind_parameters
            ),
            queries=SqlAlchemyOfferQueryRepository(session),
            batches=SqlAlchemyIngestionBatchRepository(session),
        )


if TYPE_CHECKING:
    from offerwatch.domain.ports.unit_of_work import ListingUnitOfWork

    _uow_check: ListingUnitOfWork = SqlAlchemyListingUnitOfWork()

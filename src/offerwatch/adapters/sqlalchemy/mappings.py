"""SQLAlchemy tables and mappers for the listing version log."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from offerwatch.domain.model import IngestionBatch, Operation

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

# Listing attributes, in table order; column names equal ``Listing`` attribute names.
LISTING_COLUMNS: Final[tuple[str, ...]] = (
    "source_id",
    "uf",
    "city",
    "neighborhood",
    "address",
    "description",
    "property_type",
    "selling_type",
    "asking_price",
    "evaluation_price",
    "discount_percent",
    "offer_url",
)

NUMERIC_SCALE: Final[int] = 2


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

ingestion_batch_table = Table(
    "ingestion_batch",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("file_name", String, nullable=False),
    Column("download_url", String, nullable=True),
    Column("content_hash", String(64), nullable=False, index=True),
    Column("size_bytes", Integer, nullable=False),
    Column("record_count", Integer, nullable=True),
    Column("received_at", UTCDateTime, nullable=False),
    Column("completed_at", UTCDateTime, nullable=True),
)

# Append-only: rows are inserted by reconciliation and never updated or deleted.
offer_version_table = Table(
    "offer_version",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source_id", String, nullable=False),
    Column("uf", String, nullable=False),
    Column("city", String, nullable=False),
    Column("neighborhood", String, nullable=False),
    Column("address", String, nullable=False),
    Column("description", Text, nullable=False),
    Column("property_type", String, nullable=False, server_default=""),
    Column("selling_type", String, nullable=False),
    Column("asking_price", Numeric(18, NUMERIC_SCALE), nullable=False),
    Column("evaluation_price", Numeric(18, NUMERIC_SCALE), nullable=False),
    Column("discount_percent", Numeric(6, NUMERIC_SCALE), nullable=False),
    Column("offer_url", String, nullable=False, server_default=""),
    Column("version", Integer, nullable=False),
    Column(
        "operation",
        Enum(
            Operation,
            name="operation",
            native_enum=False,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    ),
    Column("batch_id", UUIDColumnType, ForeignKey("ingestion_batch.id"), nullable=True),
    Column("created_at", UTCDateTime, nullable=False),
    UniqueConstraint("source_id", "version", name="uq_offer_version_source_version"),
    Index("ix_offer_version_uf_source", "uf", "source_id"),
)

# Last time each SourceId was present in an incoming batch.
offer_sighting_table = Table(
    "offer_sighting",
    mapper_registry.metadata,
    Column("source_id", String, primary_key=True),
    Column("last_seen_at", UTCDateTime, nullable=False),
    Column("batch_id", UUIDColumnType, ForeignKey("ingestion_batch.id"), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(IngestionBatch, ingestion_batch_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)

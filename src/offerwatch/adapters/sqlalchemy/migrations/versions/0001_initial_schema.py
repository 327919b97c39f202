"""Initial listing version log schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 12:00:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from offerwatch.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "ingestion_batch",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("download_url", sa.String(), nullable=True),
        sa.Column("content_hash", sa.String(length=64), nullable=False),
        sa.Column("size_bytes", sa.Integer(), nullable=False),
        sa.Column("record_count", sa.Integer(), nullable=True),
        sa.Column("received_at", UTCDateTime(), nullable=False),
        sa.Column("completed_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_ingestion_batch"),
    )
    op.create_index(
        "ix_ingestion_batch_content_hash", "ingestion_batch", ["content_hash"], unique=False
    )

    op.create_table(
        "offer_version",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("uf", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("neighborhood", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("property_type", sa.String(), server_default="", nullable=False),
        sa.Column("selling_type", sa.String(), nullable=False),
        sa.Column("asking_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("evaluation_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("discount_percent", sa.Numeric(6, 2), nullable=False),
        sa.Column("offer_url", sa.String(), server_default="", nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "operation",
            sa.Enum("insert", "update", "delete", name="operation", native_enum=False),
            nullable=False,
        ),
        sa.Column("batch_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["ingestion_batch.id"],
            name="fk_offer_version_offer_version_batch_id_ingestion_batch",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_offer_version"),
        sa.UniqueConstraint("source_id", "version", name="uq_offer_version_source_version"),
    )
    op.create_index("ix_offer_version_uf_source", "offer_version", ["uf", "source_id"])

    op.create_table(
        "offer_sighting",
        sa.Column("source_id", sa.String(), nullable=False),
        sa.Column("last_seen_at", UTCDateTime(), nullable=False),
        sa.Column("batch_id", sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(
            ["batch_id"],
            ["ingestion_batch.id"],
            name="fk_offer_sighting_offer_sighting_batch_id_ingestion_batch",
        ),
        sa.PrimaryKeyConstraint("source_id", name="pk_offer_sighting"),
    )


def downgrade() -> None:
    op.drop_table("offer_sighting")
    op.drop_index("ix_offer_version_uf_source", table_name="offer_version")
    op.drop_table("offer_version")
    op.drop_index("ix_ingestion_batch_content_hash", table_name="ingestion_batch")
    op.drop_table("ingestion_batch")

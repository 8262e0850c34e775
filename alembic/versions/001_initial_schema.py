"""Initial schema — all 11 tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "audit_log",
        sa.Column("event_type", sa.String(100), nullable=False, index=True),
        sa.Column("actor_id", sa.String(100), comment="Principal id or 'system'"),
        sa.Column("actor_role", sa.String(20), comment="ADMIN, SELLER, CLIENT, system"),
        sa.Column("entity_id", sa.String(100), index=True),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text())),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "config_entries",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("value_type", sa.String(20), nullable=False),
        sa.Column("description", sa.String(255)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_config_entries_key", "config_entries", ["key"], unique=True)

    op.create_table(
        "document_daily_sequences",
        sa.Column("prefix", sa.String(20), nullable=False),
        sa.Column("day", sa.String(8), nullable=False, comment="YYYYMMDD"),
        sa.Column("last_seq", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("prefix", "day", name="uq_document_daily_sequences_prefix_day"),
    )

    op.create_table(
        "companies",
        sa.Column("legal_name", sa.String(200), nullable=False),
        sa.Column("trade_name", sa.String(200)),
        sa.Column("tax_id", sa.String(32), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(30)),
        sa.Column("address", sa.String(500)),
        sa.Column("banking_info", postgresql.JSONB(astext_type=sa.Text())),
        sa.Column("brand_color", sa.String(7), comment="Hex color, e.g. #1F6FEB"),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_companies_tax_id", "companies", ["tax_id"], unique=True)

    op.create_table(
        "sellers",
        sa.Column("user_id", sa.String(100), nullable=False, comment="Identity provider user id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("default_commission", sa.Numeric(5, 2), comment="Percent"),
        sa.Column("default_target", sa.Numeric(14, 2), comment="Monthly sales target"),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sellers_user_id", "sellers", ["user_id"], unique=True)

    # ── Tables with FK to companies / sellers ──────────────────────────

    op.create_table(
        "clients",
        sa.Column("user_id", sa.String(100)),
        sa.Column("seller_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sellers.id"), index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("company_name", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("country", sa.String(2), comment="ISO 3166-1 alpha-2"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_user_id", "clients", ["user_id"], unique=True)

    op.create_table(
        "products",
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sku", sa.String(64), index=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "representations",
        sa.Column("seller_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sellers.id"), nullable=False, index=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("commission_override", sa.Numeric(5, 2), comment="Percent"),
        sa.Column("target_override", sa.Numeric(14, 2)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("seller_id", "company_id", name="uq_representations_seller_company"),
    )

    op.create_table(
        "representation_requests",
        sa.Column("seller_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sellers.id"), nullable=False, index=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("message", sa.String(1000)),
        sa.Column("resolved_by", sa.String(100), comment="Admin principal id"),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("seller_id", "company_id", name="uq_representation_requests_seller_company"),
    )

    # ── Quotations ─────────────────────────────────────────────────────

    op.create_table(
        "quotations",
        sa.Column("number", sa.String(32), nullable=False),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("seller_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("sellers.id"), nullable=False, index=True),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=False, index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("valid_until", sa.Date()),
        sa.Column("notes", sa.Text()),
        sa.Column("payment_terms", sa.String(500)),
        sa.Column("delivery_terms", sa.String(500)),
        sa.Column("incoterm", sa.String(10)),
        sa.Column("destination_port", sa.String(200)),
        sa.Column("subtotal", sa.Numeric(14, 2), nullable=False),
        sa.Column("discount", sa.Numeric(14, 2), nullable=False),
        sa.Column("freight", sa.Numeric(14, 2), nullable=False),
        sa.Column("total", sa.Numeric(14, 2), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(12, 6)),
        sa.Column("exchange_rate_source", sa.String(30)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique number; the creation retry loop matches on this index name
    op.create_index("ix_quotations_number", "quotations", ["number"], unique=True)

    op.create_table(
        "quotation_items",
        sa.Column("quotation_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("quotations.id"), nullable=False, index=True),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=False),
        sa.Column("discount", sa.Numeric(5, 2), nullable=False, comment="Percent"),
        sa.Column("total", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("quotation_items")
    op.drop_table("quotations")
    op.drop_table("representation_requests")
    op.drop_table("representations")
    op.drop_table("products")
    op.drop_table("clients")
    op.drop_table("sellers")
    op.drop_table("companies")
    op.drop_table("document_daily_sequences")
    op.drop_table("config_entries")
    op.drop_table("audit_log")

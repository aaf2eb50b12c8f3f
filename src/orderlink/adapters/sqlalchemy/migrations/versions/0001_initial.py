"""Initial linkage schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-09-02
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from orderlink.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "record_hierarchy",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_record_hierarchy_parent_kind", "record_hierarchy", ["parent_id", "kind"]
    )

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("parent_order_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("customer_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", UTCDateTime(), nullable=True),
        sa.Column("order_number", sa.String(length=64), nullable=True),
        sa.Column("billing_email", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_orders_kind_created_at", "orders", ["kind", "created_at"])

    op.create_table(
        "order_operational_data",
        sa.Column("order_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("created_via", sa.String(length=64), nullable=True),
    )

    op.create_table(
        "repair_note",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("version", sa.String(length=32), nullable=False),
        sa.Column("message", sa.String(length=512), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=True),
    )
    op.create_index("ix_repair_note_record_id", "repair_note", ["record_id"])


def downgrade() -> None:
    op.drop_index("ix_repair_note_record_id", table_name="repair_note")
    op.drop_table("repair_note")
    op.drop_table("order_operational_data")
    op.drop_index("ix_orders_kind_created_at", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_record_hierarchy_parent_kind", table_name="record_hierarchy")
    op.drop_table("record_hierarchy")

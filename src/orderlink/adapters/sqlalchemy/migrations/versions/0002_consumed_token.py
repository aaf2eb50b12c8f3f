"""Spent pairing-token nonces.

Revision ID: 0002_consumed_token
Revises: 0001_initial
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002_consumed_token"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "consumed_token",
        sa.Column("nonce", sa.String(length=64), primary_key=True),
        sa.Column("actor", sa.String(length=255), nullable=False),
        sa.Column("issued_at", sa.Integer(), nullable=False),
    )
    op.create_index("ix_consumed_token_issued_at", "consumed_token", ["issued_at"])


def downgrade() -> None:
    op.drop_index("ix_consumed_token_issued_at", table_name="consumed_token")
    op.drop_table("consumed_token")

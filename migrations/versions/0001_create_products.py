"""Create products table.

Revision ID: 0001_create_products
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# --- Alembic identifiers ---
revision: str = "0001_create_products"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), server_default=sa.text("0.00"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("products_pkey")),
    )


def downgrade() -> None:
    op.drop_table("products")

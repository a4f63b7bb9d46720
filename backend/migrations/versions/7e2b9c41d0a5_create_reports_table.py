"""Create reports table.

Revision ID: 7e2b9c41d0a5
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7e2b9c41d0a5"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "reports",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("location_label", sa.String(length=255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("narrative", sa.Text(), nullable=False),
        sa.Column("media_ref", sa.String(length=512), nullable=True),
        if_not_exists=True,
    )

    op.create_index(
        "ix_reports_category",
        "reports",
        ["category"],
        if_not_exists=True,
    )
    op.create_index(
        "idx_reports_cursor",
        "reports",
        [sa.text("created_at DESC"), sa.text("id DESC")],
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index("idx_reports_cursor", table_name="reports", if_exists=True)
    op.drop_index("ix_reports_category", table_name="reports", if_exists=True)
    op.drop_table("reports", if_exists=True)

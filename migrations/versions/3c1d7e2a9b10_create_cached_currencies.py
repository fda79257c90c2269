"""create cached_currencies

Revision ID: 3c1d7e2a9b10
Revises: 
Create Date: 2026-10-19 10:12:41.218734

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d7e2a9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "cached_currencies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("currency_date", sa.Date(), nullable=False),
        sa.Column("currency_code", sa.String(length=10), nullable=False),
        sa.Column("currency_name", sa.String(length=255), nullable=False),
        sa.Column("exchange_rate", sa.Numeric(precision=19, scale=6), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "currency_date",
            "currency_code",
            name="uq_cached_currencies_date_code",
        ),
    )
    op.create_index(
        "ix_cached_currencies_currency_date",
        "cached_currencies",
        ["currency_date"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_cached_currencies_currency_date", table_name="cached_currencies")
    op.drop_table("cached_currencies")

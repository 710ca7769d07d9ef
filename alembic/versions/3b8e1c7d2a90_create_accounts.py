"""create accounts

Revision ID: 3b8e1c7d2a90
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b8e1c7d2a90"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("identification", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("provider", sa.String(length=32), nullable=True),
        sa.Column("uid", sa.String(length=255), nullable=True),
        sa.Column("oauth2_token", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("identification"),
        sa.UniqueConstraint("oauth2_token"),
        sa.UniqueConstraint("provider", "uid", name="uq_accounts_provider_uid"),
    )


def downgrade() -> None:
    op.drop_table("accounts")

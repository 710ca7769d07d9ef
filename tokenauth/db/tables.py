"""SQLAlchemy table definitions.

AccountRow is the persistence shape of models.account.Account; the repo
converts between the two.  Uniqueness lives here, in the database, so
concurrent writers cannot create two accounts for one identity.
"""

from __future__ import annotations

import uuid

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from tokenauth.db.engine import Base


class AccountRow(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        # NULLs are distinct in a unique constraint, so unlinked accounts
        # do not collide with each other.
        UniqueConstraint("provider", "uid", name="uq_accounts_provider_uid"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    identification: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False
    )
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    uid: Mapped[str | None] = mapped_column(String(255), nullable=True)
    oauth2_token: Mapped[str] = mapped_column(
        String(128), unique=True, nullable=False
    )

"""PostgreSQL implementation of AccountStore."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.db.tables import AccountRow
from tokenauth.models.account import Account
from tokenauth.repos.account_repo import AccountConflictError, AccountNotFoundError
from tokenauth.services import token_service


class PgAccountRepo:
    """Satisfies the AccountStore Protocol using PostgreSQL via SQLAlchemy.

    Writes that can violate a unique constraint run inside a SAVEPOINT, so
    a conflict surfaces as AccountConflictError and leaves the request's
    session usable for the follow-up lookup.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: UUID) -> Account | None:
        return await self._one(select(AccountRow).where(AccountRow.id == account_id))

    async def get_by_identification(self, identification: str) -> Account | None:
        return await self._one(
            select(AccountRow).where(AccountRow.identification == identification)
        )

    async def get_by_uid(self, provider: str, uid: str) -> Account | None:
        return await self._one(
            select(AccountRow).where(
                AccountRow.provider == provider, AccountRow.uid == uid
            )
        )

    async def get_by_token(self, token: str) -> Account | None:
        return await self._one(
            select(AccountRow).where(AccountRow.oauth2_token == token)
        )

    async def add(self, account: Account) -> None:
        row = AccountRow(
            id=account.id,
            identification=account.identification,
            password_hash=account.password_hash,
            provider=account.provider,
            uid=account.uid,
            oauth2_token=account.oauth2_token,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError as exc:
            raise AccountConflictError(str(exc.orig)) from exc

    async def link_uid(self, account_id: UUID, provider: str, uid: str) -> Account:
        stmt = (
            update(AccountRow)
            .where(AccountRow.id == account_id)
            # Only an unlinked account may be linked; never re-point one.
            .where(
                or_(
                    AccountRow.uid.is_(None),
                    and_(AccountRow.provider == provider, AccountRow.uid == uid),
                )
            )
            .values(provider=provider, uid=uid)
            .returning(AccountRow)
        )
        try:
            async with self._session.begin_nested():
                row = (await self._session.scalars(stmt)).one_or_none()
        except IntegrityError as exc:
            raise AccountConflictError(str(exc.orig)) from exc
        if row is None:
            if await self.get_by_id(account_id) is None:
                raise AccountNotFoundError(account_id)
            raise AccountConflictError("account already linked")
        return _row_to_account(row)

    async def rotate_token(
        self, account_id: UUID, expected_token: str
    ) -> Account | None:
        # Compare-and-set in one statement: only the request that still
        # sees the expected token gets to replace it.
        stmt = (
            update(AccountRow)
            .where(
                AccountRow.id == account_id,
                AccountRow.oauth2_token == expected_token,
            )
            .values(oauth2_token=token_service.generate_token())
            .returning(AccountRow)
        )
        row = (await self._session.scalars(stmt)).one_or_none()
        if row is None:
            return None
        return _row_to_account(row)

    async def update_password_hash(self, account_id: UUID, password_hash: str) -> None:
        stmt = (
            update(AccountRow)
            .where(AccountRow.id == account_id)
            .values(password_hash=password_hash)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise AccountNotFoundError(account_id)

    async def _one(self, stmt) -> Account | None:
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_account(row)


def _row_to_account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        identification=row.identification,
        oauth2_token=row.oauth2_token,
        password_hash=row.password_hash,
        provider=row.provider,
        uid=row.uid,
    )

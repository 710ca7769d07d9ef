from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from tokenauth.models.account import Account
from tokenauth.services import token_service


class AccountConflictError(Exception):
    """An identification, (provider, uid) pair or token is already taken."""


class AccountNotFoundError(KeyError):
    pass


class AccountStore(Protocol):
    async def get_by_id(self, account_id: UUID) -> Account | None: ...
    async def get_by_identification(self, identification: str) -> Account | None: ...
    async def get_by_uid(self, provider: str, uid: str) -> Account | None: ...
    async def get_by_token(self, token: str) -> Account | None: ...
    async def add(self, account: Account) -> None: ...
    async def link_uid(self, account_id: UUID, provider: str, uid: str) -> Account:
        """Link an unlinked account to (provider, uid).

        Raises AccountConflictError if the account is already linked to a
        different identity or the identity belongs to another account.
        """
        ...

    async def rotate_token(
        self, account_id: UUID, expected_token: str
    ) -> Account | None: ...
    async def update_password_hash(
        self, account_id: UUID, password_hash: str
    ) -> None: ...


class InMemoryAccountRepo:
    """Dict-backed AccountStore for dev and tests.

    Each mutation holds ``_lock`` across its check-then-write so that
    uniqueness holds for concurrent tasks even if the body ever awaits.
    """

    def __init__(self) -> None:
        self._by_id: dict[UUID, Account] = {}
        self._by_identification: dict[str, UUID] = {}
        self._by_uid: dict[tuple[str, str], UUID] = {}
        self._by_token: dict[str, UUID] = {}
        self._lock = asyncio.Lock()

    def clear(self) -> None:
        self._by_id.clear()
        self._by_identification.clear()
        self._by_uid.clear()
        self._by_token.clear()

    def count(self) -> int:
        return len(self._by_id)

    async def get_by_id(self, account_id: UUID) -> Account | None:
        return self._by_id.get(account_id)

    async def get_by_identification(self, identification: str) -> Account | None:
        account_id = self._by_identification.get(identification)
        return self._by_id.get(account_id) if account_id else None

    async def get_by_uid(self, provider: str, uid: str) -> Account | None:
        account_id = self._by_uid.get((provider, uid))
        return self._by_id.get(account_id) if account_id else None

    async def get_by_token(self, token: str) -> Account | None:
        account_id = self._by_token.get(token)
        return self._by_id.get(account_id) if account_id else None

    async def add(self, account: Account) -> None:
        async with self._lock:
            if account.identification in self._by_identification:
                raise AccountConflictError("identification already exists")
            if account.oauth2_token in self._by_token:
                raise AccountConflictError("token already exists")
            uid_key = _uid_key(account)
            if uid_key is not None and uid_key in self._by_uid:
                raise AccountConflictError("provider uid already linked")

            self._by_id[account.id] = account
            self._by_identification[account.identification] = account.id
            self._by_token[account.oauth2_token] = account.id
            if uid_key is not None:
                self._by_uid[uid_key] = account.id

    async def link_uid(self, account_id: UUID, provider: str, uid: str) -> Account:
        async with self._lock:
            current = self._by_id.get(account_id)
            if current is None:
                raise AccountNotFoundError(account_id)
            if _uid_key(current) == (provider, uid):
                return current
            if current.uid is not None:
                raise AccountConflictError("account already linked")
            owner = self._by_uid.get((provider, uid))
            if owner is not None and owner != account_id:
                raise AccountConflictError("provider uid already linked")

            updated = replace(current, provider=provider, uid=uid)
            self._by_id[account_id] = updated
            self._by_uid[(provider, uid)] = account_id
            return updated

    async def rotate_token(
        self, account_id: UUID, expected_token: str
    ) -> Account | None:
        async with self._lock:
            current = self._by_id.get(account_id)
            if current is None:
                return None
            # Compare-and-set: a concurrent rotation already won.
            if not token_service.tokens_match(expected_token, current.oauth2_token):
                return None

            updated = replace(current, oauth2_token=token_service.generate_token())
            del self._by_token[current.oauth2_token]
            self._by_token[updated.oauth2_token] = account_id
            self._by_id[account_id] = updated
            return updated

    async def update_password_hash(self, account_id: UUID, password_hash: str) -> None:
        async with self._lock:
            current = self._by_id.get(account_id)
            if current is None:
                raise AccountNotFoundError(account_id)
            self._by_id[account_id] = replace(current, password_hash=password_hash)


def _uid_key(account: Account) -> tuple[str, str] | None:
    if account.provider is None or account.uid is None:
        return None
    return (account.provider, account.uid)

from __future__ import annotations

import asyncio

from argon2 import PasswordHasher

from tokenauth.models.account import Account
from tokenauth.repos.account_repo import InMemoryAccountRepo
from tokenauth.services.auth_service import (
    authenticate_account,
    hash_password,
    verify_password,
)


def test_verify_password_round_trip() -> None:
    stored_hash = hash_password("pw123")
    assert verify_password("pw123", stored_hash)
    assert not verify_password("pw124", stored_hash)


def test_verify_password_rejects_missing_or_garbage_hash() -> None:
    assert not verify_password("pw123", None)
    assert not verify_password("pw123", "not-an-argon2-hash")
    assert not verify_password("", hash_password("pw123"))


def test_authenticate_account_rehashes_when_needed() -> None:
    # Deliberately weak/old Argon2 parameters.
    old_ph = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    password = "pw123"
    old_hash = old_ph.hash(password)

    repo = InMemoryAccountRepo()
    account = Account.new(identification="tee@example.com", password_hash=old_hash)
    asyncio.run(repo.add(account))

    authed = asyncio.run(authenticate_account(repo, "tee@example.com", password))
    assert authed is not None

    stored = asyncio.run(repo.get_by_identification("tee@example.com"))
    assert stored is not None
    assert stored.password_hash != old_hash
    # Rehashing never touches the token.
    assert stored.oauth2_token == account.oauth2_token


def test_authenticate_account_unknown_identification() -> None:
    repo = InMemoryAccountRepo()
    assert asyncio.run(authenticate_account(repo, "nobody@example.com", "pw")) is None

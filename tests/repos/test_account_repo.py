from __future__ import annotations

import asyncio

import pytest

from tokenauth.models.account import Account
from tokenauth.repos.account_repo import (
    AccountConflictError,
    AccountNotFoundError,
    InMemoryAccountRepo,
)


def _add(repo: InMemoryAccountRepo, email: str, **kwargs) -> Account:
    account = Account.new(identification=email, **kwargs)
    asyncio.run(repo.add(account))
    return account


def test_lookups() -> None:
    repo = InMemoryAccountRepo()
    account = _add(repo, "tee@example.com", provider="google", uid="g-1")

    assert asyncio.run(repo.get_by_id(account.id)) == account
    assert asyncio.run(repo.get_by_identification("tee@example.com")) == account
    assert asyncio.run(repo.get_by_uid("google", "g-1")) == account
    assert asyncio.run(repo.get_by_token(account.oauth2_token)) == account


def test_uid_lookup_is_scoped_by_provider() -> None:
    repo = InMemoryAccountRepo()
    _add(repo, "tee@example.com", provider="google", uid="123")
    assert asyncio.run(repo.get_by_uid("facebook", "123")) is None


def test_add_rejects_duplicate_identification() -> None:
    repo = InMemoryAccountRepo()
    _add(repo, "tee@example.com")
    with pytest.raises(AccountConflictError):
        _add(repo, "tee@example.com")
    assert repo.count() == 1


def test_add_rejects_duplicate_provider_uid() -> None:
    repo = InMemoryAccountRepo()
    _add(repo, "a@example.com", provider="google", uid="g-1")
    with pytest.raises(AccountConflictError):
        _add(repo, "b@example.com", provider="google", uid="g-1")


def test_same_uid_different_provider_is_allowed() -> None:
    repo = InMemoryAccountRepo()
    _add(repo, "a@example.com", provider="google", uid="1")
    _add(repo, "b@example.com", provider="facebook", uid="1")
    assert repo.count() == 2


def test_link_uid() -> None:
    repo = InMemoryAccountRepo()
    account = _add(repo, "tee@example.com")

    linked = asyncio.run(repo.link_uid(account.id, "facebook", "fb-1"))

    assert linked.uid == "fb-1"
    assert linked.oauth2_token == account.oauth2_token
    assert asyncio.run(repo.get_by_uid("facebook", "fb-1")) == linked


def test_link_uid_rejects_uid_owned_by_another_account() -> None:
    repo = InMemoryAccountRepo()
    _add(repo, "a@example.com", provider="facebook", uid="fb-1")
    other = _add(repo, "b@example.com")
    with pytest.raises(AccountConflictError):
        asyncio.run(repo.link_uid(other.id, "facebook", "fb-1"))


def test_link_uid_never_repoints_a_linked_account() -> None:
    repo = InMemoryAccountRepo()
    account = _add(repo, "tee@example.com", provider="facebook", uid="fb-1")

    with pytest.raises(AccountConflictError):
        asyncio.run(repo.link_uid(account.id, "google", "g-1"))

    assert asyncio.run(repo.get_by_id(account.id)) == account
    assert asyncio.run(repo.get_by_uid("facebook", "fb-1")) == account
    assert asyncio.run(repo.get_by_uid("google", "g-1")) is None


def test_link_uid_same_identity_is_idempotent() -> None:
    repo = InMemoryAccountRepo()
    account = _add(repo, "tee@example.com", provider="google", uid="g-1")

    assert asyncio.run(repo.link_uid(account.id, "google", "g-1")) == account


def test_link_uid_unknown_account() -> None:
    repo = InMemoryAccountRepo()
    stray = Account.new(identification="x@example.com")
    with pytest.raises(AccountNotFoundError):
        asyncio.run(repo.link_uid(stray.id, "google", "g"))


def test_rotate_token_is_compare_and_set() -> None:
    repo = InMemoryAccountRepo()
    account = _add(repo, "tee@example.com")

    rotated = asyncio.run(repo.rotate_token(account.id, account.oauth2_token))
    assert rotated is not None
    assert rotated.oauth2_token != account.oauth2_token

    # The old token no longer matches, so a second rotation loses.
    assert asyncio.run(repo.rotate_token(account.id, account.oauth2_token)) is None
    assert asyncio.run(repo.get_by_id(account.id)) == rotated

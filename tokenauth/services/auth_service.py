from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from tokenauth.models.account import Account
from tokenauth.repos.account_repo import AccountStore

logger = logging.getLogger(__name__)

# Argon2 hash strings encode parameters + salt
_ph = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def authenticate_account(
    store: AccountStore, identification: str, password: str
) -> Account | None:
    """Return the account for valid credentials, else None.

    Accounts provisioned through a social login have no password hash and
    can never authenticate here.
    """
    account = await store.get_by_identification(identification)
    if account is None:
        return None
    if not verify_password(password, account.password_hash):
        return None

    # Upgrade the stored hash if the hasher's parameters changed since it
    # was written.  The token is untouched.
    if account.password_hash is not None and _ph.check_needs_rehash(
        account.password_hash
    ):
        await store.update_password_hash(account.id, _ph.hash(password))
        logger.info("Rehashed password for account=%s", account.id)

    return account

"""Create a password account in the configured PostgreSQL database.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/create_account.py EMAIL PASSWORD

Prints the new account's id and bearer token.
"""

from __future__ import annotations

import asyncio
import sys

from tokenauth.db.engine import async_session_factory, engine
from tokenauth.models.account import Account
from tokenauth.repos.account_repo import AccountConflictError
from tokenauth.repos.pg_account_repo import PgAccountRepo
from tokenauth.services import auth_service


async def _create(email: str, password: str) -> Account:
    assert async_session_factory is not None
    account = Account.new(
        identification=email, password_hash=auth_service.hash_password(password)
    )
    async with async_session_factory() as session:
        await PgAccountRepo(session).add(account)
        await session.commit()
    return account


async def _run(email: str, password: str) -> int:
    try:
        account = await _create(email, password)
    except AccountConflictError:
        print(f"account already exists: {email}", file=sys.stderr)
        return 1
    finally:
        if engine is not None:
            await engine.dispose()
    print(f"id={account.id} token={account.oauth2_token}")
    return 0


def main() -> None:
    if len(sys.argv) != 3:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    if async_session_factory is None:
        print("DATABASE_URL is not set", file=sys.stderr)
        sys.exit(2)
    sys.exit(asyncio.run(_run(sys.argv[1], sys.argv[2])))


if __name__ == "__main__":
    main()

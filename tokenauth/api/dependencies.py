"""FastAPI dependencies: account store, grant services, bearer auth.

The account store is chosen once, at import time, the same way the engine
is: PostgreSQL when DATABASE_URL is set, otherwise the module-level
in-memory repo below.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tokenauth.core.config import SETTINGS
from tokenauth.db.engine import async_session_factory, get_async_session
from tokenauth.models.account import Account
from tokenauth.models.grant import GrantType
from tokenauth.providers.base import IdentityProvider
from tokenauth.providers.facebook import FacebookIdentityProvider
from tokenauth.providers.google import GoogleIdentityProvider
from tokenauth.repos.account_repo import AccountStore, InMemoryAccountRepo
from tokenauth.repos.pg_account_repo import PgAccountRepo
from tokenauth.services.grant_resolver import GrantResolver
from tokenauth.services.revocation_service import RevocationHandler

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token")

# Module-level singletons (in-memory store is only used without a database)
account_repo = InMemoryAccountRepo()

identity_providers: dict[GrantType, IdentityProvider] = {
    GrantType.FACEBOOK_AUTH_CODE: FacebookIdentityProvider(SETTINGS.facebook()),
    GrantType.GOOGLE_AUTH_CODE: GoogleIdentityProvider(SETTINGS.google()),
}


if async_session_factory is None:

    async def get_account_store() -> AccountStore:
        return account_repo

else:

    async def get_account_store(  # type: ignore[misc]
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> AccountStore:
        return PgAccountRepo(session)


def get_grant_resolver(
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> GrantResolver:
    return GrantResolver(store, identity_providers)


def get_revocation_handler(
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> RevocationHandler:
    return RevocationHandler(store)


async def require_account(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
    store: Annotated[AccountStore, Depends(get_account_store)],
) -> Account:
    """Resolve the bearer token to its account, or 401."""
    account = await store.get_by_token(raw_token)
    if account is None:
        logger.warning("Unknown bearer token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account

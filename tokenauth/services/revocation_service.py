"""Token revocation (POST /revoke).

Revoking a token rotates the owning account's stored token; the old value
stops resolving immediately.  An unknown token is a silent no-op, and the
caller answers 200 either way, so the endpoint cannot be used to probe
which tokens are live.
"""

from __future__ import annotations

import logging

from tokenauth.core.metrics import TOKEN_REVOCATIONS
from tokenauth.models.grant import TokenRevocationRequest
from tokenauth.repos.account_repo import AccountStore

logger = logging.getLogger(__name__)


class RevocationHandler:
    def __init__(self, store: AccountStore) -> None:
        self._store = store

    async def revoke(self, request: TokenRevocationRequest) -> None:
        if not request.token:
            TOKEN_REVOCATIONS.labels(result="unknown").inc()
            return

        account = await self._store.get_by_token(request.token)
        if account is None:
            TOKEN_REVOCATIONS.labels(result="unknown").inc()
            logger.info("Revocation for unknown token ignored")
            return

        rotated = await self._store.rotate_token(account.id, request.token)
        if rotated is None:
            # Somebody else rotated it between lookup and update.
            TOKEN_REVOCATIONS.labels(result="unknown").inc()
            logger.info("Token already rotated  account_id=%s", account.id)
            return

        TOKEN_REVOCATIONS.labels(result="rotated").inc()
        logger.info(
            "Token revoked  account_id=%s",
            account.id,
            extra={"account_id": str(account.id)},
        )

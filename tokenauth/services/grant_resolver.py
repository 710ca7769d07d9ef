"""Token grant resolution: credentials in, bearer token out.

  password             → authenticate an existing account
  facebook_auth_code   ┐
  google_auth_code     ┘→ verify with the provider, then
                          authenticate / link / provision an account
  anything else        → UnsupportedGrantType

TOKEN POLICY
------------
A token is minted only when an account is created (and rotated only by
revocation).  Every successful grant returns the account's current token,
so a client that logs in again from a second device does not log the
first one out.

CONCURRENT FIRST LOGINS
-----------------------
Two requests carrying codes for the same brand-new external identity can
both reach the "provision" step.  The store rejects the second insert
(AccountConflictError); the loser looks the account up again and returns
the winner's token.  Exactly one account exists afterwards.

Linking by email has the same race: the store only links an account that
is still unlinked, so when two different identities share an email the
first link wins and the other request gets invalid_grant.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from tokenauth.core.metrics import GRANT_REQUESTS
from tokenauth.models.account import Account
from tokenauth.models.grant import (
    ExternalIdentity,
    GrantRequest,
    GrantType,
    TokenResult,
)
from tokenauth.providers.base import IdentityProvider
from tokenauth.repos.account_repo import AccountConflictError, AccountStore
from tokenauth.services import auth_service
from tokenauth.services.errors import (
    GrantError,
    InvalidGrant,
    NoAuthorizationCode,
    ProviderError,
    UnsupportedGrantType,
)

logger = logging.getLogger(__name__)


class GrantResolver:
    def __init__(
        self,
        store: AccountStore,
        providers: Mapping[GrantType, IdentityProvider],
    ) -> None:
        self._store = store
        self._providers = dict(providers)

    async def resolve(self, request: GrantRequest) -> TokenResult:
        grant = request.grant_type.value
        try:
            match request.grant_type:
                case GrantType.PASSWORD:
                    result, outcome = await self._password(request)
                case GrantType.FACEBOOK_AUTH_CODE | GrantType.GOOGLE_AUTH_CODE:
                    result, outcome = await self._social(request)
                case GrantType.UNSUPPORTED:
                    raise UnsupportedGrantType()
        except GrantError as exc:
            outcome = _outcome_for(exc)
            GRANT_REQUESTS.labels(grant_type=grant, outcome=outcome).inc()
            logger.warning(
                "Grant rejected  grant_type=%s error=%s",
                grant,
                outcome,
                extra={"grant_type": grant},
            )
            raise

        GRANT_REQUESTS.labels(grant_type=grant, outcome=outcome).inc()
        logger.info(
            "Grant issued  grant_type=%s account_id=%s outcome=%s",
            grant,
            result.account_id,
            outcome,
            extra={"grant_type": grant, "account_id": str(result.account_id)},
        )
        return result

    # -- password ---------------------------------------------------------------

    async def _password(self, request: GrantRequest) -> tuple[TokenResult, str]:
        if not request.username or not request.password:
            raise InvalidGrant()
        account = await auth_service.authenticate_account(
            self._store, request.username, request.password
        )
        if account is None:
            raise InvalidGrant()
        return _result(account), "authenticated"

    # -- social (auth code) ---------------------------------------------------

    async def _social(self, request: GrantRequest) -> tuple[TokenResult, str]:
        auth_code = (request.auth_code or "").strip()
        if not auth_code:
            raise NoAuthorizationCode()

        provider = self._providers.get(request.grant_type)
        if provider is None:
            # Grant type is known but no adapter was wired in.
            name = request.grant_type.provider or request.grant_type.value
            raise ProviderError(name, "provider not configured")

        # The store is not touched until the provider has fully answered.
        identity = await provider.verify(auth_code)

        found = await self._find(identity)
        if found is not None:
            return found

        account = Account.new(
            identification=identity.email,
            provider=identity.provider,
            uid=identity.uid,
        )
        try:
            await self._store.add(account)
        except AccountConflictError:
            logger.info(
                "Concurrent provisioning detected  provider=%s uid=%s",
                identity.provider,
                identity.uid,
            )
            found = await self._find(identity)
            if found is None:
                raise
            return found

        return _result(account, created=True), "created"

    async def _find(self, identity: ExternalIdentity) -> tuple[TokenResult, str] | None:
        """Authenticate by (provider, uid), else link by email, else None."""
        account = await self._store.get_by_uid(identity.provider, identity.uid)
        if account is not None:
            return _result(account), "authenticated"

        account = await self._store.get_by_identification(identity.email)
        if account is None:
            return None

        if (account.provider, account.uid) == (identity.provider, identity.uid):
            # Linked by a concurrent request since the uid lookup above.
            return _result(account), "authenticated"

        if account.is_linked:
            # Same email, but the account already belongs to another
            # external identity.  Refuse rather than re-point it.
            logger.warning(
                "Link refused: account already linked  account_id=%s "
                "linked_provider=%s provider=%s",
                account.id,
                account.provider,
                identity.provider,
            )
            raise InvalidGrant()

        try:
            linked = await self._store.link_uid(
                account.id, identity.provider, identity.uid
            )
        except AccountConflictError:
            # A concurrent request linked first.  Only the same identity
            # may use the account; anything else is refused like above.
            owner = await self._store.get_by_uid(identity.provider, identity.uid)
            if owner is not None:
                return _result(owner), "authenticated"
            logger.warning(
                "Link refused: account linked concurrently  account_id=%s "
                "provider=%s",
                account.id,
                identity.provider,
            )
            raise InvalidGrant() from None

        logger.info(
            "Linked account  account_id=%s provider=%s uid=%s",
            linked.id,
            identity.provider,
            identity.uid,
        )
        return _result(linked), "linked"


def _result(account: Account, *, created: bool = False) -> TokenResult:
    return TokenResult(
        access_token=account.oauth2_token, account_id=account.id, created=created
    )


def _outcome_for(exc: GrantError) -> str:
    if isinstance(exc, ProviderError):
        return "provider_error"
    return exc.error_code or type(exc).__name__

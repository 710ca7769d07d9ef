from __future__ import annotations

import httpx

from tokenauth.core.config import GoogleConfig
from tokenauth.models.grant import ExternalIdentity
from tokenauth.providers.base import HttpIdentityProvider, ProviderResponse
from tokenauth.services.errors import ProviderError


class _GoogleUserInfo(ProviderResponse):
    sub: str | None = None
    email: str | None = None
    email_verified: bool | None = None


class GoogleIdentityProvider(HttpIdentityProvider):
    """OAuth2 token endpoint, then the OpenID Connect userinfo endpoint."""

    name = "google"

    def __init__(
        self,
        config: GoogleConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_sec=config.timeout_sec, transport=transport)
        self.config = config

    async def _exchange_code(self, client: httpx.AsyncClient, auth_code: str) -> str:
        response = await client.post(
            self.config.token_url,
            data={
                "grant_type": "authorization_code",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "redirect_uri": self.config.redirect_uri,
                "code": auth_code,
            },
        )
        return self._access_token(response)

    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ExternalIdentity:
        response = await client.get(
            self.config.profile_url, params={"access_token": access_token}
        )
        info = self._parse(response, _GoogleUserInfo, "userinfo")
        if not info.sub or not info.email:
            raise ProviderError(self.name, "userinfo is missing sub or email")
        # The email is used to link existing accounts; an unverified one
        # could be claimed by anybody.
        if info.email_verified is False:
            raise ProviderError(self.name, "email is not verified")
        return ExternalIdentity(provider=self.name, uid=info.sub, email=info.email)

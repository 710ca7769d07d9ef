from __future__ import annotations

import httpx

from tokenauth.core.config import FacebookConfig
from tokenauth.models.grant import ExternalIdentity
from tokenauth.providers.base import HttpIdentityProvider, ProviderResponse
from tokenauth.services.errors import ProviderError


class _FacebookProfile(ProviderResponse):
    id: str | None = None
    email: str | None = None
    name: str | None = None


class FacebookIdentityProvider(HttpIdentityProvider):
    """Graph API: GET oauth/access_token, then GET /me?fields=email,name.

    The Graph API always includes id in the profile.
    """

    name = "facebook"
    PROFILE_FIELDS = "email,name"

    def __init__(
        self,
        config: FacebookConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout_sec=config.timeout_sec, transport=transport)
        self.config = config

    async def _exchange_code(self, client: httpx.AsyncClient, auth_code: str) -> str:
        response = await client.get(
            self.config.token_url,
            params={
                "client_id": self.config.app_id,
                "client_secret": self.config.app_secret,
                "redirect_uri": self.config.redirect_uri,
                "code": auth_code,
            },
        )
        return self._access_token(response)

    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ExternalIdentity:
        response = await client.get(
            self.config.profile_url,
            params={"fields": self.PROFILE_FIELDS, "access_token": access_token},
        )
        profile = self._parse(response, _FacebookProfile, "profile")
        # Facebook omits email when the user declined the permission.
        if not profile.id or not profile.email:
            raise ProviderError(self.name, "profile is missing id or email")
        return ExternalIdentity(provider=self.name, uid=profile.id, email=profile.email)

from __future__ import annotations

import enum
from dataclasses import dataclass
from uuid import UUID


class GrantType(enum.Enum):
    PASSWORD = "password"
    FACEBOOK_AUTH_CODE = "facebook_auth_code"
    GOOGLE_AUTH_CODE = "google_auth_code"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, raw: str | None) -> GrantType:
        """Map a wire value to a grant type; anything unknown is UNSUPPORTED."""
        if raw is None:
            return cls.UNSUPPORTED
        try:
            return cls(raw)
        except ValueError:
            return cls.UNSUPPORTED

    @property
    def provider(self) -> str | None:
        """Name of the identity provider behind a social grant."""
        return _PROVIDERS.get(self)


_PROVIDERS = {
    GrantType.FACEBOOK_AUTH_CODE: "facebook",
    GrantType.GOOGLE_AUTH_CODE: "google",
}


@dataclass(frozen=True, slots=True)
class GrantRequest:
    grant_type: GrantType
    username: str | None = None
    password: str | None = None
    auth_code: str | None = None


@dataclass(frozen=True, slots=True)
class ExternalIdentity:
    """Verified identity returned by a provider; never persisted as-is."""

    provider: str
    uid: str
    email: str


@dataclass(frozen=True, slots=True)
class TokenRevocationRequest:
    token: str | None
    token_type_hint: str | None = None


@dataclass(frozen=True, slots=True)
class TokenResult:
    access_token: str
    account_id: UUID
    created: bool = False

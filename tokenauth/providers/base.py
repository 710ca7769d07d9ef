"""Identity provider adapters: auth code in, verified identity out.

Both supported providers follow the same two-step shape:

  1. exchange the auth code for a provider access token
  2. fetch the profile/userinfo endpoint with that access token

HttpIdentityProvider owns everything the two share: the bounded-timeout
HTTP client, status checking, response validation, metrics, and turning
every failure into a single ProviderError.  Subclasses only describe the
two requests and how the profile maps onto ExternalIdentity.

There are no retries.  A failed exchange is reported to the caller, who
can start a fresh login; auth codes are single-use at the provider, so a
retried exchange would fail anyway.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from tokenauth.core.metrics import PROVIDER_DURATION, PROVIDER_REQUESTS
from tokenauth.models.grant import ExternalIdentity
from tokenauth.services.errors import ProviderError

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


class IdentityProvider(Protocol):
    name: str

    async def verify(self, auth_code: str) -> ExternalIdentity:
        """Exchange *auth_code* for the identity it belongs to.

        Raises ProviderError on any upstream failure.
        """
        ...


class ProviderResponse(BaseModel):
    """Base for provider payloads: unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class AccessTokenResponse(ProviderResponse):
    access_token: str | None = None
    token_type: str | None = None
    expires_in: float | None = None
    error: str | None = None


class HttpIdentityProvider(ABC):
    name = "provider"

    def __init__(
        self,
        *,
        timeout_sec: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    async def verify(self, auth_code: str) -> ExternalIdentity:
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                access_token = await self._exchange_code(client, auth_code)
                identity = await self._fetch_identity(client, access_token)
        except ProviderError as exc:
            self._record("error", start)
            logger.warning(
                "Provider verification failed  provider=%s reason=%s status=%s",
                self.name,
                exc.reason,
                exc.upstream_status,
                extra={"provider": self.name},
            )
            raise
        except httpx.TimeoutException as exc:
            self._record("error", start)
            logger.warning(
                "Provider timed out  provider=%s", self.name, extra={"provider": self.name}
            )
            raise ProviderError(self.name, "timeout") from exc
        except httpx.HTTPError as exc:
            self._record("error", start)
            logger.warning(
                "Provider unreachable  provider=%s error=%s",
                self.name,
                type(exc).__name__,
                extra={"provider": self.name},
            )
            raise ProviderError(self.name, "transport error") from exc

        self._record("ok", start)
        logger.info(
            "Provider verified identity  provider=%s uid=%s",
            self.name,
            identity.uid,
            extra={"provider": self.name},
        )
        return identity

    @abstractmethod
    async def _exchange_code(self, client: httpx.AsyncClient, auth_code: str) -> str:
        """Trade the auth code for a provider access token."""

    @abstractmethod
    async def _fetch_identity(
        self, client: httpx.AsyncClient, access_token: str
    ) -> ExternalIdentity:
        """Read the profile behind *access_token*."""

    # -- helpers for subclasses ------------------------------------------------

    def _parse(self, response: httpx.Response, model: type[_M], step: str) -> _M:
        """Validate status and body of a provider response."""
        if not response.is_success:
            raise ProviderError(
                self.name, f"{step} returned non-2xx", status=response.status_code
            )
        try:
            payload: Any = response.json()
            return model.model_validate(payload)
        except (ValueError, ValidationError) as exc:
            raise ProviderError(
                self.name, f"{step} returned a malformed body", status=response.status_code
            ) from exc

    def _access_token(self, response: httpx.Response) -> str:
        token = self._parse(response, AccessTokenResponse, "token exchange")
        if token.error is not None or not token.access_token:
            raise ProviderError(
                self.name, "token exchange returned no access_token", status=response.status_code
            )
        return token.access_token

    def _record(self, result: str, start: float) -> None:
        PROVIDER_REQUESTS.labels(provider=self.name, result=result).inc()
        PROVIDER_DURATION.labels(provider=self.name).observe(time.monotonic() - start)

"""Token endpoint and revocation endpoint.

  POST /token   — grant_type=password | facebook_auth_code | google_auth_code
  POST /revoke  — rotate the presented token; always 200

Failures of /token are raised as GrantError and rendered by the exception
handler in main.py: 400 {"error": ...} for client errors, 502 with an
empty body when the identity provider fails.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Response, status
from pydantic import BaseModel

from tokenauth.api.dependencies import get_grant_resolver, get_revocation_handler
from tokenauth.models.grant import GrantRequest, GrantType, TokenRevocationRequest
from tokenauth.services.grant_resolver import GrantResolver
from tokenauth.services.revocation_service import RevocationHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth2"])


class TokenOut(BaseModel):
    access_token: str


# ========================== POST /token =====================================


@router.post("/token", response_model=TokenOut)
async def issue_token(
    resolver: Annotated[GrantResolver, Depends(get_grant_resolver)],
    grant_type: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    auth_code: Annotated[str | None, Form()] = None,
) -> TokenOut:
    # NOTE: never log password or auth_code.
    parsed = GrantType.parse(grant_type)
    logger.info(
        "Token request  grant_type=%s", parsed.value, extra={"grant_type": parsed.value}
    )
    result = await resolver.resolve(
        GrantRequest(
            grant_type=parsed,
            username=username,
            password=password,
            auth_code=auth_code,
        )
    )
    return TokenOut(access_token=result.access_token)


# ========================== POST /revoke ====================================


@router.post("/revoke", status_code=status.HTTP_200_OK)
async def revoke_token(
    handler: Annotated[RevocationHandler, Depends(get_revocation_handler)],
    token: Annotated[str | None, Form()] = None,
    token_type_hint: Annotated[str | None, Form()] = None,
) -> Response:
    await handler.revoke(
        TokenRevocationRequest(token=token, token_type_hint=token_type_hint)
    )
    return Response(status_code=status.HTTP_200_OK)

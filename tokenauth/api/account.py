from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tokenauth.api.dependencies import require_account
from tokenauth.models.account import Account

router = APIRouter(tags=["account"])


class AccountOut(BaseModel):
    id: UUID
    identification: str
    provider: str | None = None
    uid: str | None = None


@router.get("/account", response_model=AccountOut)
async def read_account(
    account: Annotated[Account, Depends(require_account)],
) -> AccountOut:
    """Return the account the bearer token belongs to."""
    return AccountOut(
        id=account.id,
        identification=account.identification,
        provider=account.provider,
        uid=account.uid,
    )

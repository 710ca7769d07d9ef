from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

from tokenauth.services import token_service


@dataclass(frozen=True, slots=True)
class Account:
    id: UUID
    identification: str
    oauth2_token: str
    password_hash: str | None = None
    provider: str | None = None
    uid: str | None = None

    @property
    def is_linked(self) -> bool:
        return self.uid is not None

    @staticmethod
    def new(
        *,
        identification: str,
        password_hash: str | None = None,
        provider: str | None = None,
        uid: str | None = None,
    ) -> Account:
        # A token is minted exactly once here; later logins reuse it.
        return Account(
            id=uuid4(),
            identification=identification,
            oauth2_token=token_service.generate_token(),
            password_hash=password_hash,
            provider=provider,
            uid=uid,
        )

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import tokenauth` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tokenauth.api.dependencies import account_repo, identity_providers  # noqa: E402
from tokenauth.main import app  # noqa: E402
from tokenauth.models.account import Account  # noqa: E402
from tokenauth.models.grant import GrantType  # noqa: E402
from tokenauth.services import auth_service  # noqa: E402

TEST_EMAIL = "login@example.com"
TEST_PASSWORD = "s3cure-pass"

FACEBOOK = identity_providers[GrantType.FACEBOOK_AUTH_CODE].config  # type: ignore[attr-defined]
GOOGLE = identity_providers[GrantType.GOOGLE_AUTH_CODE].config  # type: ignore[attr-defined]

PROVIDER_ACCESS_TOKEN = "provider-access-token"


@pytest.fixture(autouse=True)
def reset_accounts() -> None:
    """Clear the in-memory account store between tests."""
    account_repo.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def seed_account(
    email: str = TEST_EMAIL,
    password: str = TEST_PASSWORD,
    *,
    provider: str | None = None,
    uid: str | None = None,
) -> Account:
    """Persist a password account in the in-memory store."""
    account = Account.new(
        identification=email,
        password_hash=auth_service.hash_password(password),
        provider=provider,
        uid=uid,
    )
    asyncio.run(account_repo.add(account))
    return account


def stored(account: Account) -> Account:
    """Re-read an account from the store (the equivalent of a reload)."""
    current = asyncio.run(account_repo.get_by_id(account.id))
    assert current is not None
    return current


@pytest.fixture
def login() -> Account:
    return seed_account()


# ---------------------------------------------------------------------------
# Stubbed identity providers
# ---------------------------------------------------------------------------


@pytest.fixture
def provider_api() -> Iterator[respx.MockRouter]:
    with respx.mock(assert_all_called=False) as mock:
        yield mock


def stub_facebook(
    mock: respx.MockRouter, profile: dict, *, profile_status: int = 200
) -> None:
    mock.get(FACEBOOK.token_url).mock(
        return_value=httpx.Response(
            200, json={"access_token": PROVIDER_ACCESS_TOKEN, "token_type": "bearer"}
        )
    )
    mock.get(FACEBOOK.profile_url).mock(
        return_value=httpx.Response(profile_status, json=profile)
    )


def stub_google(
    mock: respx.MockRouter, userinfo: dict, *, profile_status: int = 200
) -> None:
    mock.post(GOOGLE.token_url).mock(
        return_value=httpx.Response(
            200,
            json={
                "access_token": PROVIDER_ACCESS_TOKEN,
                "token_type": "Bearer",
                "expires_in": 3599,
            },
        )
    )
    mock.get(GOOGLE.profile_url).mock(
        return_value=httpx.Response(profile_status, json=userinfo)
    )

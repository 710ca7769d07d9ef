"""POST /token with grant_type=google_auth_code (Google endpoints stubbed with respx)."""

from __future__ import annotations

import asyncio

import httpx
import respx
from fastapi.testclient import TestClient

from tests.conftest import GOOGLE, TEST_EMAIL, seed_account, stored, stub_google
from tokenauth.api.dependencies import account_repo

GOOGLE_SUB = "1238190321"
PARAMS = {"grant_type": "google_auth_code", "auth_code": "authcode"}


def test_links_existing_account(
    client: TestClient, login, provider_api: respx.MockRouter
) -> None:
    stub_google(provider_api, {"sub": GOOGLE_SUB, "email": TEST_EMAIL})

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 200
    assert resp.json() == {"access_token": login.oauth2_token}
    assert stored(login).uid == GOOGLE_SUB
    assert stored(login).provider == "google"


def test_creates_account_for_new_email(
    client: TestClient, provider_api: respx.MockRouter
) -> None:
    stub_google(
        provider_api,
        {"sub": GOOGLE_SUB, "email": "new-g@example.com", "email_verified": True},
    )

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 200
    created = asyncio.run(account_repo.get_by_identification("new-g@example.com"))
    assert created is not None
    assert account_repo.count() == 1
    assert resp.json() == {"access_token": created.oauth2_token}


def test_sends_auth_code_to_token_endpoint(
    client: TestClient, provider_api: respx.MockRouter
) -> None:
    stub_google(provider_api, {"sub": GOOGLE_SUB, "email": "new-g@example.com"})

    client.post("/token", data=PARAMS)

    token_call = provider_api.calls[0]
    assert token_call.request.url == GOOGLE.token_url
    body = token_call.request.content.decode()
    assert "code=authcode" in body
    assert "grant_type=authorization_code" in body


def test_missing_auth_code_returns_400(client: TestClient) -> None:
    resp = client.post("/token", data={"grant_type": "google_auth_code"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "no_authorization_code"}
    assert account_repo.count() == 0


def test_userinfo_error_returns_502_with_empty_body(
    client: TestClient, login, provider_api: respx.MockRouter
) -> None:
    stub_google(provider_api, {"error": "invalid_token"}, profile_status=422)

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 502
    assert resp.text.strip() == ""
    assert stored(login) == login


def test_token_exchange_without_access_token_returns_502(
    client: TestClient, provider_api: respx.MockRouter
) -> None:
    provider_api.post(GOOGLE.token_url).mock(
        return_value=httpx.Response(200, json={"token_type": "Bearer"})
    )

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 502
    assert account_repo.count() == 0


def test_unverified_email_returns_502(
    client: TestClient, login, provider_api: respx.MockRouter
) -> None:
    stub_google(
        provider_api, {"sub": GOOGLE_SUB, "email": TEST_EMAIL, "email_verified": False}
    )

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 502
    assert stored(login).uid is None


# ---- account already linked to another identity ----


def test_refuses_to_relink_account_linked_elsewhere(
    client: TestClient, provider_api: respx.MockRouter
) -> None:
    linked = seed_account(TEST_EMAIL, provider="facebook", uid="fb-42")
    stub_google(provider_api, {"sub": GOOGLE_SUB, "email": TEST_EMAIL})

    resp = client.post("/token", data=PARAMS)

    assert resp.status_code == 400
    assert resp.json() == {"error": "invalid_grant"}
    assert stored(linked) == linked
    assert account_repo.count() == 1

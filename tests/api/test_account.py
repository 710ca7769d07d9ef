"""GET /account — bearer token authentication."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import TEST_EMAIL


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_account_requires_token(client: TestClient) -> None:
    resp = client.get("/account")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_account_rejects_unknown_token(client: TestClient, login) -> None:
    resp = client.get("/account", headers=_auth("not-a-token"))
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_account_returns_token_owner(client: TestClient, login) -> None:
    resp = client.get("/account", headers=_auth(login.oauth2_token))
    assert resp.status_code == 200
    assert resp.json() == {
        "id": str(login.id),
        "identification": TEST_EMAIL,
        "provider": None,
        "uid": None,
    }


def test_revoked_token_no_longer_authenticates(client: TestClient, login) -> None:
    client.post("/revoke", data={"token": login.oauth2_token})
    resp = client.get("/account", headers=_auth(login.oauth2_token))
    assert resp.status_code == 401

"""Demo: password grant → protected call → revoke, using FastAPI TestClient.

Runs against the in-memory account store (leave DATABASE_URL unset).

Run with:
    python scripts/demo_token_flow.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from tokenauth.api.dependencies import account_repo
from tokenauth.main import app
from tokenauth.models.account import Account
from tokenauth.services import auth_service

TEST_EMAIL = "demo@example.com"
TEST_PASSWORD = "demo-pass"


def main() -> None:
    client = TestClient(app)

    # ── Seed data ───────────────────────────────────────────────────
    seeded = Account.new(
        identification=TEST_EMAIL,
        password_hash=auth_service.hash_password(TEST_PASSWORD),
    )
    asyncio.run(account_repo.add(seeded))

    # ── Step 1: bad password ────────────────────────────────────────
    r = client.post(
        "/token",
        data={"grant_type": "password", "username": TEST_EMAIL, "password": "wrong"},
    )
    print(f"1. POST /token (bad creds)   → {r.status_code}  {r.json()}")

    # ── Step 2: good password ───────────────────────────────────────
    r = client.post(
        "/token",
        data={
            "grant_type": "password",
            "username": TEST_EMAIL,
            "password": TEST_PASSWORD,
        },
    )
    access_token = r.json()["access_token"]
    print(f"2. POST /token (good)        → {r.status_code}  token={access_token[:12]}…")

    # ── Step 3: protected call ──────────────────────────────────────
    r = client.get("/account", headers={"Authorization": f"Bearer {access_token}"})
    print(f"3. GET  /account (bearer)    → {r.status_code}  {r.json()}")

    # ── Step 4: unknown grant type ──────────────────────────────────
    r = client.post("/token", data={"grant_type": "UNKNOWN"})
    print(f"4. POST /token (unknown)     → {r.status_code}  {r.json()}")

    # ── Step 5: revoke ──────────────────────────────────────────────
    r = client.post(
        "/revoke", data={"token_type_hint": "access_token", "token": access_token}
    )
    print(f"5. POST /revoke              → {r.status_code}")

    # ── Step 6: old token no longer works ───────────────────────────
    r = client.get("/account", headers={"Authorization": f"Bearer {access_token}"})
    print(f"6. GET  /account (revoked)   → {r.status_code}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()

from __future__ import annotations

import pytest

from tokenauth.models.account import Account
from tokenauth.models.grant import GrantType


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("password", GrantType.PASSWORD),
        ("facebook_auth_code", GrantType.FACEBOOK_AUTH_CODE),
        ("google_auth_code", GrantType.GOOGLE_AUTH_CODE),
        ("UNKNOWN", GrantType.UNSUPPORTED),
        ("authorization_code", GrantType.UNSUPPORTED),
        ("", GrantType.UNSUPPORTED),
        (None, GrantType.UNSUPPORTED),
    ],
)
def test_grant_type_parse(raw: str | None, expected: GrantType) -> None:
    assert GrantType.parse(raw) is expected


def test_grant_type_provider() -> None:
    assert GrantType.FACEBOOK_AUTH_CODE.provider == "facebook"
    assert GrantType.GOOGLE_AUTH_CODE.provider == "google"
    assert GrantType.PASSWORD.provider is None


def test_new_accounts_get_distinct_tokens() -> None:
    a = Account.new(identification="a@example.com")
    b = Account.new(identification="b@example.com")
    assert a.oauth2_token != b.oauth2_token
    assert len(a.oauth2_token) >= 43
    assert a.is_linked is False

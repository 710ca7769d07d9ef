"""Opaque bearer token generation.

Tokens are random, not self-describing: the only way to learn who a token
belongs to is an AccountStore lookup.  That is what makes revocation a
simple rotation of the stored value.
"""

from __future__ import annotations

import hmac
import secrets

TOKEN_BYTES = 32


def generate_token() -> str:
    """Return a fresh URL-safe token with TOKEN_BYTES of entropy."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def tokens_match(presented: str, stored: str) -> bool:
    """Constant-time comparison of two tokens."""
    return hmac.compare_digest(presented.encode(), stored.encode())

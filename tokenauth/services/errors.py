"""Grant errors and their HTTP mapping.

Every failure of POST /token is one of these.  The exception handler in
main.py renders ``{"error": error_code}`` with ``status_code``; an error
whose ``error_code`` is None is rendered with an empty body.
"""

from __future__ import annotations


class GrantError(Exception):
    error_code: str | None = None
    status_code: int = 400


class InvalidGrant(GrantError):
    error_code = "invalid_grant"


class NoAuthorizationCode(GrantError):
    error_code = "no_authorization_code"


class UnsupportedGrantType(GrantError):
    error_code = "unsupported_grant_type"


class ProviderError(GrantError):
    """The identity provider failed, timed out, or answered garbage.

    Rendered as 502 with no body; the upstream payload stays in the logs.
    """

    error_code = None
    status_code = 502

    def __init__(self, provider: str, reason: str, *, status: int | None = None):
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason
        self.upstream_status = status

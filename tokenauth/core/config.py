from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class FacebookConfig:
    app_id: str
    app_secret: str
    redirect_uri: str
    timeout_sec: float
    token_url: str = "https://graph.facebook.com/v19.0/oauth/access_token"
    profile_url: str = "https://graph.facebook.com/me"


@dataclass(frozen=True)
class GoogleConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout_sec: float
    token_url: str = "https://oauth2.googleapis.com/token"
    profile_url: str = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    provider_timeout_sec: float
    facebook_app_id: str = ""
    facebook_app_secret: str = ""
    facebook_redirect_uri: str = ""
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = ""

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    def facebook(self) -> FacebookConfig:
        return FacebookConfig(
            app_id=self.facebook_app_id,
            app_secret=self.facebook_app_secret,
            redirect_uri=self.facebook_redirect_uri,
            timeout_sec=self.provider_timeout_sec,
        )

    def google(self) -> GoogleConfig:
        return GoogleConfig(
            client_id=self.google_client_id,
            client_secret=self.google_client_secret,
            redirect_uri=self.google_redirect_uri,
            timeout_sec=self.provider_timeout_sec,
        )


def _parse_bool(name: str, raw: str) -> bool:
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    timeout_raw = _getenv("PROVIDER_TIMEOUT_SEC", "10")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    # A provider call without a bound can hang a request indefinitely.
    try:
        provider_timeout_sec = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"PROVIDER_TIMEOUT_SEC must be a number (got {timeout_raw!r})"
        ) from None
    if provider_timeout_sec <= 0:
        raise ValueError(
            f"PROVIDER_TIMEOUT_SEC must be positive (got {timeout_raw!r})"
        )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_parse_bool("LOG_JSON", log_json_raw),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        provider_timeout_sec=provider_timeout_sec,
        facebook_app_id=_getenv("FACEBOOK_APP_ID", ""),
        facebook_app_secret=_getenv("FACEBOOK_APP_SECRET", ""),
        facebook_redirect_uri=_getenv("FACEBOOK_REDIRECT_URI", ""),
        google_client_id=_getenv("GOOGLE_CLIENT_ID", ""),
        google_client_secret=_getenv("GOOGLE_CLIENT_SECRET", ""),
        google_redirect_uri=_getenv("GOOGLE_REDIRECT_URI", ""),
    )


SETTINGS = load_settings()

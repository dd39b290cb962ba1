from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

from oauth_relay.models.callback import ProviderCredentials

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
DEFAULT_GITHUB_USER_URL = "https://api.github.com/user"


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    github_client_id: str | None
    # Never part of repr: Settings gets logged at startup.
    github_client_secret: str | None = field(repr=False)
    github_token_url: str = DEFAULT_GITHUB_TOKEN_URL
    github_user_url: str = DEFAULT_GITHUB_USER_URL
    public_origin: str | None = None
    admin_path: str = "/admin/"
    http_timeout_sec: float = 10.0

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def credentials(self) -> ProviderCredentials:
        return ProviderCredentials(
            client_id=self.github_client_id,
            client_secret=self.github_client_secret,
        )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8000")
    timeout_raw = _getenv("HTTP_TIMEOUT_SEC", "10")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0", "yes", "no"):
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        http_timeout_sec = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"HTTP_TIMEOUT_SEC must be a number (got {timeout_raw!r})"
        ) from None
    if http_timeout_sec <= 0:
        raise ValueError(f"HTTP_TIMEOUT_SEC must be > 0 (got {timeout_raw!r})")

    public_origin = _getenv("PUBLIC_ORIGIN", "").rstrip("/") or None
    if public_origin is not None and not public_origin.startswith(
        ("http://", "https://")
    ):
        raise ValueError(
            f"PUBLIC_ORIGIN must start with http:// or https:// (got {public_origin!r})"
        )

    admin_path = _getenv("ADMIN_PATH", "/admin/")
    if not admin_path.startswith("/"):
        admin_path = "/" + admin_path

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1", "yes"),
        port=port,
        # Empty env vars count as missing, same as unset.
        github_client_id=_getenv("GITHUB_CLIENT_ID", "") or None,
        github_client_secret=_getenv("GITHUB_CLIENT_SECRET", "") or None,
        github_token_url=_getenv("GITHUB_TOKEN_URL", DEFAULT_GITHUB_TOKEN_URL),
        github_user_url=_getenv("GITHUB_USER_URL", DEFAULT_GITHUB_USER_URL),
        public_origin=public_origin,
        admin_path=admin_path,
        http_timeout_sec=http_timeout_sec,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()

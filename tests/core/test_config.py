from __future__ import annotations

import pytest

from oauth_relay.core.config import (
    DEFAULT_GITHUB_TOKEN_URL,
    DEFAULT_GITHUB_USER_URL,
    AppEnv,
    Settings,
    load_settings,
)

_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "PORT",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GITHUB_TOKEN_URL",
    "GITHUB_USER_URL",
    "PUBLIC_ORIGIN",
    "ADMIN_PATH",
    "HTTP_TIMEOUT_SEC",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults() -> None:
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.port == 8000
    assert settings.github_client_id is None
    assert settings.github_client_secret is None
    assert settings.github_token_url == DEFAULT_GITHUB_TOKEN_URL
    assert settings.github_user_url == DEFAULT_GITHUB_USER_URL
    assert settings.public_origin is None
    assert settings.admin_path == "/admin/"
    assert settings.http_timeout_sec == 10.0


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("GITHUB_CLIENT_ID", "Iv1.abc")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "shh")
    monkeypatch.setenv("GITHUB_TOKEN_URL", "https://ghe.corp/login/oauth/access_token")
    monkeypatch.setenv("GITHUB_USER_URL", "https://ghe.corp/api/v3/user")
    monkeypatch.setenv("PUBLIC_ORIGIN", "https://cms.example.com/")
    monkeypatch.setenv("HTTP_TIMEOUT_SEC", "2.5")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.github_client_id == "Iv1.abc"
    assert settings.github_client_secret == "shh"
    assert settings.github_token_url == "https://ghe.corp/login/oauth/access_token"
    assert settings.github_user_url == "https://ghe.corp/api/v3/user"
    assert settings.public_origin == "https://cms.example.com"
    assert settings.http_timeout_sec == 2.5


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_empty_credentials_count_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_CLIENT_ID", "   ")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "")
    settings = load_settings()
    assert settings.github_client_id is None
    assert settings.credentials.is_complete is False


def test_admin_path_gets_leading_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_PATH", "cms/")
    assert load_settings().admin_path == "/cms/"


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_invalid_log_json(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match="LOG_JSON must be true|false"):
        load_settings()


def test_load_settings_rejects_non_integer_port(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_load_settings_rejects_bad_timeout(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("HTTP_TIMEOUT_SEC", raw)
    with pytest.raises(ValueError, match="HTTP_TIMEOUT_SEC"):
        load_settings()


def test_load_settings_rejects_origin_without_scheme(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PUBLIC_ORIGIN", "cms.example.com")
    with pytest.raises(ValueError, match="PUBLIC_ORIGIN must start with"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        github_client_id="cid",
        github_client_secret="top-secret-value",
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    assert _make_settings("prod").is_prod is True
    assert _make_settings("prod").is_dev is False


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


def test_secret_not_in_repr() -> None:
    s = _make_settings()
    assert "top-secret-value" not in repr(s)
    assert "top-secret-value" not in repr(s.credentials)


def test_credentials_value() -> None:
    creds = _make_settings().credentials
    assert creds.client_id == "cid"
    assert creds.client_secret == "top-secret-value"
    assert creds.is_complete is True

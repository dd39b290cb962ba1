from __future__ import annotations

import asyncio
import json
import os
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

# Ensure repo root is on sys.path so `import oauth_relay` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings load at import time; pin the ones that change test expectations
# before the app module is imported.
os.environ["APP_ENV"] = "test"
os.environ.pop("PUBLIC_ORIGIN", None)
os.environ.pop("ADMIN_PATH", None)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from oauth_relay.api.dependencies import get_callback_handler  # noqa: E402
from oauth_relay.main import app  # noqa: E402
from oauth_relay.models.callback import ProviderCredentials  # noqa: E402
from oauth_relay.services.callback_handler import CallbackHandler  # noqa: E402
from oauth_relay.services.github_client import GitHubClient  # noqa: E402

CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-s3cret"
TOKEN_URL = "https://github.test/login/oauth/access_token"
USER_URL = "https://api.github.test/user"
ORIGIN = "http://testserver"

BAD_CODE_BODY = {
    "error": "bad_verification_code",
    "error_description": "The code passed is incorrect or expired.",
    "error_uri": "https://docs.github.com/apps/troubleshooting",
}


@dataclass
class FakeGitHub:
    """In-process stand-in for the GitHub token and user endpoints.

    Serves canned responses through httpx.MockTransport and records every
    request.  Codes are single-use, like the real token endpoint: a
    replayed code gets the bad_verification_code error body.
    """

    token_status: int = 200
    token_body: object = field(
        default_factory=lambda: {
            "access_token": "abc123",
            "token_type": "bearer",
            "scope": "repo,user",
        }
    )
    token_error: Exception | None = None
    user_status: int = 200
    user_body: object = field(default_factory=lambda: {"login": "octocat", "id": 1})
    user_error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)
    used_codes: set[str] = field(default_factory=set)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url == TOKEN_URL:
            if self.token_error is not None:
                raise self.token_error
            code = json.loads(request.content).get("code")
            if code in self.used_codes:
                return httpx.Response(200, json=BAD_CODE_BODY)
            self.used_codes.add(code)
            return _respond(self.token_status, self.token_body)

        if url == USER_URL:
            if self.user_error is not None:
                raise self.user_error
            return _respond(self.user_status, self.user_body)

        return httpx.Response(404, text="Not Found")

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == url]


def _respond(status_code: int, body: object) -> httpx.Response:
    if isinstance(body, str):
        return httpx.Response(status_code, text=body)
    return httpx.Response(status_code, json=body)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def credentials() -> ProviderCredentials:
    """Complete credentials; parametrize over this name to override."""
    return ProviderCredentials(client_id=CLIENT_ID, client_secret=CLIENT_SECRET)


@pytest.fixture
def http_client(fake_github: FakeGitHub) -> Iterator[httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handle))
    yield http
    asyncio.run(http.aclose())


@pytest.fixture
def handler(
    credentials: ProviderCredentials, http_client: httpx.AsyncClient
) -> CallbackHandler:
    github = GitHubClient(http_client, token_url=TOKEN_URL, user_url=USER_URL)
    return CallbackHandler(credentials, github)


@pytest.fixture
def client(handler: CallbackHandler) -> Iterator[TestClient]:
    app.dependency_overrides[get_callback_handler] = lambda: handler
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()


def callback_params(**overrides: str | None) -> dict[str, str]:
    """Query string GitHub appends when redirecting back to /auth."""
    params: dict[str, str | None] = {
        "provider": "github",
        "site_id": "my-site.example.com",
        "code": "gh-code-1",
        "state": "st8-xyz",
    }
    params.update(overrides)
    return {k: v for k, v in params.items() if v is not None}

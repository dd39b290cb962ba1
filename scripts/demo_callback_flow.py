"""Demo: walk the GitHub → /auth → admin UI callback using FastAPI TestClient.

GitHub is replaced by an in-process httpx.MockTransport, so no OAuth app
or network access is needed.

Run with:
    python scripts/demo_callback_flow.py
"""

from __future__ import annotations

import json

import httpx
from fastapi.testclient import TestClient

from oauth_relay.api.dependencies import get_callback_handler
from oauth_relay.main import app
from oauth_relay.models.callback import ProviderCredentials
from oauth_relay.services.callback_handler import CallbackHandler
from oauth_relay.services.github_client import GitHubClient

TOKEN_URL = "https://github.demo/login/oauth/access_token"
USER_URL = "https://api.github.demo/user"

_used_codes: set[str] = set()


def _fake_github(request: httpx.Request) -> httpx.Response:
    if str(request.url) == TOKEN_URL:
        code = json.loads(request.content)["code"]
        if code in _used_codes:
            return httpx.Response(
                200,
                json={
                    "error": "bad_verification_code",
                    "error_description": "The code passed is incorrect or expired.",
                },
            )
        _used_codes.add(code)
        return httpx.Response(200, json={"access_token": "gho_demo", "scope": "repo"})
    if request.headers.get("authorization") == "token gho_demo":
        return httpx.Response(200, json={"login": "octocat"})
    return httpx.Response(401, json={"message": "Bad credentials"})


def _use_handler(credentials: ProviderCredentials) -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(_fake_github))
    handler = CallbackHandler(
        credentials, GitHubClient(http, token_url=TOKEN_URL, user_url=USER_URL)
    )
    app.dependency_overrides[get_callback_handler] = lambda: handler


def main() -> None:
    client = TestClient(app, follow_redirects=False)
    params = {
        "provider": "github",
        "site_id": "demo.example.com",
        "code": "demo-code",
        "state": "demo-state",
    }

    # ── Step 1: no credentials configured ───────────────────────────
    _use_handler(ProviderCredentials(client_id=None, client_secret=None))
    r = client.get("/auth", params=params)
    print(f"1. GET /auth (no credentials)   → {r.status_code}  {r.text}")

    _use_handler(ProviderCredentials(client_id="demo-id", client_secret="demo-secret"))

    # ── Step 2: wrong provider ──────────────────────────────────────
    r = client.get("/auth", params={**params, "provider": "gitlab"})
    print(f"2. GET /auth (provider=gitlab)  → {r.status_code}  {r.text}")

    # ── Step 3: valid callback ──────────────────────────────────────
    r = client.get("/auth", params=params)
    print(f"3. GET /auth (valid)            → {r.status_code}  Location: {r.headers['location']}")

    # ── Step 4: replay the code ─────────────────────────────────────
    r = client.get("/auth", params=params)
    print(f"4. GET /auth (replayed code)    → {r.status_code}  {r.text}")

    app.dependency_overrides.clear()
    print("\nAll steps completed.")


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import Annotated

import httpx
from fastapi import Depends, Request

from oauth_relay.core.config import SETTINGS
from oauth_relay.services.callback_handler import CallbackHandler
from oauth_relay.services.github_client import GitHubClient


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The shared outbound client opened by the lifespan hook."""
    return request.app.state.http_client


def get_callback_handler(
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> CallbackHandler:
    """Build the handler from process settings.

    Tests replace this dependency to inject credentials and a fake
    GitHub transport instead of mutating the environment.
    """
    github = GitHubClient(
        http,
        token_url=SETTINGS.github_token_url,
        user_url=SETTINGS.github_user_url,
    )
    return CallbackHandler(
        SETTINGS.credentials,
        github,
        admin_path=SETTINGS.admin_path,
    )


def request_origin(request: Request) -> str:
    """Origin the admin UI is served from.

    PUBLIC_ORIGIN wins when set: behind a TLS-terminating proxy the
    inbound request looks like plain http on an internal host.
    """
    if SETTINGS.public_origin:
        return SETTINGS.public_origin
    return f"{request.url.scheme}://{request.url.netloc}"

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from oauth_relay.core.metrics import GITHUB_REQUEST_DURATION
from oauth_relay.models.callback import (
    ExchangeOutcome,
    IdentityProfile,
    ProviderCredentials,
    TokenAbsent,
    TokenGranted,
    TokenRejected,
)

# The two GitHub endpoints the relay talks to:
#   POST <token_url>  - trade the authorization code for an access token
#   GET  <user_url>   - prove the token is accepted by the API
#
# Both requests ask for JSON. Without `Accept: application/json` the token
# endpoint answers with a form-encoded body.

logger = logging.getLogger(__name__)

_JSON = "application/json"


class UpstreamStatusError(Exception):
    """GitHub answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"{status_code} - {body}")
        self.status_code = status_code
        self.body = body


def parse_exchange(payload: Any) -> ExchangeOutcome:
    """Turn a 2xx token-endpoint body into a closed outcome.

    GitHub reports bad/expired/replayed codes with a 200 and an ``error``
    field, so the status code alone says nothing about success.  An error
    field wins over a token if both are somehow present.
    """
    if not isinstance(payload, dict):
        raise ValueError(
            f"GitHub token response is not a JSON object (got {type(payload).__name__})"
        )

    error = payload.get("error")
    if error:
        description = payload.get("error_description")
        return TokenRejected(
            error=str(error),
            description=str(description) if description else None,
        )

    access_token = payload.get("access_token")
    if isinstance(access_token, str) and access_token:
        return TokenGranted(access_token=access_token)

    return TokenAbsent()


class GitHubClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        token_url: str,
        user_url: str,
    ) -> None:
        self._http = http
        self._token_url = token_url
        self._user_url = user_url

    async def exchange_code(
        self,
        credentials: ProviderCredentials,
        *,
        code: str,
        redirect_uri: str,
        state: str,
    ) -> ExchangeOutcome:
        start = time.monotonic()
        try:
            response = await self._http.post(
                self._token_url,
                json={
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                    "code": code,
                    "redirect_uri": redirect_uri,
                    "state": state,
                },
                headers={"Accept": _JSON},
            )
        finally:
            GITHUB_REQUEST_DURATION.labels(call="token_exchange").observe(
                time.monotonic() - start
            )

        logger.debug("GitHub token endpoint answered %d", response.status_code)
        if not response.is_success:
            raise UpstreamStatusError(response.status_code, response.text)

        return parse_exchange(response.json())

    async def fetch_identity(self, access_token: str) -> IdentityProfile:
        start = time.monotonic()
        try:
            response = await self._http.get(
                self._user_url,
                headers={
                    "Authorization": f"token {access_token}",
                    "Accept": _JSON,
                },
            )
        finally:
            GITHUB_REQUEST_DURATION.labels(call="identity").observe(
                time.monotonic() - start
            )

        logger.debug("GitHub identity endpoint answered %d", response.status_code)
        if not response.is_success:
            raise UpstreamStatusError(response.status_code, response.text)

        # Parsed only to prove the body is JSON; its shape is not checked.
        return IdentityProfile(data=response.json())

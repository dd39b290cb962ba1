from __future__ import annotations

import logging

from fastapi import status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from oauth_relay.core.metrics import OAUTH_CALLBACKS
from oauth_relay.models.callback import (
    GITHUB,
    CallbackFailure,
    CallbackRequest,
    FailureKind,
    ProviderCredentials,
    RedirectTarget,
    TokenAbsent,
    TokenRejected,
)
from oauth_relay.services.github_client import GitHubClient, UpstreamStatusError

# ---------------------------------------------------------------------------
# OAuth callback relay - GitHub authorization code → admin UI redirect
#
#   validate → exchange code → verify identity → redirect
#
# Every step either advances or returns a CallbackFailure. Nothing is
# retried and nothing is stored; the only state is the local variables.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

CallbackResult = RedirectTarget | CallbackFailure


def _fail(kind: FailureKind, message: str, **extra: object) -> CallbackFailure:
    failure = CallbackFailure(kind=kind, message=message)
    OAUTH_CALLBACKS.labels(outcome=kind).inc()
    logger.warning(
        "CALLBACK FAIL: %s  status=%d",
        kind,
        failure.status_code,
        extra={"outcome": kind, **extra},
    )
    return failure


class CallbackHandler:
    def __init__(
        self,
        credentials: ProviderCredentials,
        github: GitHubClient,
        *,
        admin_path: str = "/admin/",
    ) -> None:
        self._credentials = credentials
        self._github = github
        self._admin_path = admin_path

    async def run(
        self,
        request: CallbackRequest,
        *,
        origin: str,
        self_url: str,
    ) -> CallbackResult:
        """Drive one callback to a terminal state.

        ``origin`` is where the admin UI lives; ``self_url`` is this
        endpoint's own URL, sent to GitHub as redirect_uri.
        """
        # --- Validate configuration ----------------------------------------
        # FAIL POINT: without both credentials no exchange can succeed, so
        # refuse before touching GitHub, whatever the request looks like.
        if not self._credentials.is_complete:
            return _fail(
                "misconfigured_server",
                "Missing GitHub OAuth App Client ID or Client Secret.",
            )

        # --- Validate input ----------------------------------------------------
        # FAIL POINT: only the github provider is relayed, and a code is required.
        if request.provider != GITHUB:
            return _fail(
                "bad_request",
                f"Invalid OAuth parameters: provider must be '{GITHUB}'.",
            )
        if not request.code:
            return _fail(
                "bad_request",
                "Invalid OAuth parameters: missing authorization code.",
            )
        if not request.state:
            # Not validated either way; the admin UI owns CSRF protection.
            logger.warning("Callback received without a state parameter")
        logger.info("CALLBACK step 1: parameters valid  site_id=%s  ✓", request.site_id)

        try:
            # --- Exchange code for token ---------------------------------------
            try:
                outcome = await self._github.exchange_code(
                    self._credentials,
                    code=request.code,
                    redirect_uri=self_url,
                    state=request.state,
                )
            except UpstreamStatusError as e:
                return _fail(
                    "upstream_exchange_failed",
                    f"OAuth Error: Failed to get access token from GitHub: {e}",
                    upstream_status=e.status_code,
                )

            # FAIL POINT: a 2xx with an error field is how GitHub reports
            # bad, expired and already-used codes.
            if isinstance(outcome, TokenRejected):
                detail = outcome.error
                if outcome.description:
                    detail = f"{detail} - {outcome.description}"
                return _fail(
                    "upstream_exchange_failed",
                    f"OAuth Error: GitHub token error: {detail}",
                )
            if isinstance(outcome, TokenAbsent):
                return _fail(
                    "token_missing",
                    "OAuth Error: GitHub did not return an access token.",
                )
            access_token = outcome.access_token
            logger.info("CALLBACK step 2: code exchanged for access token  ✓")

            # --- Verify the token against the identity API ---------------------
            # FAIL POINT: a token the API rejects (e.g. missing scope) must not
            # reach the admin UI; the profile itself is not used.
            try:
                profile = await self._github.fetch_identity(access_token)
            except UpstreamStatusError as e:
                return _fail(
                    "upstream_identity_failed",
                    f"OAuth Error: Failed to get user info from GitHub: {e}",
                    upstream_status=e.status_code,
                )
            logger.info("CALLBACK step 3: token verified  login=%s  ✓", profile.login)

        except Exception as e:
            # Network errors, timeouts, unparseable bodies.
            logger.exception("OAuth process error")
            return _fail("unexpected_failure", f"OAuth Error: {e}")

        # --- Redirect back to the admin UI --------------------------------------
        target = RedirectTarget(
            origin=origin,
            admin_path=self._admin_path,
            access_token=access_token,
            provider=GITHUB,
            site_id=request.site_id,
            state=request.state,
        )
        OAUTH_CALLBACKS.labels(outcome="redirected").inc()
        logger.info(
            "CALLBACK step 4: redirecting to admin UI  origin=%s",
            origin,
            extra={"outcome": "redirected"},
        )
        return target


def to_response(result: CallbackResult) -> Response:
    if isinstance(result, RedirectTarget):
        return RedirectResponse(url=result.url, status_code=status.HTTP_302_FOUND)
    return PlainTextResponse(result.message, status_code=result.status_code)

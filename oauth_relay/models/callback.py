from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import quote, urlencode

GITHUB = "github"

# •	provider: str        - must be "github"
# •	site_id: str         - opaque, echoed back to the admin UI
# •	code: str            - single-use authorization code from GitHub
# •	state: str           - opaque, echoed back, NOT checked server-side


@dataclass(frozen=True, slots=True)
class CallbackRequest:
    provider: str
    site_id: str
    code: str
    state: str

    @staticmethod
    def from_query(
        *,
        provider: str | None,
        site_id: str | None,
        code: str | None,
        state: str | None,
    ) -> CallbackRequest:
        return CallbackRequest(
            provider=provider or "",
            site_id=site_id or "",
            code=code or "",
            state=state or "",
        )


@dataclass(frozen=True, slots=True)
class ProviderCredentials:
    client_id: str | None
    client_secret: str | None = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)


# ---------------------------------------------------------------------------
# Token exchange outcome - closed set produced by github_client.parse_exchange
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TokenGranted:
    access_token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class TokenRejected:
    error: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class TokenAbsent:
    """2xx response with neither an access_token nor an error field."""


ExchangeOutcome = TokenGranted | TokenRejected | TokenAbsent


@dataclass(frozen=True, slots=True)
class IdentityProfile:
    # Only fetched to prove the token is usable; fields are not interpreted.
    data: Any

    @property
    def login(self) -> str | None:
        if not isinstance(self.data, dict):
            return None
        value = self.data.get("login")
        return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class RedirectTarget:
    origin: str
    admin_path: str
    access_token: str = field(repr=False)
    provider: str
    site_id: str
    state: str

    @property
    def url(self) -> str:
        # The admin UI reads these from the URL fragment, in this order.
        query = urlencode(
            {
                "access_token": self.access_token,
                "provider": self.provider,
                "site_id": self.site_id,
                "state": self.state,
            },
            safe="/=",
            quote_via=quote,
        )
        return f"{self.origin}{self.admin_path}#/auth?{query}"


# ---------------------------------------------------------------------------
# Terminal failures
# ---------------------------------------------------------------------------

FailureKind = Literal[
    "misconfigured_server",
    "bad_request",
    "upstream_exchange_failed",
    "token_missing",
    "upstream_identity_failed",
    "unexpected_failure",
]

FAILURE_STATUS: dict[str, int] = {
    "misconfigured_server": 500,
    "bad_request": 400,
    "upstream_exchange_failed": 500,
    "token_missing": 500,
    "upstream_identity_failed": 500,
    "unexpected_failure": 500,
}


@dataclass(frozen=True, slots=True)
class CallbackFailure:
    kind: FailureKind
    message: str

    @property
    def status_code(self) -> int:
        return FAILURE_STATUS[self.kind]

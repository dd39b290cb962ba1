"""Health and readiness endpoints.

  /health (liveness):  "Is the process alive?"  Always 200; the body says
                       whether the GitHub credentials are configured.
  /ready (readiness):  "Can this instance complete a login?"  503 when the
                       credentials are missing, so the load balancer keeps
                       traffic away from an instance that can only answer
                       every callback with a 500.

Neither endpoint calls GitHub.  An outage there is per-request and shows
up in oauth_callbacks_total, not as a restart or a drained instance.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from oauth_relay.core.config import SETTINGS

router = APIRouter(tags=["health"])


def _credentials_check() -> str:
    return "ok" if SETTINGS.credentials.is_complete else "missing"


@router.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "checks": {"github_credentials": _credentials_check()},
    }


@router.get("/ready")
async def ready() -> Response:
    if _credentials_check() != "ok":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)

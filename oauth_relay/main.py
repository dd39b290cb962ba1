from __future__ import annotations

import logging

from fastapi import FastAPI

from oauth_relay.api.auth import router as auth_router
from oauth_relay.api.health import router as health_router
from oauth_relay.api.metrics_endpoint import router as metrics_router
from oauth_relay.core.config import SETTINGS
from oauth_relay.core.http import lifespan_http_client
from oauth_relay.core.logging import setup_logging
from oauth_relay.middleware.metrics import MetricsMiddleware
from oauth_relay.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


# only app setup + router registration

app = FastAPI(
    title="decap-oauth-relay",
    lifespan=lifespan_http_client,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(auth_router)
app.include_router(health_router)

if not SETTINGS.credentials.is_complete:
    logger.warning(
        "GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET not set; "
        "every callback will answer 500 until they are configured"
    )

logger.info(
    "decap-oauth-relay started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)

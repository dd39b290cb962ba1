"""Outbound HTTP client lifecycle.

One httpx.AsyncClient per process, shared by every callback request.
The client pools connections to github.com / api.github.com, so the two
round-trips of a login reuse TLS sessions instead of re-handshaking.
Requests share the pool but no request data.

Mirrors the startup/shutdown shape of the other lifespan hooks: open on
startup, stash on app.state, close on shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from oauth_relay.core.config import SETTINGS

logger = logging.getLogger(__name__)


def build_http_client(timeout_sec: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_sec),
        headers={"User-Agent": "decap-oauth-relay"},
    )


@asynccontextmanager
async def lifespan_http_client(app: FastAPI) -> AsyncGenerator[None, None]:
    client = build_http_client(SETTINGS.http_timeout_sec)
    app.state.http_client = client
    logger.info("Outbound HTTP client ready  timeout=%.1fs", SETTINGS.http_timeout_sec)
    try:
        yield
    finally:
        await client.aclose()
        logger.info("Outbound HTTP client closed")

"""Request context middleware - request id, timing, one summary log line.

The callback handler waits on GitHub twice per request, and many
callbacks can be in flight on one event loop.  Their log lines interleave,
so every line carries the request id (see core/logging.py for the
ContextVar and the logging filter that reads it).

The summary line logs the PATH only.  The callback's query string holds
the single-use authorization code, which never goes to the logs.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from oauth_relay.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, time the request, log completion.

    1. Reads X-Request-ID (if the caller sent one) or generates a UUID
    2. Stores it in the request_id ContextVar
    3. Logs method, path, status and duration on completion
    4. Echoes X-Request-ID on the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        try:
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            logger.info(
                "%s %s → %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

            response.headers["X-Request-ID"] = req_id
            return response
        finally:
            request_id_var.reset(token)

"""Application metrics using the Prometheus client library.

This module defines all metrics in one place, a single inventory of
everything the relay measures.  Other modules import specific metrics
and increment/observe them at the point of action.

Prometheus PULLS these from GET /metrics (see api/metrics_endpoint.py).

WHAT WE WATCH
---------------
  http_*                     - every inbound request (MetricsMiddleware)
  oauth_callbacks_total      - one increment per terminal state of the
                               callback handler, labeled by outcome.
                               A spike in "upstream_exchange_failed" usually
                               means replayed/expired codes or a rotated
                               client secret.
  github_request_duration_*  - latency of the two outbound GitHub calls.
                               These are the only suspension points of a
                               callback, so they dominate its latency.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Callback requests wait on two GitHub round-trips, so the upper
    # buckets matter more here than for a typical API.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Relay-specific metrics
# ---------------------------------------------------------------------------

OAUTH_CALLBACKS = Counter(
    "oauth_callbacks_total",
    "OAuth callback requests by terminal outcome",
    ["outcome"],  # "redirected" or one of the CallbackFailure kinds
)

GITHUB_REQUEST_DURATION = Histogram(
    "github_request_duration_seconds",
    "Outbound GitHub API call duration in seconds",
    ["call"],  # "token_exchange" or "identity"
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

"""Prometheus metrics for the token service.

Every metric the service records is declared here; the modules that own
the behavior import the metric and increment or observe it in place.

HTTP metrics are filled in by MetricsMiddleware for every request.  The
grant/provider/revocation metrics answer the questions the HTTP metrics
cannot: which grant types fail, and whether a spike of 502s comes from
Facebook or from Google.

  rate(grant_requests_total{outcome="provider_error"}[5m])
  histogram_quantile(0.95, rate(provider_request_duration_seconds_bucket[5m]))
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Grant resolution
# ---------------------------------------------------------------------------

GRANT_REQUESTS = Counter(
    "grant_requests_total",
    "Token grant requests by grant type and outcome",
    # outcome: authenticated | linked | created | invalid_grant |
    #          no_authorization_code | unsupported_grant_type | provider_error
    ["grant_type", "outcome"],
)

# ---------------------------------------------------------------------------
# Identity providers
# ---------------------------------------------------------------------------

PROVIDER_REQUESTS = Counter(
    "provider_requests_total",
    "Auth code verifications against external identity providers",
    ["provider", "result"],  # result: ok | error
)

PROVIDER_DURATION = Histogram(
    "provider_request_duration_seconds",
    "Wall time of a full auth code verification (token exchange + profile)",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# ---------------------------------------------------------------------------
# Revocation
# ---------------------------------------------------------------------------

TOKEN_REVOCATIONS = Counter(
    "token_revocations_total",
    "Revocation requests by whether the token matched an account",
    ["result"],  # rotated | unknown
)

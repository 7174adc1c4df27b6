"""Prometheus metrics shared by the app and the auth services."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "orderapi_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "orderapi_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_EVENTS = Counter(
    "orderapi_auth_events_total",
    "Authentication events by outcome",
    ["event", "outcome"],
)
EXPIRED_TOKENS_REMOVED = Counter(
    "orderapi_refresh_tokens_cleaned_total",
    "Refresh token records removed by the cleanup worker",
)

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

_REQ_COUNT = Counter(
    "hostdni_http_requests_total",
    "Total HTTP requests",
    labelnames=("method", "path", "status"),
)
_REQ_LATENCY = Histogram(
    "hostdni_http_request_duration_seconds",
    "HTTP request latency seconds",
    labelnames=("method", "path"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.3, 0.5, 1.0, 2.5, 5.0, 10.0),
)
_HOSTS_OPS = Counter(
    "hostdni_hosts_operations_total",
    "Hosts file operations",
    labelnames=("action", "result"),
)
_AUTH_FAILURES = Counter(
    "hostdni_auth_failures_total",
    "Rejected API requests with a missing or invalid token",
)
_TOKEN_ROTATIONS = Counter(
    "hostdni_token_rotations_total",
    "API token rotations",
)


def observe_http_request(*, method: str, path: str, status: int, duration_seconds: float) -> None:
    _REQ_COUNT.labels(method=method, path=path, status=str(status)).inc()
    _REQ_LATENCY.labels(method=method, path=path).observe(duration_seconds)


def record_hosts_operation(*, action: str, ok: bool) -> None:
    _HOSTS_OPS.labels(action=action, result="ok" if ok else "error").inc()


def record_auth_failure() -> None:
    _AUTH_FAILURES.inc()


def record_token_rotation() -> None:
    _TOKEN_ROTATIONS.inc()


def render_metrics() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST

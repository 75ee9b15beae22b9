"""Prometheus metric definitions for the gateway."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)
provider_requests_total = Counter(
    "provider_requests_total",
    "Upstream PayPal calls by operation and outcome",
    ["service", "operation", "outcome"],
)
provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Upstream PayPal call latency seconds",
    ["service", "operation"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")

"""Prometheus metric definitions shared across the service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


transaction_requests_total = Counter("transaction_requests_total", "Total card transaction requests", ["service"])
transaction_outcomes_total = Counter(
    "transaction_outcomes_total",
    "Card transaction orchestrations by terminal status",
    ["service", "status"],
)
transaction_poll_attempts = Histogram(
    "transaction_poll_attempts",
    "Status polling attempts consumed per transaction",
    ["service"],
    buckets=(1, 2, 3, 5, 8, 10, 15, 20),
)
payment_requests_total = Counter("payment_requests_total", "Total pre-tokenized payment requests", ["service"])
payment_outcomes_total = Counter(
    "payment_outcomes_total",
    "Processed payments by reported status",
    ["service", "status"],
)
orchestration_latency_seconds = Histogram(
    "orchestration_latency_seconds",
    "End-to-end orchestration latency seconds",
    ["service", "flow"],
)
gateway_requests_total = Counter(
    "gateway_requests_total",
    "Calls to the external payment gateway",
    ["operation", "outcome"],
)
gateway_latency_seconds = Histogram(
    "gateway_latency_seconds",
    "External payment gateway call latency seconds",
    ["operation"],
)
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


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")

"""Prometheus metrics for API calls and change detection."""

from prometheus_client import Counter, Histogram

api_requests_total = Counter(
    "portal_api_requests_total",
    "Total API requests issued by the portal",
    ["method", "outcome"],
)

api_latency_ms = Histogram(
    "portal_api_latency_ms",
    "API request latency in milliseconds",
    ["outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, 10000],
)

poll_checks_total = Counter(
    "portal_poll_checks_total",
    "Total change-detection checks",
    ["outcome"],
)


class PrometheusPortalMetrics:
    """Prometheus-based portal metrics implementation."""

    def record_request(self, method: str, outcome: str, latency_ms: float) -> None:
        """Record one API request and its latency."""
        api_requests_total.labels(method=method, outcome=outcome).inc()
        api_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_poll_check(self, outcome: str) -> None:
        """Increment change-detection check counter."""
        poll_checks_total.labels(outcome=outcome).inc()

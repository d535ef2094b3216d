"""Prometheus metrics for resolution and view accounting."""

from prometheus_client import Counter

resolutions_total = Counter(
    "snapie_resolutions_total",
    "Successful source resolutions",
    ["collection", "kind", "category"],
)
resolution_errors_total = Counter(
    "snapie_resolution_errors_total",
    "Failed source resolutions",
    ["collection", "error"],
)
view_requests_total = Counter(
    "snapie_view_requests_total",
    "View-count requests by outcome",
    ["collection", "outcome"],
)

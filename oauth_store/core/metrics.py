"""Prometheus metrics for storage operations"""

from prometheus_client import Counter, Histogram, Gauge

STORAGE_OPERATION_COUNT = Counter(
    "oauthstore_operations_total",
    "Total storage operations",
    ["operation", "outcome"],
)
STORAGE_OPERATION_LATENCY = Histogram(
    "oauthstore_operation_duration_seconds",
    "Storage operation duration in seconds",
    ["operation"],
)
OPEN_HANDLES_GAUGE = Gauge("oauthstore_open_handles", "Storage handles currently holding a session")
INDEX_BOOTSTRAP_COUNT = Counter(
    "oauthstore_index_bootstraps_total",
    "Refresh-token index bootstrap attempts",
    ["outcome"],
)


def record_operation(operation: str, outcome: str, duration: float) -> None:
    """Count one storage operation and observe its latency"""
    STORAGE_OPERATION_COUNT.labels(operation, outcome).inc()
    STORAGE_OPERATION_LATENCY.labels(operation).observe(duration)

"""
Prometheus metrics for cache and store activity.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server


class MetricsCollector:
    """Collector for cache-aside and store command metrics."""

    def __init__(self, app_name: str, registry: Optional[CollectorRegistry] = None):
        self.app_name = app_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up cache metrics."""
        self._metrics["cache_requests_total"] = Counter(
            "cache_requests_total",
            "Cache lookups by result",
            ["result"],
            registry=self.registry
        )

        self._metrics["cache_writes_total"] = Counter(
            "cache_writes_total",
            "Values written to the cache",
            registry=self.registry
        )

        self._metrics["cache_invalidations_total"] = Counter(
            "cache_invalidations_total",
            "Cache invalidation requests",
            ["removed"],
            registry=self.registry
        )

        self._metrics["store_command_duration_seconds"] = Histogram(
            "store_command_duration_seconds",
            "Store command duration in seconds",
            ["command"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def start_metrics_server(self, port: int = 9090):
        """Expose the collector's registry over HTTP."""
        start_http_server(port, registry=self.registry)

    def record_cache_lookup(self, result: str):
        """Record a cache lookup outcome (hit, miss or decode_error)."""
        self._metrics["cache_requests_total"].labels(result=result).inc()

    def record_cache_write(self):
        self._metrics["cache_writes_total"].inc()

    def record_invalidation(self, removed: bool):
        self._metrics["cache_invalidations_total"].labels(removed=str(removed).lower()).inc()

    @contextmanager
    def time_command(self, command: str):
        """Context manager timing one store command."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            self._metrics["store_command_duration_seconds"].labels(command=command).observe(duration)

    def sample(self, name: str, **labels) -> float:
        """Current value of a sample in this collector's registry."""
        value = self.registry.get_sample_value(name, labels or None)
        return value or 0.0


def get_metrics_collector(app_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for the application."""
    return MetricsCollector(app_name, registry)

"""Prometheus metrics for the HTTP gateway."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all gateway metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Statement metrics
        self.queries_total = Counter(
            "pg_http_queries_total",
            "Total number of statements sent to the engine",
            ["kind", "status"],  # kind: execute, run; status: success, error
            registry=self._registry,
        )

        self.query_latency_seconds = Histogram(
            "pg_http_query_latency_seconds",
            "Statement latency in seconds, including time queued behind other statements",
            ["kind"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        # Transaction metrics
        self.transactions_total = Counter(
            "pg_http_transactions_total",
            "Total number of transaction batches",
            ["status"],  # commit, rollback
            registry=self._registry,
        )

        # Dump metrics
        self.exports_total = Counter(
            "pg_http_exports_total",
            "Total number of SQL dumps produced",
            registry=self._registry,
        )

        self.imports_total = Counter(
            "pg_http_imports_total",
            "Total number of SQL imports",
            ["status"],
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "pg_http",
            "Gateway information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The collector registry the metrics are registered with."""
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 9100, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from pg_http import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics

"""Metrics collection for hybrid search.

Provides a thin convenience wrapper around ``prometheus_client`` so the
orchestrator and fusion engine record request, upstream, and fusion metrics
with consistent label sets.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- A single registry is kept per collector (can be injected for testing)
"""

from typing import Optional
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for hybrid search.

    Parameters
    - service_name: Logical name used for scoping
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.search_requests = Counter(
            'hybrid_search_requests_total',
            'Total hybrid search requests by resolved path',
            ['path'],
            registry=self.registry
        )

        self.search_duration = Histogram(
            'hybrid_search_duration_seconds',
            'Hybrid search duration',
            ['path'],
            registry=self.registry
        )

        self.upstream_calls = Counter(
            'hybrid_upstream_calls_total',
            'Calls into the external search engine',
            ['modality', 'status'],
            registry=self.registry
        )

        self.fusion_operations = Counter(
            'hybrid_fusion_operations_total',
            'Total rank fusion operations',
            registry=self.registry
        )

        self.fused_documents = Histogram(
            'hybrid_fused_documents',
            'Distinct documents produced per fusion',
            buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000),
            registry=self.registry
        )

    def record_search(self, path: str, duration: float) -> None:
        """Record search metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.search_requests.labels(path=path).inc()
        self.search_duration.labels(path=path).observe(duration)

    def record_upstream_call(self, modality: str, status: str) -> None:
        """Record a vector or text call and whether it succeeded."""
        self.upstream_calls.labels(modality=modality, status=status).inc()

    def record_fusion(self, fused_count: int) -> None:
        """Record a fusion and the number of documents it produced."""
        self.fusion_operations.inc()
        self.fused_documents.observe(fused_count)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str = "hybrid-search") -> MetricsCollector:
    """Get or create the metrics collector.

    Returns a process-wide singleton to avoid duplicate collectors/labels.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
        logger.debug("Metrics collector created", service=service_name)
    return _metrics_collector

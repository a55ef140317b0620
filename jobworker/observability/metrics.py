"""
Prometheus metrics collection.
"""

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from jobworker.constants import METRIC_MESSAGE_DURATION, METRIC_MESSAGES_PROCESSED

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the worker.

    Collects metrics for:
    - Processed messages by handler and outcome
    - Message processing duration
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.messages_processed = Counter(
            METRIC_MESSAGES_PROCESSED,
            "Total number of processed messages",
            ["handler", "outcome"],
            registry=self._registry,
        )

        self.message_duration = Histogram(
            METRIC_MESSAGE_DURATION,
            "Message processing duration in seconds",
            ["handler"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

    def record_message_processed(
        self,
        handler: str,
        outcome: str,
        duration_seconds: float,
    ) -> None:
        """Record the outcome of one `Worker.process` call."""
        self.messages_processed.labels(handler=handler, outcome=outcome).inc()
        self.message_duration.labels(handler=handler).observe(duration_seconds)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics

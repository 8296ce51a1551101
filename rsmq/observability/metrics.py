"""
Prometheus metrics collection.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from rsmq.constants import (
    METRIC_API_LATENCY,
    METRIC_API_REQUESTS,
    METRIC_EMPTY_RECEIVES,
    METRIC_MESSAGES_DELETED,
    METRIC_MESSAGES_PROCESSED,
    METRIC_MESSAGES_RECEIVED,
    METRIC_MESSAGES_SENT,
    METRIC_PROCESSING_DURATION,
    METRIC_QUEUE_DEPTH,
    METRIC_QUEUE_HIDDEN,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the message queue.

    Collects metrics for:
    - Messages sent, received and deleted per queue
    - Receives that found no eligible message
    - Queue depth and in-flight counts
    - Worker processing outcomes and duration
    - API requests
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.messages_sent = Counter(
            METRIC_MESSAGES_SENT,
            "Total number of messages sent",
            ["qname"],
            registry=self._registry,
        )

        self.messages_received = Counter(
            METRIC_MESSAGES_RECEIVED,
            "Total number of messages received or popped",
            ["qname"],
            registry=self._registry,
        )

        self.messages_deleted = Counter(
            METRIC_MESSAGES_DELETED,
            "Total number of messages deleted or popped",
            ["qname"],
            registry=self._registry,
        )

        self.empty_receives = Counter(
            METRIC_EMPTY_RECEIVES,
            "Total number of receives that found no eligible message",
            ["qname"],
            registry=self._registry,
        )

        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of messages in the queue",
            ["qname"],
            registry=self._registry,
        )

        self.queue_hidden = Gauge(
            METRIC_QUEUE_HIDDEN,
            "Number of delayed or in-flight messages in the queue",
            ["qname"],
            registry=self._registry,
        )

        self.messages_processed = Counter(
            METRIC_MESSAGES_PROCESSED,
            "Total number of messages handled by workers",
            ["qname", "status"],
            registry=self._registry,
        )

        self.processing_duration = Histogram(
            METRIC_PROCESSING_DURATION,
            "Message handling duration in seconds",
            ["qname", "status"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        self.api_requests = Counter(
            METRIC_API_REQUESTS,
            "Total number of API requests",
            ["method", "endpoint", "status"],
            registry=self._registry,
        )

        self.api_latency = Histogram(
            METRIC_API_LATENCY,
            "API request latency in seconds",
            ["method", "endpoint"],
            buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self._registry,
        )

    def record_message_sent(self, qname: str) -> None:
        self.messages_sent.labels(qname=qname).inc()

    def record_message_received(self, qname: str) -> None:
        self.messages_received.labels(qname=qname).inc()

    def record_message_deleted(self, qname: str) -> None:
        self.messages_deleted.labels(qname=qname).inc()

    def record_empty_receive(self, qname: str) -> None:
        self.empty_receives.labels(qname=qname).inc()

    def update_queue_depth(self, qname: str, msgs: int, hidden: int) -> None:
        """Update live message counts for a queue."""
        self.queue_depth.labels(qname=qname).set(msgs)
        self.queue_hidden.labels(qname=qname).set(hidden)

    def record_message_processed(
        self,
        qname: str,
        status: str,
        duration_seconds: float,
    ) -> None:
        """Record a worker handling outcome."""
        self.messages_processed.labels(qname=qname, status=status).inc()
        self.processing_duration.labels(qname=qname, status=status).observe(
            duration_seconds
        )

    def record_api_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration_seconds: float,
    ) -> None:
        """Record an API request."""
        self.api_requests.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        self.api_latency.labels(method=method, endpoint=endpoint).observe(
            duration_seconds
        )

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


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

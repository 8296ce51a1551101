"""
Observability module.
Contains logging, metrics, and tracing setup.
"""

from rsmq.observability.logging import message_log_context, setup_logging
from rsmq.observability.metrics import (
    MetricsCollector,
    get_metrics,
    setup_metrics,
)
from rsmq.observability.tracing import get_tracer, setup_tracing

__all__ = [
    "setup_logging",
    "message_log_context",
    "setup_metrics",
    "get_metrics",
    "MetricsCollector",
    "setup_tracing",
    "get_tracer",
]

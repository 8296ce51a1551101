"""
Structured logging setup using structlog.

Package modules log through ``logging.getLogger(__name__)`` with ``extra=``
fields; the formatter installed here renders those records through
structlog, so queue, message and worker fields land as top-level keys.
"""

import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from opentelemetry import trace

from rsmq.config import get_settings

# Libraries whose INFO output drowns out queue activity
_QUIET_LOGGERS = ("uvicorn.access", "redis", "httpx")


def add_trace_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Add OpenTelemetry trace context to log records.

    Lets a worker's log lines for a message be joined with the
    ``handle_message`` span that covers them.
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def _service_context(service: str, namespace: str) -> Callable[..., dict[str, Any]]:
    def add_service_context(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("namespace", namespace)
        return event_dict

    return add_service_context


def setup_logging(component: str | None = None) -> None:
    """
    Configure structured logging for the process.

    Args:
        component: Process role ("api" or "worker"), added to every record.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _service_context(settings.otel_service_name, settings.redis_namespace),
        add_trace_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
    ]

    if settings.log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if component:
        structlog.contextvars.bind_contextvars(component=component)


@contextmanager
def message_log_context(qname: str, message_id: str, **extra: Any) -> Iterator[None]:
    """
    Tag every record logged inside the block with the message it concerns.

    Context variables are copied per asyncio task, so concurrent messages
    handled by one worker do not see each other's fields.

    Args:
        qname: The queue the message belongs to.
        message_id: The message id.
        **extra: Further fields, e.g. the receive count.
    """
    with structlog.contextvars.bound_contextvars(qname=qname, message_id=message_id, **extra):
        yield

"""
Structured logging setup using structlog.
"""

import logging
import re
import sys
from typing import Any

import structlog
from opentelemetry import trace

from jobworker.config import get_settings

BoundLogger = structlog.stdlib.BoundLogger

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def add_trace_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Add OpenTelemetry trace context to log records.

    Args:
        logger: The logger instance.
        method_name: The method name being called.
        event_dict: The event dictionary.

    Returns:
        The event dictionary with trace context added.
    """
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def render_placeholders(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Fill `{name}` placeholders in the event from the event's own fields.

    Events are logged as templates so backends can group them; the
    rendered text is what humans read. The template is kept under
    `template`. Placeholders without a matching field are left as is.
    """
    event = event_dict.get("event")
    if not isinstance(event, str) or "{" not in event:
        return event_dict

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in event_dict or key == "event":
            return match.group(0)
        return str(event_dict[key])

    rendered = _PLACEHOLDER.sub(substitute, event)
    if rendered != event:
        event_dict["template"] = event
        event_dict["event"] = rendered
    return event_dict


def setup_logging() -> None:
    """
    Configure structured logging for the worker.

    Sets up structlog with JSON or console output based on configuration.
    Integrates with standard library logging.
    """
    settings = get_settings()

    # Determine log level
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Shared processors for all loggers
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_trace_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ExtraAdder(),
        render_placeholders,
    ]

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

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


def get_logger(name: str) -> BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__).

    Returns:
        BoundLogger: A structlog logger instance.
    """
    return structlog.get_logger(name)


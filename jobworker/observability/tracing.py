"""
OpenTelemetry tracing setup.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Tracer

from jobworker import __version__
from jobworker.config import get_settings


def setup_tracing(enable_console_export: bool = False) -> Tracer:
    """
    Install an SDK tracer provider exporting over OTLP.

    Until this is called, `get_tracer` hands out the no-op tracer of
    the OpenTelemetry API, so the worker core never exports on its own.

    Args:
        enable_console_export: If True, also export spans to console.

    Returns:
        Tracer: The tracer instance.
    """
    settings = get_settings()

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.version": __version__,
        }
    )

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.otel_exporter_otlp_endpoint,
                insecure=True,
            )
        )
    )

    if enable_console_export:
        provider.add_span_processor(
            BatchSpanProcessor(ConsoleSpanExporter())
        )

    trace.set_tracer_provider(provider)

    return trace.get_tracer(settings.otel_service_name)


def get_tracer(name: str = "jobworker") -> Tracer:
    """
    Get a tracer from the current provider.

    Args:
        name: Instrumentation scope name.
    """
    return trace.get_tracer(name)

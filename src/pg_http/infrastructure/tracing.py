"""OpenTelemetry tracing.

Every statement the session sends to the engine runs inside a
``db.statement`` span. Spans are only exported once ``setup_tracing`` has
installed a provider; before that the API's no-op tracer is used.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Mapping

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.util.types import AttributeValue


_tracer: trace.Tracer | None = None


def _exporters(otlp_endpoint: str | None, console_export: bool) -> list[SpanExporter]:
    exporters: list[SpanExporter] = []
    if otlp_endpoint:
        exporters.append(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    if console_export:
        exporters.append(ConsoleSpanExporter())
    return exporters


def setup_tracing(
    service_name: str = "pg_http",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> TracerProvider:
    """Install the global tracer provider.

    Args:
        service_name: ``service.name`` resource attribute.
        otlp_endpoint: OTLP gRPC collector, e.g. ``http://localhost:4317``.
        console_export: Also print finished spans to stdout.

    Returns:
        The installed provider.
    """
    global _tracer

    from pg_http import __version__

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    for exporter in _exporters(otlp_endpoint, console_export):
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return provider


def get_tracer() -> trace.Tracer:
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("pg_http")
    return _tracer


@contextmanager
def trace_span(
    name: str, attributes: Mapping[str, AttributeValue | None] | None = None
) -> Generator[trace.Span, None, None]:
    """Run the block inside a span; attributes that are None are left off."""
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        yield span

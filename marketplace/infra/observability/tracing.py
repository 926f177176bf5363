"""
OpenTelemetry tracing for the marketplace.

``setup_tracing`` is called once from ``MarketplaceConfig.ready`` when
``OTEL_TRACING_ENABLED`` is set. Services open spans through ``get_tracer``;
without a configured provider those spans are no-ops.
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

_initialized = False


def setup_tracing(
    service_name: str = "coshop-marketplace",
    endpoint: Optional[str] = None,
    enable: bool = True,
) -> None:
    """
    Initialize OpenTelemetry tracing with an OTLP/HTTP exporter.

    Args:
        service_name: Name of the service for tracing
        endpoint: Collector traces endpoint, e.g. ``http://otel-collector:4318/v1/traces``.
            Falls back to the ``OTEL_EXPORTER_OTLP_*`` environment variables.
        enable: Enable/disable tracing
    """
    global _initialized

    if _initialized:
        logger.warning("Tracing already initialized. Skipping.")
        return

    if not enable:
        logger.info("Tracing disabled via configuration")
        return

    resource = Resource(attributes={SERVICE_NAME: service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(tracer_provider)

    # Traces all HTTP requests
    DjangoInstrumentor().instrument()

    _initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {service_name}")


def get_tracer(name: str = __name__) -> trace.Tracer:
    """
    Get tracer instance for creating custom spans.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("checkout.vendor_group") as span:
            add_span_attributes(span, business_id=business.id)
    """
    return trace.get_tracer(name)


def add_span_attributes(span: trace.Span, **attributes) -> None:
    """Add custom attributes to a span, stringifying values."""
    for key, value in attributes.items():
        span.set_attribute(key, str(value))

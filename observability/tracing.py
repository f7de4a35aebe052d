"""
Armature - Tracing with OpenTelemetry

Every bootstrap phase runs inside a span so slow or failing extensions can be
located on a flame graph.

Features:
- Disabled by default (no-op provider); enabled through configuration
- Optional console export for debugging
- Context manager for spans with automatic error recording

Usage:
    from observability.tracing import setup_tracing, create_span

    setup_tracing(TracingConfig(enabled=True, console_export=True))

    with create_span("bootstrap.definition_extensions") as span:
        span.set_attribute("extensions.invoked", 3)
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

# Global state
_tracer_provider: Optional[trace.TracerProvider] = None
_initialized: bool = False


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing."""

    service_name: str = "armature"
    service_version: str = "0.1.0"
    enabled: bool = field(
        default_factory=lambda: os.getenv("ARMATURE_TRACING_ENABLED", "false").lower() == "true"
    )
    console_export: bool = field(
        default_factory=lambda: os.getenv("ARMATURE_TRACE_CONSOLE", "false").lower() == "true"
    )
    environment: str = field(
        default_factory=lambda: os.getenv("ARMATURE_ENVIRONMENT", "development")
    )
    extra_attributes: Dict[str, str] = field(default_factory=dict)


def setup_tracing(config: Optional[TracingConfig] = None) -> trace.TracerProvider:
    """
    Configure the tracer provider used by bootstrap spans.

    The provider is kept module-local rather than installed globally, so
    embedding applications keep control of their own global provider.
    """
    global _tracer_provider, _initialized

    if _initialized and _tracer_provider:
        return _tracer_provider

    config = config or TracingConfig()

    if not config.enabled:
        _tracer_provider = trace.NoOpTracerProvider()
        _initialized = True
        return _tracer_provider

    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.environment,
        **config.extra_attributes,
    })
    provider = TracerProvider(resource=resource)

    if config.console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    _tracer_provider = provider
    _initialized = True
    return _tracer_provider


def get_tracer_provider() -> trace.TracerProvider:
    """Get the tracer provider, initializing if necessary."""
    if not _initialized:
        setup_tracing()
    return _tracer_provider or trace.get_tracer_provider()


def get_tracer(name: str, version: str = "0.1.0") -> trace.Tracer:
    """Get a tracer instance for manual instrumentation."""
    return get_tracer_provider().get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans and forget the provider."""
    global _tracer_provider, _initialized
    if _tracer_provider is not None and hasattr(_tracer_provider, "shutdown"):
        _tracer_provider.shutdown()
    _initialized = False
    _tracer_provider = None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    tracer_name: str = "armature.bootstrap",
) -> Iterator[trace.Span]:
    """
    Context manager for creating spans with automatic error handling.

    Exceptions are recorded on the span and re-raised unchanged.
    """
    tracer = get_tracer(tracer_name)
    with tracer.start_as_current_span(
        name, kind=kind, record_exception=False, set_status_on_exception=False
    ) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
